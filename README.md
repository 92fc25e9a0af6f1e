# cloudstore

A small HTTP file storage server built on Flask. Users sign up and sign in,
upload files, list them, and link content the server already holds to their
account without sending it again ("instant upload" by SHA-1). Large files can
be sent in 5 MiB chunks through a multipart upload whose progress is tracked
in Redis. File and user records live in MySQL.

A separate WebSocket echo server with a periodic heartbeat is included.

## Running

Start the HTTP file server (default `0.0.0.0:8080`):

    cloudstore-server [--host HOST] [--port PORT]

Start the WebSocket echo server (default `0.0.0.0:7777`, path `/ws`):

    cloudstore-ws [--host HOST] [--port PORT]

The WebSocket server echoes every message back to the client and sends the
text `heartbeat from server` every two seconds.

## Configuration

The file server needs MySQL and Redis. Their connection settings are module
constants: `HOST`, `PORT`, `USER`, `PASSWORD`, `DATABASE` and `CHARSET` in
`cloudstore.mysql_conn` (default `127.0.0.1:13306`, database `fileserver`),
and `REDIS_HOST`, `REDIS_PORT` and `PASSWORD` in `cloudstore.redis_conn`
(default `127.0.0.1:6379`). In code, another connection or client can be
supplied with `cloudstore.mysql_conn.set_db_conn` and
`cloudstore.redis_conn.set_redis_client`.

`cloudstore.server.create_app()` builds the Flask application. Its config
keys choose the directories used on disk:

| Key          | Default      | Used for                           |
|--------------|--------------|------------------------------------|
| `STATIC_DIR` | `./static`   | Pages and files under `/static/`   |
| `UPLOAD_DIR` | `./uploads`  | Files sent to `/file/upload`       |
| `PART_DIR`   | `./data`     | Chunks sent to `/file/mpupload/uppart` |

The pages `view/index.html`, `view/signin.html` and `view/signup.html` are
read from the static directory; they are not part of the package.

## HTTP endpoints

| Path                       | Purpose                                              |
|----------------------------|------------------------------------------------------|
| `/static/...`              | Static files from the static directory               |
| `/user/signup`             | GET: sign-up page; POST: create an account           |
| `/user/signin`             | GET: sign-in page; POST: check password, issue token |
| `/user/info`               | User name and sign-up time (token required)          |
| `/file/upload`             | GET: upload page; POST: store an uploaded file       |
| `/file/upload/suc`         | Upload confirmation text                             |
| `/file/meta`               | Stored metadata of a file by `filehash`              |
| `/file/query`              | A user's files, up to `limit`                        |
| `/file/download`           | Download a file by `filehash`                        |
| `/file/update`             | Rename a file (POST, `op=0`)                         |
| `/file/delete`             | Delete a file by `filehash`                          |
| `/file/fastupload`         | Instant upload by hash (token required)              |
| `/file/mpupload/init`      | Start a chunked upload (token required)              |
| `/file/mpupload/uppart`    | Send one chunk (token required)                      |
| `/file/mpupload/complete`  | Finish a chunked upload (token required)             |

Endpoints marked "token required" take `username` and `token` form fields;
a request without a user name of at least three characters and a
40-character token receives the sign-in page instead. The token's shape is
all that is checked.

JSON replies share one shape:

    {"code": 0, "msg": "OK", "data": ...}

A `code` of 0 means success; negative codes report failure.

## What it does not do

- Download, rename and delete work on metadata held in the running process
  (`cloudstore.meta`), not on the MySQL records. An upload is recorded in
  MySQL only, so a freshly uploaded file cannot be downloaded or deleted
  through these endpoints until a record for it exists in that process.
- Chunks of a multipart upload are stored one file per chunk and are never
  joined; completing the upload records the file in MySQL with an empty
  address.
- No tables are created; the MySQL schema must already exist.

## Library helpers

`cloudstore.util` offers hex digests (`sha1`, `md5`, `file_sha1`, `file_md5`,
and the incremental `Sha1Stream`) and small file helpers (`path_exists`,
`get_file_size`). `cloudstore.resp` builds the reply envelope with
`RespMsg` and `new_resp_msg`, and plain code-and-message bodies with
`gen_simple_resp_string` and `gen_simple_resp_stream`.