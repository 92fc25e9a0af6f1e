import io

import pytest

from cloudstore import util


def test_sha1_known_vector():
    assert util.sha1(b"abc") == "a9993e364706816aba3e25717850c26c9cd0d89d"


def test_md5_known_vector():
    assert util.md5(b"abc") == "900150983cd24fb0d6963f7d28e17f72"


def test_stream_matches_one_shot():
    stream = util.Sha1Stream()
    for piece in (b"hello ", b"big ", b"world"):
        stream.update(piece)
    assert stream.sum() == util.sha1(b"hello big world")


def test_empty_stream_matches_empty_digest():
    assert util.Sha1Stream().sum() == util.sha1(b"")


def test_file_sha1_matches_content(tmp_path):
    content = b"some file content" * 10000
    target = tmp_path / "data.bin"
    target.write_bytes(content)
    with target.open("rb") as handle:
        assert util.file_sha1(handle) == util.sha1(content)


def test_file_sha1_reads_from_current_position():
    handle = io.BytesIO(b"skipme-payload")
    handle.seek(7)
    assert util.file_sha1(handle) == util.sha1(b"payload")


def test_file_md5_matches_content():
    content = b"abcdef" * 5000
    assert util.file_md5(io.BytesIO(content)) == util.md5(content)


def test_path_exists(tmp_path):
    present = tmp_path / "here.txt"
    present.write_text("x")
    assert util.path_exists(present) is True
    assert util.path_exists(tmp_path / "missing.txt") is False


def test_get_file_size_of_file(tmp_path):
    content = b"0123456789abc"
    target = tmp_path / "f.bin"
    target.write_bytes(content)
    assert util.get_file_size(target) == len(content)


def test_get_file_size_of_directory_is_last_entry(tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "z.bin").write_bytes(b"x" * 11)
    (tmp_path / "b.txt").write_bytes(b"y" * 7)
    assert util.get_file_size(tmp_path) == 7


def test_get_file_size_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        util.get_file_size(tmp_path / "nope")