"""Tests for the file I/O service."""

from linepatch.services.file_io import FileIOService


def test_read_keeps_line_terminators(tmp_path):
    path = tmp_path / "crlf.txt"
    path.write_bytes(b"a\r\nb\r\n")

    result = FileIOService().read_file(path)
    assert result.success
    assert result.content.content == "a\r\nb\r\n"
    assert result.content.encoding == "utf-8"


def test_utf8_bom_is_detected_and_restored(tmp_path):
    path = tmp_path / "bom.txt"
    path.write_bytes(b"\xef\xbb\xbfhello\n")
    service = FileIOService()

    content = service.read_file(path).content
    assert content.bom
    assert content.content == "hello\n"

    assert service.write_file(path, "HELLO\n", encoding=content.encoding, bom=content.bom).success
    assert path.read_bytes() == b"\xef\xbb\xbfHELLO\n"


def test_utf16_file_is_not_treated_as_binary(tmp_path):
    path = tmp_path / "wide.txt"
    path.write_bytes(b"\xff\xfe" + "hi\n".encode("utf-16-le"))

    result = FileIOService().read_file(path)
    assert result.success
    assert result.content.content == "hi\n"


def test_binary_file_is_refused(tmp_path):
    path = tmp_path / "blob.bin"
    path.write_bytes(b"\x00\x01\x02")

    result = FileIOService().read_file(path)
    assert not result.success
    assert result.error.startswith("Binary file")


def test_missing_file(tmp_path):
    result = FileIOService().read_file(tmp_path / "nope.txt")
    assert not result.success
    assert "not found" in result.error


def test_write_is_exact_and_keeps_backup(tmp_path):
    path = tmp_path / "out.txt"
    path.write_bytes(b"old\n")

    result = FileIOService().write_file(path, "new\r\n", create_backup=True)
    assert result.success
    assert result.bytes_written == 5
    assert path.read_bytes() == b"new\r\n"
    assert (tmp_path / "out.txt.bak").read_bytes() == b"old\n"

