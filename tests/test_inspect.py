import hashlib

import pyarrow.parquet as pq
import pytest

from binframe_core.errors import TruncatedStreamError
from binframe_core.parts import PartFlag
from binframe_core.protocol import encode_part
from binframe_inspect.logic import check_stream
from binframe_inspect.streams import scan_parts, write_part_index


def _write_stream(path, parts, tail=b""):
    path.write_bytes(b"".join(encode_part(f, p) for f, p in parts) + tail)
    return path


PARTS = [(PartFlag.HEADER, b'{"v":1}'), (PartFlag.BINARY, b"\x00" * 32), (PartFlag.METADATA, b"")]


def test_scan_parts_offsets_and_hashes(tmp_path):
    stream = _write_stream(tmp_path / "s.bin", PARTS)
    records = scan_parts(stream, buffer_size=4)
    assert [r["offset"] for r in records] == [0, 12, 49]
    assert [r["flag_name"] for r in records] == ["header", "binary", "metadata"]
    assert records[1]["length"] == 32
    assert records[1]["content_hash"] == hashlib.sha256(b"\x00" * 32).hexdigest()
    assert {r["status"] for r in records} == {"VERIFIED"}


def test_scan_parts_strict_raises_on_torn_tail(tmp_path):
    stream = _write_stream(tmp_path / "s.bin", PARTS, tail=b"\x01\x10\x00\x00\x00abc")
    with pytest.raises(TruncatedStreamError):
        scan_parts(stream)


def test_scan_parts_lenient_warns(tmp_path):
    stream = _write_stream(tmp_path / "s.bin", PARTS, tail=b"\x01\x10\x00\x00\x00abc")
    with pytest.warns(UserWarning, match="Torn part #3 at offset 54"):
        records = scan_parts(stream, strict=False)
    assert len(records) == 3


def test_write_part_index(tmp_path):
    stream = _write_stream(tmp_path / "s.bin", PARTS)
    out = tmp_path / "idx" / "parts.parquet"
    assert write_part_index(scan_parts(stream), out)
    table = pq.read_table(out)
    assert table.column_names == ["index", "offset", "flag", "flag_name", "length", "content_hash", "status"]
    assert table.column("flag").to_pylist() == [3, 1, 2]


def test_write_part_index_empty_stream(tmp_path):
    stream = _write_stream(tmp_path / "empty.bin", [])
    out = tmp_path / "parts.parquet"
    assert scan_parts(stream) == []
    assert write_part_index([], out) is False
    assert not out.exists()


def test_check_stream_pass(tmp_path):
    stream = _write_stream(tmp_path / "s.bin", PARTS)
    result = check_stream(stream, known_flags_only=True)
    assert result == {"status": "PASS", "error_count": 0, "errors": [], "part_count": 3}


def test_check_stream_missing(tmp_path):
    result = check_stream(tmp_path / "nope.bin")
    assert result["status"] == "FAIL"
    assert result["errors"][0]["code"] == "E_STREAM_MISSING"


def test_check_stream_truncated(tmp_path):
    stream = _write_stream(tmp_path / "s.bin", PARTS, tail=b"\x02\x05\x00")
    result = check_stream(stream)
    assert result["status"] == "FAIL"
    err = result["errors"][0]
    assert err["code"] == "E_TRUNCATED"
    assert err["stage"] == "length"
    assert err["offset"] == 54


def test_check_stream_too_large(tmp_path):
    stream = _write_stream(tmp_path / "s.bin", [(PartFlag.BINARY, b"x" * 100)])
    result = check_stream(stream, max_part_size=10)
    assert result["errors"][0]["code"] == "E_TOO_LARGE"
    assert result["errors"][0]["length"] == 100


def test_check_stream_unknown_flags(tmp_path):
    stream = _write_stream(tmp_path / "s.bin", PARTS + [(0x42, b"?")])
    assert check_stream(stream)["status"] == "PASS"
    result = check_stream(stream, known_flags_only=True)
    assert result["status"] == "FAIL"
    assert result["part_count"] == 4
    assert result["errors"] == [
        {"code": "E_UNKNOWN_FLAG", "message": "Part flag is not a recognized type tag",
         "index": 3, "offset": 54, "flag": 0x42}
    ]
