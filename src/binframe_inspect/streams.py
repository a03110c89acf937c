"""binframe - part stream scanning and parquet part index."""
from __future__ import annotations

import hashlib
from pathlib import Path
from warnings import warn

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from binframe_core.errors import EndOfStream, TruncatedStreamError
from binframe_core.parts import flag_name
from binframe_core.protocol import DEFAULT_BUFFER_SIZE, DEFAULT_MAX_SCAN_PART_SIZE
from binframe_core.reader import PartReader

PART_INDEX_SCHEMA = pa.schema(
    [
        ("index", pa.int64()),
        ("offset", pa.int64()),
        ("flag", pa.int32()),
        ("flag_name", pa.string()),
        ("length", pa.int64()),
        ("content_hash", pa.string()),
        ("status", pa.string()),
    ]
)


def scan_parts(
    stream_path: Path,
    strict: bool = True,
    max_part_size: int = DEFAULT_MAX_SCAN_PART_SIZE,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> list[dict]:
    """Walk a part stream on disk and describe every part.

    Strict mode raises on a torn trailing part. Lenient mode warns and
    returns the parts read before it.
    """
    reader = PartReader(buffer_size=buffer_size, max_part_size=max_part_size)
    records: list[dict] = []

    with open(stream_path, "rb") as f:
        reader.attach(f)
        while True:
            start_off = reader.offset
            try:
                part = reader.read_part()
            except EndOfStream:
                break
            except TruncatedStreamError as e:
                if strict:
                    raise
                warn(f"Torn part #{len(records)} at offset {start_off}: {e}. Stopping scan.")
                break

            records.append(
                {
                    "index": len(records),
                    "offset": int(start_off),
                    "flag": int(part.flag),
                    "flag_name": flag_name(part.flag),
                    "length": int(part.length),
                    "content_hash": hashlib.sha256(part.payload).hexdigest(),
                    "status": "VERIFIED",
                }
            )

    return records


def write_part_index(records: list[dict], out_path: Path) -> bool:
    """Write scan records to a parquet file. Returns False for an empty stream."""
    df = pd.DataFrame(records)
    if df.empty:
        return False

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    table = pa.Table.from_pandas(df, schema=PART_INDEX_SCHEMA, preserve_index=False)
    pq.write_table(table, Path(out_path))
    return True
