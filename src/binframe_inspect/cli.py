"""binframe - Part stream command line tools."""
from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import click

from binframe_core.parts import parse_flag
from binframe_core.protocol import DEFAULT_BUFFER_SIZE, DEFAULT_MAX_SCAN_PART_SIZE
from binframe_core.reader import PartReader
from binframe_core.writer import PartWriter
from binframe_inspect.logic import check_stream
from binframe_inspect.streams import scan_parts, write_part_index

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

buffer_size_option = click.option(
    "--buffer-size",
    type=click.IntRange(min=1),
    default=DEFAULT_BUFFER_SIZE,
    show_default=True,
    envvar="BINFRAME_BUFFER_SIZE",
    help="Internal codec buffer size in bytes.",
)


def _fatal(e: Exception) -> NoReturn:
    # Fail closed, with a single-line reason. No stack traces in pipelines.
    click.echo(f"FATAL: {e}", err=True)
    raise SystemExit(1)


def _parse_part_spec(spec: str) -> tuple[int, Path]:
    if "=" not in spec:
        raise click.BadParameter(f"expected TYPE=PATH, got {spec!r}", param_hint="--part")
    kind, _, path = spec.partition("=")
    try:
        flag = parse_flag(kind)
    except ValueError:
        raise click.BadParameter(f"unknown part type {kind!r}", param_hint="--part") from None
    return flag, Path(path)


def pack_stream(out: Path, parts: list[tuple[int, Path]], buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """Write the given files as parts into a new stream file. Returns the part count."""
    writer = PartWriter(buffer_size=buffer_size)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "wb") as f:
        writer.attach(f)
        for flag, path in parts:
            writer.write_part(flag, path.read_bytes())
        writer.flush()
    return len(parts)


def extract_stream(stream: Path, out_dir: Path, buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """Write every payload to out_dir/part-NNNNN.bin. Returns the part count."""
    out_dir.mkdir(parents=True, exist_ok=True)
    reader = PartReader(buffer_size=buffer_size)
    count = 0
    with open(stream, "rb") as f:
        reader.attach(f)
        for part in reader:
            (out_dir / f"part-{count:05d}.bin").write_bytes(part.payload)
            count += 1
    return count


@click.group()
def main() -> None:
    """Write, inspect and check binframe part streams."""


@main.command("pack")
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--part", "part_specs", multiple=True, required=True, metavar="TYPE=PATH",
              help="Part to append; TYPE is binary, metadata, header or a number 0-255.")
@buffer_size_option
def pack_cmd(out: Path, part_specs: tuple[str, ...], buffer_size: int) -> None:
    """Pack files into a part stream, in the order given."""
    parts = [_parse_part_spec(s) for s in part_specs]
    try:
        count = pack_stream(out, parts, buffer_size=buffer_size)
    except Exception as e:
        _fatal(e)
    click.echo(f"PASS: {count} parts written to {out}")


@main.command("ls")
@click.argument("stream", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--lenient", is_flag=True, help="Warn on a torn trailing part instead of failing.")
@buffer_size_option
def ls_cmd(stream: Path, lenient: bool, buffer_size: int) -> None:
    """List parts as canonical JSON lines."""
    try:
        records = scan_parts(stream, strict=not lenient, buffer_size=buffer_size)
    except Exception as e:
        _fatal(e)
    for rec in records:
        click.echo(json.dumps(rec, **CANONICAL_JSON_KW))


@main.command("extract")
@click.argument("stream", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out_dir", type=click.Path(file_okay=False, path_type=Path))
@buffer_size_option
def extract_cmd(stream: Path, out_dir: Path, buffer_size: int) -> None:
    """Extract every payload into OUT_DIR."""
    try:
        count = extract_stream(stream, out_dir, buffer_size=buffer_size)
    except Exception as e:
        _fatal(e)
    click.echo(f"PASS: {count} parts extracted to {out_dir}")


@main.command("index")
@click.argument("stream", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--max-part-size", type=click.IntRange(min=0), default=DEFAULT_MAX_SCAN_PART_SIZE,
              show_default=True, help="Reject parts declaring a larger payload.")
def index_cmd(stream: Path, out: Path, max_part_size: int) -> None:
    """Write a parquet index of the parts in STREAM."""
    try:
        records = scan_parts(stream, strict=True, max_part_size=max_part_size)
        written = write_part_index(records, out)
    except Exception as e:
        _fatal(e)
    if not written:
        click.echo("PASS: empty stream, no index written")
        return
    click.echo(f"PASS: Part index generated at {out}")
    click.echo(f"  Parts: {len(records)}")
    for name in sorted({r["flag_name"] for r in records}):
        click.echo(f"  {name}: {sum(1 for r in records if r['flag_name'] == name)}")


@main.command("check")
@click.argument("stream", type=click.Path(path_type=Path))
@click.option("--known-flags-only", is_flag=True, help="Reject parts whose flag is not binary, metadata or header.")
def check_cmd(stream: Path, known_flags_only: bool) -> None:
    """Check that STREAM decodes cleanly to its end."""
    result = check_stream(stream, known_flags_only=known_flags_only)
    click.echo(json.dumps(result, **CANONICAL_JSON_KW))
    if result["status"] != "PASS":
        raise SystemExit(1)


if __name__ == "__main__":
    main()
