import json, os, sys, uuid
from datetime import datetime, timezone
from pathlib import Path

from binframe_core.parts import PartFlag
from binframe_core.protocol import HEADER_LEN
from binframe_core.writer import PartWriter

# --- CONFIGURATION ---
FRAMES = 100
BLOB_SIZE = 4 * 1024
META_EVERY = 10  # one metadata part per N binary parts


def generate_stream(out_dir, torn=False, buffer_size=None):
    """
    Write a sample part stream:
    one header part, then binary blobs with a metadata part every META_EVERY frames.
    With torn=True the final part loses half its payload, as after a crash mid-write.
    """
    sess_id = str(uuid.uuid4())
    path = Path(out_dir) / f"stream-{sess_id[:8]}.bin"
    path.parent.mkdir(parents=True, exist_ok=True)

    header = {
        "session_id": sess_id,
        "frames": FRAMES,
        "blob_size": BLOB_SIZE,
        "started_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }

    print(f"Generating: {path.name} (Torn={torn})")

    writer = PartWriter(buffer_size=buffer_size)
    with open(path, "wb") as f:
        writer.attach(f)
        writer.write_part(PartFlag.HEADER, json.dumps(header, sort_keys=True).encode())

        for frame_id in range(FRAMES):
            if frame_id % META_EVERY == 0:
                meta = {"frame_id": frame_id, "kind": "checkpoint"}
                writer.write_part(PartFlag.METADATA, json.dumps(meta, sort_keys=True).encode())
            writer.write_part(PartFlag.BINARY, os.urandom(BLOB_SIZE))

        writer.flush()  # Durability: commit before closing

    if torn:
        # Cut the last binary part in half.
        size = path.stat().st_size
        with open(path, "r+b") as f:
            f.truncate(size - (BLOB_SIZE // 2))

    return path


if __name__ == "__main__":
    # Usage:
    #   python tools/gen_stream.py OUT_DIR [--runs N] [--torn] [--buffer-size N]

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    def pop_int(arg_list: list[str], opt: str, default):
        if opt not in arg_list:
            return default, arg_list
        i = arg_list.index(opt)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{opt} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    torn, args = pop_flag(args, "--torn")
    runs, args = pop_int(args, "--runs", 1)
    buffer_size, args = pop_int(args, "--buffer-size", None)

    out = args[0] if args else "streams_out"

    for _ in range(runs):
        p = generate_stream(out, torn=torn, buffer_size=buffer_size)
        print(f"  Bytes: {p.stat().st_size} ({HEADER_LEN}-byte header per part)")
