from pathlib import Path
from binframe_core.errors import DataTooLargeError, TruncatedStreamError, UnknownFlagError
from binframe_core.parts import require_known_flag
from binframe_core.protocol import DEFAULT_MAX_SCAN_PART_SIZE
from .const import ERRORS
from .streams import scan_parts

def _fail(errors: list, part_count: int = 0) -> dict:
    return {"status":"FAIL","error_count":len(errors),"errors":errors,"part_count":part_count}

def check_stream(stream_path: Path, known_flags_only: bool = False,
                 max_part_size: int = DEFAULT_MAX_SCAN_PART_SIZE) -> dict:
    errors = []

    if not stream_path.is_file():
        errors.append({"code":"E_STREAM_MISSING","message":ERRORS["E_STREAM_MISSING"],"path":str(stream_path)})
        return _fail(errors)

    try:
        records = scan_parts(stream_path, strict=True, max_part_size=max_part_size)
    except TruncatedStreamError as e:
        errors.append({"code":"E_TRUNCATED","message":ERRORS["E_TRUNCATED"],"offset":e.offset,
                       "stage":e.stage,"expected":e.expected,"received":e.received})
        return _fail(errors)
    except DataTooLargeError as e:
        errors.append({"code":"E_TOO_LARGE","message":ERRORS["E_TOO_LARGE"],"length":e.length,"limit":e.limit})
        return _fail(errors)

    if known_flags_only:
        for rec in records:
            try:
                require_known_flag(rec["flag"])
            except UnknownFlagError:
                errors.append({"code":"E_UNKNOWN_FLAG","message":ERRORS["E_UNKNOWN_FLAG"],
                               "index":rec["index"],"offset":rec["offset"],"flag":rec["flag"]})
        if errors:
            return _fail(errors, len(records))

    return {"status":"PASS","error_count":0,"errors":[],"part_count":len(records)}
