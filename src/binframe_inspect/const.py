ERRORS = {
  "E_STREAM_MISSING": "Part stream file missing",
  "E_TRUNCATED": "Part stream ends inside a part",
  "E_TOO_LARGE": "Part length exceeds the configured limit",
  "E_UNKNOWN_FLAG": "Part flag is not a recognized type tag",
}
