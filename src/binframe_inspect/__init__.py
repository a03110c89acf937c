"""binframe inspect - scanning, indexing and checking part streams."""
