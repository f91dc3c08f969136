"""Transcoding of stored keyword text into the index's single-byte charset."""

# Latin-9: Latin-1 plus the euro sign and the French/Finnish letters it lacks
INDEX_CHARSET = "iso8859_15"


def to_index_charset(text: str) -> bytes:
    """Encode *text* as ISO-8859-15, replacing unrepresentable characters with ``?``."""
    return text.encode(INDEX_CHARSET, errors="replace")
