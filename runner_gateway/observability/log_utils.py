"""
Text clipping for logs and bounded columns.

Runner bodies can be large and binary-ish; everything that ends up in a log
line or a Text column goes through these helpers first.

Dependencies: none
System role: Logging helper functions
"""


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


def clip_text(text: str | bytes | None, limit: int) -> str:
    """
    First ``limit`` characters of a body, decoded leniently.

    No marker is appended, so the result fits a column sized to ``limit``.

    Args:
        text: Body text or raw bytes
        limit: Maximum characters kept

    Returns:
        str: Clipped text, empty for None
    """
    return _as_text(text)[:limit]


def preview(text: str | bytes | None, limit: int = 200) -> str:
    """
    Log-friendly preview of a body.

    Longer bodies are clipped and suffixed with the number of characters
    dropped, e.g. ``{"stdout": "... (+1834 chars)``.
    """
    full = _as_text(text)
    if len(full) <= limit:
        return full
    return f"{full[:limit]} (+{len(full) - limit} chars)"
