"""Request field validators shared by the API routers."""


def ensure_utf8(value: str | None) -> str | None:
    """Reject text that cannot be stored, such as lone surrogate escapes."""
    if value is None:
        return value
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError("Text must be valid UTF-8")
    return value
