def first_present(data: dict, *names):
    """Return the first of ``names`` whose value in ``data`` is set."""
    for name in names:
        value = data.get(name)
        if value is not None and value != "":
            return value
    return None


def missing_fields(required):
    """``required`` is a list of (value, name) pairs."""
    return [name for value, name in required if value is None or value == ""]


def as_int(value):
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def as_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def as_text(value):
    """Stripped string or None; non-strings count as absent."""
    if not isinstance(value, str):
        return None
    return value.strip() or None
