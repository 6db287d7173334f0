# portal/utils/http.py
"""Small request/response helpers shared by the JSON routes."""

from __future__ import annotations

from datetime import date, time

from flask import jsonify, request

from portal.i18n import translate


class InvalidRequestBody(Exception):
    """Raised when an endpoint needs a JSON object body and did not get one."""


def json_error(key: str, status: int, **extra):
    """Return ``({"error": <localized message>, **extra}, status)``."""
    params = extra.pop("params", None) or {}
    body = {"error": translate(key, **params)}
    body.update(extra)
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequestBody(f"expected a JSON object, got {type(data).__name__}")
    return data


def optional_json_body() -> dict:
    """Like :func:`json_body` but an empty body is an empty dict."""
    if not request.get_data(cache=True):
        return {}
    return json_body()


def clean_value(value):
    """Empty strings become ``None``; everything else is kept as sent."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def copy_fields(data: dict, fields) -> dict:
    """Whitelist-copy ``fields`` from ``data``; absent or empty values become None."""
    return {field: clean_value(data.get(field)) for field in fields}


def first_missing(data: dict, required) -> str | None:
    for field in required:
        if clean_value(data.get(field)) is None:
            return field
    return None


def int_arg(name: str, default: int, minimum: int = 0, maximum: int | None = None) -> int:
    try:
        value = int(request.args.get(name, default))
    except (TypeError, ValueError):
        value = default
    value = max(minimum, value)
    if maximum is not None:
        value = min(value, maximum)
    return value


def parse_bool(value, default: bool = False) -> bool:
    """JSON booleans as-is; strings such as ``"false"`` or ``"0"`` are parsed, not truth-tested."""
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def bool_arg(name: str, default: bool = False) -> bool:
    return parse_bool(request.args.get(name), default)


def parse_date(value):
    """ISO date string (``YYYY-MM-DD``, time part ignored) or None; ValueError if malformed."""
    value = clean_value(value)
    if value is None:
        return None
    return date.fromisoformat(str(value)[:10])


def parse_time(value):
    value = clean_value(value)
    if value is None:
        return None
    return time.fromisoformat(str(value))
