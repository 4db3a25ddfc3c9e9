import re
from typing import Any

import phonenumbers

from app.core.config import settings


def success_response(message: str, payload: Any = None) -> dict:
    return {"success": True, "message": message, "payload": payload}


def error_response(message: str, code: int = 500, errors: Any = None) -> dict:
    body = {"success": False, "message": message, "code": code}
    if errors is not None:
        body["errors"] = errors
    return body


def slugify(name: str) -> str:
    """Convert a display name to a URL-friendly slug."""
    s = name.strip().lower()
    s = s.replace("&", "")
    s = s.replace("/", "-")
    s = re.sub(r"[^a-z0-9\s-]", "", s)
    s = re.sub(r"[\s-]+", "-", s)
    return s.strip("-")


def normalize_phone_number(raw: str, region: str | None = None) -> str:
    """Return the number in E.164 form; raises ValueError when it is not a valid number."""
    cleaned = re.sub(r"[^\d+]", "", raw or "")
    try:
        number = phonenumbers.parse(cleaned, region or settings.DEFAULT_PHONE_REGION)
    except phonenumbers.NumberParseException as e:
        raise ValueError("Invalid phone number format") from e
    if not phonenumbers.is_valid_number(number):
        raise ValueError("Invalid phone number format")
    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.E164)


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0


_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def field_errors(errors) -> list[dict]:
    """pydantic error list -> [{field, message}]."""
    out = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in _LOCATION_PREFIXES]
        message = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        out.append({"field": ".".join(loc) or None, "message": message})
    return out
