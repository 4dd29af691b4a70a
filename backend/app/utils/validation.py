from __future__ import annotations

import re
from urllib.parse import urlsplit

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


def validate_password_strength(password: str) -> tuple[bool, str | None]:
    """Validate password strength."""
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"

    weak_passwords = {"password", "123456", "qwerty", "admin", "test", "password123", "bookmarks"}
    if password.lower() in weak_passwords:
        return False, "Password is too weak. Please choose a stronger password."
    return True, None


def is_valid_bookmark_url(url: str) -> bool:
    """Loose URL check: optional http(s) scheme and a dotted host."""
    candidate = (url or "").strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    parts = urlsplit(candidate)
    if parts.scheme not in {"http", "https"}:
        return False
    host = parts.hostname or ""
    return "." in host and not host.startswith(".") and not host.endswith(".")


def is_valid_hex_color(value: str) -> bool:
    return bool(_HEX_COLOR_RE.match(value or ""))
