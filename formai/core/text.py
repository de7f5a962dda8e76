"""
Small text helpers shared by schemas and services.
"""
import re
from typing import Optional
from urllib.parse import urlparse

_NON_SLUG = re.compile(r"[^a-z0-9]+")
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


def slugify(value: str, max_length: int = 80) -> str:
    """Lowercase, hyphen-separated slug. Empty input gives an empty slug."""
    slug = _NON_SLUG.sub("-", (value or "").lower()).strip("-")
    return slug[:max_length].rstrip("-")


def is_http_url(value: Optional[str]) -> bool:
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def normalize_domain(value: str) -> str:
    """Strip scheme, path and trailing dot from a host name."""
    value = (value or "").strip().lower()
    if "://" in value:
        value = urlparse(value).netloc
    return value.split("/")[0].rstrip(".")
