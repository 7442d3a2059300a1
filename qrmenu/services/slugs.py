"""
Slug helpers for public menu routes
"""

from typing import Optional
import re

from qrmenu.core.config import get_settings
from qrmenu.models.business import SLUG_PATTERN

_TURKISH = str.maketrans({"ğ": "g", "ü": "u", "ş": "s", "ı": "i", "ö": "o", "ç": "c"})
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(name: str) -> str:
    """Derive a slug from a business name

    "Mikail Çay Ocağı" -> "mikail-cay-ocagi"
    """
    # "İ".lower() yields "i" plus a combining dot, drop it first
    lowered = name.replace("İ", "i").replace("I", "ı").lower().translate(_TURKISH)
    return _NON_ALNUM.sub("-", lowered).strip("-")


def is_valid_slug(slug) -> bool:
    return isinstance(slug, str) and bool(SLUG_PATTERN.match(slug))


def menu_url(slug: str, base_url: Optional[str] = None) -> str:
    """Public storefront URL encoded in QR codes"""
    base = base_url if base_url is not None else get_settings().PUBLIC_BASE_URL
    return f"{base.rstrip('/')}/{slug}"
