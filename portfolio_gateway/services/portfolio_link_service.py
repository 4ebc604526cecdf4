"""Public share links for a profile's portfolio page."""
from __future__ import annotations

import re
import secrets
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

from .records_service import utc_now_iso

PORTFOLIO_LINKS_TABLE = "portfolio_links"

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
SUFFIX_LENGTH = 5
FALLBACK_SLUG_BASE = "user"

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def slug_base(full_name: Optional[str]) -> str:
    """Lower-case ``full_name`` and collapse every non-alphanumeric run to one hyphen.

    >>> slug_base("Jane Doe!!")
    'jane-doe'
    """
    base = _NON_ALNUM_RE.sub("-", (full_name or "").lower()).strip("-")
    return base or FALLBACK_SLUG_BASE


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def make_slug(full_name: Optional[str], suffix_fn: Callable[[], str] = random_suffix) -> str:
    return f"{slug_base(full_name)}-{suffix_fn()}"


class PortfolioLinkService:
    """Create share-link rows. Slugs are not checked for collisions."""

    def __init__(
        self,
        client: Any,
        origin: str,
        path: str = "/portfolio.html",
        suffix_fn: Callable[[], str] = random_suffix,
    ) -> None:
        self.client = client
        self.origin = origin.rstrip("/")
        self.path = path
        self._suffix_fn = suffix_fn

    def share_url(self, slug: str) -> str:
        return f"{self.origin}{self.path}?u={quote(slug)}"

    def create_link(self, profile_id: Any, full_name: Optional[str]) -> Dict[str, str]:
        """
        Insert a new link row for a profile.

        Returns:
            Dict with ``url`` (full share URL) and ``slug``
        """
        slug = make_slug(full_name, self._suffix_fn)
        response = (
            self.client.table(PORTFOLIO_LINKS_TABLE)
            .insert([{"profile_id": profile_id, "public_url": slug, "created_at": utc_now_iso()}])
            .execute()
        )
        data = response.data or []
        stored = (data[0].get("public_url") if data else None) or slug
        return {"url": self.share_url(stored), "slug": stored}
