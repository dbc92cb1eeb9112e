"""Link and image URL resolution against the page URL."""

from __future__ import annotations

import logging
from urllib.parse import urljoin

logger = logging.getLogger(__name__)

# href prefixes that never point at a citable resource
_NON_CITABLE_PREFIXES: tuple[str, ...] = ("#", "javascript:", "vbscript:", "data:")


def _join(base_url: str, ref: str) -> str:
    if not base_url:
        return ref
    try:
        return urljoin(base_url, ref)
    except ValueError as exc:
        logger.debug("Could not resolve %r against %r: %s", ref, base_url, exc)
        return ref


def resolve_link(href: object, base_url: str = "") -> str | None:
    """Return the absolute URL for an anchor *href*, or None if it is not a link.

    Fragment-only, ``javascript:``, and ``data:`` hrefs are not links for
    citation purposes.
    """
    if href is None:
        return None
    href = " ".join(href) if isinstance(href, list) else str(href)
    href = href.strip()
    if not href or href.lower().startswith(_NON_CITABLE_PREFIXES):
        return None
    return _join(base_url, href)


def resolve_src(src: object, base_url: str = "", srcset: object = None) -> str:
    """Return the absolute image URL from ``src`` (or the first ``srcset`` entry).

    Inline ``data:`` images give an empty string.
    """
    value = str(src or "").strip()
    if not value:
        candidates = str(srcset or "").strip()
        if candidates:
            value = candidates.split(",")[0].strip().split(" ")[0]
    if not value or value.lower().startswith("data:"):
        return ""
    return _join(base_url, value)
