"""Signals for brand import pulled out of a fetched homepage.

Pages are treated as text: a few regexes find the title, meta tags, logo
candidates and hex colours, and the remaining markup is stripped down to
readable copy for the model.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urljoin, urlsplit

TEXT_LIMIT = 8000
MAX_COLORS = 6

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_TITLE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_LOGO_IMG = re.compile(r"<img[^>]*(?:logo|brand|header)[^>]*src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)
_FAVICON = re.compile(
    r"<link[^>]*rel=[\"'](?:icon|shortcut icon|apple-touch-icon)[^\"']*[\"'][^>]*href=[\"']([^\"']+)[\"']",
    re.IGNORECASE,
)
_HEX_COLOR = re.compile(r"#[0-9A-Fa-f]{6}")
_DROP_BLOCKS = [
    re.compile(rf"<{tag}[^>]*>.*?</{tag}>", re.IGNORECASE | re.DOTALL)
    for tag in ("script", "style", "nav", "footer")
]
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")
_ENTITIES = {"&nbsp;": " ", "&amp;": "&", "&lt;": "<", "&gt;": ">", "&quot;": '"', "&#39;": "'"}


def normalize_url(url: str) -> str:
    """Adds ``https://`` when no scheme is given. Raises ValueError for unusable URLs."""
    candidate = url.strip()
    if not _SCHEME.match(candidate):
        candidate = f"https://{candidate}"
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        parts.port  # raises on a malformed port
    except ValueError:
        raise ValueError(url) from None
    if not host or any(ch.isspace() for ch in parts.netloc):
        raise ValueError(url)
    return candidate


def resolve_url(href: str, base: str) -> str:
    try:
        return urljoin(base, href)
    except ValueError:
        return href


def extract_meta(html: str, name: str) -> str:
    """Content of a ``<meta>`` tag matched by name, then property, then content-first order."""
    key = re.escape(name)
    patterns = (
        rf"<meta[^>]*name=[\"']{key}[\"'][^>]*content=[\"']([^\"']*)[\"']",
        rf"<meta[^>]*property=[\"']{key}[\"'][^>]*content=[\"']([^\"']*)[\"']",
        rf"<meta[^>]*content=[\"']([^\"']*)[\"'][^>]*(?:name|property)=[\"']{key}[\"']",
    )
    for pattern in patterns:
        match = re.search(pattern, html, re.IGNORECASE)
        if match:
            return match.group(1)
    return ""


def strip_html(html: str) -> str:
    for block in _DROP_BLOCKS:
        html = block.sub("", html)
    text = _TAG.sub(" ", html)
    for entity, char in _ENTITIES.items():
        text = text.replace(entity, char)
    return _WHITESPACE.sub(" ", text).strip()


def logo_candidates(html: str, base_url: str) -> list[str]:
    found: list[str] = []
    og_image = extract_meta(html, "og:image")
    if og_image:
        found.append(resolve_url(og_image, base_url))
    found.extend(resolve_url(src, base_url) for src in _LOGO_IMG.findall(html))
    favicon = _FAVICON.search(html)
    if favicon:
        found.append(resolve_url(favicon.group(1), base_url))
    return found


def site_colors(html: str) -> list[str]:
    unique = dict.fromkeys(_HEX_COLOR.findall(html))
    return list(unique)[:MAX_COLORS]


@dataclass(frozen=True)
class SiteSnapshot:
    url: str
    title: str = ""
    og_title: str = ""
    meta_description: str = ""
    text: str = ""
    logo_candidates: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)

    @classmethod
    def from_html(cls, html: str, url: str) -> "SiteSnapshot":
        title = _TITLE.search(html)
        return cls(
            url=url,
            title=title.group(1).strip() if title else "",
            og_title=extract_meta(html, "og:title"),
            meta_description=extract_meta(html, "description") or extract_meta(html, "og:description"),
            text=strip_html(html)[:TEXT_LIMIT],
            logo_candidates=logo_candidates(html, url),
            colors=site_colors(html),
        )
