"""
Domain Extractor and link classification.

domain_of() derives the display host of a result URL.
LinkFilter decides whether an outbound link can be a search result:

  RESULT   = absolute http(s) link to a third-party site
  PROVIDER = the search provider's own pages (any google.<tld> host)
  DENIED   = media hosting, help/support, asset/redirect/cache hosts
  INVALID  = not an absolute http(s) URL
"""

from __future__ import annotations

import html
import re
from enum import Enum
from typing import Iterable, Optional, Set
from urllib.parse import parse_qs, urlsplit


class LinkKind(str, Enum):
    RESULT = "result"
    PROVIDER = "provider"
    DENIED = "denied"
    INVALID = "invalid"


# Hosts that never carry an organic result
NON_RESULT_DOMAINS: Set[str] = {
    "youtube.com",
    "support.google.com",
    "gstatic.com",
    "googleusercontent.com",
    "googleadservices.com",
    "googlesyndication.com",
    "doubleclick.net",
}

PROVIDER_HOST_RE = re.compile(r"(?:^|\.)google\.[a-z]{2,3}(?:\.[a-z]{2})?$")

# Redirect wrappers used by the provider: /url?q=<target>&sa=...
REDIRECT_PATHS = ("/url", "/interstitial", "/imgres")
REDIRECT_PARAMS = ("q", "url", "imgrefurl")


def domain_of(url: str) -> str:
    """
    Return the lowercase host of ``url`` with one leading "www." removed.

    Anything that does not parse as an absolute URL comes back unchanged.
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except (ValueError, TypeError, AttributeError):
        return url
    if not parts.scheme or not parts.netloc or not host:
        return url
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def is_http_url(url: Optional[str]) -> bool:
    """True for strings that start with an http(s) scheme."""
    if not url:
        return False
    lowered = url[:8].lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def resolve_href(href: Optional[str]) -> Optional[str]:
    """
    Turn a raw href into an absolute http(s) URL.

    Provider redirect links (``/url?q=https://...&sa=U``) are unwrapped.
    Returns None for anything that is not, or does not wrap, an http(s) URL.
    """
    if not href:
        return None
    href = html.unescape(href.strip())

    if is_http_url(href):
        try:
            parts = urlsplit(href)
        except ValueError:
            return None
        # absolute redirect wrapper, e.g. https://www.google.com/url?q=...
        if PROVIDER_HOST_RE.search((parts.hostname or "").lower()):
            target = _redirect_target(parts.path, parts.query)
            if target:
                return target
        return href

    if href.startswith("/"):
        try:
            parts = urlsplit(href)
        except ValueError:
            return None
        return _redirect_target(parts.path, parts.query)

    return None


def _redirect_target(path: str, query: str) -> Optional[str]:
    if path not in REDIRECT_PATHS:
        return None
    params = parse_qs(query)
    for name in REDIRECT_PARAMS:
        for value in params.get(name, []):
            target = value.strip()
            if is_http_url(target):
                return target
    return None


class LinkFilter:
    """
    Classify outbound links.

    Resolution order:
      1. Not an absolute http(s) URL -> INVALID
      2. Provider host              -> PROVIDER
      3. Deny-list (suffix match)   -> DENIED
      4. Anything else              -> RESULT
    """

    def __init__(self, extra_deny: Optional[Iterable[str]] = None):
        self._deny: Set[str] = set(NON_RESULT_DOMAINS)
        if extra_deny:
            self._deny |= {d.strip().lower() for d in extra_deny if d.strip()}

    @property
    def denied_domains(self) -> Set[str]:
        return self._deny

    def classify(self, url: Optional[str]) -> LinkKind:
        if not is_http_url(url):
            return LinkKind.INVALID
        host = domain_of(url)
        if host == url:
            # did not parse
            return LinkKind.INVALID

        if PROVIDER_HOST_RE.search(host):
            return LinkKind.PROVIDER
        if self._domain_matches(host, self._deny):
            return LinkKind.DENIED
        return LinkKind.RESULT

    def is_result_link(self, url: Optional[str]) -> bool:
        """Return True if ``url`` can be the target of a search result."""
        return self.classify(url) == LinkKind.RESULT

    @staticmethod
    def _domain_matches(domain: str, domain_set: Set[str]) -> bool:
        """
        Check if domain matches any entry in the set.
        Supports suffix matching (e.g., "m.youtube.com" matches "youtube.com").
        """
        for d in domain_set:
            if domain == d or domain.endswith("." + d):
                return True
        return False
