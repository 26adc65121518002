"""
Fetch Adapter — SearchClient ABC and provider implementations.

Supports:
  - Google HTML results (default)

One request per call, bounded timeout, no retries and no cache. Every
failure surfaces as UpstreamFetchError so the boundary can report it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .config import SearchConfig
from .errors import UpstreamFetchError

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Abstract client
# ------------------------------------------------------------------

class SearchClient(ABC):
    """Abstract fetch interface: query in, raw provider HTML out."""

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._config = config or SearchConfig()
        self._transport = transport

    @property
    def config(self) -> SearchConfig:
        return self._config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @abstractmethod
    def _build_request(self, query: str) -> httpx.Request:
        """Provider-specific request."""
        ...

    def fetch(self, query: str) -> str:
        """
        Fetch the raw result page for ``query``.

        Raises:
            UpstreamFetchError: timeout, network failure or non-2xx status
        """
        request = self._build_request(query)
        logger.debug("[%s] GET %s", self.provider_name, request.url)

        try:
            with httpx.Client(
                timeout=self._config.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                resp = client.send(request)
                resp.raise_for_status()
                return resp.text
        except httpx.TimeoutException as exc:
            logger.warning("[%s] timed out: %s", self.provider_name, exc)
            raise UpstreamFetchError(
                f"Request timed out after {self._config.timeout_seconds:g}s"
            ) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("[%s] HTTP %d", self.provider_name, status)
            raise UpstreamFetchError(
                f"Upstream responded with HTTP {status}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("[%s] request failed: %s", self.provider_name, exc)
            raise UpstreamFetchError(str(exc) or type(exc).__name__) from exc


# ------------------------------------------------------------------
# Google HTML provider
# ------------------------------------------------------------------

class GoogleHTMLClient(SearchClient):
    """Fetch the Google results page as a desktop browser would."""

    @property
    def provider_name(self) -> str:
        return "google"

    def _build_request(self, query: str) -> httpx.Request:
        params = {"q": query}
        if self._config.language:
            params["hl"] = self._config.language
        return httpx.Request(
            "GET",
            self._config.search_url,
            params=params,
            headers=self._config.headers,
        )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def get_search_client(
    provider: str = "google",
    config: Optional[SearchConfig] = None,
    **kwargs,
) -> SearchClient:
    """Factory — create a search client by provider name."""
    providers = {
        "google": GoogleHTMLClient,
    }
    cls = providers.get(provider)
    if not cls:
        raise ValueError(
            f"Unknown provider '{provider}'. Choose from: {list(providers.keys())}"
        )
    return cls(config=config, **kwargs)
