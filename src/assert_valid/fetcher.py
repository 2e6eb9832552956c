from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

from .cache import CacheContext, CacheLocation, CacheStore

if TYPE_CHECKING:
    from .validator_client import RawResponse

logger = logging.getLogger(__name__)

Ctx = TypeVar("Ctx", bound=CacheContext)


class CachedFetcher(ABC, Generic[Ctx]):
    """Base class that handles cache hydration and bookkeeping.

    The cache is consulted once, on construction: a stale entry is discarded
    and the new document recorded before any network call is made.
    """

    def __init__(
        self,
        *,
        document: str,
        ctx: Ctx | None = None,
        cache_store: CacheStore[Ctx] | None = None,
    ):
        self._document = document
        self._ctx = ctx
        self._cache_store = cache_store if ctx is not None else None
        self._location: CacheLocation | None = None
        self._response: RawResponse | None = None
        self._last_response_source: str = "uninitialized"

        if self._cache_store is not None and self._ctx is not None:
            self._location = self._cache_store.locate(self._ctx)
            state = self._cache_store.check_and_refresh(self._location, document)
            if state.fresh:
                self._response = state.response
                self._last_response_source = "cache"
                logger.debug("Reusing cached validator response for %s", self._ctx.key())

    @property
    def last_response_source(self) -> str:
        return self._last_response_source

    @property
    def response(self) -> RawResponse:
        if self._response is None:
            raise ValueError("Response not fetched yet. Call fetch() first.")
        return self._response

    def fetch(self) -> RawResponse:
        if self._response is not None:
            return self._response
        response = self._fetch_remote()
        self._last_response_source = "network"
        self._response = self._record(response)
        return self._response

    def _record(self, response: RawResponse) -> RawResponse:
        """Persist response to cache store if present."""
        if self._cache_store is not None and self._location is not None:
            self._cache_store.put(self._location, response)
        return response

    @abstractmethod
    def _fetch_remote(self) -> RawResponse:
        """Perform the network round trip for the current document."""
        raise NotImplementedError
