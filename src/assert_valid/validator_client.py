from __future__ import annotations

import logging
from abc import abstractmethod

import httpx
from pydantic import BaseModel, Field
from typing_extensions import Annotated

from .cache import CacheKey, CacheStore, DocumentKind
from .config import ValidatorConfig
from .errors import ValidatorProtocolError
from .fetcher import CachedFetcher
from .requests import CssRequest, MarkupRequest

logger = logging.getLogger(__name__)


class RawResponse(BaseModel):
    status_code: Annotated[int, Field(description="HTTP status code")]
    reason: Annotated[str, Field(default="", description="HTTP reason phrase")]
    headers: Annotated[
        dict[str, str],
        Field(default_factory=dict, description="Response headers, lower-cased names"),
    ]
    body: Annotated[str, Field(default="", description="Decoded response body")]

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> RawResponse:
        return cls(
            status_code=response.status_code,
            reason=response.reason_phrase,
            headers={name.lower(): value for name, value in response.headers.items()},
            body=response.text,
        )

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


class ValidatorApi(CachedFetcher[CacheKey]):
    """A single POST to a remote W3C validator, behind the response cache."""

    KIND: DocumentKind

    def __init__(
        self,
        document: str,
        *,
        ctx: CacheKey | None = None,
        config: ValidatorConfig | None = None,
        cache_store: CacheStore[CacheKey] | None = None,
    ):
        if ctx is not None and ctx.kind is not self.KIND:
            raise ValueError(f"{type(self).__name__} requires a {self.KIND.value} cache key")
        self.config = config or ValidatorConfig()
        super().__init__(document=document, ctx=ctx, cache_store=cache_store)

    @property
    @abstractmethod
    def url(self) -> str:
        """Endpoint the document is posted to."""
        raise NotImplementedError

    @abstractmethod
    def build_request(self) -> MarkupRequest | CssRequest:
        """Encode the document the way the endpoint expects."""
        raise NotImplementedError

    def _client(self) -> httpx.Client:
        proxy = self.config.proxy.url() if self.config.proxy else None
        return httpx.Client(proxy=proxy, timeout=self.config.timeout)

    def _fetch_remote(self) -> RawResponse:
        request = self.build_request()
        logger.debug("POST %s (%d bytes)", self.url, len(self._document))
        with self._client() as client:
            response = client.post(self.url, content=request.body(), headers=request.headers())
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ValidatorProtocolError(
                "a successful HTTP status",
                f"{e.response.status_code} {e.response.reason_phrase} from {self.url}",
            ) from e
        return RawResponse.from_httpx(response)


class MarkupValidatorApi(ValidatorApi):
    KIND = DocumentKind.MARKUP

    @property
    def url(self) -> str:
        return self.config.markup_url

    def build_request(self) -> MarkupRequest:
        return MarkupRequest(fragment=self._document)


class CssValidatorApi(ValidatorApi):
    KIND = DocumentKind.CSS

    @property
    def url(self) -> str:
        return self.config.css_url

    def build_request(self) -> CssRequest:
        return CssRequest(
            css=self._document,
            warning=self.config.css_warning,
            profile=self.config.css_profile,
            usermedium=self.config.css_usermedium,
            boundary=self.config.boundary,
        )


def validator_api_for(kind: DocumentKind) -> type[ValidatorApi]:
    return MarkupValidatorApi if kind is DocumentKind.MARKUP else CssValidatorApi
