from __future__ import annotations

import logging
from dataclasses import dataclass

from .cache import CacheKey, DocumentKind
from .config import ValidatorConfig
from .errors import InvalidDocumentError
from .interpreter import Verdict, interpret
from .store import FileCacheStore
from .validator_client import validator_api_for

logger = logging.getLogger(__name__)

CSS_FAILURE_HEADER = "CSS Validation failed:"


@dataclass(frozen=True)
class TestIdentity:
    """The running test, used to scope its cached validator responses."""

    __test__ = False

    class_name: str
    method_name: str

    def cache_key(self, kind: DocumentKind) -> CacheKey:
        return CacheKey(class_name=self.class_name, method_name=self.method_name, kind=kind)


def failure_message(kind: DocumentKind, verdict: Verdict) -> str:
    message = verdict.message()
    if kind is DocumentKind.CSS:
        return f"{CSS_FAILURE_HEADER}\n{message}"
    return message or "Markup validator reported the document as invalid"


def validate(
    document: str,
    kind: DocumentKind,
    *,
    identity: TestIdentity,
    config: ValidatorConfig | None = None,
    store: FileCacheStore | None = None,
) -> Verdict:
    """Return the validator's verdict for ``document``, using the cache when possible."""
    cfg = config or ValidatorConfig()
    cache_store = store or FileCacheStore(config=cfg)
    api = validator_api_for(kind)(
        document,
        ctx=identity.cache_key(kind),
        config=cfg,
        cache_store=cache_store,
    )
    response = api.fetch()
    logger.debug(
        "%s validation for %s.%s answered from %s",
        kind.value,
        identity.class_name,
        identity.method_name,
        api.last_response_source,
    )
    return interpret(kind, response)


def assert_valid(
    document: str,
    kind: DocumentKind,
    *,
    identity: TestIdentity,
    config: ValidatorConfig | None = None,
    store: FileCacheStore | None = None,
) -> Verdict:
    verdict = validate(document, kind, identity=identity, config=config, store=store)
    if not verdict.valid:
        raise InvalidDocumentError(failure_message(kind, verdict), verdict=verdict, kind=kind)
    return verdict


def assert_valid_markup(fragment: str, **kwargs) -> Verdict:
    return assert_valid(fragment, DocumentKind.MARKUP, **kwargs)


def assert_valid_css(css: str, **kwargs) -> Verdict:
    return assert_valid(css, DocumentKind.CSS, **kwargs)


class ValidationAssertions:
    """Mixin for ``unittest.TestCase`` adding W3C validity assertions.

    Set ``validator_config`` on the test class to override the settings
    otherwise read from the environment.
    """

    validator_config: ValidatorConfig | None = None

    def _validator_identity(self) -> TestIdentity:
        return TestIdentity(
            class_name=f"{type(self).__module__}.{type(self).__qualname__}",
            method_name=self._testMethodName,
        )

    def _assert_validity(self, document: str, kind: DocumentKind) -> Verdict:
        config = self.validator_config or ValidatorConfig.from_env()
        verdict = validate(document, kind, identity=self._validator_identity(), config=config)
        if not verdict.valid:
            raise self.failureException(failure_message(kind, verdict))
        return verdict

    def assert_valid_markup(self, fragment: str) -> Verdict:
        return self._assert_validity(fragment, DocumentKind.MARKUP)

    def assert_valid_css(self, css: str) -> Verdict:
        return self._assert_validity(css, DocumentKind.CSS)
