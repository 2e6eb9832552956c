"""pytest fixtures for asserting markup and CSS validity.

Registered through the ``pytest11`` entry point, so installing the package is
enough::

    def test_home_page_markup(client, assert_valid_markup):
        assert_valid_markup(client.get("/").text)

The cache slot is derived from the requesting test's class (or module) and
node name. Each parametrized case gets its own slot, since the parameter
id is part of the node name.
"""

from __future__ import annotations

from typing import Callable

import pytest

from .assertions import TestIdentity, assert_valid
from .cache import DocumentKind
from .config import ValidatorConfig
from .interpreter import Verdict
from .store import FileCacheStore


def _identity(request: pytest.FixtureRequest) -> TestIdentity:
    owner = request.cls.__qualname__ if request.cls is not None else None
    module = request.module.__name__
    class_name = f"{module}.{owner}" if owner else module
    method_name = request.node.name
    return TestIdentity(class_name=class_name, method_name=method_name)


@pytest.fixture(scope="session")
def validator_config() -> ValidatorConfig:
    """Override in a conftest.py to configure endpoints, proxy or cache dir."""
    return ValidatorConfig.from_env()


@pytest.fixture(scope="session")
def validator_store(validator_config: ValidatorConfig) -> FileCacheStore:
    return FileCacheStore(config=validator_config)


def _assertion(
    request: pytest.FixtureRequest,
    kind: DocumentKind,
    config: ValidatorConfig,
    store: FileCacheStore,
) -> Callable[[str], Verdict]:
    identity = _identity(request)

    def check(document: str) -> Verdict:
        __tracebackhide__ = True
        return assert_valid(document, kind, identity=identity, config=config, store=store)

    return check


@pytest.fixture
def assert_valid_markup(request, validator_config, validator_store) -> Callable[[str], Verdict]:
    return _assertion(request, DocumentKind.MARKUP, validator_config, validator_store)


@pytest.fixture
def assert_valid_css(request, validator_config, validator_store) -> Callable[[str], Verdict]:
    return _assertion(request, DocumentKind.CSS, validator_config, validator_store)
