from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
import pytest

from assert_valid.config import CACHE_DIR_ENV, PROXY_HOST_ENV, PROXY_PORT_ENV


@pytest.fixture(autouse=True)
def isolate_cache_dir(tmp_path, monkeypatch):
    """Force each test to use an isolated response cache."""
    monkeypatch.setenv(CACHE_DIR_ENV, str(tmp_path / "validator-cache"))
    monkeypatch.delenv(PROXY_HOST_ENV, raising=False)
    monkeypatch.delenv(PROXY_PORT_ENV, raising=False)
    yield


@dataclass
class FakeValidator:
    """Stands in for httpx.Client, recording every POST it receives."""

    respond: Callable[[str, bytes], httpx.Response]
    posts: list[dict[str, Any]] = field(default_factory=list)
    client_kwargs: list[dict[str, Any]] = field(default_factory=list)

    @property
    def call_count(self) -> int:
        return len(self.posts)

    def factory(self, *args, **kwargs):
        self.client_kwargs.append(kwargs)
        outer = self

        class DummyClient:
            def __enter__(self_inner):
                return self_inner

            def __exit__(self_inner, exc_type, exc, tb):
                return False

            def post(self_inner, url, *, content=b"", headers=None):
                outer.posts.append({"url": url, "content": content, "headers": headers or {}})
                return outer.respond(url, content)

        return DummyClient()


def _make_response(
    url: str,
    status: int = 200,
    *,
    text: str = "",
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    return httpx.Response(
        status,
        text=text,
        headers=headers,
        request=httpx.Request("POST", url),
    )


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def fake_validator(monkeypatch):
    def install(respond: Callable[[str, bytes], httpx.Response]) -> FakeValidator:
        fake = FakeValidator(respond=respond)
        monkeypatch.setattr("assert_valid.validator_client.httpx.Client", fake.factory)
        return fake

    return install
