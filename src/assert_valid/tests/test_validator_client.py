from __future__ import annotations

import httpx
import pytest

from assert_valid.cache import CacheKey, DocumentKind
from assert_valid.config import DEFAULT_CSS_URL, DEFAULT_MARKUP_URL, ProxyConfig, ValidatorConfig
from assert_valid.errors import ValidatorProtocolError
from assert_valid.store import FileCacheStore
from assert_valid.validator_client import (
    CssValidatorApi,
    MarkupValidatorApi,
    RawResponse,
    ValidatorApi,
    validator_api_for,
)


def test_markup_api_posts_form_to_check(fake_validator, make_response):
    fake = fake_validator(
        lambda url, content: make_response(url, headers={"X-W3C-Validator-Status": "Valid"})
    )

    api = MarkupValidatorApi("<p>a b</p>")
    response = api.fetch()

    assert fake.call_count == 1
    post = fake.posts[0]
    assert post["url"] == DEFAULT_MARKUP_URL
    assert post["content"] == b"fragment=%3Cp%3Ea+b%3C%2Fp%3E&output=xml"
    assert post["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
    assert response.header("X-W3C-Validator-Status") == "Valid"
    assert api.last_response_source == "network"


def test_css_api_posts_multipart_to_validator(fake_validator, make_response):
    fake = fake_validator(lambda url, content: make_response(url, text="<html></html>"))
    config = ValidatorConfig(boundary="BOUNDARY")

    CssValidatorApi("a { color: red }", config=config).fetch()

    post = fake.posts[0]
    assert post["url"] == DEFAULT_CSS_URL
    assert post["headers"]["Content-Type"] == "multipart/form-data; boundary=BOUNDARY"
    assert post["content"].startswith(b"--BOUNDARY\r\n")
    assert b"a { color: red }\r\n" in post["content"]
    assert post["content"].endswith(b"--BOUNDARY--\r\n")


def test_client_connects_directly_without_proxy(fake_validator, make_response):
    fake = fake_validator(lambda url, content: make_response(url, text=""))

    CssValidatorApi("a {}").fetch()

    assert fake.client_kwargs == [{"proxy": None, "timeout": 30.0}]


def test_client_routes_through_configured_proxy(fake_validator, make_response):
    fake = fake_validator(lambda url, content: make_response(url, text=""))
    config = ValidatorConfig(proxy=ProxyConfig(host="proxy.local", port=3128), timeout=5)

    CssValidatorApi("a {}", config=config).fetch()

    assert fake.client_kwargs == [{"proxy": "http://proxy.local:3128", "timeout": 5}]


def test_error_status_raises_and_is_not_cached(fake_validator, make_response, tmp_path):
    fake = fake_validator(lambda url, content: make_response(url, 503, text="busy"))
    store = FileCacheStore(tmp_path)
    key = CacheKey("PagesTest", "test_index", DocumentKind.MARKUP)

    api = MarkupValidatorApi("<p/>", ctx=key, cache_store=store)
    with pytest.raises(ValidatorProtocolError, match="503") as excinfo:
        api.fetch()

    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)
    assert not store.locate(key).results_path.exists()


def test_transport_errors_propagate(monkeypatch):
    def respond(url, content):
        raise httpx.ConnectError("name resolution failed")

    class Failing:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def post(self, url, **kwargs):
            return respond(url, kwargs.get("content"))

    monkeypatch.setattr("assert_valid.validator_client.httpx.Client", Failing)

    with pytest.raises(httpx.ConnectError):
        MarkupValidatorApi("<p/>").fetch()


def test_response_before_fetch_raises():
    api = MarkupValidatorApi("<p/>")
    with pytest.raises(ValueError, match="not fetched"):
        _ = api.response


def test_cache_key_must_match_api_kind(tmp_path):
    key = CacheKey("StyleTest", "test_site", DocumentKind.CSS)
    with pytest.raises(ValueError, match="markup"):
        MarkupValidatorApi("<p/>", ctx=key, cache_store=FileCacheStore(tmp_path))


def test_raw_response_from_httpx_lowercases_headers(make_response):
    response = make_response(
        DEFAULT_MARKUP_URL,
        headers={"X-W3C-Validator-Status": "Invalid", "X-W3C-Validator-Errors": "2"},
        text="<result/>",
    )
    raw = RawResponse.from_httpx(response)

    assert raw.status_code == 200
    assert raw.reason == "OK"
    assert raw.headers["x-w3c-validator-status"] == "Invalid"
    assert raw.header("X-W3C-Validator-Errors") == "2"
    assert raw.body == "<result/>"


def test_validator_api_for_kind():
    assert validator_api_for(DocumentKind.MARKUP) is MarkupValidatorApi
    assert validator_api_for(DocumentKind.CSS) is CssValidatorApi


def test_validator_api_requires_endpoint_and_encoding():
    class Incomplete(ValidatorApi):
        KIND = DocumentKind.MARKUP

    with pytest.raises(TypeError, match="abstract"):
        Incomplete("<p/>")
