from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

DEFAULT_MARKUP_URL = "https://validator.w3.org/check"
DEFAULT_CSS_URL = "https://jigsaw.w3.org/css-validator/validator"
DEFAULT_CACHE_DIR = "~/.cache/assert-valid"
DEFAULT_BOUNDARY = "-----------------------------24464570528145"
DEFAULT_TIMEOUT = 30.0

CACHE_DIR_ENV = "ASSERT_VALID_CACHE_DIR"
PROXY_HOST_ENV = "ASSERT_VALID_PROXY_HOST"
PROXY_PORT_ENV = "ASSERT_VALID_PROXY_PORT"
TIMEOUT_ENV = "ASSERT_VALID_TIMEOUT"
MARKUP_URL_ENV = "ASSERT_VALID_MARKUP_URL"
CSS_URL_ENV = "ASSERT_VALID_CSS_URL"


@dataclass(frozen=True)
class ProxyConfig:
    host: str
    port: int
    scheme: str = "http"

    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


@dataclass(frozen=True)
class ValidatorConfig:
    """Settings shared by the validator clients and the response cache."""

    markup_url: str = DEFAULT_MARKUP_URL
    css_url: str = DEFAULT_CSS_URL
    cache_dir: Path = field(default_factory=lambda: Path(DEFAULT_CACHE_DIR))
    proxy: ProxyConfig | None = None
    timeout: float | None = DEFAULT_TIMEOUT
    boundary: str = DEFAULT_BOUNDARY
    css_profile: str = "css2"
    css_usermedium: str = "all"
    css_warning: str = "1"

    def __post_init__(self):
        object.__setattr__(self, "cache_dir", Path(self.cache_dir).expanduser())
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive when provided")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ValidatorConfig:
        env = os.environ if environ is None else environ
        return cls(
            markup_url=env.get(MARKUP_URL_ENV, DEFAULT_MARKUP_URL),
            css_url=env.get(CSS_URL_ENV, DEFAULT_CSS_URL),
            cache_dir=Path(env.get(CACHE_DIR_ENV, DEFAULT_CACHE_DIR)),
            proxy=_proxy_from_env(env),
            timeout=float(env[TIMEOUT_ENV]) if env.get(TIMEOUT_ENV) else DEFAULT_TIMEOUT,
        )


def _proxy_from_env(env: Mapping[str, str]) -> ProxyConfig | None:
    host = env.get(PROXY_HOST_ENV)
    if not host:
        return None
    port = env.get(PROXY_PORT_ENV)
    if not port:
        raise ValueError(f"{PROXY_PORT_ENV} must be set when {PROXY_HOST_ENV} is")
    return ProxyConfig(host=host, port=int(port))
