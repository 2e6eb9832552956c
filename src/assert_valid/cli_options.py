from __future__ import annotations

from dataclasses import dataclass

from .cache import DocumentKind
from .config import ProxyConfig, ValidatorConfig


@dataclass(frozen=True)
class ConnectionOptions:
    cache_dir: str | None
    proxy_host: str | None
    proxy_port: int | None
    timeout: float | None

    def has_complete_proxy(self) -> bool:
        return not (bool(self.proxy_host) ^ (self.proxy_port is not None))

    def to_config(self, base: ValidatorConfig) -> ValidatorConfig:
        proxy = base.proxy
        if self.proxy_host and self.proxy_port is not None:
            proxy = ProxyConfig(host=self.proxy_host, port=self.proxy_port)
        return ValidatorConfig(
            markup_url=base.markup_url,
            css_url=base.css_url,
            cache_dir=self.cache_dir or base.cache_dir,
            proxy=proxy,
            timeout=self.timeout if self.timeout is not None else base.timeout,
            boundary=base.boundary,
            css_profile=base.css_profile,
            css_usermedium=base.css_usermedium,
            css_warning=base.css_warning,
        )


@dataclass(frozen=True)
class ValidateOptions:
    path: str
    kind: DocumentKind
    connection: ConnectionOptions
