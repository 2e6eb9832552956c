from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from .validator_client import RawResponse


class DocumentKind(Enum):
    MARKUP = "markup"
    CSS = "css"

    @property
    def extension(self) -> str:
        return "html" if self is DocumentKind.MARKUP else "css"

    @property
    def results_suffix(self) -> str:
        return "-results.json" if self is DocumentKind.MARKUP else "results.json"


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def sanitize_identifier(value: str) -> str:
    """Turn a test class/method name into a filesystem-safe identifier."""
    cleaned = value.replace("::", ".").replace("/", ".").replace("\\", ".")
    cleaned = _UNSAFE_CHARS.sub("_", cleaned).strip(".")
    return cleaned or "_"


@runtime_checkable
class CacheContext(Protocol):
    """Represents a hashable cache lookup context."""

    kind: DocumentKind

    def key(self) -> str: ...

    def __hash__(self) -> int: ...


TContext = TypeVar("TContext", bound=CacheContext)


@dataclass(frozen=True)
class CacheKey(CacheContext):
    class_name: str
    method_name: str
    kind: DocumentKind

    def key(self) -> str:
        readable = sanitize_identifier(f"{self.class_name}.{self.method_name}")
        return f"{readable}-{self.identity_digest()}"

    def identity_digest(self) -> str:
        # sanitized names can collide; the raw names cannot
        raw = f"{self.class_name}\0{self.method_name}".encode("utf-8")
        return hashlib.sha256(raw).hexdigest()[:10]

    def __hash__(self) -> int:
        return hash((self.key(), self.kind))


@dataclass(frozen=True)
class CacheLocation:
    """Content and results slots owned by a single cache key."""

    directory: Path
    content_path: Path
    results_path: Path

    def owned_paths(self) -> tuple[Path, Path]:
        return (self.content_path, self.results_path)


@dataclass(frozen=True)
class CacheState:
    """Outcome of comparing a document against the stored cache entry."""

    fresh: bool
    response: RawResponse | None = None

    @classmethod
    def hit(cls, response: RawResponse) -> CacheState:
        return cls(fresh=True, response=response)

    @classmethod
    def miss(cls) -> CacheState:
        return cls(fresh=False)


class CacheStore(Protocol[TContext]):
    """Abstract cache store interface to support dependency inversion."""

    def locate(self, ctx: TContext) -> CacheLocation: ...

    def check_and_refresh(self, location: CacheLocation, document: str) -> CacheState: ...

    def put(self, location: CacheLocation, response: RawResponse) -> None: ...
