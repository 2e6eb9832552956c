from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .cache import CacheKey, CacheLocation, CacheState, DocumentKind
from .config import ValidatorConfig
from .validator_client import RawResponse

logger = logging.getLogger(__name__)


def digest(document: str | bytes) -> str:
    data = document.encode("utf-8") if isinstance(document, str) else document
    return hashlib.sha256(data).hexdigest()


def _atomic_write(path: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileCacheStore:
    """Content-addressed, single-generation cache of raw validator responses.

    Each cache key owns two files under ``<cache_dir>/<kind>/``: the last
    document seen for that key and the JSON response it produced. A stored
    response is only reused while the document is byte-identical.
    """

    def __init__(
        self,
        cache_dir: str | os.PathLike[str] | None = None,
        *,
        config: ValidatorConfig | None = None,
    ):
        self._config = config or ValidatorConfig()
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else self._config.cache_dir

    def locate(self, ctx: CacheKey) -> CacheLocation:
        directory = self.cache_dir / ctx.kind.value
        directory.mkdir(parents=True, exist_ok=True)
        identity = ctx.key()
        return CacheLocation(
            directory=directory,
            content_path=directory / f"{identity}.{ctx.kind.extension}",
            results_path=directory / f"{identity}{ctx.kind.results_suffix}",
        )

    def digest(self, document: str) -> str:
        return digest(document)

    def stored_digest(self, location: CacheLocation) -> str | None:
        if not location.content_path.exists():
            return None
        return digest(location.content_path.read_bytes())

    def check_and_refresh(self, location: CacheLocation, document: str) -> CacheState:
        if self.stored_digest(location) == self.digest(document):
            response = self._read_results(location)
            if response is not None:
                logger.debug("Cache hit for %s", location.content_path)
                return CacheState.hit(response)
            logger.debug("Cache content matches but no results for %s", location.content_path)
            return CacheState.miss()

        logger.debug("Cache miss for %s; discarding stale entry", location.content_path)
        self.invalidate(location)
        _atomic_write(location.content_path, document.encode("utf-8"))
        return CacheState.miss()

    def invalidate(self, location: CacheLocation) -> None:
        for path in location.owned_paths():
            path.unlink(missing_ok=True)

    def put(self, location: CacheLocation, response: RawResponse) -> None:
        _atomic_write(location.results_path, response.to_json().encode("utf-8"))

    def clear(self, kind: DocumentKind | None = None) -> int:
        kinds = [kind] if kind is not None else list(DocumentKind)
        removed = 0
        for k in kinds:
            directory = self.cache_dir / k.value
            if not directory.is_dir():
                continue
            removed += sum(1 for path in directory.rglob("*") if path.is_file())
            shutil.rmtree(directory)
        return removed

    def _read_results(self, location: CacheLocation) -> RawResponse | None:
        path = location.results_path
        if not path.exists():
            return None
        try:
            return RawResponse.model_validate_json(path.read_bytes())
        except ValidationError as e:
            logger.warning("Discarding unreadable cached response %s: %s", path, e)
            path.unlink(missing_ok=True)
            return None
