"""Short-code corpus: persisted by seeding, loaded once per load run.

The on-disk format is a JSON array of short-code strings. A corpus that is
missing, empty or malformed is a setup failure; the run must not start.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

__all__ = ["Corpus", "CorpusError", "load_corpus", "write_corpus"]

logger = logging.getLogger(__name__)


class CorpusError(ValueError):
    """The corpus file cannot back a redirect run."""


class Corpus(Sequence[str]):
    """Immutable, randomly indexable sequence of short codes."""

    __slots__ = ("_codes", "source")

    def __init__(self, codes: Iterable[str], source: str | None = None):
        self._codes = tuple(codes)
        self.source = source

    def __getitem__(self, index):
        return self._codes[index]

    def __len__(self) -> int:
        return len(self._codes)

    def __repr__(self) -> str:
        return f"Corpus(size={len(self._codes)}, source={self.source!r})"


def load_corpus(path: str | os.PathLike) -> Corpus:
    """Parse ``path`` as a non-empty JSON array of non-empty strings."""

    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CorpusError(f"Corpus file not found: {path}. Run the seed command first.") from exc
    except UnicodeDecodeError as exc:
        raise CorpusError(f"Corpus file {path} is not valid UTF-8 JSON: {exc}") from exc
    except OSError as exc:
        raise CorpusError(f"Corpus file {path} is unreadable: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CorpusError(f"Corpus file {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise CorpusError(f"Corpus file {path} must hold a JSON array, got {type(data).__name__}")
    if not data:
        raise CorpusError(f"Corpus file {path} is empty")
    for index, code in enumerate(data):
        if not isinstance(code, str) or not code:
            raise CorpusError(f"Corpus file {path} has an invalid entry at index {index}: {code!r}")

    logger.info("Loaded %d short codes from %s", len(data), path)
    return Corpus(data, source=str(path))


def write_corpus(path: str | os.PathLike, codes: Sequence[str]) -> Path:
    """Write ``codes`` as a JSON array, replacing any previous file atomically."""

    path = Path(path)
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(list(codes), handle, indent=2)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path
