import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

from fulltext_search.exceptions import ExtractionFailure

logger = logging.getLogger(__name__)


class SearchFileParser(ABC):
    """Reads the plain text of one file as a lazy sequence of chunks.

    A parser is opened, read once, then closed. It can be used as a context
    manager, in which case a file that cannot be opened raises
    ``ExtractionFailure``.
    """

    def __init__(self, path: Path):
        self.path = path
        self._handle = None

    def open(self) -> bool:
        try:
            self._handle = self._open()
        except (OSError, ValueError, ExtractionFailure) as e:
            logger.warning(f"Cannot open {self.path}: {e}")
            self._handle = None
            return False
        return True

    def close(self) -> None:
        if self._handle is not None and hasattr(self._handle, "close"):
            self._handle.close()
        self._handle = None

    def read(self) -> Iterator[str]:
        if self._handle is None:
            raise ExtractionFailure(f"Parser for {self.path} is not open")
        return self._read(self._handle)

    def __enter__(self) -> "SearchFileParser":
        if not self.open():
            raise ExtractionFailure(f"Cannot open {self.path}")
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @abstractmethod
    def _open(self):
        """Open the underlying file and return the handle used by ``_read``."""

    @abstractmethod
    def _read(self, handle) -> Iterator[str]:
        """Yield text chunks from an open handle."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} path={self.path}>"


def resolve_path(path: str, files_dir: Optional[str] = None) -> Path:
    resolved = Path(path)
    if not resolved.is_absolute() and files_dir:
        resolved = Path(files_dir) / resolved
    return resolved
