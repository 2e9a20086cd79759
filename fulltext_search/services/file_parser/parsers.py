from typing import Iterator, Optional

from bs4 import BeautifulSoup
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from fulltext_search.exceptions import ExtractionFailure
from fulltext_search.services.file_parser.base import SearchFileParser


class PlainTextParser(SearchFileParser):
    """Plain text files, one chunk per line."""

    def _open(self):
        return open(self.path, "r", encoding="utf-8", errors="replace")

    def _read(self, handle) -> Iterator[str]:
        for line in handle:
            yield line


class HtmlParser(SearchFileParser):
    """HTML and XML galleys with the markup removed."""

    def _open(self):
        return open(self.path, "rb")

    def _read(self, handle) -> Iterator[str]:
        soup = BeautifulSoup(handle.read(), "html.parser")
        for element in soup(["script", "style"]):
            element.decompose()
        for text in soup.stripped_strings:
            yield text


class PdfParser(SearchFileParser):
    """PDF galleys, one chunk per page."""

    def __init__(self, path, max_pages: Optional[int] = None):
        super().__init__(path)
        self.max_pages = max_pages or None

    def _open(self):
        try:
            return PdfReader(str(self.path))
        except PyPdfError as e:
            raise ExtractionFailure(f"Invalid PDF {self.path}: {e}") from e

    def _read(self, handle) -> Iterator[str]:
        for number, page in enumerate(handle.pages):
            if self.max_pages is not None and number >= self.max_pages:
                break
            yield page.extract_text() or ""

    def close(self) -> None:
        # PdfReader keeps its own stream; dropping the reference is enough
        self._handle = None
