from .base import SearchFileParser
from .extractor import extract_text
from .factory import make_file_parser
from .parsers import HtmlParser, PdfParser, PlainTextParser

__all__ = ["HtmlParser", "PdfParser", "PlainTextParser", "SearchFileParser", "extract_text", "make_file_parser"]
