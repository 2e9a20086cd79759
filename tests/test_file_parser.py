import pytest

from fulltext_search.config import ParserSettings
from fulltext_search.exceptions import ExtractionFailure
from fulltext_search.schemas.submission import SubmissionFile
from fulltext_search.services.file_parser import (
    HtmlParser,
    PdfParser,
    PlainTextParser,
    extract_text,
    make_file_parser,
)


def submission_file(path, mimetype=None, file_id=1):
    return SubmissionFile(id=file_id, submission_id=1, file_stage=10, path=str(path), mimetype=mimetype)


@pytest.fixture
def parser_settings(tmp_path):
    return ParserSettings(files_dir=str(tmp_path))


class TestMakeFileParser:
    def test_by_mimetype(self, tmp_path, parser_settings):
        parser = make_file_parser(submission_file("galley.bin", "text/html; charset=utf-8"), parser_settings)
        assert isinstance(parser, HtmlParser)
        assert parser.path == tmp_path / "galley.bin"

    def test_by_extension(self, parser_settings):
        assert isinstance(make_file_parser(submission_file("galley.txt"), parser_settings), PlainTextParser)
        assert isinstance(make_file_parser(submission_file("galley.PDF"), parser_settings), PdfParser)

    def test_absolute_path_is_kept(self, tmp_path, parser_settings):
        path = tmp_path / "nested" / "galley.txt"
        assert make_file_parser(submission_file(path), parser_settings).path == path

    def test_unknown_format(self, parser_settings):
        assert make_file_parser(submission_file("galley.docx", "application/msword"), parser_settings) is None

    def test_oversized_file(self, tmp_path):
        (tmp_path / "big.txt").write_text("some text")
        settings = ParserSettings(files_dir=str(tmp_path), max_file_size_mb=0)
        assert make_file_parser(submission_file("big.txt"), settings) is None


class TestParsers:
    def test_plain_text_reads_lines(self, tmp_path):
        path = tmp_path / "galley.txt"
        path.write_text("first line\nsecond line\n")
        with PlainTextParser(path) as parser:
            assert list(parser.read()) == ["first line\n", "second line\n"]

    def test_html_drops_scripts(self, tmp_path):
        path = tmp_path / "galley.html"
        path.write_text(
            "<html><head><style>p {}</style><script>var x;</script></head>"
            "<body><h1>Results</h1><p>Galley <b>text</b></p></body></html>"
        )
        with HtmlParser(path) as parser:
            assert list(parser.read()) == ["Results", "Galley", "text"]

    def test_read_requires_open(self, tmp_path):
        with pytest.raises(ExtractionFailure):
            PlainTextParser(tmp_path / "galley.txt").read()

    def test_open_missing_file(self, tmp_path):
        parser = PlainTextParser(tmp_path / "missing.txt")
        assert parser.open() is False
        with pytest.raises(ExtractionFailure):
            with PlainTextParser(tmp_path / "missing.txt"):
                pass

    def test_empty_pdf_cannot_be_opened(self, tmp_path):
        path = tmp_path / "galley.pdf"
        path.write_bytes(b"")
        assert PdfParser(path).open() is False


class TestExtractText:
    def test_chunks_are_joined(self, tmp_path, parser_settings):
        (tmp_path / "galley.txt").write_text("Quantum\n\n  entanglement   results\n")
        assert extract_text(submission_file("galley.txt", "text/plain"), parser_settings) == (
            "Quantum entanglement results"
        )

    def test_markup_never_reaches_the_text(self, tmp_path, parser_settings):
        (tmp_path / "galley.html").write_text("<p>Full <i>text</i></p>")
        assert extract_text(submission_file("galley.html"), parser_settings) == "Full text"

    def test_missing_file_is_empty(self, parser_settings):
        assert extract_text(submission_file("missing.txt"), parser_settings) == ""

    def test_unsupported_format_is_empty(self, tmp_path, parser_settings):
        (tmp_path / "galley.docx").write_bytes(b"PK")
        assert extract_text(submission_file("galley.docx"), parser_settings) == ""

    def test_read_failure_is_empty(self, tmp_path, parser_settings, monkeypatch):
        (tmp_path / "galley.txt").write_text("text")

        def broken_read(self, handle):
            raise ExtractionFailure("corrupt")

        monkeypatch.setattr(PlainTextParser, "_read", broken_read)
        assert extract_text(submission_file("galley.txt"), parser_settings) == ""
