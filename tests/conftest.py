from datetime import datetime
from typing import Dict, Iterable, Iterator, Optional

import pytest
from sqlalchemy import Float, Integer, func, type_coerce

from fulltext_search.config import DatabaseSettings, ParserSettings, Settings
from fulltext_search.db.host import host_tables
from fulltext_search.db.interfaces.relational import SQLDatabase
from fulltext_search.db.schema import SearchIndexSchema
from fulltext_search.repositories.search_index import SearchIndexRepository
from fulltext_search.schemas.submission import Author, Publication, Submission, SubmissionFile
from fulltext_search.services.search.dialects import RankingDialect
from fulltext_search.services.submissions import SubmissionSource

PUBLISHED = 3
QUEUED = 1


class LikeDialect(RankingDialect):
    """Case-insensitive substring matching for SQLite.

    The score of a column is the number of characters matched by the query,
    so more occurrences rank higher.
    """

    name = "sqlite"

    def _document(self, column):
        return func.lower(func.coalesce(column, ""))

    def predicate(self, column, query):
        return self._document(column).like(f"%{query.lower()}%")

    def score(self, column, query):
        document = self._document(column)
        matched = func.length(document, type_=Integer) - func.length(
            func.replace(document, query.lower(), ""), type_=Integer
        )
        return type_coerce(matched, Float)


class InMemorySubmissionSource(SubmissionSource):
    """Host read model backed by dicts, mirrored into the host tables."""

    def __init__(self, database, host):
        self.database = database
        self.host = host
        self.submissions: Dict[int, Submission] = {}
        self.files: Dict[int, SubmissionFile] = {}

    def add_context(self, context_id: int, path: str, names: Optional[Dict[str, str]] = None, seq: float = 0):
        with self.database.engine.begin() as conn:
            conn.execute(
                self.host.contexts.insert().values(
                    {self.host.context_id_column: context_id, "path": path, "seq": seq}
                )
            )
            for locale, name in (names or {}).items():
                conn.execute(
                    self.host.context_settings.insert().values(
                        {
                            self.host.context_id_column: context_id,
                            "locale": locale,
                            "setting_name": "name",
                            "setting_value": name,
                        }
                    )
                )

    def add_submission(self, submission: Submission) -> Submission:
        self.submissions[submission.id] = submission
        publication = submission.current_publication
        with self.database.engine.begin() as conn:
            conn.execute(
                self.host.submissions.insert().values(
                    submission_id=submission.id,
                    context_id=submission.context_id,
                    current_publication_id=publication.id if publication else None,
                    status=submission.status,
                )
            )
            if publication is not None:
                conn.execute(
                    self.host.publications.insert().values(
                        publication_id=publication.id,
                        submission_id=submission.id,
                        date_published=publication.date_published,
                    )
                )
        return submission

    def set_status(self, submission_id: int, status: int) -> None:
        self.submissions[submission_id] = self.submissions[submission_id].model_copy(update={"status": status})
        with self.database.engine.begin() as conn:
            conn.execute(
                self.host.submissions.update()
                .where(self.host.submissions.c.submission_id == submission_id)
                .values(status=status)
            )

    def add_file(self, submission_file: SubmissionFile) -> SubmissionFile:
        self.files[submission_file.id] = submission_file
        return submission_file

    def get_submission(self, submission_id: int) -> Optional[Submission]:
        return self.submissions.get(submission_id)

    def get_submission_file(self, submission_file_id: int) -> Optional[SubmissionFile]:
        return self.files.get(submission_file_id)

    def iter_published_submissions(self, context_id: int) -> Iterator[Submission]:
        for submission in sorted(self.submissions.values(), key=lambda s: s.id):
            if submission.context_id == context_id and submission.status == PUBLISHED:
                yield submission

    def iter_submission_files(self, submission_id: int, file_stages: Iterable[int]) -> Iterator[SubmissionFile]:
        stages = set(file_stages)
        for submission_file in sorted(self.files.values(), key=lambda f: f.id):
            if submission_file.submission_id == submission_id and submission_file.file_stage in stages:
                yield submission_file


def make_submission(
    submission_id: int,
    context_id: int = 1,
    title: str = "Untitled",
    abstract: Optional[str] = None,
    status: int = PUBLISHED,
    date_published: Optional[datetime] = None,
    authors: Iterable[Author] = (),
    keywords: Optional[Dict[str, list]] = None,
) -> Submission:
    publication = Publication(
        id=submission_id * 10,
        title={"en": title},
        abstract={"en": abstract} if abstract else {},
        authors=list(authors),
        keywords=keywords or {},
        date_published=date_published,
    )
    return Submission(id=submission_id, context_id=context_id, status=status, current_publication=publication)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database=DatabaseSettings(url="sqlite://"),
        parser=ParserSettings(files_dir=str(tmp_path)),
    )


@pytest.fixture
def host(settings):
    return host_tables(settings.host)


@pytest.fixture
def database(settings, host):
    database = SQLDatabase(settings.database)
    database.startup()
    host.metadata.create_all(database.engine)
    yield database
    database.teardown()


@pytest.fixture
def installed_database(database, settings):
    SearchIndexSchema(database.engine, ts_config=settings.index.ts_config).create()
    return database


@pytest.fixture
def session(installed_database):
    with installed_database.get_session() as session:
        yield session


@pytest.fixture
def repository(session, host, settings):
    return SearchIndexRepository(session, host=host, published_status=settings.host.published_status)


@pytest.fixture
def dialect():
    return LikeDialect()


@pytest.fixture
def source(database, host):
    return InMemorySubmissionSource(database, host)
