import pytest
from sqlalchemy import func, select, text

from fulltext_search.models.search_record import SearchRecord
from fulltext_search.repositories import search_index
from fulltext_search.repositories.search_index import SearchIndexRepository
from tests.conftest import QUEUED, make_submission


class TestUpsert:
    def test_insert_then_update_keeps_one_record(self, repository):
        repository.upsert(1, 1, {"title": "First"})
        repository.upsert(1, 1, {"title": "Second"})

        assert repository.count() == 1
        assert repository.get(1).title == "Second"

    def test_partial_update_keeps_other_fields(self, repository):
        repository.upsert(1, 1, {"title": "Title", "abstract": "Abstract"})
        repository.upsert(1, 1, {"galley_text": "Galley"})

        record = repository.get(1)
        assert record.title == "Title"
        assert record.abstract == "Abstract"
        assert record.galley_text == "Galley"
        assert record.keywords is None

    def test_timestamps(self, repository):
        record = repository.upsert(1, 1, {"title": "Title"})
        created_at = record.created_at
        updated = repository.upsert(1, 1, {"title": "Changed"})
        assert updated.created_at == created_at
        assert updated.updated_at >= created_at

    def test_context_follows_latest_write(self, repository):
        repository.upsert(1, 1, {"title": "Title"})
        repository.upsert(1, 2, {"abstract": "Moved"})
        assert repository.get(1).context_id == 2
        assert repository.count(context_id=1) == 0

    def test_unknown_field_rejected(self, repository):
        with pytest.raises(ValueError):
            repository.upsert(1, 1, {"publisher": "nope"})

    def test_submission_id_is_unique(self, session, repository):
        repository.upsert(1, 1, {"title": "Title"})
        repository.upsert(1, 1, {"title": "Title"})
        total = session.scalar(select(func.count()).select_from(SearchRecord).where(SearchRecord.submission_id == 1))
        assert total == 1

    def test_concurrent_first_writes_merge(self, installed_database, host, monkeypatch):
        """Two units of work that both saw no record each keep their own fields."""
        with installed_database.get_session() as first, installed_database.get_session() as second:
            first_repository = SearchIndexRepository(first, host=host)
            second_repository = SearchIndexRepository(second, host=host)
            assert first_repository.get(1) is None
            assert second_repository.get(1) is None
            # the first unit of work keeps its stale view of the index
            monkeypatch.setattr(first_repository, "get", lambda submission_id: None)

            second_repository.upsert(1, 1, {"galley_text": "Galley"})
            second.commit()
            first_repository.upsert(1, 1, {"title": "Title"})
            first.commit()

        with installed_database.get_session() as session:
            record = SearchIndexRepository(session, host=host).get(1)
            assert (record.title, record.galley_text) == ("Title", "Galley")

    def test_engines_without_keyed_upsert(self, repository, monkeypatch):
        monkeypatch.setattr(search_index, "UPSERT_INSERTS", {})

        repository.upsert(1, 1, {"title": "Title"})
        record = repository.upsert(1, 2, {"galley_text": "Galley"})

        assert repository.count() == 1
        assert (record.context_id, record.title, record.galley_text) == (2, "Title", "Galley")


class TestDelete:
    def test_delete_by_submission(self, repository):
        repository.upsert(1, 1, {"title": "Title"})
        assert repository.delete_by_submission(1) is True
        assert repository.get(1) is None

    def test_delete_missing_is_not_an_error(self, repository):
        assert repository.delete(404) is False

    def test_clear_galley_text(self, repository):
        repository.upsert(1, 1, {"title": "Title", "galley_text": "Body"})
        assert repository.clear_galley_text(1) is True

        record = repository.get(1)
        assert record.galley_text is None
        assert record.title == "Title"

    def test_clear_galley_text_missing(self, repository):
        assert repository.clear_galley_text(404) is False


class TestPruneUnpublished:
    def test_removes_only_unpublished_of_the_context(self, source, repository):
        source.add_submission(make_submission(1, context_id=1))
        source.add_submission(make_submission(2, context_id=1, status=QUEUED))
        source.add_submission(make_submission(3, context_id=2, status=QUEUED))
        for submission_id, context_id in ((1, 1), (2, 1), (3, 2)):
            repository.upsert(submission_id, context_id, {"title": "Title"})

        assert repository.prune_unpublished([1]) == 1
        assert repository.get(1) is not None
        assert repository.get(2) is None
        assert repository.get(3) is not None

    def test_falsy_context_ids_are_skipped(self, source, repository):
        source.add_submission(make_submission(1, status=QUEUED))
        repository.upsert(1, 1, {"title": "Title"})

        assert repository.prune_unpublished([None, 0]) == 0
        assert repository.count() == 1


class TestAllContexts:
    def test_names_in_host_order(self, source, repository):
        source.add_context(1, "journal-b", {"en": "Journal B"}, seq=2)
        source.add_context(2, "journal-a", {"fr_CA": "Revue A", "de": "Zeitschrift A"}, seq=1)
        source.add_context(3, "journal-c", seq=3)

        contexts = repository.all_contexts(primary_locale="en")

        assert list(contexts) == [2, 1, 3]
        assert contexts == {2: "Zeitschrift A", 1: "Journal B", 3: "journal-c"}

    def test_primary_locale_wins(self, source, repository):
        source.add_context(1, "journal", {"en": "Journal", "fr_CA": "Revue"})
        assert repository.all_contexts(primary_locale="fr_CA") == {1: "Revue"}


class TestClearLegacySearchTables:
    def test_rows_are_deleted(self, session, repository):
        session.execute(text("CREATE TABLE submission_search_objects (object_id INTEGER)"))
        session.execute(text("INSERT INTO submission_search_objects VALUES (1), (2)"))

        repository.clear_legacy_search_tables(["submission_search_objects"])

        assert session.execute(text("SELECT COUNT(*) FROM submission_search_objects")).scalar() == 0
