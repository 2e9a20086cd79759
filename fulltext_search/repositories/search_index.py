import logging
from typing import Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Session

from fulltext_search.db.host import HostTables
from fulltext_search.db.interfaces.base import BaseRepository
from fulltext_search.models.search_record import TEXT_FIELDS, SearchRecord, utcnow

logger = logging.getLogger(__name__)

# Engines with a native keyed upsert on the unique submission_id
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "mysql": mysql.insert,
    "mariadb": mysql.insert,
    "sqlite": sqlite.insert,
}


class SearchIndexRepository(BaseRepository):
    """Owns the full-text search index table.

    Every write is flushed right away; committing is left to the caller so a
    unit of work can span more than one call.
    """

    def __init__(self, session: Session, host: HostTables, published_status: int = 3):
        super().__init__(session)
        self.host = host
        self.published_status = published_status

    def get(self, submission_id: int) -> Optional[SearchRecord]:
        stmt = select(SearchRecord).where(SearchRecord.submission_id == submission_id)
        return self.session.scalars(stmt).first()

    def count(self, context_id: Optional[int] = None) -> int:
        stmt = select(func.count(SearchRecord.id))
        if context_id is not None:
            stmt = stmt.where(SearchRecord.context_id == context_id)
        return self.session.scalar(stmt) or 0

    def upsert(self, submission_id: int, context_id: int, fields: Mapping[str, Optional[str]]) -> SearchRecord:
        """Insert or update the record of a submission.

        Only the given fields are written; the others keep their stored value
        (or stay NULL on insert). On engines with a keyed upsert the write is a
        single statement, so concurrent first writes for one submission merge
        instead of colliding on ``submission_id``.
        """
        unknown = set(fields) - set(TEXT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown search index fields: {sorted(unknown)}")

        now = utcnow()
        make_insert = UPSERT_INSERTS.get(self.session.get_bind().dialect.name)
        if make_insert is None:
            return self._upsert_read_first(submission_id, context_id, fields, now)

        updates = {"context_id": context_id, "updated_at": now, **fields}
        stmt = make_insert(SearchRecord.__table__).values(
            submission_id=submission_id,
            created_at=now,
            **updates,
        )
        if isinstance(stmt, mysql.Insert):
            stmt = stmt.on_duplicate_key_update(**updates)
        else:
            stmt = stmt.on_conflict_do_update(index_elements=["submission_id"], set_=updates)
        self.session.execute(stmt)
        logger.debug(f"Upserted index record for submission {submission_id}: {sorted(fields)}")

        return self.session.scalars(
            select(SearchRecord)
            .where(SearchRecord.submission_id == submission_id)
            .execution_options(populate_existing=True)
        ).one()

    def _upsert_read_first(
        self,
        submission_id: int,
        context_id: int,
        fields: Mapping[str, Optional[str]],
        now,
    ) -> SearchRecord:
        record = self.get(submission_id)
        if record is None:
            record = SearchRecord(
                submission_id=submission_id,
                context_id=context_id,
                created_at=now,
                updated_at=now,
                **fields,
            )
            self.session.add(record)
            logger.debug(f"Inserted index record for submission {submission_id}")
        else:
            record.context_id = context_id
            for field, value in fields.items():
                setattr(record, field, value)
            record.updated_at = now
            logger.debug(f"Updated index record for submission {submission_id}: {sorted(fields)}")

        self.session.flush()
        return record

    def delete(self, submission_id: int) -> bool:
        return self.delete_by_submission(submission_id)

    def delete_by_submission(self, submission_id: int) -> bool:
        result = self.session.execute(
            delete(SearchRecord).where(SearchRecord.submission_id == submission_id)
        )
        self.session.flush()
        return result.rowcount > 0

    def clear_galley_text(self, submission_id: int) -> bool:
        result = self.session.execute(
            update(SearchRecord)
            .where(SearchRecord.submission_id == submission_id)
            .values(galley_text=None, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        self.session.flush()
        return result.rowcount > 0

    def prune_unpublished(self, context_ids: Iterable[Optional[int]]) -> int:
        """Delete records whose host submission is in one of the contexts but not published.

        The status is read from the host submissions table at delete time.
        """
        submissions = self.host.submissions
        removed = 0
        for context_id in context_ids:
            if not context_id:
                continue

            unpublished = (
                select(submissions.c.submission_id)
                .where(submissions.c.context_id == context_id)
                .where(submissions.c.status != self.published_status)
            )
            result = self.session.execute(
                delete(SearchRecord)
                .where(SearchRecord.submission_id.in_(unpublished))
                .execution_options(synchronize_session=False)
            )
            removed += result.rowcount
            logger.info(f"Pruned {result.rowcount} unpublished submissions from context {context_id}")

        self.session.flush()
        return removed

    def all_contexts(self, primary_locale: str = "en") -> Dict[int, str]:
        """Map every host context id to its display name, in host order."""
        contexts = self.host.contexts
        settings = self.host.context_settings
        context_id = self.host.context_id
        settings_context_id = settings.c[self.host.context_id_column]

        names = (
            select(
                settings_context_id.label("context_id"),
                settings.c.locale,
                settings.c.setting_value,
            )
            .where(settings.c.setting_name == "name")
            .where(settings.c.setting_value.is_not(None))
            .where(settings.c.setting_value != "")
        )
        rows = self.session.execute(names).all()

        localized: Dict[int, Dict[str, str]] = {}
        for row in rows:
            localized.setdefault(row.context_id, {})[row.locale] = row.setting_value

        result: Dict[int, str] = {}
        for row in self.session.execute(
            select(context_id.label("context_id"), contexts.c.path).order_by(contexts.c.seq, context_id)
        ):
            by_locale = localized.get(row.context_id, {})
            if primary_locale in by_locale:
                result[row.context_id] = by_locale[primary_locale]
            elif by_locale:
                result[row.context_id] = by_locale[sorted(by_locale)[0]]
            else:
                result[row.context_id] = row.path
        return result

    def clear_legacy_search_tables(self, tables: List[str], truncate: bool = False) -> None:
        """Empty the host's standard keyword search tables."""
        for table in tables:
            quoted = self.session.get_bind().dialect.identifier_preparer.quote(table)
            statement = f"TRUNCATE TABLE {quoted}" if truncate else f"DELETE FROM {quoted}"
            self.session.execute(text(statement))
            logger.info(f"Cleared legacy search table {table}")
        self.session.flush()
