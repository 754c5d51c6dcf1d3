"""
Persistent cache of accepted title -> sheet row name matches.

Repeated reconciliation runs reuse earlier decisions instead of re-ranking,
and manual selections always take precedence over automatic ones.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from .database import MatchRecord, init_database, get_session
from .logger import StructuredLogger, get_logger
from .normalize import normalize_title


class MatchCache:
    """SQLite-backed store of match decisions keyed by normalized title."""

    def __init__(self, db_path: Path, logger: Optional[StructuredLogger] = None):
        self.db_path = Path(db_path)
        self.logger = logger
        init_database(self.db_path)

    def get(self, title: str) -> Optional[Dict[str, Any]]:
        session = get_session(self.db_path)
        try:
            record = session.get(MatchRecord, normalize_title(title))
            return record.to_dict() if record is not None else None
        finally:
            session.close()

    def put(
        self,
        title: str,
        matched_name: str,
        score: int,
        match_type: str,
        manual: bool = False,
    ) -> str:
        """
        Insert or update the decision for a title.

        Returns:
            "new", "updated" or "no-change". Automatic decisions never
            replace a manual one.
        """
        key = normalize_title(title)
        session = get_session(self.db_path)
        try:
            record = session.get(MatchRecord, key)
            if record is None:
                session.add(MatchRecord(
                    title_key=key,
                    title=title,
                    matched_name=matched_name,
                    score=score,
                    match_type=match_type,
                    manual=manual,
                ))
                session.commit()
                return "new"

            if record.manual and not manual:
                return "no-change"

            current = (record.matched_name, record.score, record.match_type, record.manual)
            if current == (matched_name, score, match_type, manual):
                record.updated_at = datetime.now()
                session.commit()
                return "no-change"

            record.title = title
            record.matched_name = matched_name
            record.score = score
            record.match_type = match_type
            record.manual = manual
            session.commit()
            return "updated"
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()

    def touch(self, title: str) -> bool:
        """Mark a cached decision as reused. Returns False if the title is not cached."""
        session = get_session(self.db_path)
        try:
            record = session.get(MatchRecord, normalize_title(title))
            if record is None:
                return False
            record.updated_at = datetime.now()
            session.commit()
            return True
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()

    def remember_manual(self, title: str, matched_name: str) -> str:
        """Record a user-confirmed match."""
        return self.put(title, matched_name, 100, "manual", manual=True)

    def all(self) -> List[Dict[str, Any]]:
        session = get_session(self.db_path)
        try:
            records = session.query(MatchRecord).order_by(MatchRecord.title_key).all()
            return [r.to_dict() for r in records]
        finally:
            session.close()

    def clear(self) -> int:
        """Remove every entry, manual ones included. Returns the number removed."""
        session = get_session(self.db_path)
        try:
            removed = session.query(MatchRecord).delete()
            session.commit()
            return removed
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()

    def delete_stale(self, days: int = 30) -> Tuple[int, int]:
        """
        Remove automatic matches not stored or reused within the given number of days.

        Args:
            days: Number of days to keep entries (default: 30)

        Returns:
            Tuple of (entries_before, entries_after)
        """
        logger = self.logger or get_logger()
        cutoff = datetime.now() - timedelta(days=days)
        session = get_session(self.db_path)
        try:
            before = session.query(MatchRecord).count()
            session.query(MatchRecord).filter(
                MatchRecord.manual == False,  # noqa: E712
                MatchRecord.updated_at < cutoff,
            ).delete(synchronize_session=False)
            session.commit()
            after = session.query(MatchRecord).count()

            logger.info(
                f"Cache cleanup complete: {before - after} removed, {after} remaining",
                entries_before=before,
                entries_after=after,
                days_threshold=days,
            )
            return (before, after)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Cache cleanup failed: {e}", error=str(e), days=days)
            return (0, 0)
        finally:
            session.close()
