"""
Tests for the match cache and its database layer.
"""

import pytest
from datetime import datetime, timedelta
from sqlalchemy.exc import IntegrityError

from sheetmatch.cache import MatchCache
from sheetmatch.database import MatchRecord, init_database, get_session


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_creates_parent_directories(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "test.db"

        init_database(db_path)

        assert db_path.exists()

    def test_required_fields(self, tmp_path):
        db_path = tmp_path / "test.db"
        init_database(db_path)
        session = get_session(db_path)
        session.add(MatchRecord(title_key="physics intro"))

        with pytest.raises(IntegrityError):
            session.commit()
        session.close()


class TestMatchCache:
    """Test cache reads and writes."""

    def test_get_missing(self, match_cache):
        assert match_cache.get("Physics Intro") is None

    def test_put_new_then_get(self, match_cache):
        status = match_cache.put("Physics Intro.mp4", "Physics Intro", 100, "exact")
        assert status == "new"

        entry = match_cache.get("physics intro")
        assert entry["matched_name"] == "Physics Intro"
        assert entry["score"] == 100
        assert entry["match_type"] == "exact"
        assert entry["manual"] is False
        assert entry["title"] == "Physics Intro.mp4"

    def test_put_no_change(self, match_cache):
        match_cache.put("Physics Intro", "Physics Intro", 100, "exact")
        assert match_cache.put("Physics Intro", "Physics Intro", 100, "exact") == "no-change"

    def test_put_updated(self, match_cache):
        match_cache.put("Physics Intro Part 2", "Physics Intro", 92, "contains")
        status = match_cache.put("Physics Intro Part 2", "Physics Intro 2", 95, "fuzzy")

        assert status == "updated"
        assert match_cache.get("Physics Intro Part 2")["matched_name"] == "Physics Intro 2"

    def test_manual_not_overwritten(self, match_cache):
        assert match_cache.remember_manual("Physics Intro Part 2", "Physics Row") == "new"
        status = match_cache.put("Physics Intro Part 2", "Physics Intro", 92, "contains")

        assert status == "no-change"
        entry = match_cache.get("Physics Intro Part 2")
        assert entry["matched_name"] == "Physics Row"
        assert entry["manual"] is True
        assert entry["match_type"] == "manual"

    def test_manual_replaces_automatic(self, match_cache):
        match_cache.put("Physics Intro Part 2", "Physics Intro", 92, "contains")
        assert match_cache.remember_manual("Physics Intro Part 2", "Physics Row") == "updated"

    def test_all_and_clear(self, match_cache):
        match_cache.put("b title", "B", 90, "fuzzy")
        match_cache.put("a title", "A", 100, "exact")

        entries = match_cache.all()
        assert [e["matched_name"] for e in entries] == ["A", "B"]

        assert match_cache.clear() == 2
        assert match_cache.all() == []


class TestDeleteStale:
    """Test stale cache cleanup."""

    def _add(self, db_path, key, updated_at, manual=False):
        session = get_session(db_path)
        session.add(MatchRecord(
            title_key=key,
            title=key,
            matched_name=key.upper(),
            score=90,
            match_type="manual" if manual else "fuzzy",
            manual=manual,
            created_at=updated_at,
            updated_at=updated_at,
        ))
        session.commit()
        session.close()

    def test_removes_old_automatic_entries(self, match_cache):
        now = datetime.now()
        self._add(match_cache.db_path, "old auto", now - timedelta(days=40))
        self._add(match_cache.db_path, "old manual", now - timedelta(days=40), manual=True)
        self._add(match_cache.db_path, "fresh auto", now - timedelta(days=2))

        before, after = match_cache.delete_stale(days=30)

        assert before == 3
        assert after == 2
        assert match_cache.get("old auto") is None
        assert match_cache.get("old manual") is not None
        assert match_cache.get("fresh auto") is not None

    def test_empty_cache(self, match_cache):
        assert match_cache.delete_stale(days=7) == (0, 0)

    def test_repeated_decision_refreshes_entry(self, match_cache):
        self._add(match_cache.db_path, "old auto", datetime.now() - timedelta(days=40))

        assert match_cache.put("old auto", "OLD AUTO", 90, "fuzzy") == "no-change"

        assert match_cache.delete_stale(days=30) == (1, 1)
        assert match_cache.get("old auto") is not None

    def test_touch_refreshes_entry(self, match_cache):
        self._add(match_cache.db_path, "old auto", datetime.now() - timedelta(days=40))

        assert match_cache.touch("Old Auto.mp4") is True
        assert match_cache.touch("never cached") is False

        assert match_cache.delete_stale(days=30) == (1, 1)
