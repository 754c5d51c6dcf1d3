"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for the match cache.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class MatchRecord(Base):
    """Accepted title -> sheet row name decision."""

    __tablename__ = "matches"

    title_key = Column(String, primary_key=True)  # normalize_title(title)
    title = Column(String, nullable=False)
    matched_name = Column(String, nullable=False)
    score = Column(Integer, nullable=False)
    match_type = Column(String, nullable=False)  # exact, core, contains, fuzzy, manual
    manual = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "matched_name": self.matched_name,
            "score": self.score,
            "match_type": self.match_type,
            "manual": self.manual,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
