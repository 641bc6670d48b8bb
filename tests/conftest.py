"""
Shared fixtures: an in-memory results repository and records from the
contest scenario.
"""

import pytest

from handlers.result_errors import QueryError, RepositoryConnectionError
from handlers.result_models import ResultRecord
from handlers.result_normalizer import normalize_ar


class InMemoryResultRepository:
    """Repository over a plain list, matching names the way the SQLite adapter does."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.calls = []

    def query_by_name_substrings(self, terms, limit):
        self.calls.append(("query", tuple(terms), limit))
        found = [
            r for r in self.records
            if all(normalize_ar(t) in normalize_ar(r.name) for t in terms)
        ]
        return found[:limit]

    def count_greater_grade(self, category, grade):
        self.calls.append(("count", category, grade))
        return sum(
            1 for r in self.records
            if (r.category or "") == (category or "") and r.grade is not None and r.grade > grade
        )

    def connection_healthy(self):
        return True


class BrokenRepository(InMemoryResultRepository):
    """Fails every search query."""

    def __init__(self, error=None, records=None):
        super().__init__(records)
        self.error = error or RepositoryConnectionError("unreachable")

    def query_by_name_substrings(self, terms, limit):
        self.calls.append(("query", tuple(terms), limit))
        raise self.error

    def connection_healthy(self):
        return False


class BrokenRankRepository(InMemoryResultRepository):
    """Finds candidates but fails the rank query."""

    def count_greater_grade(self, category, grade):
        raise QueryError("rank query failed")


@pytest.fixture
def scenario_records():
    return [
        ResultRecord(identifier=1, name="أحمد محمد", category="5", grade=90),
        ResultRecord(identifier=2, name="احمد محمود", category="5", grade=95),
        ResultRecord(identifier=3, name="سارة أحمد", category="3", grade=100),
    ]


@pytest.fixture
def repo(scenario_records):
    return InMemoryResultRepository(scenario_records)


@pytest.fixture
def bot_db(tmp_path, monkeypatch):
    from database import db_manager

    monkeypatch.setattr(db_manager, "DATABASE_NAME", str(tmp_path / "bot.db"))
    db_manager.init_db()
    return db_manager
