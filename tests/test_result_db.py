"""Tests for the SQLite results repository."""

import pytest

from handlers.result_db import SqliteResultRepository
from handlers.result_errors import QueryError, RepositoryConnectionError
from handlers.result_models import ResultRecord
from handlers.result_rank import rank_of
from handlers.result_search import search


@pytest.fixture
def sqlite_repo(tmp_path, scenario_records):
    repo = SqliteResultRepository(str(tmp_path / "results.db"))
    repo.init_db()
    repo.bulk_insert(scenario_records)
    return repo


class TestSqliteResultRepository:
    """Tests for SqliteResultRepository."""

    def test_substring_query_is_conjunctive(self, sqlite_repo):
        found = sqlite_repo.query_by_name_substrings(["احمد", "محمد"], 10)
        assert [r.identifier for r in found] == [1]

    def test_substring_query_ignores_hamza(self, sqlite_repo):
        found = sqlite_repo.query_by_name_substrings(["أحمد"], 10)
        assert [r.identifier for r in found] == [1, 2, 3]

    def test_substring_query_respects_limit(self, sqlite_repo):
        assert len(sqlite_repo.query_by_name_substrings(["احمد"], 2)) == 2

    def test_like_wildcards_are_literal(self, sqlite_repo):
        assert sqlite_repo.query_by_name_substrings(["%"], 10) == []
        assert sqlite_repo.query_by_name_substrings(["_"], 10) == []

    def test_count_greater_grade(self, sqlite_repo):
        assert sqlite_repo.count_greater_grade("5", 90) == 1
        assert sqlite_repo.count_greater_grade("5", 95) == 0
        assert sqlite_repo.count_greater_grade("3", 50) == 1

    def test_count_with_missing_category(self, sqlite_repo):
        sqlite_repo.add_result(10, "بلا فئة", None, 50)
        sqlite_repo.add_result(11, "بلا فئة ثاني", "", 60)
        assert sqlite_repo.count_greater_grade(None, 10) == 2

    def test_search_end_to_end(self, sqlite_repo):
        result = search("احمد محمد", sqlite_repo)
        assert result.identifier == 1
        assert result.rank == rank_of("5", 90, sqlite_repo) == 2

    def test_connection_healthy(self, sqlite_repo):
        assert sqlite_repo.connection_healthy() is True

    def test_connection_unhealthy_without_table(self, tmp_path):
        repo = SqliteResultRepository(str(tmp_path / "empty.db"))
        assert repo.connection_healthy() is False

    def test_missing_directory_is_connection_error(self, tmp_path):
        repo = SqliteResultRepository(str(tmp_path / "missing" / "results.db"))
        with pytest.raises(RepositoryConnectionError):
            repo.query_by_name_substrings(["احمد"], 10)

    def test_query_error_without_table(self, tmp_path):
        repo = SqliteResultRepository(str(tmp_path / "empty.db"))
        with pytest.raises(QueryError):
            repo.count_greater_grade("5", 90)

    def test_get_and_delete(self, sqlite_repo):
        assert sqlite_repo.get_result_by_no(3).name == "سارة أحمد"
        assert sqlite_repo.delete_result(3) is True
        assert sqlite_repo.get_result_by_no(3) is None
        assert sqlite_repo.delete_result(3) is False

    def test_add_result_replaces_same_number(self, sqlite_repo):
        sqlite_repo.add_result(1, "  أحمد محمد  ", "5", 97)
        record = sqlite_repo.get_result_by_no(1)
        assert record.name == "أحمد محمد"
        assert record.grade == 97

    def test_all_results_order(self, sqlite_repo):
        ordered = sqlite_repo.get_all_results()
        assert [r.identifier for r in ordered] == [3, 2, 1]

    def test_categories(self, sqlite_repo):
        assert sorted(sqlite_repo.get_categories()) == ["3", "5"]

    def test_all_for_search_has_normalized_names(self, sqlite_repo):
        rows = {r["no"]: r for r in sqlite_repo.get_all_for_search()}
        assert rows[3]["normalized_name"] == "ساره احمد"

    def test_bulk_insert_empty(self, sqlite_repo):
        assert sqlite_repo.bulk_insert([]) == 0

    def test_bulk_insert_assigns_numbers(self, tmp_path):
        repo = SqliteResultRepository(str(tmp_path / "r.db"))
        repo.init_db()
        repo.bulk_insert([ResultRecord(identifier=None, name="زيد", category="3", grade=50)])
        assert repo.get_all_results()[0].identifier == 1
