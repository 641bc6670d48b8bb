import logging
import sqlite3
from typing import Iterable, Optional, Protocol, Sequence

from config import RESULTS_DB_NAME
from handlers.result_errors import QueryError, RepositoryConnectionError
from handlers.result_models import ResultRecord
from handlers.result_normalizer import normalize_ar

logger = logging.getLogger(__name__)


class ResultRepository(Protocol):
    def query_by_name_substrings(self, terms: Sequence[str], limit: int) -> list[ResultRecord]: ...

    def count_greater_grade(self, category: Optional[str], grade: float) -> int: ...

    def connection_healthy(self) -> bool: ...


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_record(row: sqlite3.Row) -> ResultRecord:
    return ResultRecord(
        identifier=row["no"],
        name=row["name"],
        category=row["category"],
        grade=row["grade"],
    )


class SqliteResultRepository:
    """
    Results table on top of sqlite3.

    Names are stored twice: as entered and normalized with normalize_ar, and
    substring search runs against the normalized column so that hamza, ya and
    ta-marbuta variants match each other.
    """

    def __init__(self, db_path: str = RESULTS_DB_NAME, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def get_conn(self):
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
        except sqlite3.Error as e:
            raise RepositoryConnectionError(f"cannot open results database: {e}", e) from e
        conn.row_factory = sqlite3.Row
        return conn

    def _run(self, sql: str, params: Iterable = (), commit: bool = False):
        conn = self.get_conn()
        try:
            cur = conn.execute(sql, tuple(params))
            rows = cur.fetchall()
            if commit:
                conn.commit()
            return rows, cur.rowcount, cur.lastrowid
        except sqlite3.Error as e:
            raise QueryError(f"results query failed: {e}", e) from e
        finally:
            conn.close()

    def init_db(self):
        conn = self.get_conn()
        try:
            conn.execute("""
            CREATE TABLE IF NOT EXISTS results (
                no INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                normalized_name TEXT NOT NULL,
                category TEXT,
                grade REAL
            );
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_results_category_grade ON results (category, grade)")
            conn.commit()
        except sqlite3.Error as e:
            raise QueryError(f"cannot create results table: {e}", e) from e
        finally:
            conn.close()

    # ---------------------------
    # Record repository capability
    # ---------------------------

    def query_by_name_substrings(self, terms: Sequence[str], limit: int) -> list[ResultRecord]:
        sql = "SELECT no, name, category, grade FROM results"
        params: list = []
        conditions = []
        for term in terms:
            conditions.append("normalized_name LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(normalize_ar(term))}%")
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY rowid LIMIT ?"
        params.append(limit)

        rows, _, _ = self._run(sql, params)
        return [_row_to_record(r) for r in rows]

    def count_greater_grade(self, category: Optional[str], grade: float) -> int:
        rows, _, _ = self._run(
            "SELECT COUNT(*) AS count FROM results WHERE COALESCE(category, '') = ? AND grade > ?",
            (category or "", grade or 0),
        )
        return rows[0]["count"] if rows else 0

    def connection_healthy(self) -> bool:
        try:
            self._run("SELECT no FROM results LIMIT 1")
        except (RepositoryConnectionError, QueryError) as e:
            logger.error("Results connection test failed: %s", e)
            return False
        return True

    # ---------------------------
    # Admin operations
    # ---------------------------

    def add_result(self, no, name: str, category: Optional[str], grade: Optional[float]) -> int:
        _, _, lastrowid = self._run(
            """
            INSERT OR REPLACE INTO results (no, name, normalized_name, category, grade)
            VALUES (?, ?, ?, ?, ?)
            """,
            (no, name.strip(), normalize_ar(name), category or None, grade),
            commit=True,
        )
        return lastrowid

    def bulk_insert(self, records: Iterable[ResultRecord]) -> int:
        rows = [
            (r.identifier, r.name.strip(), normalize_ar(r.name), r.category or None, r.grade)
            for r in records
        ]
        if not rows:
            return 0

        conn = self.get_conn()
        try:
            conn.executemany("""
                INSERT OR REPLACE INTO results (no, name, normalized_name, category, grade)
                VALUES (?, ?, ?, ?, ?)
            """, rows)
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise QueryError(f"results import failed: {e}", e) from e
        finally:
            conn.close()
        return len(rows)

    def get_result_by_no(self, no) -> Optional[ResultRecord]:
        rows, _, _ = self._run("SELECT no, name, category, grade FROM results WHERE no = ?", (no,))
        return _row_to_record(rows[0]) if rows else None

    def delete_result(self, no) -> bool:
        _, rowcount, _ = self._run("DELETE FROM results WHERE no = ?", (no,), commit=True)
        return rowcount > 0

    def get_all_results(self) -> list[ResultRecord]:
        rows, _, _ = self._run("SELECT no, name, category, grade FROM results ORDER BY category ASC, grade DESC")
        return [_row_to_record(r) for r in rows]

    def get_all_for_search(self) -> list[dict]:
        rows, _, _ = self._run("SELECT no, name, normalized_name FROM results")
        return [dict(r) for r in rows]

    def get_categories(self) -> list[str]:
        rows, _, _ = self._run("SELECT DISTINCT category FROM results WHERE category IS NOT NULL AND category != ''")
        return [r["category"] for r in rows]
