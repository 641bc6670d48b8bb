from typing import Iterable, Optional

from handlers.result_errors import RepositoryError
from handlers.result_models import RankedResult, ResultRecord, category_key


def rank_of(category: Optional[str], grade: Optional[float], repository) -> int:
    """
    Rank of a single grade inside its category: one plus the number of
    records in the same category with a strictly higher grade.
    """
    try:
        higher = repository.count_greater_grade(category, grade or 0)
    except RepositoryError:
        raise
    except Exception as e:
        raise RepositoryError(f"rank query failed: {e}", e) from e
    return higher + 1


def rank_all(records: Iterable[ResultRecord]) -> list[RankedResult]:
    """
    Rank every record inside its category.

    Categories are emitted in the order they are first seen; inside a category
    records are sorted by grade (highest first) and equal grades keep their
    input order, so each category gets ranks 1..N without shared places.
    """
    groups: dict[str, list[ResultRecord]] = {}
    for record in records:
        groups.setdefault(category_key(record.category), []).append(record)

    ranked: list[RankedResult] = []
    for category, group in groups.items():
        ordered = sorted(group, key=lambda r: r.grade or 0, reverse=True)
        ranked.extend(
            RankedResult(
                identifier=r.identifier,
                name=r.name,
                category=category,
                grade=r.grade or 0,
                rank=index,
            )
            for index, r in enumerate(ordered, 1)
        )
    return ranked
