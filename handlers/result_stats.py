from dataclasses import dataclass, field
from typing import Iterable

from handlers.result_models import ResultRecord, category_key


@dataclass
class ContestStats:
    total_students: int = 0
    categories: list[str] = field(default_factory=list)
    average_grade: int = 0
    top_grade: float = 0
    categories_count: dict[str, int] = field(default_factory=dict)


def calculate_stats(records: Iterable[ResultRecord]) -> ContestStats:
    """Totals over the results table. Zero or missing grades do not count towards average/top."""
    records = list(records)
    if not records:
        return ContestStats()

    grades = [r.grade for r in records if r.grade and r.grade > 0]

    categories_count: dict[str, int] = {}
    for r in records:
        key = category_key(r.category)
        categories_count[key] = categories_count.get(key, 0) + 1

    # half up, not banker's rounding
    average = int(sum(grades) / len(grades) + 0.5) if grades else 0

    return ContestStats(
        total_students=len(records),
        categories=list(categories_count),
        average_grade=average,
        top_grade=max(grades) if grades else 0,
        categories_count=categories_count,
    )
