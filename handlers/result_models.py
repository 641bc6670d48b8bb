from dataclasses import dataclass

UNSPECIFIED_CATEGORY = "غير محدد"


@dataclass(frozen=True)
class ResultRecord:
    identifier: int | str
    name: str
    category: str | None = None
    grade: float | None = None


@dataclass(frozen=True)
class MatchResult:
    identifier: int | str
    name: str
    category: str | None
    grade: float | None
    rank: int
    # True when the rank query failed and rank fell back to 1
    rank_degraded: bool = False


@dataclass(frozen=True)
class RankedResult:
    identifier: int | str
    name: str
    category: str
    grade: float
    rank: int


def category_key(category) -> str:
    if category is None:
        return UNSPECIFIED_CATEGORY
    key = str(category)
    return key if key else UNSPECIFIED_CATEGORY
