import logging
from typing import Optional, Sequence

from handlers.result_errors import RepositoryError, ValidationError
from handlers.result_models import MatchResult, ResultRecord
from handlers.result_normalizer import normalize_ar
from handlers.result_rank import rank_of

logger = logging.getLogger(__name__)

MIN_SINGLE_TERM_LENGTH = 3
MAX_CANDIDATES = 10

TERM_SCORE = 10
FULL_MATCH_SCORE = 50
PREFIX_SCORE = 20


def extract_terms(query: str) -> list[str]:
    words = [w for w in normalize_ar(query).split(" ") if w]

    if not words or (len(words) == 1 and len(words[0]) < MIN_SINGLE_TERM_LENGTH):
        raise ValidationError("name too short")

    return words


def score_candidate(name: str, terms: Sequence[str], normalized_query: str) -> int:
    normalized_name = normalize_ar(name)
    score = 0

    for term in terms:
        if term in normalized_name:
            score += TERM_SCORE

    if normalized_name == normalized_query:
        score += FULL_MATCH_SCORE

    if terms and normalized_name.startswith(terms[0]):
        score += PREFIX_SCORE

    return score


def pick_best_match(candidates: Sequence[ResultRecord], terms: Sequence[str], normalized_query: str) -> Optional[ResultRecord]:
    best = None
    best_score = -1

    # strict '>' keeps the earliest candidate on equal scores
    for candidate in candidates:
        score = score_candidate(candidate.name, terms, normalized_query)
        if score > best_score:
            best, best_score = candidate, score

    return best


def search(query: str, repository, limit: int = MAX_CANDIDATES) -> Optional[MatchResult]:
    """
    Find the single best-matching result for a student name.

    Returns None when the repository has no candidate. Raises ValidationError
    for a too-short query (before touching the repository) and RepositoryError
    when the candidate query fails. A failing rank query does not fail the
    search: the rank falls back to 1 and the result is flagged as degraded.
    """
    terms = extract_terms(query)
    logger.info("Searching for terms: %s", terms)

    try:
        candidates = repository.query_by_name_substrings(terms, min(limit, MAX_CANDIDATES))
    except RepositoryError:
        raise
    except Exception as e:
        raise RepositoryError(f"search query failed: {e}", e) from e

    logger.info("Search completed, %d candidate(s)", len(candidates))
    if not candidates:
        return None

    best = pick_best_match(candidates, terms, normalize_ar(query))

    rank_degraded = False
    try:
        rank = rank_of(best.category, best.grade, repository)
    except RepositoryError as e:
        logger.warning("Rank lookup failed for result %s, showing rank 1: %s", best.identifier, e)
        rank = 1
        rank_degraded = True

    return MatchResult(
        identifier=best.identifier,
        name=best.name,
        category=best.category,
        grade=best.grade,
        rank=rank,
        rank_degraded=rank_degraded,
    )
