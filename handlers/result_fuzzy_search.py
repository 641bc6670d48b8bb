from rapidfuzz import fuzz
from handlers.result_normalizer import normalize_ar


def fuzzy_match(query: str, choices: list[dict], min_score: int = 70, limit: int = 10):

    q = normalize_ar(query)
    if not q:
        return []

    results = []
    for ch in choices:
        score = fuzz.token_set_ratio(q, ch["normalized_name"])
        if score >= min_score:
            results.append({
                "no": ch["no"],
                "name": ch["name"],
                "score": round(score)
            })

    results.sort(key=lambda x: x["score"], reverse=True)
    return results[:limit]
