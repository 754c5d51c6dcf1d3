"""
Ranking and reconciliation of video titles against sheet row names.

Responsibilities:
- Rank candidate row names for a title using the similarity engine.
- Pick the best candidate, classify the match and apply a threshold.
- Consult and update the match cache when one is configured.

Invariant:
Given identical inputs and cache contents, results are deterministic.
Ties keep the caller's candidate order.
"""

from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from .cache import MatchCache
from .config import Settings, DEFAULT_MAX_INPUT_LENGTH, DEFAULT_THRESHOLD
from .logger import StructuredLogger, get_logger
from .normalize import normalize_title, core_title, extract_q_numbers
from .similarity import similarity, name_similarity

SCORER_FUNCS: Dict[str, Callable[[str, str], int]] = {
    "similarity": similarity,
    "name": name_similarity,
}

# Core titles shorter than this are too generic to match on their own
MIN_CORE_LENGTH = 10


class RankedCandidate(NamedTuple):
    candidate: str
    score: int


@dataclass(frozen=True)
class MatchResult:
    candidate: Optional[str]
    score: int
    match_type: str  # exact, core, contains, fuzzy, cached, none
    accepted: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


NO_MATCH = MatchResult(candidate=None, score=0, match_type="none", accepted=False)


def _get_scorer(scorer: str) -> Callable[[str, str], int]:
    try:
        return SCORER_FUNCS[scorer]
    except KeyError:
        raise ValueError(f"Unknown scorer {scorer!r}; use one of {', '.join(SCORER_FUNCS)}")


def _prepare(text: str, max_input_length: int) -> str:
    return normalize_title(text)[:max_input_length]


def rank_candidates(
    title: str,
    candidates: Sequence[str],
    scorer: str = "similarity",
    limit: Optional[int] = None,
    max_input_length: int = DEFAULT_MAX_INPUT_LENGTH,
) -> List[RankedCandidate]:
    """
    Score every candidate against a title, best first.

    Args:
        title: Video title to look up
        candidates: Sheet row names
        scorer: "similarity" or "name"
        limit: Keep only the top N entries
        max_input_length: Normalized strings are truncated to this length

    Returns:
        List of RankedCandidate sorted by descending score
    """
    score_fn = _get_scorer(scorer)
    norm_title = _prepare(title, max_input_length)
    ranked = [
        RankedCandidate(c, score_fn(norm_title, _prepare(c, max_input_length)))
        for c in candidates
    ]
    ranked.sort(key=lambda r: -r.score)
    if limit is not None:
        ranked = ranked[:limit]
    return ranked


def _find_core_match(title: str, candidates: Sequence[str]) -> Optional[str]:
    core = core_title(title)
    if len(core) <= MIN_CORE_LENGTH:
        return None
    title_qs = set(extract_q_numbers(title))
    same_core = [c for c in candidates if core_title(c) == core]
    if not same_core:
        return None
    for c in same_core:
        if title_qs & set(extract_q_numbers(c)):
            return c
    return same_core[0]


def find_best_match(
    title: str,
    candidates: Sequence[str],
    threshold: Optional[int] = None,
    scorer: str = "similarity",
    max_input_length: int = DEFAULT_MAX_INPUT_LENGTH,
) -> MatchResult:
    """
    Find the sheet row name that best matches a title.

    Tried in order: exact match after title normalization, same core title
    (ignoring Q numbers), then the top-ranked candidate, classified as
    "contains" or "fuzzy" and accepted only at or above the threshold.
    """
    if threshold is None:
        threshold = DEFAULT_THRESHOLD
    score_fn = _get_scorer(scorer)

    norm_title = _prepare(title, max_input_length)
    if not candidates or not norm_title:
        return NO_MATCH

    # Compare full titles; only scoring works on truncated ones
    full_title = normalize_title(title)
    for candidate in candidates:
        if normalize_title(candidate) == full_title:
            return MatchResult(candidate, 100, "exact", True)

    core_candidate = _find_core_match(title, candidates)
    if core_candidate is not None:
        score = score_fn(norm_title, _prepare(core_candidate, max_input_length))
        return MatchResult(core_candidate, score, "core", True)

    ranked = rank_candidates(
        title, candidates, scorer=scorer, limit=1, max_input_length=max_input_length
    )
    best = ranked[0]
    if best.score == 0:
        return NO_MATCH

    norm_best = _prepare(best.candidate, max_input_length)
    contained = bool(norm_best) and (norm_best in norm_title or norm_title in norm_best)
    match_type = "contains" if contained else "fuzzy"
    return MatchResult(best.candidate, best.score, match_type, best.score >= threshold)


class Reconciler:
    """
    Reconciles titles against a candidate list, with optional caching.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[MatchCache] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.settings = settings or Settings()
        self.cache = cache
        self.logger = logger or get_logger()

    def reconcile(self, title: str, candidates: Sequence[str]) -> MatchResult:
        if self.cache is not None:
            cached = self.cache.get(title)
            if cached is not None and cached["matched_name"] in candidates:
                self.logger.record_cache_hit()
                self.logger.record_match("cached")
                self.cache.touch(title)
                self.logger.debug("Cache hit", title=title, matched_name=cached["matched_name"])
                return MatchResult(cached["matched_name"], cached["score"], "cached", True)

        result = find_best_match(
            title,
            candidates,
            threshold=self.settings.threshold,
            scorer=self.settings.scorer,
            max_input_length=self.settings.max_input_length,
        )
        self.logger.record_comparisons(len(candidates))

        if not result.accepted:
            self.logger.record_miss()
            self.logger.info(
                "No acceptable match",
                title=title,
                best_candidate=result.candidate,
                score=result.score,
                threshold=self.settings.threshold,
            )
            return result

        self.logger.record_match(result.match_type)
        self.logger.debug(
            "Matched title",
            title=title,
            candidate=result.candidate,
            score=result.score,
            match_type=result.match_type,
        )
        if self.cache is not None:
            self.cache.put(title, result.candidate, result.score, result.match_type)
        return result

    def reconcile_many(self, titles: Sequence[str], candidates: Sequence[str]) -> Dict[str, Any]:
        """
        Reconcile every title against the same candidate list.

        Returns:
            Dict with "found", "not_found" counts and per-title "results"
        """
        results = []
        found = 0
        for title in titles:
            result = self.reconcile(title, candidates)
            if result.accepted:
                found += 1
            results.append({"title": title, **result.to_dict()})

        return {"found": found, "not_found": len(results) - found, "results": results}
