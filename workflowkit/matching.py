"""Fuzzy filtering of candidate records.

``match`` owns the policy (empty queries pass everything through, default
keys and threshold). Ranking is delegated to a ``Matcher``; the bundled
``SubsequenceMatcher`` scores substring hits first and falls back to ordered
character subsequences, rewarding contiguous runs and word-boundary starts.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol, TypeVar

DEFAULT_KEYS: tuple[str, ...] = ("title",)
DEFAULT_THRESHOLD = 0.4
WORD_BOUNDARY_CHARS = "/_- ."

# Substring hits land in [0, SUBSTRING_CEILING]; subsequence hits above it.
SUBSTRING_CEILING = 0.3

T = TypeVar("T")


class Matcher(Protocol):
    def search(
        self,
        candidates: Sequence[T],
        query: str,
        keys: Sequence[str],
        threshold: float,
    ) -> list[T]: ...


def field_values(candidate: object, key: str) -> list[str]:
    """Resolve a dotted ``key`` on a mapping or object to searchable strings."""
    value: object = candidate
    for part in key.split("."):
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
        if value is None:
            return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(item) for item in value if item is not None]
    return [str(value)]


# Subsequence scoring weights.
RUN_BONUS = 20
RUN_STEP = 4
RUN_BONUS_CAP = 16
GAP_STEP = 2
GAP_PENALTY_CAP = 40
BOUNDARY_BONUS = 35
LENGTH_DIVISOR = 5


def _at_word_boundary(text: str, index: int) -> bool:
    return index == 0 or text[index - 1] in WORD_BOUNDARY_CHARS


def _run_bonus(run: int) -> int:
    return RUN_BONUS + min(RUN_BONUS_CAP, run * RUN_STEP)


def subsequence_score(query: str, candidate: str) -> int | None:
    """Greedy ordered-subsequence score; ``None`` if some character is missing."""
    if not query:
        return 0
    haystack = candidate.casefold()

    score = 0
    last = -1
    run = 0
    for needle in query.casefold():
        found = haystack.find(needle, last + 1)
        if found < 0:
            return None
        if found == last + 1:
            run += 1
            score += _run_bonus(run)
        else:
            run = 0
            score -= min(GAP_PENALTY_CAP, (found - last - 1) * GAP_STEP)
        if _at_word_boundary(haystack, found):
            score += BOUNDARY_BONUS
        last = found

    return score - len(haystack) // LENGTH_DIVISOR


def _ideal_score(length: int) -> int:
    """Score of a query matched as one run starting at a word boundary."""
    return BOUNDARY_BONUS + sum(_run_bonus(run) for run in range(1, length + 1))


def match_distance(query: str, candidate: str) -> float | None:
    """Distance in ``[0, 1]`` between ``query`` and ``candidate`` (0 is exact).

    Returns ``None`` when ``query`` is not even a subsequence of ``candidate``.
    """
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()
    if not query_folded or not candidate_folded:
        return None

    idx = candidate_folded.find(query_folded)
    if idx >= 0:
        coverage = len(query_folded) / len(candidate_folded)
        boundary = _at_word_boundary(candidate_folded, idx)
        distance = 0.25 * (1.0 - coverage) + (0.0 if boundary else 0.05)
        return min(SUBSTRING_CEILING, distance)

    score = subsequence_score(query_folded, candidate_folded)
    if score is None:
        return None
    quality = max(0.0, min(1.0, score / _ideal_score(len(query_folded))))
    return SUBSTRING_CEILING + (1.0 - SUBSTRING_CEILING) * (1.0 - quality)


class SubsequenceMatcher:
    def search(
        self,
        candidates: Sequence[T],
        query: str,
        keys: Sequence[str],
        threshold: float,
    ) -> list[T]:
        query = query.strip()
        scored: list[tuple[float, int, T]] = []
        for position, candidate in enumerate(candidates):
            best: float | None = None
            for key in keys:
                for text in field_values(candidate, key):
                    distance = match_distance(query, text)
                    if distance is not None and (best is None or distance < best):
                        best = distance
            if best is not None and best <= threshold:
                scored.append((best, position, candidate))
        scored.sort(key=lambda item: (item[0], item[1]))
        return [candidate for _, _, candidate in scored]


def match(
    candidates: Sequence[T],
    query: str,
    keys: Sequence[str] | None = None,
    threshold: float | None = None,
    matcher: Matcher | None = None,
) -> Sequence[T]:
    """Filter and rank ``candidates`` against ``query``.

    A blank query returns ``candidates`` itself, unfiltered and in order, so
    an empty search box lists everything. Otherwise the matcher decides
    membership and order (best first). ``threshold`` is the loosest accepted
    distance; lower is stricter.
    """
    if not query or not query.strip():
        return candidates
    engine = matcher if matcher is not None else SubsequenceMatcher()
    return engine.search(
        candidates,
        query,
        tuple(keys) if keys else DEFAULT_KEYS,
        DEFAULT_THRESHOLD if threshold is None else float(threshold),
    )
