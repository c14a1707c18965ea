"""
Hybrid result merging and ranking.

Pure functions combining vector and keyword candidates into one ranked,
duplicate-free list. Vector hits win over keyword hits for the same chunk;
keyword hits only fill remaining slots.

Dependencies: edu_assistant.models.retrieval
System role: Merge / dedup / rank step of the hybrid retriever
"""

from collections.abc import Iterable

from edu_assistant.models.retrieval import SearchOrigin, SearchResult, SearchTypeCounts


def merge_results(
    vector_results: Iterable[SearchResult],
    keyword_results: Iterable[SearchResult],
    match_count: int,
) -> list[SearchResult]:
    """
    Merge vector and keyword candidates.

    Vector candidates are inserted first, keyed by chunk id. Keyword
    candidates whose id is not yet present are added while the merged set
    holds fewer than match_count entries. The merged set is then stably
    sorted by score descending and truncated to match_count.

    Args:
        vector_results: Vector candidates, already above the similarity threshold
        keyword_results: Keyword candidates
        match_count: Maximum results to return

    Returns:
        list[SearchResult]: Ranked results with unique ids

    Example:
        vector [a:0.9], keyword [a, b] with match_count=2
        -> [a (vector, 0.9), b (keyword, 0.5)]
    """
    if match_count < 1:
        return []

    merged: dict[str, SearchResult] = {}

    for result in vector_results:
        if result.id not in merged:
            merged[result.id] = result

    for result in keyword_results:
        if len(merged) >= match_count:
            break
        if result.id not in merged:
            merged[result.id] = result

    return rank_results(merged.values())[:match_count]


def rank_results(results: Iterable[SearchResult]) -> list[SearchResult]:
    """
    Order results by score, highest first.

    sorted() is stable, so equal scores keep insertion order (vector hits
    ahead of keyword hits).
    """
    return sorted(results, key=lambda result: result.score, reverse=True)


def count_origins(results: Iterable[SearchResult]) -> SearchTypeCounts:
    """Count how many results each search stage contributed."""
    counts = SearchTypeCounts()
    for result in results:
        if result.origin is SearchOrigin.VECTOR:
            counts.vector += 1
        else:
            counts.keyword += 1
    return counts
