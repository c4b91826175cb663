"""Relevance ranking for aggregated search results."""

from .relevance import query_words, relevance_score, rank_results

__all__ = ["query_words", "relevance_score", "rank_results"]
