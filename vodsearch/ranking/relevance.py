"""
Relevance Ranking Module

Scores each result against the user's query with a fixed, additive
heuristic and orders results by that score.

Signals (points):
1. Title equals query (1000) or contains it (500)
2. Every query word in the title (+300), otherwise some words (+50)
3. Position of the first query word in the title (+100 at start, +50 later)
4. Title length between 2 and 50 characters (+20)
5. Every query word in the description (+30) or category (+20)
6. Year field contains the query (+10)
"""

from ..connectors.base import ResultRecord

EXACT_TITLE = 1000
TITLE_CONTAINS = 500
ALL_WORDS_IN_TITLE = 300
FIRST_WORD_AT_START = 100
FIRST_WORD_LATER = 50
SOME_WORDS_IN_TITLE = 50
TITLE_LENGTH = 20
ALL_WORDS_IN_DESCRIPTION = 30
ALL_WORDS_IN_CATEGORY = 20
YEAR_MATCH = 10

TITLE_LENGTH_RANGE = (2, 50)


def query_words(query: str) -> list[str]:
    """Lowercase whitespace tokens of a query."""
    return query.strip().lower().split()


def relevance_score(
    record: ResultRecord,
    query: str,
    words: list[str] | None = None,
) -> int:
    """
    Score one record against a query.

    Args:
        record: Result to score
        query: Raw user query
        words: Pre-tokenised query words (computed from query when omitted)

    Returns:
        Non-negative integer score
    """
    needle = query.strip().lower()
    if words is None:
        words = query_words(query)
    if not needle or not words:
        return 0

    title = record.title.lower()
    description = record.description.lower()
    category = record.category.lower()
    year = record.year.lower()

    score = 0

    if title == needle:
        score += EXACT_TITLE
    elif needle in title:
        score += TITLE_CONTAINS

    matched = sum(1 for word in words if word in title)
    if matched == len(words):
        score += ALL_WORDS_IN_TITLE
    elif matched:
        score += SOME_WORDS_IN_TITLE

    position = title.find(words[0])
    if position == 0:
        score += FIRST_WORD_AT_START
    elif position > 0:
        score += FIRST_WORD_LATER

    low, high = TITLE_LENGTH_RANGE
    if low <= len(title) <= high:
        score += TITLE_LENGTH

    if all(word in description for word in words):
        score += ALL_WORDS_IN_DESCRIPTION
    if all(word in category for word in words):
        score += ALL_WORDS_IN_CATEGORY

    if needle in year:
        score += YEAR_MATCH

    return score


def rank_results(results: list[ResultRecord], query: str) -> list[ResultRecord]:
    """
    Order results by descending relevance.

    The sort is stable, so equal scores keep their incoming order. A blank
    query returns the results in their original order.

    Returns:
        New list; the input is not modified
    """
    words = query_words(query)
    if not words:
        return list(results)

    scores = [relevance_score(record, query, words) for record in results]
    order = sorted(range(len(results)), key=lambda i: -scores[i])
    return [results[i] for i in order]
