"""
Weighted multi-field fuzzy matching.

Scores are dissimilarities: 0 means identical, 1 means unrelated.

For each field, every query token is compared against every token of the
field value (and the whole value) with an edit-distance style ratio, so
token position inside the field does not matter. A query token is "owned"
by the field(s) where it matches best; a field's similarity is the mean over
the tokens it owns, or the whole-string ratio when that is higher.

A field matches when its dissimilarity is at most FIELD_MATCH_THRESHOLD.
The candidate score is the product of `max(d, EPSILON) ** weight` over
matched fields, diluted by the share of query tokens that no field covers.
"""

import re
import unicodedata
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from src.utils.config import AgentConfig

T = TypeVar("T")

MIN_TOKEN_LENGTH = 2
EPSILON = 0.001
FIELD_MATCH_THRESHOLD = AgentConfig.RESOLVER_FIELD_MATCH_THRESHOLD

_TOKEN_SPLIT = re.compile(r"[^0-9a-z]+")


@dataclass(frozen=True)
class WeightedField:
    """A record field taking part in fuzzy ranking."""

    name: str
    weight: float


CONTACT_FIELDS: tuple[WeightedField, ...] = (
    WeightedField("first_name", 0.4),
    WeightedField("last_name", 0.4),
    WeightedField("email", 0.15),
    WeightedField("phone", 0.05),
)

PROPERTY_FIELDS: tuple[WeightedField, ...] = (
    WeightedField("reference", 0.5),
    WeightedField("street", 0.25),
    WeightedField("city", 0.15),
    WeightedField("postal_code", 0.1),
)


def normalize_text(value: Any) -> str:
    """Lower-case, accent-fold and trim a value."""
    if value is None:
        return ""
    text = unicodedata.normalize("NFKD", str(value))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return text.lower().strip()


def tokenize(text: str) -> list[str]:
    """Split normalized text into tokens of at least MIN_TOKEN_LENGTH chars."""
    return [t for t in _TOKEN_SPLIT.split(text) if len(t) >= MIN_TOKEN_LENGTH]


def similarity(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    return SequenceMatcher(None, a, b).ratio()


@dataclass
class CandidateScore:
    score: float
    matched_fields: list[str]


def score_fields(
    query: str,
    values: dict[str, Any],
    fields: Sequence[WeightedField],
) -> Optional[CandidateScore]:
    """
    Score one candidate's field values against a query.

    Returns None when the query has no usable token or no field matches.
    """
    query_norm = normalize_text(query)
    query_tokens = tokenize(query_norm)
    if not query_tokens:
        return None

    token_sims: dict[str, dict[str, float]] = {}
    whole_sims: dict[str, float] = {}
    for f in fields:
        value_norm = normalize_text(values.get(f.name))
        value_tokens = set(tokenize(value_norm))
        if len(value_norm) >= MIN_TOKEN_LENGTH:
            value_tokens.add(value_norm)
        token_sims[f.name] = {
            t: max((similarity(t, v) for v in value_tokens), default=0.0)
            for t in query_tokens
        }
        whole_sims[f.name] = similarity(query_norm, value_norm)

    best_by_token = {
        t: max(token_sims[f.name][t] for f in fields) for t in query_tokens
    }

    product = 1.0
    matched: list[str] = []
    for f in fields:
        owned = [
            token_sims[f.name][t]
            for t in query_tokens
            if token_sims[f.name][t] > 0 and token_sims[f.name][t] == best_by_token[t]
        ]
        field_sim = max(whole_sims[f.name], sum(owned) / len(owned) if owned else 0.0)
        dissimilarity = 1.0 - field_sim
        if dissimilarity <= FIELD_MATCH_THRESHOLD:
            matched.append(f.name)
            product *= max(dissimilarity, EPSILON) ** f.weight

    if not matched:
        return None

    covered = sum(1 for t in query_tokens if best_by_token[t] >= 1.0 - FIELD_MATCH_THRESHOLD)
    coverage = covered / len(query_tokens)
    score = 1.0 - (1.0 - product) * coverage
    return CandidateScore(score=score, matched_fields=matched)


def rank(
    query: str,
    candidates: Iterable[T],
    extract: Callable[[T], dict[str, Any]],
    fields: Sequence[WeightedField],
) -> list[tuple[T, CandidateScore]]:
    """Rank candidates by ascending score; non-matching candidates are dropped."""
    scored = []
    for candidate in candidates:
        result = score_fields(query, extract(candidate), fields)
        if result is not None:
            scored.append((candidate, result))
    # stable sort keeps store order (most recently updated first) on ties
    scored.sort(key=lambda pair: pair[1].score)
    return scored
