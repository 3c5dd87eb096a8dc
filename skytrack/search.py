"""
Ranked free-text search over live aircraft and reference airports.

Each field contributes its best matching tier (exact > prefix > substring),
and field scores are summed. Only records scoring above zero are returned.

Entity weights:
    callsign    exact 100   prefix 50   substring 20
    id          exact 100   prefix 50
    airline                 prefix 40   substring 15
    country                             substring 10
    origin      exact 90                substring 25
    destination exact 90                substring 25

Airport weights:
    IATA        exact 100   prefix 80
    ICAO        exact 100   prefix 80
    name                    prefix 60   substring 30
    city                    prefix 50   substring 25
    country                             substring 15

Ordering is by descending score only. Equal scores keep their input order
(Python's sort is stable); there is no secondary key.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from skytrack.config import config
from skytrack.models import (
    Entity,
    ReferenceAirport,
    NOT_AVAILABLE,
    UNKNOWN_AIRCRAFT,
    UNKNOWN_AIRLINE,
    UNKNOWN_COUNTRY,
)

# (exact, prefix, substring); 0 disables a tier
Weights = Tuple[int, int, int]

CALLSIGN_WEIGHTS: Weights = (100, 50, 20)
ID_WEIGHTS: Weights = (100, 50, 0)
AIRLINE_WEIGHTS: Weights = (0, 40, 15)
COUNTRY_WEIGHTS: Weights = (0, 0, 10)
ROUTE_WEIGHTS: Weights = (90, 0, 25)

AIRPORT_CODE_WEIGHTS: Weights = (100, 80, 0)
AIRPORT_NAME_WEIGHTS: Weights = (0, 60, 30)
AIRPORT_CITY_WEIGHTS: Weights = (0, 50, 25)
AIRPORT_COUNTRY_WEIGHTS: Weights = (0, 0, 15)

# Placeholders for unreported metadata never match
SENTINELS = frozenset(
    s.lower() for s in (NOT_AVAILABLE, UNKNOWN_AIRCRAFT, UNKNOWN_AIRLINE, UNKNOWN_COUNTRY)
)


class SearchHit(NamedTuple):
    score: int
    record: Any


@dataclass
class SearchResults:
    """Independently ranked hits per category."""
    entities: List[SearchHit] = field(default_factory=list)
    airports: List[SearchHit] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.entities or self.airports)

    def to_dict(self) -> dict:
        return {
            'flights': [
                {'score': hit.score, **hit.record.to_dict()} for hit in self.entities
            ],
            'airports': [
                {'score': hit.score, **hit.record.to_dict()} for hit in self.airports
            ],
        }


def field_score(value: Optional[str], query: str, weights: Weights) -> int:
    """
    Best tier a single field reaches for an already lowercased query.

    Tiers are tried strongest first; a disabled tier falls through to the
    next one, so an exact hit still earns the prefix weight when the field
    has no exact weight.
    """
    if not value:
        return 0
    text = value.lower()
    if text in SENTINELS:
        return 0

    exact, prefix, substring = weights
    if exact and text == query:
        return exact
    if prefix and text.startswith(query):
        return prefix
    if substring and query in text:
        return substring
    return 0


def score_entity(entity: Entity, query: str) -> int:
    """Additive score of an entity against a lowercased query."""
    score = (
        field_score(entity.callsign, query, CALLSIGN_WEIGHTS)
        + field_score(entity.id, query, ID_WEIGHTS)
        + field_score(entity.airline, query, AIRLINE_WEIGHTS)
        + field_score(entity.origin_country, query, COUNTRY_WEIGHTS)
    )
    if entity.route:
        score += field_score(entity.route.origin_code, query, ROUTE_WEIGHTS)
        score += field_score(entity.route.destination_code, query, ROUTE_WEIGHTS)
    return score


def score_airport(airport: ReferenceAirport, query: str) -> int:
    """Additive score of a reference airport against a lowercased query."""
    return (
        field_score(airport.iata_code, query, AIRPORT_CODE_WEIGHTS)
        + field_score(airport.icao_code, query, AIRPORT_CODE_WEIGHTS)
        + field_score(airport.name, query, AIRPORT_NAME_WEIGHTS)
        + field_score(airport.city, query, AIRPORT_CITY_WEIGHTS)
        + field_score(airport.country, query, AIRPORT_COUNTRY_WEIGHTS)
    )


def rank(records: Iterable[Any], query: str, scorer, limit: int) -> List[SearchHit]:
    """Score, drop zeros, sort by descending score (stable), truncate."""
    hits = []
    for record in records:
        score = scorer(record, query)
        if score > 0:
            hits.append(SearchHit(score, record))
    hits.sort(key=lambda hit: -hit.score)
    return hits[:limit]


class SearchRanker:
    """
    Stateless ranker over whatever entities and airports it is given.

    Reads its inputs only; callers pass the current store contents on
    every query.
    """

    def __init__(self, min_query_length: Optional[int] = None, top_n: Optional[int] = None):
        self.min_query_length = (
            config.search.min_query_length if min_query_length is None else min_query_length
        )
        self.top_n = top_n or config.search.top_n

    def normalize_query(self, query: Optional[str]) -> Optional[str]:
        """Lowercased, trimmed query, or None if too short to search."""
        q = (query or '').strip().lower()
        if not q or len(q) < self.min_query_length:
            return None
        return q

    def search(
        self,
        query: Optional[str],
        entities: Sequence[Entity],
        airports: Sequence[ReferenceAirport],
    ) -> SearchResults:
        q = self.normalize_query(query)
        if q is None:
            return SearchResults()

        return SearchResults(
            entities=rank(entities, q, score_entity, self.top_n),
            airports=rank(airports, q, score_airport, self.top_n),
        )
