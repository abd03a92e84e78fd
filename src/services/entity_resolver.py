"""Entity resolver - map a free-text or ID query to one contact or property."""

import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from src.models.contact import Contact
from src.models.property import Property
from src.models.resolution import (
    Ambiguous,
    EntityKind,
    NotFound,
    Record,
    Resolved,
    ResolutionResult,
    ResolutionTier,
)
from src.services import fuzzy_match
from src.services.supabase_client import QueryGateway, get_query_gateway
from src.utils.config import AgentConfig
from src.utils.errors import (
    AmbiguousError,
    NotFoundError,
    ResolutionError,
    SupabaseError,
)
from src.utils.logging import get_structured_logger, log_timing, sanitize_query_text

logger = get_structured_logger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-().]+$")
PHONE_MATCH_DIGITS = 8


@dataclass
class ResolveFilters:
    """Optional narrowing of the fuzzy candidate pool."""

    type: Optional[str] = None
    status: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    city: Optional[str] = None

    def store_filters(self, kind: EntityKind) -> dict[str, Any]:
        filters: dict[str, Any] = {"type": self.type, "status": self.status}
        if kind is EntityKind.PROPERTY:
            filters["price__gte"] = self.min_price
            filters["price__lte"] = self.max_price
        return filters


@dataclass
class ResolveRequest:
    kind: EntityKind
    query: str
    agency_id: str
    filters: ResolveFilters


def digits_only(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def is_phone_query(query: str) -> bool:
    return bool(PHONE_PATTERN.match(query)) and len(digits_only(query)) >= PHONE_MATCH_DIGITS


def record_label(record: Record) -> str:
    """Short human label used in disambiguation prompts."""
    if isinstance(record, Contact):
        return record.full_name
    return record.reference


def parse_record(kind: EntityKind, row: dict) -> Record:
    model = Contact if kind is EntityKind.CONTACT else Property
    try:
        return model.model_validate(row)
    except PydanticValidationError as e:
        raise ResolutionError(
            f"Malformed {kind.value} row from store",
            context={"record_id": row.get("id"), "errors": e.error_count()},
        )


def fuzzy_values(record: Record) -> dict[str, Any]:
    """Flatten the fields used for fuzzy ranking."""
    if isinstance(record, Contact):
        return {
            "first_name": record.first_name,
            "last_name": record.last_name,
            "email": record.email,
            "phone": record.phone,
        }
    return {
        "reference": record.reference,
        "street": record.address.street,
        "city": record.address.city,
        "postal_code": record.address.postal_code,
    }


class ResolverStrategy:
    """One resolution tier. Returns NotFound to let the next tier try."""

    tier: ResolutionTier
    kinds: frozenset = frozenset(EntityKind)

    def applies(self, request: ResolveRequest) -> bool:
        return request.kind in self.kinds

    async def attempt(self, request: ResolveRequest, gateway: QueryGateway) -> ResolutionResult:
        raise NotImplementedError


class IdLookup(ResolverStrategy):
    """UUID-shaped query: fetch by id within the tenant."""

    tier = ResolutionTier.ID_LOOKUP

    def applies(self, request: ResolveRequest) -> bool:
        return bool(UUID_PATTERN.match(request.query))

    async def attempt(self, request: ResolveRequest, gateway: QueryGateway) -> ResolutionResult:
        row = await gateway.get_by_id(request.kind.table, request.query, request.agency_id)
        if row is None:
            return NotFound(request.query)
        return Resolved(parse_record(request.kind, row), self.tier)


class ExactField(ResolverStrategy):
    """Contact email (case-insensitive) or phone (last 8 digits) exact match."""

    tier = ResolutionTier.EXACT_FIELD
    kinds = frozenset({EntityKind.CONTACT})

    def applies(self, request: ResolveRequest) -> bool:
        return request.kind in self.kinds and (
            bool(EMAIL_PATTERN.match(request.query)) or is_phone_query(request.query)
        )

    async def attempt(self, request: ResolveRequest, gateway: QueryGateway) -> ResolutionResult:
        if EMAIL_PATTERN.match(request.query):
            return await self._by_email(request, gateway)
        return await self._by_phone(request, gateway)

    async def _by_email(self, request: ResolveRequest, gateway: QueryGateway) -> ResolutionResult:
        email = request.query.strip().lower()
        # ilike treats `_` as a wildcard, so re-check equality locally
        rows, _ = await gateway.list_records(
            "contacts",
            request.agency_id,
            filters={"email__ilike": email},
            limit=25,
            order_by="updated_at",
        )
        for row in rows:
            if (row.get("email") or "").strip().lower() == email:
                return Resolved(parse_record(request.kind, row), self.tier)
        return NotFound(request.query)

    async def _by_phone(self, request: ResolveRequest, gateway: QueryGateway) -> ResolutionResult:
        suffix = digits_only(request.query)[-PHONE_MATCH_DIGITS:]
        # stored numbers are free-form, so compare digit suffixes locally
        rows, _ = await gateway.list_records(
            "contacts",
            request.agency_id,
            limit=AgentConfig.FUZZY_CANDIDATE_LIMIT,
            order_by="updated_at",
        )
        for row in rows:
            stored = digits_only(row.get("phone"))
            if len(stored) >= PHONE_MATCH_DIGITS and stored[-PHONE_MATCH_DIGITS:] == suffix:
                return Resolved(parse_record(request.kind, row), self.tier)
        return NotFound(request.query)


class ExactReference(ResolverStrategy):
    """Property reference, case-insensitive exact match."""

    tier = ResolutionTier.EXACT_REFERENCE
    kinds = frozenset({EntityKind.PROPERTY})

    async def attempt(self, request: ResolveRequest, gateway: QueryGateway) -> ResolutionResult:
        reference = request.query.strip().lower()
        rows, _ = await gateway.list_records(
            "properties",
            request.agency_id,
            filters={"reference__ilike": request.query.strip()},
            limit=25,
            order_by="updated_at",
        )
        for row in rows:
            if (row.get("reference") or "").strip().lower() == reference:
                return Resolved(parse_record(request.kind, row), self.tier)
        return NotFound(request.query)


class FuzzyRank(ResolverStrategy):
    """Bounded candidate fetch ranked by weighted multi-field similarity."""

    tier = ResolutionTier.FUZZY_RANK

    def __init__(
        self,
        candidate_limit: Optional[int] = None,
        confidence_threshold: Optional[float] = None,
        tie_margin: Optional[float] = None,
    ):
        self.candidate_limit = candidate_limit or AgentConfig.FUZZY_CANDIDATE_LIMIT
        self.confidence_threshold = (
            confidence_threshold
            if confidence_threshold is not None
            else AgentConfig.RESOLVER_CONFIDENCE_THRESHOLD
        )
        self.tie_margin = tie_margin if tie_margin is not None else AgentConfig.RESOLVER_TIE_MARGIN

    async def attempt(self, request: ResolveRequest, gateway: QueryGateway) -> ResolutionResult:
        rows, _ = await gateway.list_records(
            request.kind.table,
            request.agency_id,
            filters=request.filters.store_filters(request.kind),
            limit=self.candidate_limit,
            order_by="updated_at",
        )
        candidates = self._parse_pool(request, rows)

        if request.kind is EntityKind.PROPERTY and request.filters.city:
            city = fuzzy_match.normalize_text(request.filters.city)
            candidates = [
                c for c in candidates
                if city in fuzzy_match.normalize_text(c.address.city)
            ]

        if not candidates:
            return NotFound(request.query)

        fields = (
            fuzzy_match.CONTACT_FIELDS
            if request.kind is EntityKind.CONTACT
            else fuzzy_match.PROPERTY_FIELDS
        )
        ranked = fuzzy_match.rank(request.query, candidates, fuzzy_values, fields)
        if not ranked:
            return NotFound(request.query)

        best, best_score = ranked[0]
        runner_up_close = (
            len(ranked) > 1
            and ranked[1][1].score < self.confidence_threshold
            and ranked[1][1].score - best_score.score < self.tie_margin
        )
        if best_score.score < self.confidence_threshold and not runner_up_close:
            return Resolved(best, self.tier, score=best_score.score)

        suggestions = [record_label(record) for record, _ in ranked[:AgentConfig.MAX_SUGGESTIONS]]
        return Ambiguous(request.query, suggestions)

    def _parse_pool(self, request: ResolveRequest, rows: list[dict]) -> list[Record]:
        """Parse candidate rows; a malformed row is dropped from the pool."""
        candidates = []
        for row in rows:
            try:
                candidates.append(parse_record(request.kind, row))
            except ResolutionError as e:
                logger.warning(
                    "Skipping malformed candidate row",
                    entity_kind=request.kind.value,
                    record_id=row.get("id"),
                    agency_id=request.agency_id,
                    error=e.message,
                )
        return candidates


def default_strategies() -> list[ResolverStrategy]:
    return [IdLookup(), ExactField(), ExactReference(), FuzzyRank()]


class EntityResolver:
    """
    Resolve a query to a single contact or property.

    Strategies run in order; the first result other than NotFound wins.
    Store failures surface as ResolutionError, never as NotFound.
    """

    def __init__(
        self,
        gateway: Optional[QueryGateway] = None,
        strategies: Optional[Sequence[ResolverStrategy]] = None,
    ):
        self.gateway = gateway or get_query_gateway()
        self.strategies = list(strategies) if strategies is not None else default_strategies()

    async def resolve(
        self,
        kind: EntityKind,
        query: str,
        agency_id: str,
        filters: Optional[ResolveFilters] = None,
    ) -> ResolutionResult:
        request = ResolveRequest(
            kind=kind,
            query=(query or "").strip(),
            agency_id=agency_id,
            filters=filters or ResolveFilters(),
        )
        if not request.query:
            return NotFound(request.query)

        with log_timing(
            f"resolve_{kind.value}",
            logger=logger,
            agency_id=agency_id,
            query=sanitize_query_text(request.query),
        ):
            result: ResolutionResult = NotFound(request.query)
            for strategy in self.strategies:
                if not strategy.applies(request):
                    continue
                try:
                    result = await strategy.attempt(request, self.gateway)
                except SupabaseError as e:
                    logger.error(
                        "Store failure during resolution",
                        entity_kind=kind.value,
                        tier=strategy.tier.value,
                        agency_id=agency_id,
                        error=str(e),
                    )
                    raise ResolutionError(
                        f"Could not look up {kind.value}: {e.message}",
                        context={"tier": strategy.tier.value},
                    ) from e
                if not isinstance(result, NotFound):
                    break

        self._log_result(kind, request, result)
        return result

    def _log_result(self, kind: EntityKind, request: ResolveRequest, result: ResolutionResult) -> None:
        if isinstance(result, Resolved):
            logger.info(
                "Resolved entity",
                entity_kind=kind.value,
                tier=result.tier.value,
                record_id=result.record.id,
                score=result.score,
                agency_id=request.agency_id,
            )
        elif isinstance(result, Ambiguous):
            logger.info(
                "Ambiguous entity query",
                entity_kind=kind.value,
                suggestion_count=len(result.suggestions),
                agency_id=request.agency_id,
            )
        else:
            logger.info(
                "Entity not found",
                entity_kind=kind.value,
                agency_id=request.agency_id,
            )

    async def resolve_contact(
        self, query: str, agency_id: str, filters: Optional[ResolveFilters] = None
    ) -> ResolutionResult:
        return await self.resolve(EntityKind.CONTACT, query, agency_id, filters)

    async def resolve_property(
        self, query: str, agency_id: str, filters: Optional[ResolveFilters] = None
    ) -> ResolutionResult:
        return await self.resolve(EntityKind.PROPERTY, query, agency_id, filters)

    async def resolve_or_raise(
        self,
        kind: EntityKind,
        query: str,
        agency_id: str,
        filters: Optional[ResolveFilters] = None,
    ) -> Record:
        """Resolve or raise NotFoundError / AmbiguousError with suggestions."""
        result = await self.resolve(kind, query, agency_id, filters)
        if isinstance(result, Resolved):
            return result.record
        raise resolution_failure(kind, result)


def resolution_failure(kind: EntityKind, result: ResolutionResult) -> Exception:
    """Build the caller-facing error for an unresolved query."""
    label = kind.value.capitalize()
    did_you_mean = ""
    if result.suggestions:
        did_you_mean = " Did you mean: " + ", ".join(f'"{s}"' for s in result.suggestions) + "?"
    if isinstance(result, Ambiguous):
        return AmbiguousError(
            f'Several {kind.value}s match "{result.query}".{did_you_mean}',
            suggestions=result.suggestions,
        )
    return NotFoundError(
        f'{label} not found: "{result.query}".{did_you_mean}',
        suggestions=result.suggestions,
    )
