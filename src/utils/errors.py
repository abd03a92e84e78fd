"""Error handling utilities."""

from typing import Any, Optional


class AgencyAgentError(Exception):
    """Base exception for the agency agent backend."""

    error_type = "error"

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestions = list(suggestions or [])
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message

    def to_payload(self) -> dict:
        """Structured error payload returned across the tool boundary."""
        payload: dict[str, Any] = {
            "message": self.message,
            "error_type": self.error_type,
        }
        if self.suggestions:
            payload["suggestions"] = self.suggestions
        if self.context.get("actions_taken"):
            payload["actions_taken"] = self.context["actions_taken"]
        return payload


class NotFoundError(AgencyAgentError):
    """No candidate matched the query."""
    error_type = "not_found"


class AmbiguousError(AgencyAgentError):
    """Several plausible candidates, none confident enough to pick."""
    error_type = "ambiguous"


class ResolutionError(AgencyAgentError):
    """Backend unreachable or returned malformed data during resolution."""
    error_type = "resolution_error"


class ValidationError(AgencyAgentError):
    """Caller input failed validation."""
    error_type = "validation_error"


class DateParseError(ValidationError):
    """Natural-language date could not be parsed."""
    error_type = "date_parse_error"


class WriteError(AgencyAgentError):
    """Insert, update or delete failed at the store."""
    error_type = "write_error"


class SupabaseError(AgencyAgentError):
    """Supabase operation error."""
    error_type = "store_error"


class QueryTimeoutError(SupabaseError):
    """Supabase call did not complete within the configured timeout."""
    error_type = "store_timeout"
