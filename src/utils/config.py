"""Agent runtime configuration read from environment variables."""

import os


class AgentConfig:
    """Centralized agent configuration."""

    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
    SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
    SUPABASE_QUERY_TIMEOUT_SECONDS = float(os.environ.get("SUPABASE_QUERY_TIMEOUT_SECONDS", "10"))

    # Resolver tuning
    FUZZY_CANDIDATE_LIMIT = int(os.environ.get("FUZZY_CANDIDATE_LIMIT", "500"))
    RESOLVER_CONFIDENCE_THRESHOLD = float(os.environ.get("RESOLVER_CONFIDENCE_THRESHOLD", "0.3"))
    RESOLVER_FIELD_MATCH_THRESHOLD = 0.4
    RESOLVER_TIE_MARGIN = 0.02
    MAX_SUGGESTIONS = 3

    MCP_SERVER_NAME = os.environ.get("MCP_SERVER_NAME", "agency-agent-server")

    @classmethod
    def supabase_key(cls) -> str:
        """Service role key when configured, anon key otherwise."""
        return cls.SUPABASE_SERVICE_ROLE_KEY or cls.SUPABASE_ANON_KEY

    @classmethod
    def is_service_role(cls) -> bool:
        return bool(cls.SUPABASE_SERVICE_ROLE_KEY)
