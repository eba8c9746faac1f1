"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from sisiago.adapters.supabase_audit_repository import SupabaseAuditRepository
from sisiago.adapters.supabase_user_repository import SupabaseUserRepository
from sisiago.config import Settings
from sisiago.services.audit import AuditLogger
from sisiago.services.audit_query import AuditQueryService
from sisiago.services.audit_stats import AuditStatsService
from sisiago.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    audit_logger: AuditLogger
    audit_query_service: AuditQueryService
    audit_stats_service: AuditStatsService
    user_service: UserService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    audit_repository = SupabaseAuditRepository(supabase_client)
    user_repository = SupabaseUserRepository(supabase_client)
    audit_logger = AuditLogger(
        audit_repository, max_attempts=resolved_settings.audit_write_attempts
    )
    audit_query_service = AuditQueryService(
        repository=audit_repository,
        user_directory=user_repository,
    )
    audit_stats_service = AuditStatsService(audit_query_service)
    user_service = UserService(
        repository=user_repository,
        audit_logger=audit_logger,
    )

    return AppContainer(
        settings=resolved_settings,
        audit_logger=audit_logger,
        audit_query_service=audit_query_service,
        audit_stats_service=audit_stats_service,
        user_service=user_service,
    )
