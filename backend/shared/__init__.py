"""
Shared infrastructure for the Courses backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client and table gateway factory
- repository / memory: Table gateway implementations
- exceptions: Base exception classes
- models: The authenticated principal

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import create_table_gateway, get_supabase_client, reset_client_cache
from .exceptions import (
    CoursesError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
)
from .memory import InMemoryTableGateway
from .models import Principal, Role, SERVICE_PRINCIPAL
from .repository import BaseRepository, SupabaseTableGateway, TableGateway

__all__ = [
    "Settings",
    "get_settings",
    "create_table_gateway",
    "get_supabase_client",
    "reset_client_cache",
    "CoursesError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "ExternalServiceError",
    "InMemoryTableGateway",
    "Principal",
    "Role",
    "SERVICE_PRINCIPAL",
    "BaseRepository",
    "SupabaseTableGateway",
    "TableGateway",
]
