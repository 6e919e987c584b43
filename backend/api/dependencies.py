"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through a class that
takes its collaborators in the constructor, and this file creates the
concrete implementations.

The storage backend is picked once from settings: the in-memory gateway
for tests and local development, or the Supabase service-role client.
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports (avoids circular imports)
if TYPE_CHECKING:
    from modules.access import AccessControlledTables
    from modules.courses import CourseService
    from modules.likes import LikeService
    from modules.profiles import ProfileService
    from modules.subscriptions import (
        ISubscriptionStore,
        SubscriptionReconciler,
        SubscriptionService,
    )
    from shared.repository import TableGateway


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container. They hold
    no per-request state; the principal is passed into every call.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._gateway: "TableGateway | None" = None
        self._subscription_store: "ISubscriptionStore | None" = None
        self._subscription_service: "SubscriptionService | None" = None
        self._reconciler: "SubscriptionReconciler | None" = None
        self._tables: "AccessControlledTables | None" = None
        self._profile_service: "ProfileService | None" = None
        self._like_service: "LikeService | None" = None
        self._course_service: "CourseService | None" = None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def gateway(self) -> "TableGateway":
        """Get the full-privilege table gateway."""
        if self._gateway is None:
            from shared.database import create_table_gateway
            self._gateway = create_table_gateway(self.settings)
        return self._gateway

    @property
    def subscription_store(self) -> "ISubscriptionStore":
        """Get the subscription store matching the gateway's backend."""
        if self._subscription_store is None:
            from modules.subscriptions.store import (
                InMemorySubscriptionStore,
                SupabaseSubscriptionStore,
            )
            from shared.memory import InMemoryTableGateway

            gateway = self.gateway
            if isinstance(gateway, InMemoryTableGateway):
                self._subscription_store = InMemorySubscriptionStore(gateway)
            else:
                from shared.database import get_supabase_client
                self._subscription_store = SupabaseSubscriptionStore(
                    get_supabase_client(),
                    ordering=self.settings.subscription_event_ordering,
                )
        return self._subscription_store

    @property
    def subscriptions(self) -> "SubscriptionService":
        """Get the subscription read service."""
        if self._subscription_service is None:
            from modules.subscriptions.service import SubscriptionService
            self._subscription_service = SubscriptionService(self.subscription_store)
        return self._subscription_service

    @property
    def reconciler(self) -> "SubscriptionReconciler":
        """Get the webhook reconciler."""
        if self._reconciler is None:
            from modules.subscriptions.reconciler import SubscriptionReconciler
            settings = self.settings
            self._reconciler = SubscriptionReconciler(
                store=self.subscription_store,
                webhook_secret=settings.stripe_webhook_secret,
                tolerance=settings.stripe_webhook_tolerance,
                ordering=settings.subscription_event_ordering,
            )
        return self._reconciler

    @property
    def tables(self) -> "AccessControlledTables":
        """Get the access-controlled data layer."""
        if self._tables is None:
            from modules.access.service import AccessControlledTables
            self._tables = AccessControlledTables(
                gateway=self.gateway,
                subscriptions=self.subscriptions,
            )
        return self._tables

    @property
    def profiles(self) -> "ProfileService":
        """Get the profile service instance."""
        if self._profile_service is None:
            from modules.profiles.service import ProfileService
            self._profile_service = ProfileService(self.tables)
        return self._profile_service

    @property
    def likes(self) -> "LikeService":
        """Get the like service instance."""
        if self._like_service is None:
            from modules.likes.service import LikeService
            self._like_service = LikeService(self.tables)
        return self._like_service

    @property
    def courses(self) -> "CourseService":
        """Get the course service instance."""
        if self._course_service is None:
            from modules.courses.service import CourseService
            self._course_service = CourseService(self.tables)
        return self._course_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances (and a fresh in-memory database).
        """
        self._gateway = None
        self._subscription_store = None
        self._subscription_service = None
        self._reconciler = None
        self._tables = None
        self._profile_service = None
        self._like_service = None
        self._course_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_profile_service() -> "ProfileService":
    """FastAPI dependency for profile service."""
    return get_container().profiles


def get_like_service() -> "LikeService":
    """FastAPI dependency for like service."""
    return get_container().likes


def get_course_service() -> "CourseService":
    """FastAPI dependency for course service."""
    return get_container().courses


def get_subscription_service() -> "SubscriptionService":
    """FastAPI dependency for subscription read service."""
    return get_container().subscriptions


def get_subscription_reconciler() -> "SubscriptionReconciler":
    """FastAPI dependency for the webhook reconciler."""
    return get_container().reconciler
