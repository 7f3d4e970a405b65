from elections.config import get_settings
from elections.services.election_service import ElectionService, derive_status
from elections.services.identity_service import IdentityService


def build_election_service() -> ElectionService:
    """Wire the service to the Django stores using application settings."""
    from elections.stores.cached_store import CachedEventStore
    from elections.stores.django_store import DjangoEventStore, DjangoVoteStore

    settings = get_settings()
    events = DjangoEventStore()
    return ElectionService(
        events=CachedEventStore(events, ttl_seconds=settings.event_cache_ttl_seconds),
        votes=DjangoVoteStore(),
        vote_events=events,
        rules=settings.event_rules(),
        enforce_voting_window=settings.enforce_voting_window,
    )


def build_identity_service() -> IdentityService:
    return IdentityService(rules=get_settings().identity_rules())


__all__ = [
    "ElectionService",
    "IdentityService",
    "build_election_service",
    "build_identity_service",
    "derive_status",
]
