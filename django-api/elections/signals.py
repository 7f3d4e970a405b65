"""Django signals for cache invalidation.

Event records are cached by CachedEventStore; any write that reaches the
database through another path (admin, shell, fixtures) must drop them too.
invalidate_event_cache defers a second drop to transaction commit.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from elections.models import Event, Option
from elections.stores.cached_store import invalidate_event_cache


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_records(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    invalidate_event_cache(instance.pk)


@receiver([post_save, post_delete], sender=Option)
def invalidate_option_records(sender, instance, **kwargs):
    """Invalidate the parent event's caches when an option is saved or deleted."""
    invalidate_event_cache(instance.event_id)
