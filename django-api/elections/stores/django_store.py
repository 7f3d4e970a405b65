"""Django ORM implementation of the EventStore and VoteStore.

Database errors never leave this module raw: IntegrityError (unique or
restricted foreign key) becomes ConflictError, anything else from the
driver becomes StoreError.
"""

import functools
from collections import defaultdict

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count

from elections import models
from elections.domain import (
    Event,
    EventDraft,
    EventId,
    EventPatch,
    Option,
    OptionId,
    Vote,
    VoteId,
)
from elections.stores.interfaces import (
    ConflictError,
    EventStore,
    StoreError,
    UnknownOptionError,
    VoteStore,
)


def translate_store_errors(method):
    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except IntegrityError as exc:
            raise ConflictError(str(exc)) from exc
        except DatabaseError as exc:
            raise StoreError(str(exc)) from exc

    return wrapper


def to_domain_option(row: models.Option) -> Option:
    return Option(id=OptionId(row.id), name=row.name, position=row.position)


def to_domain_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        description=row.description,
        options=tuple(to_domain_option(option) for option in row.options.all()),
        start_at=row.start_at,
        end_at=row.end_at,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def to_domain_vote(row: models.Vote) -> Vote:
    return Vote(
        id=VoteId(row.id),
        event_id=EventId(row.event_id),
        participant_id=row.participant_id,
        option_id=OptionId(row.option_id),
        voted_at=row.voted_at,
    )


class DjangoEventStore(EventStore):
    """Relational event store using Django ORM."""

    def _queryset(self):
        return models.Event.objects.prefetch_related("options")

    @translate_store_errors
    def list_events(self) -> list[Event]:
        return [to_domain_event(row) for row in self._queryset().order_by("-created_at")]

    @translate_store_errors
    def get_event(self, event_id: EventId) -> Event | None:
        row = self._queryset().filter(pk=event_id.value).first()
        return to_domain_event(row) if row is not None else None

    @translate_store_errors
    def create_event(self, draft: EventDraft) -> Event:
        with transaction.atomic():
            row = models.Event.objects.create(
                title=draft.title,
                description=draft.description,
                start_at=draft.start_at,
                end_at=draft.end_at,
                created_by=draft.created_by,
            )
            models.Option.objects.bulk_create(
                models.Option(event=row, name=name, position=position)
                for position, name in enumerate(draft.option_names)
            )
        return self.get_event(EventId(row.id))

    @translate_store_errors
    def update_event(self, event_id: EventId, patch: EventPatch) -> Event | None:
        with transaction.atomic():
            row = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
            if row is None:
                return None

            for field in ("title", "description", "start_at", "end_at"):
                value = getattr(patch, field)
                if value is not None:
                    setattr(row, field, value)
            row.save()

            if patch.options is not None:
                # Lock the rows first so a vote being cast against one of them commits
                # before the delete collects its restricted references.
                list(models.Option.objects.select_for_update().filter(event=row))
                # Raises RestrictedError (an IntegrityError) if any vote points at an option.
                models.Option.objects.filter(event=row).delete()
                models.Option.objects.bulk_create(
                    models.Option(event=row, name=name, position=position)
                    for position, name in enumerate(patch.options)
                )
        return self.get_event(event_id)

    @translate_store_errors
    def delete_event(self, event_id: EventId) -> None:
        with transaction.atomic():
            models.Vote.objects.filter(event_id=event_id.value).delete()
            models.Event.objects.filter(pk=event_id.value).delete()


class DjangoVoteStore(VoteStore):
    """Relational vote store. The unique constraint on (event, participant_id)
    is the source of truth for one vote per participant."""

    @translate_store_errors
    def add_vote(self, event_id: EventId, participant_id: str, option_id: OptionId) -> Vote:
        # Savepoint: a constraint violation must not break the request transaction.
        with transaction.atomic():
            # The option row stays locked until commit, so it cannot be replaced
            # between this check and the insert.
            option = (
                models.Option.objects.select_for_update()
                .filter(pk=option_id.value, event_id=event_id.value)
                .first()
            )
            if option is None:
                raise UnknownOptionError("Option is not part of the event")
            row = models.Vote.objects.create(
                event_id=event_id.value,
                participant_id=participant_id,
                option_id=option_id.value,
            )
        return to_domain_vote(row)

    @translate_store_errors
    def has_voted(self, event_id: EventId, participant_id: str) -> bool:
        return models.Vote.objects.filter(
            event_id=event_id.value, participant_id=participant_id
        ).exists()

    @translate_store_errors
    def votes_exist(self, event_id: EventId) -> bool:
        return models.Vote.objects.filter(event_id=event_id.value).exists()

    @translate_store_errors
    def voted_event_ids(self, participant_id: str) -> set[EventId]:
        rows = models.Vote.objects.filter(participant_id=participant_id).values_list(
            "event_id", flat=True
        )
        return {EventId(value) for value in rows}

    @translate_store_errors
    def count_by_option(self, event_id: EventId) -> dict[OptionId, int]:
        rows = (
            models.Vote.objects.filter(event_id=event_id.value)
            .order_by()
            .values("option_id")
            .annotate(count=Count("id"))
        )
        return {OptionId(row["option_id"]): row["count"] for row in rows}

    @translate_store_errors
    def voters_by_option(self, event_id: EventId) -> dict[OptionId, list[str]]:
        rows = (
            models.Vote.objects.filter(event_id=event_id.value)
            .order_by("voted_at", "id")
            .values_list("option_id", "participant_id")
        )
        voters: dict[OptionId, list[str]] = defaultdict(list)
        for option_id, participant_id in rows:
            voters[OptionId(option_id)].append(participant_id)
        return dict(voters)

    @translate_store_errors
    def delete_votes_for_event(self, event_id: EventId) -> int:
        deleted, _ = models.Vote.objects.filter(event_id=event_id.value).delete()
        return deleted
