"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.utils import timezone


class Event(models.Model):
    """Persistence model for election events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField()
    start_at = models.DateTimeField(default=timezone.now)
    end_at = models.DateTimeField(blank=True, null=True)
    created_by = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="event_created_at_idx"),
        ]

    def __str__(self) -> str:
        return self.title


class Option(models.Model):
    """Persistence model for the options of an event."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="options")
    name = models.CharField(max_length=255)
    position = models.PositiveIntegerField()

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "position"], name="unique_option_position_per_event"
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Vote(models.Model):
    """Persistence model for votes. One row per (event, participant)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="votes")
    participant_id = models.CharField(max_length=255)
    option = models.ForeignKey(Option, on_delete=models.RESTRICT, related_name="votes")
    voted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["voted_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "participant_id"], name="unique_vote_per_participant"
            ),
        ]
        indexes = [
            models.Index(fields=["participant_id"], name="vote_participant_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.participant_id} - {self.option_id}"
