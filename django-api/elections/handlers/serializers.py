"""Serializers for request parsing and for transforming domain models to API responses.

Input serializers check format only (types, required keys). Business rules
live in elections.domain.validation and are enforced by the service.
"""

from rest_framework import serializers

from elections.domain import EventPatch


class EventCreateSerializer(serializers.Serializer):
    """Input for POST /api/admin/events"""

    title = serializers.CharField(allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(allow_blank=True, trim_whitespace=False)
    options = serializers.ListField(child=serializers.CharField(allow_blank=True), allow_empty=True)
    start_at = serializers.DateTimeField(required=False, allow_null=True)
    end_at = serializers.DateTimeField(required=False, allow_null=True)


class EventPatchSerializer(serializers.Serializer):
    """Input for PUT/PATCH /api/admin/events/{event_id}"""

    title = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    options = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False, allow_empty=True
    )
    start_at = serializers.DateTimeField(required=False)
    end_at = serializers.DateTimeField(required=False)

    def to_patch(self) -> EventPatch:
        data = self.validated_data
        options = data.get("options")
        return EventPatch(
            title=data.get("title"),
            description=data.get("description"),
            options=tuple(options) if options is not None else None,
            start_at=data.get("start_at"),
            end_at=data.get("end_at"),
        )


class IdentitySerializer(serializers.Serializer):
    """Input for POST /api/auth/register and PUT /api/auth/me"""

    name = serializers.CharField(allow_blank=True, trim_whitespace=False)
    email = serializers.CharField(allow_blank=True, trim_whitespace=False)
    password = serializers.CharField(allow_blank=True, trim_whitespace=False)


class VoteInputSerializer(serializers.Serializer):
    """Input for POST /api/events/{event_id}/vote"""

    option_id = serializers.CharField()


class OptionSerializer(serializers.Serializer):
    """Serializer for Option domain model."""

    id = serializers.CharField()
    name = serializers.CharField()
    position = serializers.IntegerField()


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField()
    options = OptionSerializer(many=True)
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class AdminEventSerializer(EventSerializer):
    """Event as seen by organizers, with its owner."""

    created_by = serializers.CharField()


class EventListingSerializer(serializers.Serializer):
    """Flattens EventListing into the event fields plus status."""

    event_serializer_class = EventSerializer

    def to_representation(self, instance):
        data = self.event_serializer_class(instance.event).data
        data["status"] = instance.status.value
        if instance.has_voted is not None:
            data["has_voted"] = instance.has_voted
        return data


class AdminEventListingSerializer(EventListingSerializer):
    event_serializer_class = AdminEventSerializer


class EventDetailSerializer(serializers.Serializer):
    """Public single-event view: options carry vote counts, never voters."""

    def to_representation(self, instance):
        data = EventSerializer(instance.event).data
        data["status"] = instance.status.value
        data["options"] = [
            {
                "id": str(tally.option.id),
                "name": tally.option.name,
                "position": tally.option.position,
                "vote_count": tally.count,
            }
            for tally in instance.tallies
        ]
        if instance.has_voted is not None:
            data["has_voted"] = instance.has_voted
        return data


class OptionTallySerializer(serializers.Serializer):
    option_id = serializers.CharField(source="option.id")
    option = serializers.CharField(source="option.name")
    count = serializers.IntegerField()
    voters = serializers.ListField(child=serializers.CharField())


class EventResultsSerializer(serializers.Serializer):
    """Organizer results: event summary, every option's tally and voters."""

    def to_representation(self, instance):
        event = instance.event
        leading = instance.leading()
        return {
            "event": {
                "id": str(event.id),
                "title": event.title,
                "description": event.description,
                "start_at": serializers.DateTimeField().to_representation(event.start_at),
                "end_at": (
                    serializers.DateTimeField().to_representation(event.end_at)
                    if event.end_at is not None
                    else None
                ),
                "status": instance.status.value,
            },
            "results": OptionTallySerializer(instance.tallies, many=True).data,
            "total_votes": instance.total_votes,
            "leading_option_id": str(leading.option.id) if leading is not None else None,
        }


class VoteSerializer(serializers.Serializer):
    """Serializer for Vote domain model."""

    id = serializers.CharField()
    event_id = serializers.CharField()
    option_id = serializers.CharField()
    participant_id = serializers.CharField()
    voted_at = serializers.DateTimeField()


class AccountSerializer(serializers.Serializer):
    """Serializer for Account domain model."""

    id = serializers.CharField()
    name = serializers.CharField()
    email = serializers.CharField()
    role = serializers.CharField(source="role.value")
