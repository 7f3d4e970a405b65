"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView, set_rollback

from elections.domain import Caller, ElectionStatus
from elections.domain.errors import DomainError, ErrorCode, ValidationFailedError
from elections.handlers import serializers
from elections.observability import bind_request_context
from elections.services import build_election_service, build_identity_service
from elections.services.identity_service import role_of

ERROR_STATUS = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_OPTION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.DUPLICATE_VOTE: status.HTTP_409_CONFLICT,
    ErrorCode.VOTING_IN_PROGRESS: status.HTTP_409_CONFLICT,
    ErrorCode.ELECTION_NOT_ACTIVE: status.HTTP_409_CONFLICT,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def caller_from_request(request: Request) -> Caller | None:
    """Translate the identity asserted by Django auth into a Caller."""
    user = request.user
    if user is None or not user.is_authenticated:
        return None
    return Caller(id=str(user.pk), role=role_of(user))


def error_response(error: DomainError) -> Response:
    body = {"code": error.code.value, "message": error.message}
    if error.details:
        body["details"] = list(error.details)
    return Response({"error": body}, status=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST))


def format_errors(errors: dict) -> list[str]:
    """Flatten DRF serializer errors into 'field: message' strings."""
    messages = []
    for field, field_errors in errors.items():
        if isinstance(field_errors, dict):
            field_errors = [msg for nested in field_errors.values() for msg in nested]
        for message in field_errors:
            messages.append(f"{field}: {message}")
    return messages


class ElectionAPIView(APIView):
    """Base view: resolves the caller and maps domain errors to responses."""

    service_factory = staticmethod(build_election_service)

    def initial(self, request: Request, *args, **kwargs) -> None:
        super().initial(request, *args, **kwargs)
        self.caller = caller_from_request(request)
        self.service = self.service_factory()
        bind_request_context(
            path=request.path,
            method=request.method,
            caller_id=self.caller.id if self.caller else None,
        )

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            set_rollback()
            return error_response(exc)
        return super().handle_exception(exc)

    def parse(self, serializer_class, data):
        serializer = serializer_class(data=data)
        if not serializer.is_valid():
            raise ValidationFailedError(format_errors(serializer.errors))
        return serializer


class EventListView(ElectionAPIView):
    """Handler for GET /api/events"""

    def get(self, request: Request) -> Response:
        raw_status = request.query_params.get("status")
        try:
            status_filter = ElectionStatus(raw_status) if raw_status else None
        except ValueError:
            raise ValidationFailedError([f"status: '{raw_status}' is not a valid status"]) from None

        listings = self.service.list_events(status=status_filter, caller=self.caller)
        return Response(serializers.EventListingSerializer(listings, many=True).data)


class EventDetailView(ElectionAPIView):
    """Handler for GET /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        detail = self.service.get_event(event_id, caller=self.caller)
        return Response(serializers.EventDetailSerializer(detail).data)


class VoteView(ElectionAPIView):
    """Handler for POST /api/events/{event_id}/vote"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = self.parse(serializers.VoteInputSerializer, request.data)
        vote = self.service.cast_vote(
            event_id, serializer.validated_data["option_id"], caller=self.caller
        )
        return Response(serializers.VoteSerializer(vote).data, status=status.HTTP_201_CREATED)


class AdminEventListView(ElectionAPIView):
    """Handler for GET/POST /api/admin/events"""

    def get(self, request: Request) -> Response:
        listings = self.service.list_admin_events(self.caller)
        return Response(serializers.AdminEventListingSerializer(listings, many=True).data)

    def post(self, request: Request) -> Response:
        data = self.parse(serializers.EventCreateSerializer, request.data).validated_data
        event = self.service.create_event(
            data["title"],
            data["description"],
            data["options"],
            data.get("start_at"),
            data.get("end_at"),
            caller=self.caller,
        )
        return Response(serializers.AdminEventSerializer(event).data, status=status.HTTP_201_CREATED)


class AdminEventDetailView(ElectionAPIView):
    """Handler for PUT/PATCH/DELETE /api/admin/events/{event_id}"""

    def patch(self, request: Request, event_id: str) -> Response:
        patch = self.parse(serializers.EventPatchSerializer, request.data).to_patch()
        event = self.service.update_event(event_id, patch, caller=self.caller)
        return Response(serializers.AdminEventSerializer(event).data)

    put = patch

    def delete(self, request: Request, event_id: str) -> Response:
        self.service.delete_event(event_id, caller=self.caller)
        return Response({"message": "Event deleted successfully"})


class AdminEventResultsView(ElectionAPIView):
    """Handler for GET /api/admin/events/{event_id}/results"""

    def get(self, request: Request, event_id: str) -> Response:
        results = self.service.get_results(event_id, caller=self.caller)
        return Response(serializers.EventResultsSerializer(results).data)


class RegisterView(ElectionAPIView):
    """Handler for POST /api/auth/register"""

    service_factory = staticmethod(build_identity_service)

    def post(self, request: Request) -> Response:
        data = self.parse(serializers.IdentitySerializer, request.data).validated_data
        account = self.service.register(data["name"], data["email"], data["password"])
        return Response(serializers.AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class ProfileView(ElectionAPIView):
    """Handler for PUT /api/auth/me"""

    service_factory = staticmethod(build_identity_service)

    def put(self, request: Request) -> Response:
        data = self.parse(serializers.IdentitySerializer, request.data).validated_data
        account = self.service.update_profile(
            data["name"], data["email"], data["password"], caller=self.caller
        )
        return Response(serializers.AccountSerializer(account).data)
