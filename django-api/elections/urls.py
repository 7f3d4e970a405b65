from django.urls import path

from elections.handlers import (
    AdminEventDetailView,
    AdminEventListView,
    AdminEventResultsView,
    EventDetailView,
    EventListView,
    ProfileView,
    RegisterView,
    VoteView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("events/<str:event_id>/vote", VoteView.as_view(), name="event-vote"),
    path("admin/events", AdminEventListView.as_view(), name="admin-event-list"),
    path(
        "admin/events/<str:event_id>",
        AdminEventDetailView.as_view(),
        name="admin-event-detail",
    ),
    path(
        "admin/events/<str:event_id>/results",
        AdminEventResultsView.as_view(),
        name="admin-event-results",
    ),
    path("auth/register", RegisterView.as_view(), name="auth-register"),
    path("auth/me", ProfileView.as_view(), name="auth-profile"),
]
