from elections.handlers.views import (
    AdminEventDetailView,
    AdminEventListView,
    AdminEventResultsView,
    EventDetailView,
    EventListView,
    ProfileView,
    RegisterView,
    VoteView,
)

__all__ = [
    "AdminEventDetailView",
    "AdminEventListView",
    "AdminEventResultsView",
    "EventDetailView",
    "EventListView",
    "ProfileView",
    "RegisterView",
    "VoteView",
]
