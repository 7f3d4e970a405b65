from django.contrib import admin

from elections.models import Event, Option, Vote


class OptionInline(admin.TabularInline):
    model = Option
    extra = 2
    ordering = ["position"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "created_by", "start_at", "end_at", "created_at"]
    search_fields = ["title", "created_by"]
    inlines = [OptionInline]


@admin.register(Vote)
class VoteAdmin(admin.ModelAdmin):
    list_display = ["event", "participant_id", "option", "voted_at"]
    list_filter = ["event"]
    readonly_fields = ["event", "participant_id", "option", "voted_at"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
