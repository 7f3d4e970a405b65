from django.apps import AppConfig


class ElectionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "elections"

    def ready(self) -> None:
        from elections import signals  # noqa: F401
        from elections.config import get_settings
        from elections.observability import configure_structlog

        settings = get_settings()
        configure_structlog(environment=settings.environment, log_level=settings.log_level)
