"""
apps.entities.apps
"""
from django.apps import AppConfig


class EntitiesConfig(AppConfig):
    name = "apps.entities"
    label = "entities"
    verbose_name = "Edge Entities"

    def ready(self) -> None:
        from . import checks

        # Runs under every entry point (WSGI included), not only management
        # commands; a wrong binding must stop the process here.
        checks.verify_entity_bindings()
