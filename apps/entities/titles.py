"""
apps.entities.titles
~~~~~~~~~~~~~~~~~~~~
Title callbacks referenced by generated routes.
"""
from __future__ import annotations

from .context import RouteContext


class EntityTitleProvider:
    def title(self, context: RouteContext) -> str:
        entity = context.entity
        return entity.label() if entity is not None else context.entity_type.label

    def add_title(self, context: RouteContext) -> str:
        return f"Add {context.entity_type.label.lower()}"

    def edit_title(self, context: RouteContext) -> str:
        return f"Edit {context.entity_type.label.lower()} {self.title(context)}"

    def delete_title(self, context: RouteContext) -> str:
        return f"Delete {context.entity_type.label.lower()} {self.title(context)}"

    def collection_title(self, context: RouteContext) -> str:
        return context.entity_type.label_plural


class AppTitleProvider(EntityTitleProvider):
    """Titles for developer-scoped app routes."""

    def add_title(self, context: RouteContext) -> str:
        return f"Create {context.entity_type.label.lower()}"

    def edit_title(self, context: RouteContext) -> str:
        return f"Edit {self.title(context)}"

    def delete_title(self, context: RouteContext) -> str:
        return f"Delete {self.title(context)}"

    def analytics_title(self, context: RouteContext) -> str:
        return f"Analytics of {self.title(context)}"


def my_developer_apps_title(context: RouteContext) -> str:
    """``"My apps"`` on one's own listing, ``"Apps of <name>"`` otherwise."""
    plural = context.entity_type.label_plural
    if context.is_own_route:
        return f"My {plural.lower()}"
    user = context.route_user
    name = user.get_full_name() or user.get_username()
    return f"{plural} of {name}"
