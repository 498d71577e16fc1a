"""
apps.entities.context
~~~~~~~~~~~~~~~~~~~~~
Per-request state shared by access checks, handlers, forms and title
callbacks of a generated route.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404

from common.exceptions import NotFoundError

from . import services
from .entity_types import EntityType
from .routing import LOAD_UNCHANGED_OPTION, OWNER_PARAMETER, RouteEntry

#: URL parameter carrying an app name on developer-scoped routes.
APP_PARAMETER = "app"


@dataclass
class RouteContext:
    """
    Everything known about the route being served.

    ``route_user``, ``developer_id`` and ``entity`` are resolved lazily so
    that an access check which does not need them never triggers a database
    query or a backend call.
    """

    request: Any
    route_name: str
    route: RouteEntry
    entity_type: EntityType
    params: dict[str, str] = field(default_factory=dict)

    _route_user: Any = field(default=None, init=False, repr=False)
    _entity: Any = field(default=None, init=False, repr=False)

    @property
    def user(self):
        return self.request.user

    @property
    def has_owner(self) -> bool:
        return OWNER_PARAMETER in self.params

    @property
    def route_user(self):
        """The user named by ``{user}``; 404 if unknown, ``None`` if absent."""
        if not self.has_owner:
            return None
        if self._route_user is None:
            self._route_user = get_object_or_404(get_user_model(), pk=self.params[OWNER_PARAMETER])
        return self._route_user

    @property
    def developer_id(self) -> str | None:
        """Edge developer id of the route user (their e-mail address)."""
        user = self.route_user
        if user is None:
            return None
        if not user.email:
            raise NotFoundError(f"User {user.pk} has no developer account.")
        return user.email

    @property
    def is_own_route(self) -> bool:
        """Whether the requesting user is the route's owner."""
        return self.has_owner and self.user.is_authenticated and str(self.user.pk) == self.params[OWNER_PARAMETER]

    @property
    def entity_id(self) -> str | None:
        return self.params.get(APP_PARAMETER) or self.params.get(self.entity_type.id)

    @property
    def load_unchanged(self) -> bool:
        return bool(self.route.options.get(LOAD_UNCHANGED_OPTION))

    @property
    def entity(self):
        """
        The entity addressed by the route, or ``None`` on routes without one.

        Loaded at most once per request, except on routes marked
        ``load_unchanged_entity`` where every access reads the backend's
        current state.
        """
        if self.entity_id is None:
            return None
        if self._entity is None or self.load_unchanged:
            self._entity = self._load_entity()
        return self._entity

    def _load_entity(self):
        if self.has_owner:
            return services.load_developer_app(self.developer_id, self.entity_id)
        return services.load_entity(self.entity_type, self.entity_id)
