"""
apps.entities.urls
~~~~~~~~~~~~~~~~~~
URL patterns generated from the route table of every registered entity
type.  Mounted at the site root by the root URLconf.
"""
from __future__ import annotations

import re

from django.urls import URLPattern, re_path

from .entity_types import EntityType, entity_types
from .routing import RouteEntry
from .views import EntityRouteView

#: Constraint for placeholders the route does not constrain.
DEFAULT_PARAMETER_PATTERN = r"[^/]+"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def route_regex(route: RouteEntry) -> str:
    """
    Translate a route path into an anchored regex for :func:`re_path`.

    ``/user/{user}/apps/{app}`` with ``{"user": r"\\d+"}`` becomes
    ``^user/(?P<user>\\d+)/apps/(?P<app>[^/]+)$``.
    """
    pattern, position = [], 0
    path = route.path.lstrip("/")
    for match in _PLACEHOLDER.finditer(path):
        name = match.group(1)
        constraint = route.parameters.get(name, DEFAULT_PARAMETER_PATTERN)
        pattern.append(re.escape(path[position:match.start()]))
        pattern.append(f"(?P<{name}>{constraint})")
        position = match.end()
    pattern.append(re.escape(path[position:]))
    return "^" + "".join(pattern) + "$"


def build_urlpatterns(types: list[EntityType]) -> list[URLPattern]:
    patterns = []
    for entity_type in types:
        for name, route in entity_type.generate_routes().items():
            patterns.append(re_path(
                route_regex(route),
                EntityRouteView.as_view(route_name=name, route=route),
                name=name,
            ))
    return patterns


urlpatterns = build_urlpatterns(entity_types())
