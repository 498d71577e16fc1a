"""
apps.entities.views
~~~~~~~~~~~~~~~~~~~
The single DRF view serving every generated entity route.

:func:`apps.entities.urls.build_urlpatterns` creates one instance per route
via ``EntityRouteView.as_view(route_name=..., route=...)``.  Per request the
view:

1. builds a :class:`~apps.entities.context.RouteContext`,
2. enforces the route's access requirements
   (:class:`~apps.entities.access.RouteAccessPermission`),
3. dispatches to the route's handler, and
4. adds the route title to dict responses.
"""
from __future__ import annotations

from typing import Callable

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .access import RouteAccessPermission
from .context import RouteContext
from .routing import RouteEntry
from .utils import resolve_reference


def resolve_handler(context: RouteContext) -> Callable[[RouteContext], Response]:
    """Return the callable serving *context*'s route."""
    route = context.route
    kind = route.handler_kind
    if kind == "controller":
        return resolve_reference(route.controller)
    if kind == "entity_list":
        entity_type = services.resolve_entity_type(route.entity_list)
        return resolve_reference(entity_type.list_builder)
    if kind == "entity_form":
        entity_type_id, _, operation = route.entity_form.partition(".")
        entity_type = services.resolve_entity_type(entity_type_id)
        return resolve_reference(entity_type.form_classes[operation])().handle
    return resolve_reference(route.form)().handle


@extend_schema(tags=["Edge entities"], responses=OpenApiTypes.OBJECT)
class EntityRouteView(APIView):
    """Serves one generated route; configured through ``as_view`` kwargs."""

    route_name: str = ""
    route: RouteEntry | None = None
    permission_classes = [RouteAccessPermission]

    _context: RouteContext | None = None

    def get_route_context(self) -> RouteContext:
        if self._context is None:
            self._context = RouteContext(
                request=self.request,
                route_name=self.route_name,
                route=self.route,
                entity_type=services.resolve_entity_type(self.route.entity_type_id),
                params=dict(self.kwargs),
            )
        return self._context

    def handle_route(self, request: Request, **kwargs) -> Response:
        context = self.get_route_context()
        response = resolve_handler(context)(context)
        if isinstance(response.data, dict) and self.route.title_callback:
            title = resolve_reference(self.route.title_callback)(context)
            response.data = {"title": title, **response.data}
        return response

    get = post = put = patch = delete = handle_route
