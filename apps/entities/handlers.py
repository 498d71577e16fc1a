"""
apps.entities.handlers
~~~~~~~~~~~~~~~~~~~~~~
Controllers and list builders referenced by generated routes.

Each handler takes the :class:`~apps.entities.context.RouteContext` and
returns a DRF :class:`~rest_framework.response.Response`.  All backend work
is delegated to :mod:`apps.entities.services`.
"""
from __future__ import annotations

from rest_framework.response import Response

from . import services
from .context import RouteContext
from .serializers import ApiProductSerializer, DeveloperAppSerializer

ENTITY_SERIALIZERS = {
    "api_product": ApiProductSerializer,
    "developer_app": DeveloperAppSerializer,
}


def serialize(context: RouteContext, instance, *, many: bool = False):
    serializer_class = ENTITY_SERIALIZERS[context.entity_type.id]
    return serializer_class(instance, many=many).data


class EntityListBuilder:
    """Every entity of the route's type in the organization."""

    def load(self, context: RouteContext) -> list:
        return services.list_entities(context.entity_type)

    def render(self, context: RouteContext) -> Response:
        entities = self.load(context)
        return Response({
            "count": len(entities),
            "results": serialize(context, entities, many=True),
        })


class DeveloperAppListBuilderForDeveloper(EntityListBuilder):
    """The apps owned by the route's ``{user}``."""

    def load(self, context: RouteContext) -> list:
        return services.list_developer_apps(context.developer_id)

    def render(self, context: RouteContext) -> Response:
        response = super().render(context)
        response.data["developer"] = context.developer_id
        return response


class EntityViewController:
    def view(self, context: RouteContext) -> Response:
        return Response(serialize(context, context.entity))


class DeveloperAppViewForDeveloper(EntityViewController):
    """One app of the route's ``{user}``, with its credentials' products."""

    def view(self, context: RouteContext) -> Response:
        response = super().view(context)
        response.data["developer"] = context.developer_id
        response.data["approved"] = context.entity.is_approved()
        return response
