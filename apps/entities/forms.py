"""
apps.entities.forms
~~~~~~~~~~~~~~~~~~~
Entity forms for developer apps.

A form answers ``GET`` with what a client needs to render it (current
values, choices, a confirmation question) and processes a submission sent
with one of its :attr:`EntityForm.submit_methods`.  Input is validated with
the serializers in :mod:`apps.entities.serializers`; all backend work goes
through :mod:`apps.entities.services`.

=====================================  ============================  =========
Form                                   Route                         Owner from
=====================================  ============================  =========
DeveloperAppCreateForm                 ``…add_form``                 body
DeveloperAppEditForm                   ``…edit_form``                app
DeveloperAppDeleteForm                 ``…delete_form``              app
DeveloperAppCreateFormForDeveloper     ``…add_form_for_developer``   ``{user}``
DeveloperAppEditFormForDeveloper       ``…edit_form_for_developer``  ``{user}``
DeveloperAppDeleteFormForDeveloper     ``…delete_form_for_developer`` ``{user}``
DeveloperAppAnalyticsFormForDeveloper  ``…analytics_for_developer``  ``{user}``
=====================================  ============================  =========
"""
from __future__ import annotations

from django.conf import settings
from rest_framework import serializers, status
from rest_framework.response import Response

from . import services
from .context import RouteContext
from .entity_types import API_PRODUCT
from .handlers import serialize
from .serializers import (
    AnalyticsQuerySerializer,
    ApiProductSerializer,
    DeveloperAppAdminCreateSerializer,
    DeveloperAppCreateSerializer,
    DeveloperAppUpdateSerializer,
)


class EntityForm:
    submit_methods: tuple[str, ...] = ("POST",)

    def handle(self, context: RouteContext) -> Response:
        if context.request.method in self.submit_methods:
            return self.submit(context)
        return self.build(context)

    def build(self, context: RouteContext) -> Response:
        raise NotImplementedError

    def submit(self, context: RouteContext) -> Response:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class DeveloperAppCreateForm(EntityForm):
    """Administrative app creation; the owning developer is submitted."""

    serializer_class: type[serializers.Serializer] = DeveloperAppAdminCreateSerializer

    def available_products(self, context: RouteContext) -> list:
        """Products a user may attach: all for admins, public ones otherwise."""
        products = services.list_entities(API_PRODUCT)
        if context.user.has_perm(context.entity_type.admin_permission):
            return products
        return [product for product in products if product.access_level() == "public"]

    def developer_for(self, context: RouteContext, data: dict) -> str:
        return data["developer"]

    def build(self, context: RouteContext) -> Response:
        return Response({
            "fields": list(self.serializer_class().fields),
            "api_products": ApiProductSerializer(self.available_products(context), many=True).data,
        })

    def submit(self, context: RouteContext) -> Response:
        serializer = self.serializer_class(data=context.request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        offered = {product.name for product in self.available_products(context)}
        unknown = sorted(set(data["api_products"]) - offered)
        if unknown:
            raise serializers.ValidationError({"api_products": [f"Unknown API product(s): {', '.join(unknown)}."]})

        app = services.create_developer_app(
            self.developer_for(context, data),
            name=data["name"],
            display_name=data.get("display_name", ""),
            description=data.get("description", ""),
            callback_url=data.get("callback_url", ""),
            api_products=data["api_products"],
        )
        return Response(serialize(context, app), status=status.HTTP_201_CREATED)


class DeveloperAppCreateFormForDeveloper(DeveloperAppCreateForm):
    """App creation for the route's ``{user}``."""

    serializer_class = DeveloperAppCreateSerializer

    def developer_for(self, context: RouteContext, data: dict) -> str:
        return context.developer_id


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------

class DeveloperAppEditForm(EntityForm):
    submit_methods = ("POST", "PUT", "PATCH")

    def developer_for(self, context: RouteContext) -> str:
        return context.entity.owner_id()

    def build(self, context: RouteContext) -> Response:
        return Response(serialize(context, context.entity))

    def submit(self, context: RouteContext) -> Response:
        serializer = DeveloperAppUpdateSerializer(data=context.request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        app = services.update_developer_app(
            self.developer_for(context), context.entity, dict(serializer.validated_data)
        )
        return Response(serialize(context, app))


class DeveloperAppEditFormForDeveloper(DeveloperAppEditForm):
    def developer_for(self, context: RouteContext) -> str:
        return context.developer_id


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

class DeveloperAppDeleteForm(EntityForm):
    submit_methods = ("POST", "DELETE")

    def developer_for(self, context: RouteContext) -> str:
        return context.entity.owner_id()

    def build(self, context: RouteContext) -> Response:
        app = context.entity
        return Response({
            "app": serialize(context, app),
            "question": f"Are you sure you want to delete the {context.entity_type.label.lower()} {app.label()}?",
        })

    def submit(self, context: RouteContext) -> Response:
        services.delete_developer_app(self.developer_for(context), context.entity.name)
        return Response(status=status.HTTP_204_NO_CONTENT)


class DeveloperAppDeleteFormForDeveloper(DeveloperAppDeleteForm):
    def developer_for(self, context: RouteContext) -> str:
        return context.developer_id


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

class DeveloperAppAnalyticsFormForDeveloper(EntityForm):
    """Traffic of one app over a date range; read only."""

    submit_methods = ()

    def build(self, context: RouteContext) -> Response:
        query = AnalyticsQuerySerializer(data=context.request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        environment = params.get("environment") or settings.EDGE_ANALYTICS_ENVIRONMENT

        app = context.entity
        metrics = services.get_app_analytics(
            app,
            environment=environment,
            since=params["since"],
            until=params["until"],
            time_unit=params["time_unit"],
        )
        return Response({
            "app": app.name,
            "environment": environment,
            "since": params["since"].isoformat(),
            "until": params["until"].isoformat(),
            "time_unit": params["time_unit"],
            "metrics": metrics,
        })
