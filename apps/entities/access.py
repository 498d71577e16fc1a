"""
apps.entities.access
~~~~~~~~~~~~~~~~~~~~
Access checks for generated routes.

A route's ``access`` mapping lists requirement kinds and their values; the
route is accessible only if **every** requirement passes:

========================  =================================================
Kind                      Value / rule
========================  =================================================
``permission``            Permission expression, see :func:`check_permission`.
``entity_create_access``  Entity type id; admin or ``create_<type>``.
``entity_access``         ``"<type>.<operation>"``; admin or
                          ``<operation>_any_<type>``.
``developer_app_access``  Operation; admin, ``<op>_any_developer_app``, or
                          the route's ``{user}`` holding ``<op>_own_developer_app``.
``custom_access``         Dotted reference to a check taking the context.
========================  =================================================
"""
from __future__ import annotations

from typing import Callable

import structlog
from django.core.exceptions import ImproperlyConfigured
from rest_framework.permissions import BasePermission

from .context import RouteContext
from .entity_types import get_entity_type
from .utils import resolve_reference

logger = structlog.get_logger(__name__)


def check_permission(user, expression: str) -> bool:
    """
    Evaluate a permission *expression* for *user*.

    ``+`` separates alternatives and ``,`` separates permissions that must
    all be held, with ``,`` binding tighter::

        "entities.a+entities.b"        a OR b
        "entities.a,entities.b"        a AND b
        "entities.a,entities.b+x.c"    (a AND b) OR c
    """
    return any(
        all(user.has_perm(permission.strip()) for permission in alternative.split(","))
        for alternative in expression.split("+")
    )


def _is_admin(context: RouteContext, entity_type_id: str | None = None) -> bool:
    entity_type = get_entity_type(entity_type_id) if entity_type_id else context.entity_type
    return context.user.has_perm(entity_type.admin_permission)


def permission_access(context: RouteContext, expression: str) -> bool:
    return check_permission(context.user, expression)


def entity_create_access(context: RouteContext, entity_type_id: str) -> bool:
    """Creating for another user's account is reserved to administrators."""
    if _is_admin(context, entity_type_id):
        return True
    if context.has_owner and not context.is_own_route:
        return False
    entity_type = get_entity_type(entity_type_id)
    return context.user.has_perm(entity_type.permission(f"create_{entity_type_id}"))


def entity_access(context: RouteContext, value: str) -> bool:
    entity_type_id, _, operation = value.partition(".")
    if _is_admin(context, entity_type_id):
        return True
    entity_type = get_entity_type(entity_type_id)
    return context.user.has_perm(entity_type.permission(f"{operation}_any_{entity_type_id}"))


def developer_app_access(context: RouteContext, operation: str) -> bool:
    entity_type = context.entity_type
    if _is_admin(context):
        return True
    if context.user.has_perm(entity_type.permission(f"{operation}_any_{entity_type.id}")):
        return True
    return context.is_own_route and context.user.has_perm(
        entity_type.permission(f"{operation}_own_{entity_type.id}")
    )


def custom_access(context: RouteContext, reference: str) -> bool:
    return bool(resolve_reference(reference)(context))


ACCESS_CHECKS: dict[str, Callable[[RouteContext, str], bool]] = {
    "permission": permission_access,
    "entity_create_access": entity_create_access,
    "entity_access": entity_access,
    "developer_app_access": developer_app_access,
    "custom_access": custom_access,
}


def check_route_access(context: RouteContext) -> bool:
    """Return ``True`` iff every access requirement of the route passes."""
    for kind, value in context.route.access.items():
        check = ACCESS_CHECKS.get(kind)
        if check is None:
            raise ImproperlyConfigured(f"Route {context.route_name!r} uses unknown access check {kind!r}.")
        if not check(context, value):
            logger.info(
                "route_access_denied",
                route=context.route_name,
                requirement=kind,
                value=value,
                user_id=context.user.pk,
            )
            return False
    return True


class MyAppsAccessCheck:
    """Access to a developer's app listing."""

    def access(self, context: RouteContext) -> bool:
        # Listing someone's apps is allowed exactly when viewing them is.
        return developer_app_access(context, "view")


class RouteAccessPermission(BasePermission):
    """DRF permission enforcing the access requirements of the view's route."""

    message = "You do not have access to this page."

    def has_permission(self, request, view) -> bool:
        return check_route_access(view.get_route_context())
