"""
apps.entities.services.entity_service
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
All business logic for Edge entities.

Handlers and forms must call only these functions.  Every backend call goes
through a bound controller from
:mod:`apps.entities.services.controller_registry`, so whatever comes back is
an instance of the entity type's local class.

Responsibilities
----------------
- Resolving entity types by id.
- Listing and loading API products and developer apps.
- Creating, updating and deleting a developer's apps.
- Querying app analytics.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog

from common.exceptions import ConflictError, NotFoundError, RemoteAPIError

from ..entities import DeveloperApp
from ..entity_types import EntityType, get_entity_type
from . import controller_registry

logger = structlog.get_logger(__name__)

#: Metrics requested by the app analytics page.
ANALYTICS_METRICS = ("sum(message_count)", "avg(total_response_time)", "sum(is_error)")


# ---------------------------------------------------------------------------
# Entity types
# ---------------------------------------------------------------------------

def resolve_entity_type(entity_type_id: str) -> EntityType:
    """
    Return the registered :class:`EntityType`.

    Raises:
        NotFoundError: If no entity type has that id.
    """
    try:
        return get_entity_type(entity_type_id)
    except KeyError:
        raise NotFoundError(f"Entity type '{entity_type_id}' does not exist.") from None


# ---------------------------------------------------------------------------
# Organization-wide entities
# ---------------------------------------------------------------------------

def list_entities(entity_type: EntityType) -> list[Any]:
    """Return every entity of *entity_type* in the organization."""
    entities = controller_registry.get_entity_controller(entity_type.id).get_entities()
    logger.debug("entities_listed", entity_type=entity_type.id, count=len(entities))
    return entities


def load_entity(entity_type: EntityType, entity_id: str) -> Any:
    """
    Load one entity by id.

    Raises:
        RemoteEntityNotFoundError: If the backend does not know *entity_id*.
    """
    return controller_registry.get_entity_controller(entity_type.id).load(entity_id)


# ---------------------------------------------------------------------------
# Developer apps
# ---------------------------------------------------------------------------

def list_developer_apps(developer_id: str) -> list[DeveloperApp]:
    """Return the apps owned by *developer_id*, sorted by label."""
    apps = controller_registry.get_developer_app_controller(developer_id).get_entities()
    return sorted(apps, key=lambda app: app.label().lower())


def load_developer_app(developer_id: str, name: str) -> DeveloperApp:
    """Load the app called *name* owned by *developer_id*."""
    return controller_registry.get_developer_app_controller(developer_id).load(name)


def create_developer_app(
    developer_id: str,
    *,
    name: str,
    display_name: str = "",
    description: str = "",
    callback_url: str = "",
    api_products: list[str] | None = None,
) -> DeveloperApp:
    """
    Create an app for *developer_id*.

    Raises:
        ConflictError: If the developer already has an app called *name*.
    """
    app = DeveloperApp(name=name, callback_url=callback_url, api_products=list(api_products or []))
    if display_name:
        app.display_name = display_name
    if description:
        app.description = description

    controller = controller_registry.get_developer_app_controller(developer_id)
    try:
        created = controller.create(app)
    except RemoteAPIError as exc:
        if exc.remote_status == 409:
            raise ConflictError(f"An app called '{name}' already exists.") from exc
        raise

    logger.info(
        "developer_app_created",
        developer_id=developer_id,
        app=created.name,
        api_products=app.api_products,
    )
    return created


def update_developer_app(developer_id: str, app: DeveloperApp, changes: dict) -> DeveloperApp:
    """
    Apply *changes* (``display_name``, ``description``, ``callback_url``) to
    *app* and save it.  Unknown keys are ignored.
    """
    updatable_fields = {"display_name", "description", "callback_url"}
    for field_name, value in changes.items():
        if field_name in updatable_fields:
            setattr(app, field_name, value)

    updated = controller_registry.get_developer_app_controller(developer_id).update(app)
    logger.info("developer_app_updated", developer_id=developer_id, app=updated.name)
    return updated


def delete_developer_app(developer_id: str, name: str) -> DeveloperApp | None:
    deleted = controller_registry.get_developer_app_controller(developer_id).delete(name)
    logger.info("developer_app_deleted", developer_id=developer_id, app=name)
    return deleted


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

def get_app_analytics(
    app: DeveloperApp,
    *,
    environment: str,
    since: datetime,
    until: datetime,
    time_unit: str = "hour",
) -> dict:
    """Return traffic metrics for *app* between *since* and *until*."""
    stats = controller_registry.get_stats_controller(environment)
    result = stats.get_metrics(
        "apps",
        ANALYTICS_METRICS,
        since,
        until,
        time_unit=time_unit,
        filter_expression=f"(developer_app eq '{app.name}')",
    )
    logger.debug("app_analytics_fetched", app=app.name, environment=environment)
    return result
