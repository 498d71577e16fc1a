"""
apps.entities.services.controller_registry
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Builds bound controllers once and keeps them for the life of the process.

Controllers are immutable after construction, so sharing them between
requests is safe.  Keys are plain strings: one controller per
(organization, entity type), plus one per developer for the
developer-scoped app controller.
"""
from __future__ import annotations

from functools import lru_cache

import structlog
from django.conf import settings

from apps.edge_connector import client as edge_client
from apps.edge_connector.controllers import StatsController

from ..controllers import DeveloperAppController
from ..entity_types import DEVELOPER_APP, get_entity_type

logger = structlog.get_logger(__name__)


@lru_cache(maxsize=None)
def _entity_controller(organization: str, entity_type_id: str):
    entity_type = get_entity_type(entity_type_id)
    controller = entity_type.controller_class(
        organization, edge_client.get_client(), [], entity_type.entity_class
    )
    logger.info(
        "entity_controller_bound",
        organization=organization,
        entity_type=entity_type_id,
        controller=type(controller).__name__,
        entity_class=entity_type.entity_class.__name__,
    )
    return controller


@lru_cache(maxsize=1024)
def _developer_app_controller(organization: str, developer_id: str) -> DeveloperAppController:
    return DeveloperAppController(
        organization, developer_id, edge_client.get_client(), [], DEVELOPER_APP.entity_class
    )


def get_entity_controller(entity_type_id: str):
    """Organization-wide controller for *entity_type_id*."""
    return _entity_controller(settings.EDGE_ORGANIZATION, entity_type_id)


def get_developer_app_controller(developer_id: str) -> DeveloperAppController:
    """Controller for the apps of one developer."""
    return _developer_app_controller(settings.EDGE_ORGANIZATION, developer_id)


def get_stats_controller(environment: str) -> StatsController:
    return StatsController(settings.EDGE_ORGANIZATION, environment, edge_client.get_client())


def reset() -> None:
    """Drop every cached controller; the next lookup binds a fresh one."""
    _entity_controller.cache_clear()
    _developer_app_controller.cache_clear()
