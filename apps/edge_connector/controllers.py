"""
apps.edge_connector.controllers
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Generic remote-CRUD controllers over organization-scoped Edge collections.

Each controller knows a collection path and which record class to
materialise; :meth:`EntityController.entity_class` is the single hook that
decides the latter.  :mod:`apps.entities.controllers` overrides it to bind a
controller to a local entity class.

Class hierarchy::

    EntityController            load / get_entities / get_entity_ids
    └── EntityCrudController    + create / update / delete
        ├── ApiProductController    /organizations/{org}/apiproducts
        └── DeveloperAppController  /organizations/{org}/developers/{dev}/apps
    AppController (read only)       /organizations/{org}/apps
    StatsController                 /organizations/{org}/environments/{env}/stats
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable
from urllib.parse import quote

from .client import EdgeClient
from .normalizers import EntitySerializer, Normalizer
from .records import ApiProduct, DeveloperApp


class EntityController:
    """Read operations shared by every Edge collection."""

    #: Key of the entity list in an ``expand=true`` collection response.
    collection_key: str = ""

    def __init__(
        self,
        organization: str,
        client: EdgeClient,
        normalizers: Iterable[Normalizer] | None = None,
    ) -> None:
        if not organization:
            raise ValueError("organization must be a non-empty string.")
        self.organization = organization
        self.client = client
        self.serializer = EntitySerializer(normalizers)

    def entity_class(self) -> type:
        raise NotImplementedError

    def base_path(self) -> str:
        raise NotImplementedError

    def entity_path(self, entity_id: str) -> str:
        return f"{self.base_path()}/{quote(entity_id, safe='')}"

    def _materialize(self, payload: dict) -> Any:
        return self.serializer.deserialize(payload, self.entity_class())

    def load(self, entity_id: str) -> Any:
        return self._materialize(self.client.get(self.entity_path(entity_id)))

    def get_entities(self) -> list[Any]:
        payload = self.client.get(self.base_path(), params={"expand": "true"}) or {}
        return [self._materialize(item) for item in payload.get(self.collection_key, [])]

    def get_entity_ids(self) -> list[str]:
        return list(self.client.get(self.base_path()) or [])


class EntityCrudController(EntityController):
    """Adds create, update and delete to :class:`EntityController`."""

    def create(self, entity: Any) -> Any:
        payload = self.client.post(self.base_path(), json=self.serializer.serialize(entity))
        return self._materialize(payload)

    def update(self, entity: Any) -> Any:
        payload = self.client.put(
            self.entity_path(entity.id()), json=self.serializer.serialize(entity)
        )
        return self._materialize(payload)

    def delete(self, entity_id: str) -> Any:
        """Return the deleted entity, or ``None`` when Edge answers with no body."""
        payload = self.client.delete(self.entity_path(entity_id))
        return None if payload is None else self._materialize(payload)


class ApiProductController(EntityCrudController):
    collection_key = "apiProduct"

    def entity_class(self) -> type:
        return ApiProduct

    def base_path(self) -> str:
        return f"/organizations/{self.organization}/apiproducts"


class DeveloperAppController(EntityCrudController):
    """Apps of one developer, addressed by developer e-mail (or id) and app name."""

    collection_key = "app"

    def __init__(
        self,
        organization: str,
        developer_id: str,
        client: EdgeClient,
        normalizers: Iterable[Normalizer] | None = None,
    ) -> None:
        if not developer_id:
            raise ValueError("developer_id must be a non-empty string.")
        super().__init__(organization, client, normalizers)
        self.developer_id = developer_id

    def entity_class(self) -> type:
        return DeveloperApp

    def base_path(self) -> str:
        developer = quote(self.developer_id, safe="@")
        return f"/organizations/{self.organization}/developers/{developer}/apps"


class AppController(EntityController):
    """Organization-wide, read-only view of every app, addressed by app id."""

    collection_key = "app"

    def entity_class(self) -> type:
        return DeveloperApp

    def base_path(self) -> str:
        return f"/organizations/{self.organization}/apps"


class StatsController:
    """Analytics queries for one environment."""

    #: Format the stats API expects in ``timeRange``.
    TIME_FORMAT = "%m/%d/%Y %H:%M"

    def __init__(self, organization: str, environment: str, client: EdgeClient) -> None:
        if not organization or not environment:
            raise ValueError("organization and environment must be non-empty strings.")
        self.organization = organization
        self.environment = environment
        self.client = client

    def get_metrics(
        self,
        dimension: str,
        metrics: Iterable[str],
        since: datetime,
        until: datetime,
        *,
        time_unit: str = "hour",
        filter_expression: str | None = None,
    ) -> dict:
        params = {
            "select": ",".join(metrics),
            "timeRange": f"{since.strftime(self.TIME_FORMAT)}~{until.strftime(self.TIME_FORMAT)}",
            "timeUnit": time_unit,
        }
        if filter_expression:
            params["filter"] = filter_expression
        path = (
            f"/organizations/{self.organization}/environments/"
            f"{self.environment}/stats/{dimension}"
        )
        return self.client.get(path, params=params) or {}
