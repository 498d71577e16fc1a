"""
apps.edge_connector.records
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Plain records for the resources the Edge backend manages.

Field names are the snake_case form of the backend's camelCase JSON keys so
that :class:`~apps.edge_connector.normalizers.EntitySerializer` can map
between them mechanically.  ``attributes`` is always a ``{name: value}``
dict here; the wire format's ``[{"name": ..., "value": ...}]`` list is
handled by the normalizers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ApiProduct:
    """An API product: a bundle of API resources offered to developers."""

    name: str
    display_name: str = ""
    description: str = ""
    approval_type: str = "auto"
    api_resources: list[str] = field(default_factory=list)
    environments: list[str] = field(default_factory=list)
    proxies: list[str] = field(default_factory=list)
    scopes: list[str] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    created_at: datetime | None = None
    last_modified_at: datetime | None = None

    def id(self) -> str:
        return self.name


@dataclass
class DeveloperApp:
    """
    An app registered by a developer.

    ``app_id`` is the backend-generated UUID; ``name`` is unique per
    developer only.  ``api_products`` is only sent on create; on reads the
    product list lives inside ``credentials``.
    """

    name: str
    app_id: str = ""
    developer_id: str = ""
    callback_url: str = ""
    status: str = "approved"
    app_family: str = "default"
    api_products: list[str] = field(default_factory=list)
    credentials: list[dict] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    created_at: datetime | None = None
    last_modified_at: datetime | None = None

    def id(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.attributes.get("DisplayName", "")

    @display_name.setter
    def display_name(self, value: str) -> None:
        self.attributes["DisplayName"] = value

    @property
    def description(self) -> str:
        return self.attributes.get("Notes", "")

    @description.setter
    def description(self, value: str) -> None:
        self.attributes["Notes"] = value

    def credential_products(self) -> list[str]:
        """Names of every API product attached through any credential."""
        names: list[str] = []
        for credential in self.credentials:
            for product in credential.get("apiProducts", []):
                name = product.get("apiproduct")
                if name and name not in names:
                    names.append(name)
        return names
