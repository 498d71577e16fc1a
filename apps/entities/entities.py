"""
apps.entities.entities
~~~~~~~~~~~~~~~~~~~~~~
Local entity classes: Edge records that implement the entity interfaces.
"""
from __future__ import annotations

from dataclasses import dataclass

from apps.edge_connector import records

from .interfaces import ApiProductInterface, DeveloperAppInterface


@dataclass
class ApiProduct(records.ApiProduct, ApiProductInterface):
    entity_type_id = "api_product"

    def label(self) -> str:
        return self.display_name or self.name

    def access_level(self) -> str:
        return self.attributes.get("access", "public")


@dataclass
class DeveloperApp(records.DeveloperApp, DeveloperAppInterface):
    entity_type_id = "developer_app"

    def label(self) -> str:
        return self.display_name or self.name

    def is_approved(self) -> bool:
        return self.status == "approved"

    def owner_id(self) -> str:
        return self.developer_id
