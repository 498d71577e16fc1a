"""
apps.entities.entity_types
~~~~~~~~~~~~~~~~~~~~~~~~~~
Entity type descriptors and the registry of the types this project exposes.

An :class:`EntityType` ties together everything the rest of the app needs to
know about one kind of Edge resource: its local entity class, the bound
controller class that loads it, its permissions, link templates, forms and
the route generator that turns its templates into routes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

from . import controllers, routing
from .entities import ApiProduct, DeveloperApp
from .permissions import APP_LABEL


def _readonly(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class EntityType:
    """
    Immutable description of one entity type.

    Attributes:
        id: Stable machine name, e.g. ``"developer_app"``.
        label: Human-readable singular name.
        label_plural: Human-readable plural name.
        entity_class: Local class implementing the type's interface.
        controller_class: Bound controller class that loads *entity_class*.
        admin_permission: Permission granting full control over the type.
        overview_permission: Permission granting access to the admin listing
            in addition to *admin_permission* (empty if none).
        link_templates: Link relation → URL pattern.
        form_classes: Form operation → dotted form class.
        list_builder: Dotted ``Class.method`` rendering the collection.
        route_provider: Function generating the type's route table.
    """

    id: str
    label: str
    label_plural: str
    entity_class: type
    controller_class: type
    admin_permission: str
    overview_permission: str = ""
    link_templates: Mapping[str, str] = field(default_factory=dict)
    form_classes: Mapping[str, str] = field(default_factory=dict)
    list_builder: str = "apps.entities.handlers.EntityListBuilder.render"
    route_provider: Callable[["EntityType"], routing.RouteTable] = routing.default_entity_routes

    def __post_init__(self) -> None:
        object.__setattr__(self, "link_templates", _readonly(self.link_templates))
        object.__setattr__(self, "form_classes", _readonly(self.form_classes))

    def has_link_template(self, rel: str) -> bool:
        return rel in self.link_templates

    def get_link_template(self, rel: str) -> str:
        return self.link_templates[rel]

    @staticmethod
    def references_owner(pattern: str) -> bool:
        """Whether *pattern* contains the owning-principal placeholder."""
        return routing.OWNER_PLACEHOLDER in pattern

    def permission(self, codename: str) -> str:
        """Full permission string for *codename*, e.g. ``"entities.create_developer_app"``."""
        return f"{APP_LABEL}.{codename}"

    def generate_routes(self) -> routing.RouteTable:
        return self.route_provider(self)


_FORMS = "apps.entities.forms"

API_PRODUCT = EntityType(
    id="api_product",
    label="API product",
    label_plural="API products",
    entity_class=ApiProduct,
    controller_class=controllers.ApiProductController,
    admin_permission=f"{APP_LABEL}.administer_api_product",
    link_templates={
        "canonical": "/api-products/{api_product}",
        "collection": "/api-products",
    },
)

DEVELOPER_APP = EntityType(
    id="developer_app",
    label="App",
    label_plural="Apps",
    entity_class=DeveloperApp,
    controller_class=controllers.AppController,
    admin_permission=f"{APP_LABEL}.administer_developer_app",
    overview_permission=f"{APP_LABEL}.access_developer_app_overview",
    link_templates={
        "add-form": "/developer-apps/add",
        "canonical": "/developer-apps/{developer_app}",
        "edit-form": "/developer-apps/{developer_app}/edit",
        "delete-form": "/developer-apps/{developer_app}/delete",
        "collection": "/developer-apps",
        "collection-by-developer": "/user/{user}/apps",
        "canonical-by-developer": "/user/{user}/apps/{app}",
        "add-form-for-developer": "/user/{user}/create-app",
        "edit-form-for-developer": "/user/{user}/apps/{app}/edit",
        "delete-form-for-developer": "/user/{user}/apps/{app}/delete",
        "analytics-for-developer": "/user/{user}/apps/{app}/analytics",
    },
    form_classes={
        "add": f"{_FORMS}.DeveloperAppCreateForm",
        "edit": f"{_FORMS}.DeveloperAppEditForm",
        "delete": f"{_FORMS}.DeveloperAppDeleteForm",
        "add_for_developer": f"{_FORMS}.DeveloperAppCreateFormForDeveloper",
        "edit_for_developer": f"{_FORMS}.DeveloperAppEditFormForDeveloper",
        "delete_for_developer": f"{_FORMS}.DeveloperAppDeleteFormForDeveloper",
    },
    route_provider=routing.developer_app_routes,
)

_REGISTRY: dict[str, EntityType] = {
    entity_type.id: entity_type for entity_type in (API_PRODUCT, DEVELOPER_APP)
}


def get_entity_type(entity_type_id: str) -> EntityType:
    """Return the registered type; raises :class:`KeyError` if unknown."""
    return _REGISTRY[entity_type_id]


def entity_types() -> list[EntityType]:
    return list(_REGISTRY.values())
