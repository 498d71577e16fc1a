"""
apps.entities.routing
~~~~~~~~~~~~~~~~~~~~~
Route tables generated from an entity type's link templates.

A *link template* is an optional, named URL pattern an entity type declares
(``"canonical"``, ``"edit-form-for-developer"``, …).  Generators inspect the
templates and emit one :class:`RouteEntry` per template that is present;
a missing template simply means that kind of route is not offered.

Generators compose instead of subclassing::

    table = developer_app_routes(entity_type)
    # == base table from default_entity_routes(), permission-adjusted,
    #    plus one entry per declared *-by-developer / *-for-developer template

This module is **pure Python**: handler, title and access-check references
are dotted strings resolved by :mod:`apps.entities.views` at request time,
so route tables can be built and compared without Django set up.
"""
from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, ClassVar, Iterator, Mapping, Protocol

#: Placeholder naming the principal that owns the resource.
OWNER_PLACEHOLDER = "{user}"
OWNER_PARAMETER = "user"
#: Owners are addressed by numeric user id.
OWNER_PARAMETER_PATTERN = r"\d+"

#: Route option: always load the entity from the backend, never a kept copy.
LOAD_UNCHANGED_OPTION = "load_unchanged_entity"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

_TITLES = "apps.entities.titles"
_HANDLERS = "apps.entities.handlers"


class RoutableEntityType(Protocol):
    """What the generators need from an entity type descriptor."""

    id: str
    admin_permission: str
    overview_permission: str

    def has_link_template(self, rel: str) -> bool: ...

    def get_link_template(self, rel: str) -> str: ...


@dataclass(frozen=True)
class RouteEntry:
    """
    One generated route.

    Exactly one of :attr:`controller`, :attr:`entity_form`, :attr:`form` and
    :attr:`entity_list` is set.

    Attributes:
        path: URL pattern with ``{name}`` placeholders, taken verbatim from
            the link template.
        controller: ``"module.Class.method"`` handler.
        entity_form: ``"<entity type id>.<operation>"`` form operation.
        form: ``"module.Class"`` form handler.
        entity_list: Entity type id whose list builder renders the route.
        title_callback: ``"module.Class.method"`` or ``"module.function"``.
        defaults: Values passed to every handler; always holds
            ``entity_type_id``.
        parameters: Placeholder name → regex it must match.
        access: Requirement kind → value; every requirement must pass.
        options: Extra flags such as :data:`LOAD_UNCHANGED_OPTION`.
    """

    HANDLER_FIELDS: ClassVar[tuple[str, ...]] = ("controller", "entity_form", "form", "entity_list")
    MAPPING_FIELDS: ClassVar[tuple[str, ...]] = ("defaults", "parameters", "access", "options")

    path: str
    controller: str | None = None
    entity_form: str | None = None
    form: str | None = None
    entity_list: str | None = None
    title_callback: str | None = None
    defaults: Mapping[str, str] = field(default_factory=dict)
    parameters: Mapping[str, str] = field(default_factory=dict)
    access: Mapping[str, str] = field(default_factory=dict)
    options: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        handlers = [name for name in self.HANDLER_FIELDS if getattr(self, name)]
        if len(handlers) != 1:
            raise ValueError(
                f"Route {self.path!r} must set exactly one of {self.HANDLER_FIELDS}; got {handlers}."
            )
        # Copied and read-only so that entries shared between tables stay frozen.
        for name in self.MAPPING_FIELDS:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    @property
    def handler_kind(self) -> str:
        return next(name for name in self.HANDLER_FIELDS if getattr(self, name))

    @property
    def handler(self) -> str:
        return getattr(self, self.handler_kind)

    @property
    def entity_type_id(self) -> str:
        return self.defaults["entity_type_id"]

    def placeholders(self) -> list[str]:
        return _PLACEHOLDER.findall(self.path)


class RouteTable:
    """Ordered, name-unique collection of :class:`RouteEntry` objects."""

    def __init__(self) -> None:
        self._routes: dict[str, RouteEntry] = {}

    def add(self, name: str, route: RouteEntry) -> None:
        if name in self._routes:
            raise ValueError(f"Route {name!r} is already defined.")
        self._routes[name] = route

    def get(self, name: str) -> RouteEntry | None:
        return self._routes.get(name)

    def replace(self, name: str, **changes) -> RouteEntry:
        """Swap the entry stored under *name* for a copy with *changes* applied."""
        route = dataclasses.replace(self._routes[name], **changes)
        self._routes[name] = route
        return route

    def names(self) -> list[str]:
        return list(self._routes)

    def items(self):
        return self._routes.items()

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RouteTable):
            return NotImplemented
        return list(self._routes.items()) == list(other._routes.items())

    def __repr__(self) -> str:
        return f"RouteTable({self.names()!r})"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _template(entity_type: RoutableEntityType, rel: str) -> str | None:
    """Return the link template for *rel*, or ``None`` if absent or empty."""
    if not entity_type.has_link_template(rel):
        return None
    return entity_type.get_link_template(rel) or None


def _route(
    entity_type: RoutableEntityType,
    path: str,
    *,
    access: Mapping[str, str],
    title_callback: str,
    options: Mapping[str, bool] | None = None,
    **handler: str,
) -> RouteEntry:
    parameters = {}
    if OWNER_PLACEHOLDER in path:
        parameters[OWNER_PARAMETER] = OWNER_PARAMETER_PATTERN
    return RouteEntry(
        path=path,
        title_callback=title_callback,
        defaults={"entity_type_id": entity_type.id},
        parameters=parameters,
        access=dict(access),
        options=dict(options or {}),
        **handler,
    )


def _route_name(entity_type: RoutableEntityType, suffix: str) -> str:
    return f"entity.{entity_type.id}.{suffix}"


# ---------------------------------------------------------------------------
# Base generator
# ---------------------------------------------------------------------------

def default_entity_routes(entity_type: RoutableEntityType) -> RouteTable:
    """
    Canonical CRUD routes for *entity_type*, one per declared template.

    ``add_form`` is added before ``canonical`` so that a literal ``/add``
    segment wins over the ``{entity}`` placeholder when URLs are matched.
    """
    type_id = entity_type.id
    table = RouteTable()

    if path := _template(entity_type, "add-form"):
        table.add(_route_name(entity_type, "add_form"), _route(
            entity_type, path,
            entity_form=f"{type_id}.add",
            title_callback=f"{_TITLES}.EntityTitleProvider.add_title",
            access={"entity_create_access": type_id},
        ))

    if path := _template(entity_type, "canonical"):
        table.add(_route_name(entity_type, "canonical"), _route(
            entity_type, path,
            controller=f"{_HANDLERS}.EntityViewController.view",
            title_callback=f"{_TITLES}.EntityTitleProvider.title",
            access={"entity_access": f"{type_id}.view"},
        ))

    if path := _template(entity_type, "edit-form"):
        table.add(_route_name(entity_type, "edit_form"), _route(
            entity_type, path,
            entity_form=f"{type_id}.edit",
            title_callback=f"{_TITLES}.EntityTitleProvider.edit_title",
            access={"entity_access": f"{type_id}.update"},
        ))

    if path := _template(entity_type, "delete-form"):
        table.add(_route_name(entity_type, "delete_form"), _route(
            entity_type, path,
            entity_form=f"{type_id}.delete",
            title_callback=f"{_TITLES}.EntityTitleProvider.delete_title",
            access={"entity_access": f"{type_id}.delete"},
        ))

    if path := _template(entity_type, "collection"):
        table.add(_route_name(entity_type, "collection"), _route(
            entity_type, path,
            entity_list=type_id,
            title_callback=f"{_TITLES}.EntityTitleProvider.collection_title",
            access={"permission": entity_type.admin_permission},
        ))

    return table


# ---------------------------------------------------------------------------
# Developer app generator
# ---------------------------------------------------------------------------

def _collection_route_by_developer(entity_type: RoutableEntityType) -> RouteEntry | None:
    path = _template(entity_type, "collection-by-developer")
    if path is None:
        return None
    return _route(
        entity_type, path,
        controller=f"{_HANDLERS}.DeveloperAppListBuilderForDeveloper.render",
        title_callback=f"{_TITLES}.my_developer_apps_title",
        access={"custom_access": "apps.entities.access.MyAppsAccessCheck.access"},
    )


def _canonical_route_by_developer(entity_type: RoutableEntityType) -> RouteEntry | None:
    path = _template(entity_type, "canonical-by-developer")
    if path is None:
        return None
    return _route(
        entity_type, path,
        controller=f"{_HANDLERS}.DeveloperAppViewForDeveloper.view",
        title_callback=f"{_TITLES}.AppTitleProvider.title",
        access={"developer_app_access": "view"},
    )


def _add_form_route_for_developer(entity_type: RoutableEntityType) -> RouteEntry | None:
    path = _template(entity_type, "add-form-for-developer")
    if path is None:
        return None
    return _route(
        entity_type, path,
        entity_form=f"{entity_type.id}.add_for_developer",
        title_callback=f"{_TITLES}.AppTitleProvider.add_title",
        access={"entity_create_access": entity_type.id},
    )


def _edit_form_route_for_developer(entity_type: RoutableEntityType) -> RouteEntry | None:
    path = _template(entity_type, "edit-form-for-developer")
    if path is None:
        return None
    # Edits are applied to the backend's current state, never a kept copy.
    return _route(
        entity_type, path,
        entity_form=f"{entity_type.id}.edit_for_developer",
        title_callback=f"{_TITLES}.AppTitleProvider.edit_title",
        access={"developer_app_access": "update"},
        options={LOAD_UNCHANGED_OPTION: True},
    )


def _delete_form_route_for_developer(entity_type: RoutableEntityType) -> RouteEntry | None:
    path = _template(entity_type, "delete-form-for-developer")
    if path is None:
        return None
    return _route(
        entity_type, path,
        entity_form=f"{entity_type.id}.delete_for_developer",
        title_callback=f"{_TITLES}.AppTitleProvider.delete_title",
        access={"developer_app_access": "delete"},
    )


def _analytics_route_for_developer(entity_type: RoutableEntityType) -> RouteEntry | None:
    path = _template(entity_type, "analytics-for-developer")
    if path is None:
        return None
    return _route(
        entity_type, path,
        form="apps.entities.forms.DeveloperAppAnalyticsFormForDeveloper",
        title_callback=f"{_TITLES}.AppTitleProvider.analytics_title",
        access={"developer_app_access": "analytics"},
    )


#: Route name suffix → builder, in the order routes are added.
DEVELOPER_ROUTE_BUILDERS: tuple[tuple[str, Callable[[RoutableEntityType], RouteEntry | None]], ...] = (
    ("collection_by_developer", _collection_route_by_developer),
    ("canonical_by_developer", _canonical_route_by_developer),
    ("add_form_for_developer", _add_form_route_for_developer),
    ("edit_form_for_developer", _edit_form_route_for_developer),
    ("delete_form_for_developer", _delete_form_route_for_developer),
    ("analytics_for_developer", _analytics_route_for_developer),
)


def developer_app_routes(
    entity_type: RoutableEntityType,
    base: Callable[[RoutableEntityType], RouteTable] = default_entity_routes,
) -> RouteTable:
    """
    Routes for developer apps: the *base* table with adjusted permissions
    plus the developer-scoped routes whose templates *entity_type* declares.

    * ``add_form`` is restricted to the admin permission; the unscoped
      creation UI is not offered to regular users.
    * ``collection`` also admits the overview permission (``+`` = OR).
    """
    table = base(entity_type)

    add_form = _route_name(entity_type, "add_form")
    if add_form in table:
        table.replace(add_form, access={"permission": entity_type.admin_permission})

    collection = _route_name(entity_type, "collection")
    if collection in table:
        access = dict(table.get(collection).access)
        access["permission"] = "+".join(
            p for p in (access.get("permission"), entity_type.overview_permission) if p
        )
        table.replace(collection, access=access)

    for suffix, build in DEVELOPER_ROUTE_BUILDERS:
        route = build(entity_type)
        if route is not None:
            table.add(_route_name(entity_type, suffix), route)

    return table
