"""
apps.entities.controllers
~~~~~~~~~~~~~~~~~~~~~~~~~
Edge controllers bound to local entity classes.

The generic controllers in :mod:`apps.edge_connector.controllers` materialise
plain records.  The controllers here take the local entity class as a
constructor argument instead, and refuse to exist if that class does not
implement the interface required for their resource kind::

    controller = ApiProductController("my-org", client, [], ApiProduct)
    controller.load("premium")              # -> ApiProduct instance

    ApiProductController("my-org", client, [], DeveloperApp)
    # InvalidBindingError: Entity class must implement
    #   apps.entities.interfaces.ApiProductInterface.

The check runs once, before the generic controller is initialised; nothing
is re-validated per operation and no backend call is made.
"""
from __future__ import annotations

import inspect
from typing import Iterable

from apps.edge_connector import controllers as edge
from apps.edge_connector.client import EdgeClient
from apps.edge_connector.normalizers import Normalizer
from common.exceptions import InvalidBindingError

from .interfaces import ApiProductInterface, DeveloperAppInterface, EdgeEntityInterface


class BoundEntityControllerMixin:
    """Binds a generic Edge controller to one validated local entity class."""

    #: Interface the bound entity class must implement.
    required_interface: type[EdgeEntityInterface] = EdgeEntityInterface

    _entity_class: type

    @classmethod
    def check_entity_class(cls, entity_class: object) -> None:
        """
        Raise :class:`~common.exceptions.InvalidBindingError` unless
        *entity_class* is a concrete class implementing
        :attr:`required_interface`.
        """
        interface = cls.required_interface
        if not inspect.isclass(entity_class):
            raise InvalidBindingError(entity_class, interface, f"Got {entity_class!r} instead of a class.")
        if not issubclass(entity_class, interface):
            raise InvalidBindingError(entity_class, interface, f"{entity_class.__qualname__} does not.")
        if inspect.isabstract(entity_class):
            raise InvalidBindingError(
                entity_class, interface, f"{entity_class.__qualname__} is abstract."
            )

    def _bind(self, entity_class: type) -> None:
        self._entity_class = entity_class

    def entity_class(self) -> type:
        return self._entity_class


class ApiProductController(BoundEntityControllerMixin, edge.ApiProductController):
    required_interface = ApiProductInterface

    def __init__(
        self,
        organization: str,
        client: EdgeClient,
        normalizers: Iterable[Normalizer] | None = None,
        entity_class: type | None = None,
    ) -> None:
        self.check_entity_class(entity_class)
        super().__init__(organization, client, normalizers)
        self._bind(entity_class)


class DeveloperAppController(BoundEntityControllerMixin, edge.DeveloperAppController):
    required_interface = DeveloperAppInterface

    def __init__(
        self,
        organization: str,
        developer_id: str,
        client: EdgeClient,
        normalizers: Iterable[Normalizer] | None = None,
        entity_class: type | None = None,
    ) -> None:
        self.check_entity_class(entity_class)
        super().__init__(organization, developer_id, client, normalizers)
        self._bind(entity_class)


class AppController(BoundEntityControllerMixin, edge.AppController):
    required_interface = DeveloperAppInterface

    def __init__(
        self,
        organization: str,
        client: EdgeClient,
        normalizers: Iterable[Normalizer] | None = None,
        entity_class: type | None = None,
    ) -> None:
        self.check_entity_class(entity_class)
        super().__init__(organization, client, normalizers)
        self._bind(entity_class)
