"""
apps.entities.interfaces
~~~~~~~~~~~~~~~~~~~~~~~~
Capability contracts for local Edge entity classes.

A bound controller (:mod:`apps.entities.controllers`) only accepts an entity
class that is a subclass of the interface for its resource kind, so these
ABCs are checked with :func:`issubclass` when controllers are built.
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class EdgeEntityInterface(ABC):
    """Any Edge resource exposed as a local entity."""

    #: Identifier of the entity type this class belongs to.
    entity_type_id: str = ""

    @abstractmethod
    def id(self) -> str:
        """Identifier used in URLs and backend paths."""

    @abstractmethod
    def label(self) -> str:
        """Human-readable name."""


class ApiProductInterface(EdgeEntityInterface):
    @abstractmethod
    def access_level(self) -> str:
        """``"public"``, ``"private"`` or ``"internal"``."""


class AppInterface(EdgeEntityInterface):
    @abstractmethod
    def is_approved(self) -> bool: ...


class DeveloperAppInterface(AppInterface):
    @abstractmethod
    def owner_id(self) -> str:
        """Backend id of the developer that owns the app."""
