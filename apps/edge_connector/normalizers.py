"""
apps.edge_connector.normalizers
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Serialization adapters between Edge JSON payloads and record classes.

A normalizer converts one aspect of a payload in both directions:

``denormalize(data)``
    wire → Python (camelCase keys → snake_case, attribute lists → dicts, …)
``normalize(data)``
    Python → wire, the exact inverse.

:class:`EntitySerializer` runs a chain of normalizers: in list order when
reading a payload, in reverse order when writing one.  An empty chain means
"use :data:`DEFAULT_NORMALIZERS`".
"""
from __future__ import annotations

import dataclasses
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Protocol

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Normalizer(Protocol):
    def denormalize(self, data: dict[str, Any]) -> dict[str, Any]: ...

    def normalize(self, data: dict[str, Any]) -> dict[str, Any]: ...


class CamelCaseNormalizer:
    """Maps top-level keys between ``camelCase`` and ``snake_case``."""

    @staticmethod
    def to_snake(key: str) -> str:
        return _CAMEL_BOUNDARY.sub("_", key).lower()

    @staticmethod
    def to_camel(key: str) -> str:
        head, *rest = key.split("_")
        return head + "".join(part.capitalize() for part in rest)

    def denormalize(self, data: dict[str, Any]) -> dict[str, Any]:
        return {self.to_snake(key): value for key, value in data.items()}

    def normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        return {self.to_camel(key): value for key, value in data.items()}


class AttributesNormalizer:
    """Maps ``[{"name": n, "value": v}, ...]`` to ``{n: v}`` and back."""

    def __init__(self, key: str = "attributes") -> None:
        self.key = key

    def denormalize(self, data: dict[str, Any]) -> dict[str, Any]:
        raw = data.get(self.key)
        if isinstance(raw, list):
            data = dict(data)
            data[self.key] = {item["name"]: item.get("value", "") for item in raw}
        return data

    def normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        raw = data.get(self.key)
        if isinstance(raw, dict):
            data = dict(data)
            data[self.key] = [{"name": name, "value": value} for name, value in raw.items()]
        return data


class TimestampNormalizer:
    """Maps epoch-millisecond integers to timezone-aware datetimes and back."""

    def __init__(self, fields: Iterable[str] = ("created_at", "last_modified_at")) -> None:
        self.fields = tuple(fields)

    def denormalize(self, data: dict[str, Any]) -> dict[str, Any]:
        data = dict(data)
        for name in self.fields:
            value = data.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                data[name] = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return data

    def normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        data = dict(data)
        for name in self.fields:
            value = data.get(name)
            if isinstance(value, datetime):
                data[name] = int(value.timestamp() * 1000)
        return data


#: Chain applied when a controller is given no normalizers.
DEFAULT_NORMALIZERS: tuple[Normalizer, ...] = (
    CamelCaseNormalizer(),
    AttributesNormalizer(),
    TimestampNormalizer(),
)


class EntitySerializer:
    """
    Converts record instances to Edge payloads and back.

    Usage::

        serializer = EntitySerializer()
        product = serializer.deserialize(payload, ApiProduct)
        payload = serializer.serialize(product)
    """

    def __init__(self, normalizers: Iterable[Normalizer] | None = None) -> None:
        chain = tuple(normalizers or ())
        self.normalizers: tuple[Normalizer, ...] = chain or DEFAULT_NORMALIZERS

    def deserialize(self, payload: dict[str, Any], entity_class: type) -> Any:
        """
        Build an *entity_class* instance from a backend payload.

        Keys that do not correspond to an init field of *entity_class* are
        dropped, so newer backend fields never break deserialization.
        """
        data = dict(payload)
        for normalizer in self.normalizers:
            data = normalizer.denormalize(data)
        accepted = {f.name for f in dataclasses.fields(entity_class) if f.init}
        return entity_class(**{key: value for key, value in data.items() if key in accepted})

    def serialize(self, entity: Any) -> dict[str, Any]:
        """Build a backend payload from *entity*; ``None`` values are omitted."""
        data = {
            f.name: getattr(entity, f.name)
            for f in dataclasses.fields(entity)
            if getattr(entity, f.name) is not None
        }
        for normalizer in reversed(self.normalizers):
            data = normalizer.normalize(data)
        return data
