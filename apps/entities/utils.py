"""
apps.entities.utils
"""
from __future__ import annotations

import inspect
from typing import Any

from django.utils.module_loading import import_string


def resolve_reference(reference: str) -> Any:
    """
    Import the object named by a dotted *reference*.

    ``"module.attr"`` returns the attribute itself (a function or a class).
    ``"module.Class.method"`` returns *method* bound to a fresh ``Class()``.
    """
    try:
        return import_string(reference)
    except ImportError:
        owner_path, _, attribute = reference.rpartition(".")
        owner = import_string(owner_path)
        if not inspect.isclass(owner):
            raise
        return getattr(owner(), attribute)
