"""
apps.entities.checks
~~~~~~~~~~~~~~~~~~~~
Binding validation.  :func:`verify_entity_bindings` runs from
``EntitiesConfig.ready()`` and aborts startup; the system checks below report
the same defects through ``manage.py check``.

``entities.E001``
    An entity type's entity class cannot be bound to its controller class.
``entities.E002``
    An entity type's developer-scoped apps cannot be bound.
"""
from django.core import checks

from common.exceptions import InvalidBindingError

from .controllers import DeveloperAppController
from .entity_types import DEVELOPER_APP, entity_types


def verify_entity_bindings() -> None:
    """
    Validate every binding the controller registry will make.

    Raises:
        InvalidBindingError: For the first entity type whose entity class
            its controller class rejects.
    """
    for entity_type in entity_types():
        entity_type.controller_class.check_entity_class(entity_type.entity_class)
    DeveloperAppController.check_entity_class(DEVELOPER_APP.entity_class)


@checks.register(checks.Tags.compatibility)
def check_entity_bindings(app_configs=None, **kwargs):
    errors = []
    for entity_type in entity_types():
        try:
            entity_type.controller_class.check_entity_class(entity_type.entity_class)
        except InvalidBindingError as exc:
            errors.append(checks.Error(
                str(exc),
                hint=f"Fix entity_class or controller_class of entity type '{entity_type.id}'.",
                obj=entity_type.id,
                id="entities.E001",
            ))

    try:
        DeveloperAppController.check_entity_class(DEVELOPER_APP.entity_class)
    except InvalidBindingError as exc:
        errors.append(checks.Error(str(exc), obj=DEVELOPER_APP.id, id="entities.E002"))
    return errors
