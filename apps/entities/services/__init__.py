"""
apps.entities.services package.
"""
from .entity_service import (  # noqa: F401
    create_developer_app,
    delete_developer_app,
    get_app_analytics,
    list_developer_apps,
    list_entities,
    load_developer_app,
    load_entity,
    resolve_entity_type,
    update_developer_app,
)
