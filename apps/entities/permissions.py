"""
apps.entities.permissions
~~~~~~~~~~~~~~~~~~~~~~~~~
Permission codenames for Edge entities.

Declared on :class:`~apps.entities.models.EdgeEntityPermission` so Django
creates them; referenced everywhere else as ``"entities.<codename>"``.
"""

APP_LABEL = "entities"

#: Operations a developer may perform on apps, with ``own``/``any`` scopes.
APP_OPERATIONS = ("view", "update", "delete", "analytics")

PERMISSIONS: list[tuple[str, str]] = [
    ("administer_api_product", "Administer API products"),
    ("view_any_api_product", "View any API product"),
    ("administer_developer_app", "Administer developer apps"),
    ("access_developer_app_overview", "Access the developer app overview page"),
    ("create_developer_app", "Create developer apps"),
] + [
    (f"{operation}_{scope}_developer_app", f"{operation.capitalize()} {scope} developer apps")
    for operation in APP_OPERATIONS
    for scope in ("own", "any")
]
