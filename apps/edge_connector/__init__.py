"""
apps.edge_connector
~~~~~~~~~~~~~~~~~~~
Thin client for the Edge API-management backend.

Nothing in this package knows about Django entity types or routes; it only
speaks the backend's organization-scoped REST API.  The entity integration in
:mod:`apps.entities` binds these generic controllers to local classes.
"""
