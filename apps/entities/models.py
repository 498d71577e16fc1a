"""
apps.entities.models
~~~~~~~~~~~~~~~~~~~~
Edge entities live on the remote backend, not in the database.  The only
model here is an unmanaged placeholder that owns the app's permissions.
"""
from django.db import models

from .permissions import PERMISSIONS


class EdgeEntityPermission(models.Model):
    """Holds the ``entities.*`` permissions; has no table."""

    class Meta:
        managed = False
        default_permissions = ()
        permissions = PERMISSIONS
        verbose_name = "Edge entity permission"
