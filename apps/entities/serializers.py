"""
apps.entities.serializers
~~~~~~~~~~~~~~~~~~~~~~~~~
I/O-only serializers for Edge entity routes.
No business logic; shape validation only.
"""
from datetime import timedelta

from django.utils import timezone
from rest_framework import serializers


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

class ApiProductSerializer(serializers.Serializer):
    """Read serializer for an API product."""

    name = serializers.CharField()
    label = serializers.SerializerMethodField()
    description = serializers.CharField()
    access_level = serializers.SerializerMethodField()
    approval_type = serializers.CharField()
    environments = serializers.ListField(child=serializers.CharField())
    created_at = serializers.DateTimeField(allow_null=True)
    last_modified_at = serializers.DateTimeField(allow_null=True)

    def get_label(self, instance) -> str:
        return instance.label()

    def get_access_level(self, instance) -> str:
        return instance.access_level()


class DeveloperAppSerializer(serializers.Serializer):
    """Read serializer for a developer app."""

    name = serializers.CharField()
    app_id = serializers.CharField()
    display_name = serializers.CharField()
    description = serializers.CharField()
    callback_url = serializers.CharField()
    status = serializers.CharField()
    api_products = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(allow_null=True)
    last_modified_at = serializers.DateTimeField(allow_null=True)

    def get_api_products(self, instance) -> list[str]:
        return instance.credential_products() or list(instance.api_products)


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class DeveloperAppCreateSerializer(serializers.Serializer):
    """Validates the body of a create-app submission."""

    name = serializers.RegexField(r"^[A-Za-z0-9_\-]+$", max_length=255)
    display_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    callback_url = serializers.URLField(required=False, allow_blank=True)
    api_products = serializers.ListField(
        child=serializers.CharField(max_length=255), required=False, default=list
    )


class DeveloperAppAdminCreateSerializer(DeveloperAppCreateSerializer):
    """Admin variant: the owning developer is part of the submission."""

    developer = serializers.EmailField()


class DeveloperAppUpdateSerializer(serializers.Serializer):
    """Validates the body of an edit-app submission; all fields optional."""

    display_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    callback_url = serializers.URLField(required=False, allow_blank=True)


class AnalyticsQuerySerializer(serializers.Serializer):
    """Validates the query string of the app analytics page."""

    environment = serializers.CharField(max_length=100, required=False)
    since = serializers.DateTimeField(required=False)
    until = serializers.DateTimeField(required=False)
    time_unit = serializers.ChoiceField(choices=["minute", "hour", "day", "week"], default="hour")

    def validate(self, attrs):
        until = attrs.get("until") or timezone.now()
        since = attrs.get("since") or until - timedelta(days=1)
        if since >= until:
            raise serializers.ValidationError({"since": "Must be earlier than 'until'."})
        attrs["since"], attrs["until"] = since, until
        return attrs
