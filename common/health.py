"""
common.health
~~~~~~~~~~~~~
GET /health/ – liveness + readiness check.

Returns:
    200  {"status": "ok", "db": "ok", "edge": "ok"}            – everything healthy
    503  {"status": "degraded", "db": ..., "edge": "error: <msg>"} – a dependency is down
"""
import structlog
from django.conf import settings
from django.db import OperationalError, connection
from django.http import JsonResponse

from apps.edge_connector.client import get_client
from common.exceptions import RemoteAPIError, RemoteEntityNotFoundError

logger = structlog.get_logger(__name__)


def _database_status() -> str:
    try:
        connection.ensure_connection()
    except OperationalError as exc:
        logger.error("health_check_db_failure", error=str(exc))
        return f"error: {exc}"
    return "ok"


def _edge_status() -> str:
    """Fetch the organization record, the cheapest authenticated call."""
    try:
        get_client().get(f"/organizations/{settings.EDGE_ORGANIZATION}")
    except (RemoteAPIError, RemoteEntityNotFoundError) as exc:
        logger.error("health_check_edge_failure", error=exc.detail)
        return f"error: {exc.detail}"
    return "ok"


def health_check(request):
    """Return service health including database and Edge connectivity."""
    payload = {"db": _database_status(), "edge": _edge_status()}
    healthy = all(value == "ok" for value in payload.values())
    payload = {"status": "ok" if healthy else "degraded", **payload}
    return JsonResponse(payload, status=200 if healthy else 503)
