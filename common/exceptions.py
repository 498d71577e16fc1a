"""
common.exceptions
~~~~~~~~~~~~~~~~~
Centralised DRF exception handler and custom exception classes.

Two families live here:

* :class:`AppError` and its subclasses are request-time errors that the DRF
  exception handler turns into ``{"code": ..., "detail": ...}`` responses.
* :class:`InvalidBindingError` is a wiring defect detected while services are
  being assembled.  It is never rendered as a response; it aborts startup.
"""
import structlog
from django.core.exceptions import ImproperlyConfigured
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base application error.  Subclass to define domain-specific errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "error"
    default_detail: str = "An error occurred."

    def __init__(self, detail: str | None = None, code: str | None = None) -> None:
        self.detail = detail or self.default_detail
        self.code = code or self.default_code
        super().__init__(self.detail)

    def __str__(self) -> str:
        return self.detail


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_detail = "The requested resource was not found."


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"
    default_detail = "A resource conflict occurred."


class RemoteAPIError(AppError):
    """
    The Edge backend could not be reached or answered with an error.

    ``remote_status`` keeps the backend's HTTP status (``None`` for transport
    failures such as timeouts or refused connections).
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "remote_api_error"
    default_detail = "The API management backend returned an error."

    def __init__(
        self,
        detail: str | None = None,
        code: str | None = None,
        remote_status: int | None = None,
    ) -> None:
        super().__init__(detail, code)
        self.remote_status = remote_status


class RemoteEntityNotFoundError(NotFoundError):
    """The Edge backend answered 404 for the requested entity."""

    default_code = "remote_entity_not_found"
    default_detail = "The entity does not exist on the API management backend."

    def __init__(self, detail: str | None = None, code: str | None = None, remote_status: int = 404) -> None:
        super().__init__(detail, code)
        self.remote_status = remote_status


class InvalidBindingError(ImproperlyConfigured):
    """
    A controller was bound to an entity class that does not implement the
    interface required for its resource kind.

    Raised at construction time only.  Attributes:

    entity_class
        The offending class reference (may be ``None``).
    required_interface
        The interface the controller requires.
    """

    def __init__(self, entity_class: object, required_interface: type, reason: str = "") -> None:
        self.entity_class = entity_class
        self.required_interface = required_interface
        interface_name = f"{required_interface.__module__}.{required_interface.__qualname__}"
        message = f"Entity class must implement {interface_name}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


def custom_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    Global DRF exception handler.
    Converts AppError subclasses to JSON responses and delegates everything
    else to the default DRF handler so standard DRF exceptions still work.
    """
    if isinstance(exc, AppError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "app_error",
            code=exc.code,
            detail=exc.detail,
            status_code=exc.status_code,
            remote_status=getattr(exc, "remote_status", None),
        )
        return Response(
            {"code": exc.code, "detail": exc.detail},
            status=exc.status_code,
        )

    response = drf_exception_handler(exc, context)
    if response is not None:
        logger.warning(
            "drf_error",
            detail=response.data,
            status_code=response.status_code,
        )
    else:
        logger.exception("unhandled_exception", exc_info=exc)

    return response
