"""Error taxonomy surfaced by the lifecycle services.

``NotFoundError`` and ``ValidationError`` are fatal to the requested operation
and carry a ``payload`` that the HTTP layer returns verbatim next to the
message. ``ServerError`` wraps unexpected storage failures on the primary
mutation. Failures inside cascade steps are logged and never raised.
"""
from typing import Any, Dict, Iterable, Optional


class LifecycleError(Exception):
    status_code = 500

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, **self.payload}


class NotFoundError(LifecycleError):
    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f'{entity} with ID "{entity_id}" was not found.',
            {"entity": entity, "id": entity_id},
        )


class ValidationError(LifecycleError, ValueError):
    status_code = 400


class InvalidTransitionError(ValidationError):
    def __init__(
        self,
        entity: str,
        entity_id: str,
        current_status: str,
        requested_status: str,
        allowed: Iterable[str],
        *,
        hint: str = "",
    ):
        allowed_list = list(allowed)
        allowed_text = ", ".join(allowed_list) if allowed_list else "none (terminal)"
        message = (
            f'Invalid status transition from "{current_status}" to "{requested_status}". '
            f"Allowed next statuses: {allowed_text}{hint}"
        )
        super().__init__(
            message,
            {
                "entity": entity,
                "id": entity_id,
                "current_status": current_status,
                "requested_status": requested_status,
                "allowed_statuses": allowed_list,
            },
        )
        self.current_status = current_status
        self.requested_status = requested_status
        self.allowed_statuses = allowed_list


class ServerError(LifecycleError):
    status_code = 500
