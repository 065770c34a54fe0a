"""Input validation for Portainer control operations.

Every predicate here is pure. Public operations run them before touching the
environment resolver or the network; the first failure short-circuits the
operation with its falsy result.
"""

import math
from collections.abc import Mapping
from typing import Any

import structlog

from ..models.container import ContainerActionOptions, ContainerActionRequest
from ..models.enums import ContainerAction
from ..models.refs import StackById, StackByName, StackRef

logger = structlog.get_logger()

VALID_ACTIONS = tuple(action.value for action in ContainerAction)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_positive_id(value: Any) -> bool:
    """True for a finite, integral number greater than zero.

    Booleans are rejected even though ``bool`` subclasses ``int``.
    """
    if not _is_number(value):
        return False
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        return False
    return value > 0


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def is_optional_environment_id(value: Any) -> bool:
    return value is None or is_positive_id(value)


def is_non_negative_number(value: Any) -> bool:
    return _is_number(value) and math.isfinite(value) and value >= 0


def as_record_list(payload: Any) -> list[dict[str, Any]] | None:
    """Collection payload as a list of JSON objects, or None if it is not a list.

    Non-object entries are dropped.
    """
    if not isinstance(payload, list):
        logger.error("Unexpected collection payload", payload_type=type(payload).__name__)
        return None
    records = [item for item in payload if isinstance(item, dict)]
    if len(records) != len(payload):
        logger.warning("Dropped non-object entries", dropped=len(payload) - len(records))
    return records


def parse_action_options(raw: Any) -> ContainerActionOptions | None:
    """Validate an option bag; returns None when any field has the wrong type."""
    if raw is None:
        return ContainerActionOptions()
    if isinstance(raw, ContainerActionOptions):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        logger.error("Invalid options: must be a mapping", options_type=type(raw).__name__)
        return None

    for field in ("force", "remove_volumes"):
        value = raw.get(field)
        if value is not None and not isinstance(value, bool):
            logger.error(f"Invalid {field}: must be a boolean", value=repr(value))
            return None

    signal = raw.get("signal")
    if signal is not None and not isinstance(signal, str):
        logger.error("Invalid signal: must be a string", value=repr(signal))
        return None

    timeout_ms = raw.get("timeout_ms")
    if timeout_ms is not None and not is_non_negative_number(timeout_ms):
        logger.error("Invalid timeout_ms: must be a non-negative number", value=repr(timeout_ms))
        return None

    return ContainerActionOptions(
        force=raw.get("force"),
        remove_volumes=raw.get("remove_volumes"),
        signal=signal,
        timeout_ms=timeout_ms,
    )


def parse_action_request(raw: Any) -> ContainerActionRequest | None:
    """Validate a container action request in the documented order.

    Order: request shape, action vocabulary, container id, environment id,
    options. Returns None on the first failure.
    """
    if isinstance(raw, ContainerActionRequest):
        raw = {
            "action": raw.action.value,
            "container_id": raw.container_id,
            "environment_id": raw.environment_id,
            "options": raw.options.model_dump(),
        }
    if not isinstance(raw, Mapping):
        logger.error("Invalid request: must be a mapping", request_type=type(raw).__name__)
        return None

    action = raw.get("action")
    if isinstance(action, ContainerAction):
        action = action.value
    if action not in VALID_ACTIONS:
        logger.error(
            "Invalid action", action=repr(action), valid_actions=list(VALID_ACTIONS)
        )
        return None

    container_id = raw.get("container_id")
    if not is_non_empty_string(container_id) or container_id.strip() in (".", ".."):
        logger.error("Invalid container_id: must be a non-empty string")
        return None

    environment_id = raw.get("environment_id")
    if not is_optional_environment_id(environment_id):
        logger.error("Invalid environment_id: must be a positive integer or None")
        return None

    options = parse_action_options(raw.get("options"))
    if options is None:
        return None

    return ContainerActionRequest(
        action=ContainerAction(action),
        container_id=container_id.strip(),
        environment_id=int(environment_id) if environment_id is not None else None,
        options=options,
    )


def parse_stack_ref(value: Any) -> StackRef | None:
    """Resolve a stack id-or-name into a tagged reference.

    Accepts a positive integral number or a non-empty (post-trim) string;
    anything else yields None.
    """
    if isinstance(value, StackById | StackByName):
        value = value.stack_id if isinstance(value, StackById) else value.name
    if is_positive_id(value):
        return StackById(int(value))
    if is_non_empty_string(value):
        return StackByName(value.strip())
    return None
