"""Reading the signed ``__referrer`` fields a rendered form submits back."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from protoform import observability
from protoform.exceptions import InvalidHashError, InvalidReferrerError
from protoform.security import HashService

logger = logging.getLogger(__name__)

REFERRER_KEY = "__referrer"


def encode_arguments(arguments: dict[str, Any]) -> str:
    """Serialize request arguments for the ``__referrer[arguments]`` field (unsigned)."""
    payload = json.dumps(arguments, separators=(",", ":"), default=str)
    return base64.b64encode(payload.encode()).decode()


def encode_action_request(extension: str | None, controller: str | None, action: str | None) -> str:
    """Serialize the action identity for the ``__referrer[@request]`` field (unsigned)."""
    return json.dumps(
        {"@extension": extension, "@controller": controller, "@action": action},
        separators=(",", ":"),
    )


@dataclass
class Referrer:
    """The action that rendered a submitted form."""

    extension: str | None
    controller: str | None
    action: str | None
    arguments: dict[str, Any] = field(default_factory=dict)


def read_referrer(arguments: dict[str, Any], hash_service: HashService) -> Referrer:
    """Verify and decode the referrer submitted with a form.

    ``arguments`` are the submitted arguments of the plugin (already
    unflattened and scoped to its namespace).

    Raises:
        InvalidReferrerError: If the referrer is missing, unsigned, tampered
            with or inconsistent with its plain ``@`` fields.
    """
    data = arguments.get(REFERRER_KEY)
    if not isinstance(data, dict):
        raise InvalidReferrerError("No referrer submitted")

    try:
        action_request = json.loads(hash_service.validate_and_strip_hmac(data.get("@request", "")))
        encoded_arguments = hash_service.validate_and_strip_hmac(data.get("arguments", ""))
        referrer_arguments = json.loads(base64.b64decode(encoded_arguments, validate=True))
    except InvalidHashError as e:
        logger.warning("Rejected referrer with invalid signature: %s", e)
        observability.error("Rejected referrer with invalid signature")
        raise InvalidReferrerError(f"Referrer signature is invalid: {e}") from e
    except (ValueError, binascii.Error) as e:
        raise InvalidReferrerError("Referrer payload is corrupt") from e

    if not isinstance(action_request, dict) or not isinstance(referrer_arguments, dict):
        raise InvalidReferrerError("Referrer payload is corrupt")

    for key in ("@extension", "@controller", "@action"):
        submitted = data.get(key)
        # hidden inputs submit an unset identity as ""
        if submitted is not None and submitted != (action_request.get(key) or ""):
            logger.warning("Referrer %s does not match the signed request", key)
            observability.error("Referrer {key} does not match the signed request", key=key)
            raise InvalidReferrerError(f"Referrer {key} does not match the signed request")

    return Referrer(
        extension=action_request.get("@extension"),
        controller=action_request.get("@controller"),
        action=action_request.get("@action"),
        arguments=referrer_arguments,
    )
