"""Trusted-properties tokens: which fields a rendered form may submit."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from protoform import observability
from protoform.arguments import array_key, next_index, parse_field_name
from protoform.exceptions import InvalidArgumentForHashGenerationError, InvalidHashError
from protoform.security import HashService

logger = logging.getLogger(__name__)


class PropertyMappingConfigurationService:
    """Generates and reads the signed ``__trustedProperties`` token.

    The token is the tree of rendered field names (leaves set to ``1``)
    below the plugin namespace, serialized as compact JSON with an HMAC
    appended. On submission the tree tells which arguments came from the
    rendered form.
    """

    def __init__(self, hash_service: HashService):
        self.hash_service = hash_service

    def generate_trusted_properties_token(
        self, field_names: Iterable[str], field_name_prefix: str = ""
    ) -> str:
        """Build the signed token for ``field_names``.

        Raises:
            InvalidArgumentForHashGenerationError: If two field names disagree
                on whether a name is an array, or ``[]`` is not the last segment.
        """
        tree: dict[Any, Any] = {}
        for field_name in field_names:
            segments = parse_field_name(field_name)
            current = tree
            for position, segment in enumerate(map(array_key, segments)):
                if not isinstance(current, dict):
                    raise InvalidArgumentForHashGenerationError(
                        f'The form field "{field_name}" is declared as array, but it collides '
                        "with a previous form field of the same name which declared the "
                        "field as string (string overridden by array)"
                    )
                if position == len(segments) - 1:
                    if isinstance(current.get(segment), dict):
                        raise InvalidArgumentForHashGenerationError(
                            f'The form field "{field_name}" is declared as string, but it '
                            "collides with a previous form field of the same name which "
                            "declared the field as array (array overridden by string)"
                        )
                    if segment == "":
                        current[next_index(current)] = 1
                    else:
                        current[segment] = 1
                else:
                    if segment == "":
                        raise InvalidArgumentForHashGenerationError(
                            f'The form field "{field_name}" is invalid: "[]" is used in the '
                            'middle of the name (like foo[][bar]) instead of as last segment'
                        )
                    current = current.setdefault(segment, {})

        if field_name_prefix:
            tree = tree.get(array_key(field_name_prefix), {})

        return self.hash_service.append_hmac(_serialize(tree))

    def decode_trusted_properties(self, token: str) -> dict[str, Any]:
        """Verify a token and return its field tree.

        Raises:
            InvalidHashError: If the token was not signed with this application's key.
        """
        payload = self.hash_service.validate_and_strip_hmac(token)
        try:
            tree = json.loads(payload)
        except json.JSONDecodeError as e:
            raise InvalidHashError("Trusted properties payload is not valid JSON") from e
        if not isinstance(tree, dict):
            raise InvalidHashError("Trusted properties payload is not a field tree")
        return tree

    def filter_trusted_arguments(
        self, arguments: dict[str, Any], trusted: dict[str, Any]
    ) -> dict[str, Any]:
        """Drop every argument whose path is not part of the trusted tree."""
        filtered: dict[str, Any] = {}
        for key, value in arguments.items():
            allowed = trusted.get(str(key))
            if allowed is None:
                logger.warning("Dropping untrusted argument %r", key)
                observability.warning("Dropped untrusted argument {key}", key=str(key))
                continue
            if isinstance(allowed, dict):
                if isinstance(value, dict):
                    filtered[key] = self.filter_trusted_arguments(value, allowed)
                else:
                    logger.warning("Dropping argument %r: expected nested values", key)
            elif isinstance(value, dict):
                logger.warning("Dropping argument %r: expected a single value", key)
            else:
                filtered[key] = value
        return filtered


def _serialize(tree: dict[Any, Any]) -> str:
    return json.dumps(tree, separators=(",", ":"))
