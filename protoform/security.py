"""HMAC signing for strings round-tripped through hidden form fields.

Uses the HMAC primitives of the Python stdlib, keyed with the application
secret. The hex digest is appended directly to the signed string.
"""

from __future__ import annotations

import hashlib
import hmac

from protoform.exceptions import InvalidHashError


class HashService:
    def __init__(self, secret_key: str, algorithm: str = "sha256"):
        if not secret_key:
            raise ValueError("HashService requires a non-empty secret key")
        self._key = secret_key.encode()
        self.algorithm = algorithm
        self.hmac_length = hashlib.new(algorithm).digest_size * 2

    def generate_hmac(self, string: str) -> str:
        """Return the hex HMAC of ``string``."""
        return hmac.new(self._key, string.encode(), self.algorithm).hexdigest()

    def append_hmac(self, string: str) -> str:
        """Return ``string`` with its HMAC appended."""
        return string + self.generate_hmac(string)

    def validate_hmac(self, string: str, hmac_value: str) -> bool:
        return hmac.compare_digest(self.generate_hmac(string), hmac_value)

    def validate_and_strip_hmac(self, string: str) -> str:
        """Verify a string produced by :meth:`append_hmac` and return the original.

        Raises:
            InvalidHashError: If the string is too short to carry an HMAC or
                the HMAC does not match.
        """
        if not isinstance(string, str):
            raise InvalidHashError("Only strings can carry an HMAC")
        if len(string) < self.hmac_length:
            raise InvalidHashError(
                f"String is shorter than the {self.hmac_length} characters of an HMAC"
            )
        payload = string[: -self.hmac_length]
        if not self.validate_hmac(payload, string[-self.hmac_length :]):
            raise InvalidHashError("HMAC does not match the signed string")
        return payload
