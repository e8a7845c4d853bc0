"""Validation result tree used to feed messages back into re-rendered forms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic import ValidationError


@dataclass(frozen=True)
class Message:
    """A single validation message."""

    message: str
    code: str | None = None
    arguments: tuple = ()

    def __str__(self) -> str:
        return self.message


@dataclass
class Result:
    """Messages for one property plus child results for its sub-properties.

    Usage:
        result = Result()
        result.for_property("post.title").add_error(Message("Required"))
        result.for_property("post").for_property("title").errors
    """

    errors: list[Message] = field(default_factory=list)
    warnings: list[Message] = field(default_factory=list)
    notices: list[Message] = field(default_factory=list)
    _properties: dict[str, Result] = field(default_factory=dict, repr=False)

    def for_property(self, path: str | None) -> Result:
        """Return the result for a dotted property path, creating it if needed."""
        if not path:
            return self
        head, _, rest = path.partition(".")
        child = self._properties.get(head)
        if child is None:
            child = Result()
            self._properties[head] = child
        return child.for_property(rest)

    def get_property(self, path: str | None) -> Result:
        """Like :meth:`for_property`, but never adds nodes to the tree.

        Paths without a result give a detached empty Result.
        """
        if not path:
            return self
        head, _, rest = path.partition(".")
        child = self._properties.get(head)
        if child is None:
            return Result()
        return child.get_property(rest)

    def add_error(self, message: Message | str) -> Result:
        self.errors.append(_as_message(message))
        return self

    def add_warning(self, message: Message | str) -> Result:
        self.warnings.append(_as_message(message))
        return self

    def add_notice(self, message: Message | str) -> Result:
        self.notices.append(_as_message(message))
        return self

    def get_errors(self) -> list[Message]:
        return self.errors

    def get_warnings(self) -> list[Message]:
        return self.warnings

    def get_notices(self) -> list[Message]:
        return self.notices

    def has_errors(self) -> bool:
        """True if this result or any child result has errors."""
        if self.errors:
            return True
        return any(child.has_errors() for child in self._properties.values())

    def has_messages(self) -> bool:
        """True if this result or any child result has a message of any severity."""
        if self.errors or self.warnings or self.notices:
            return True
        return any(child.has_messages() for child in self._properties.values())

    def flattened_errors(self, _prefix: str = "") -> dict[str, list[Message]]:
        """Map dotted property paths to their errors, skipping paths without errors."""
        flattened: dict[str, list[Message]] = {}
        if self.errors:
            flattened[_prefix] = list(self.errors)
        for name, child in self._properties.items():
            path = f"{_prefix}.{name}" if _prefix else name
            flattened.update(child.flattened_errors(path))
        return flattened

    @classmethod
    def from_validation_error(
        cls, error: ValidationError, object_name: str | None = None
    ) -> Result:
        """Build a result tree from a Pydantic ValidationError.

        Each error's ``loc`` becomes the property path. Errors without a
        location land on the object (or the root when there is no object).
        """
        result = cls()
        base = result.for_property(object_name)
        for err in error.errors():
            path = ".".join(str(part) for part in err.get("loc", ()))
            base.for_property(path).add_error(
                Message(err["msg"], code=err.get("type"))
            )
        return result


def _as_message(message: Message | str) -> Message:
    if isinstance(message, Message):
        return message
    return Message(str(message))
