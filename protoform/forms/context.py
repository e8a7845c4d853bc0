"""Per-render state shared by every field of a form."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from protoform.request import ActionRequest


class FormContext:
    """The current request and, for object forms, the bound object's name.

    Fields keep a reference to the context of the form that owns them, so a
    change here is seen by all of them.
    """

    def __init__(
        self,
        request: ActionRequest | None = None,
        object_name: str | None = None,
        object: Any = None,
    ):
        self.request = request
        self.object_name = object_name
        self.object = object

    def get_request(self) -> ActionRequest | None:
        return self.request

    def set_request(self, request: ActionRequest) -> None:
        self.request = request

    def get_object_name(self) -> str | None:
        return self.object_name

    def set_object_name(self, object_name: str | None) -> None:
        self.object_name = object_name

    def get_object(self) -> Any:
        return self.object

    def set_object(self, object: Any) -> None:
        self.object = object

    def is_object_form(self) -> bool:
        return bool(self.object_name)

    def __repr__(self) -> str:
        return f"FormContext(object_name={self.object_name!r}, request={self.request!r})"
