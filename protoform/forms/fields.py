"""A single form control bound to a form context."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from protoform.exceptions import FormContextError
from protoform.extension import ExtensionService

if TYPE_CHECKING:
    from protoform.forms.context import FormContext
    from protoform.request import ActionRequest


class Field:
    """A form control that knows its namespaced name and its current value.

    A field is either a *property field*, whose name is a property of the
    form's bound object, or a *plain field*:

        field.set_property("title").render_name()   # tx_blog_post[post][title]
        field.set_name("q[term]").render_name()     # tx_blog_post[q][term]

    Usage in a template payload:
        {"type": "text", "class": "wide", "name": "...", "value": "..."}
    """

    def __init__(
        self,
        name: str = "",
        *,
        property_field: bool = False,
        extension_service: ExtensionService | None = None,
    ):
        self.name = name
        self.property_field = property_field
        self.extension_service = extension_service or ExtensionService()
        self.form_context: FormContext | None = None
        self.attributes: dict[str, str] = {}
        # Re-display what the user submitted when the form comes back after validation
        self.respect_submitted_value = True
        self.value: Any = None
        self.default_value: str | None = None

    # -- Configuration --

    def set_form_context(self, form_context: FormContext) -> Field:
        """Attach the field to a form context, replacing any previous one."""
        self.form_context = form_context
        return self

    def set_property(self, property_name: str) -> Field:
        """Name the field after a property of the form's object and make it a property field."""
        self.name = property_name
        self.property_field = True
        return self

    def get_name(self) -> str:
        """The unprefixed name (see :meth:`render_name` for the rendered one)."""
        return self.name

    def set_name(self, name: str) -> Field:
        self.name = name
        return self

    def is_property_field(self) -> bool:
        return self.property_field

    def is_plain_field(self) -> bool:
        return not self.property_field

    def set_property_field(self, property_field: bool) -> Field:
        self.property_field = property_field
        return self

    def set_value(self, value: Any) -> Field:
        self.value = value
        return self

    def get_default_value(self) -> str | None:
        return self.default_value

    def set_default_value(self, default_value: str | None) -> Field:
        self.default_value = default_value
        return self

    def set_respect_submitted_value(self, respect_submitted_value: bool) -> Field:
        self.respect_submitted_value = respect_submitted_value
        return self

    # -- Attributes --

    def set_attribute(self, attribute: str, value: str) -> Field:
        self.attributes[attribute] = value
        return self

    def set_multiple_attributes(self, attributes: Mapping[str, str]) -> Field:
        self.attributes.update(attributes)
        return self

    def remove_attribute(self, attribute: str) -> Field:
        self.attributes.pop(attribute, None)
        return self

    # -- Rendering --

    def render(self) -> dict[str, Any]:
        """Attributes plus the rendered name and value, which always win."""
        return {
            **self.attributes,
            "name": self.render_name(),
            "value": self.render_value(),
        }

    def render_name(self) -> str:
        if self._is_bound_property():
            return self.prefix_property_field_name(self.name)
        return self.prefix_field_name(self.name)

    def render_value(self) -> Any:
        """Explicit value, else the resubmitted value, else the default.

        A submitted value is only looked up when the request re-renders a
        form that failed validation. Names missing from the submitted
        arguments render as None.
        """
        if self.value is not None:
            return self.value

        original_request = self._request().get_original_request()
        if self.respect_submitted_value and original_request is not None:
            submitted = original_request.get_arguments()
            if self._is_bound_property():
                submitted = submitted.get(self._context().get_object_name())
                if not isinstance(submitted, Mapping):
                    return None
            return submitted.get(self.name)

        if self.default_value is not None:
            return self.default_value

        return self._object_value()

    def get_validation_messages(self) -> list[str]:
        """Messages for this field from the failed submission: errors, warnings, notices."""
        request = self._request()
        if request.get_original_request() is None:
            return []

        results = request.get_original_request_mapping_results()
        if self._is_bound_property():
            results = results.get_property(self._context().get_object_name())
        results = results.get_property(self.name)

        return [
            str(message)
            for group in (results.get_errors(), results.get_warnings(), results.get_notices())
            for message in group
        ]

    # -- Naming --

    def get_field_name_prefix(self) -> str:
        return self.extension_service.get_field_name_prefix(self._request())

    def prefix_field_name(self, field_name: str) -> str:
        """``foo[bar]`` -> ``<prefix>[foo][bar]``; unchanged without a prefix."""
        prefix = self.get_field_name_prefix()
        if not prefix:
            return field_name
        head, bracket, rest = field_name.partition("[")
        prefixed = f"{prefix}[{head}]"
        if bracket:
            prefixed += f"[{rest}"
        return prefixed

    def prefix_property_field_name(self, property_name: str) -> str:
        prefix = self.get_field_name_prefix()
        object_name = self._context().get_object_name()
        if not prefix:
            return f"{object_name}[{property_name}]"
        return f"{prefix}[{object_name}][{property_name}]"

    # -- Internals --

    def _context(self) -> FormContext:
        if self.form_context is None:
            raise FormContextError(f"Field {self.name!r} is not attached to a form")
        return self.form_context

    def _request(self) -> ActionRequest:
        request = self._context().get_request()
        if request is None:
            raise FormContextError(f"Form of field {self.name!r} has no request")
        return request

    def _is_bound_property(self) -> bool:
        # A property field without an object to belong to is named like a plain field
        return self.property_field and self._context().is_object_form()

    def _object_value(self) -> Any:
        if not self._is_bound_property():
            return None
        obj = self._context().get_object()
        if obj is None:
            return None
        if isinstance(obj, Mapping):
            return obj.get(self.name)
        return getattr(obj, self.name, None)

    def __repr__(self) -> str:
        kind = "property" if self.property_field else "plain"
        return f"Field({self.name!r}, {kind})"
