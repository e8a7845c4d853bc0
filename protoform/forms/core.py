"""Core Form class: field registry, protective hidden fields and the render payload."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from protoform import observability
from protoform.config import get_settings
from protoform.extension import ExtensionService
from protoform.forms.context import FormContext
from protoform.forms.fields import Field
from protoform.mapping import PropertyMappingConfigurationService
from protoform.referrer import REFERRER_KEY, encode_action_request, encode_arguments
from protoform.request import ActionRequest
from protoform.security import HashService

logger = logging.getLogger(__name__)

TRUSTED_PROPERTIES_FIELD_NAME = "__trustedProperties"


class Form:
    """The fields of one rendered form plus its trusted-properties and referrer fields.

    Usage:
        form = Form(request, object_name="post")
        form.create_field("title").set_attribute("type", "text")
        form.create_plain_hidden_field("page", "page").set_value("2")

        payload = form.render()
        # {"fields": {"title": {...}, "page": {...}},
        #  "hiddenFields": [page, __trustedProperties, 5 x __referrer[...]]}

    Services default to ones built from :func:`protoform.config.get_settings`.
    """

    def __init__(
        self,
        request: ActionRequest,
        *,
        object_name: str | None = None,
        extension_service: ExtensionService | None = None,
        mapping_service: PropertyMappingConfigurationService | None = None,
        hash_service: HashService | None = None,
    ):
        if extension_service is None or hash_service is None:
            settings = get_settings()
            if extension_service is None:
                extension_service = ExtensionService(settings.forms.plugin_namespaces)
            if hash_service is None:
                hash_service = HashService(settings.secret_key, settings.forms.hmac_algorithm)

        self.extension_service = extension_service
        self.hash_service = hash_service
        self.mapping_service = mapping_service or PropertyMappingConfigurationService(hash_service)

        self.form_context = FormContext(request, object_name)
        self.fields: dict[str, Field] = {}
        self.hidden_fields: dict[str, Field] = {}

    # -- Context --

    def set_request(self, request: ActionRequest) -> None:
        """Start over with a fresh context for ``request``.

        Fields created before keep pointing at the previous context.
        """
        self.form_context = FormContext(request)

    def set_object_name(self, name: str) -> None:
        self.form_context.set_object_name(name)

    def set_object(self, obj: Any) -> None:
        self.form_context.set_object(obj)

    # -- Field creation --

    def create_field(
        self,
        identifier: str,
        name_or_property: str | None = None,
        property_field: bool | None = None,
    ) -> Field:
        """Create a field stored under ``identifier`` and return it for further setup.

        The name defaults to the identifier. Fields of an object form are
        property fields unless ``property_field`` says otherwise.
        """
        if not name_or_property:
            name_or_property = identifier

        if property_field is None:
            property_field = self.form_context.is_object_form()

        field = Field(
            name_or_property,
            property_field=property_field,
            extension_service=self.extension_service,
        )
        field.set_form_context(self.form_context)

        self.fields[identifier] = field
        return field

    def create_hidden_field(
        self,
        identifier: str,
        name_or_property: str | None = None,
        property_field: bool | None = None,
    ) -> Field:
        field = self.create_field(identifier, name_or_property, property_field)
        self.hidden_fields[identifier] = field
        return field

    def create_plain_hidden_field(self, identifier: str, name: str | None = None) -> Field:
        field = self.create_field(identifier, name, False)
        self.hidden_fields[identifier] = field
        return field

    # -- Adopting existing fields --

    def add_field(self, field: Field, identifier: str | None = None) -> Field:
        """Take ownership of ``field``.

        The field is re-bound to this form's context even if another form
        owned it before: the last form to add a field owns it.
        It also takes over the form's namespace resolution, so its name lands
        below the same prefix as the trusted-properties token.
        """
        if not identifier:
            identifier = field.get_name()

        field.set_form_context(self.form_context)
        field.extension_service = self.extension_service
        self.fields[identifier] = field
        return field

    def add_hidden_field(self, field: Field, identifier: str | None = None) -> Field:
        if not identifier:
            identifier = field.get_name()

        self.add_field(field, identifier)
        self.hidden_fields[identifier] = field
        return field

    # -- Access --

    def get_field(self, identifier: str) -> Field:
        return self.fields[identifier]

    def __getitem__(self, identifier: str) -> Field:
        return self.fields[identifier]

    def __contains__(self, identifier: str) -> bool:
        return identifier in self.fields

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields.values())

    def __len__(self) -> int:
        return len(self.fields)

    def get_form_field_names(self) -> list[str]:
        """Rendered names of every field, in creation order."""
        return [field.render_name() for field in self.fields.values()]

    # -- Rendering --

    def render(self) -> dict[str, Any]:
        """Render the payload for the template layer.

        Raises:
            InvalidArgumentForHashGenerationError: If the field names cannot
                be turned into a trusted-properties token.
        """
        request = self.form_context.get_request()
        with observability.span(
            "protoform.form.render",
            controller=request.get_controller_name() if request else None,
            action=request.get_controller_action_name() if request else None,
            field_count=len(self.fields),
        ):
            fields = {
                identifier: field.render()
                for identifier, field in self.fields.items()
            }

            hidden_fields = [field.render() for field in self.hidden_fields.values()]
            hidden_fields.extend(self.render_hidden_fields())

        logger.debug(
            "Rendered form with %d fields and %d hidden fields",
            len(fields),
            len(hidden_fields),
        )
        observability.info(
            "Rendered form with {field_count} fields",
            field_count=len(fields),
            hidden_field_count=len(hidden_fields),
        )
        return {
            "fields": fields,
            "hiddenFields": hidden_fields,
        }

    def render_hidden_fields(self) -> list[dict[str, Any]]:
        """The trusted-properties field followed by the five referrer fields."""
        return [self.render_trusted_properties_field(), *self.render_referrer_fields()]

    def render_trusted_properties_field(self) -> dict[str, Any]:
        field = self._generated_field(TRUSTED_PROPERTIES_FIELD_NAME)
        token = self.mapping_service.generate_trusted_properties_token(
            self.get_form_field_names(),
            field.get_field_name_prefix(),
        )
        return field.set_value(token).render()

    def render_referrer_fields(self) -> list[dict[str, Any]]:
        request = self.form_context.get_request()
        extension_name = request.get_controller_extension_name()
        controller_name = request.get_controller_name()
        action_name = request.get_controller_action_name()

        values = [
            ("@extension", extension_name),
            ("@controller", controller_name),
            ("@action", action_name),
            ("arguments", self.hash_service.append_hmac(encode_arguments(request.get_arguments()))),
            (
                "@request",
                self.hash_service.append_hmac(
                    encode_action_request(extension_name, controller_name, action_name)
                ),
            ),
        ]

        return [
            self._generated_field(f"{REFERRER_KEY}[{key}]").set_value(value).render()
            for key, value in values
        ]

    # -- Internals --

    def _generated_field(self, name: str) -> Field:
        """A plain hidden field that is rendered but never registered on the form."""
        field = Field(name, extension_service=self.extension_service)
        field.set_form_context(self.form_context)
        field.set_respect_submitted_value(False)
        return field
