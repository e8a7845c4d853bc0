"""The request accessor consumed by forms."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from protoform.validation import Result


@dataclass
class ActionRequest:
    """Identity and arguments of the controller action being rendered.

    A request that re-renders a form after failed validation carries the
    failed request as ``original_request``, together with the validation
    results produced for it.
    """

    extension_name: str | None = None
    plugin_name: str | None = None
    controller_name: str | None = None
    action_name: str | None = None
    arguments: dict[str, Any] = field(default_factory=dict)
    original_request: ActionRequest | None = None
    original_request_mapping_results: Result = field(default_factory=Result)

    def get_controller_extension_name(self) -> str | None:
        return self.extension_name

    def get_plugin_name(self) -> str | None:
        return self.plugin_name

    def get_controller_name(self) -> str | None:
        return self.controller_name

    def get_controller_action_name(self) -> str | None:
        return self.action_name

    def get_arguments(self) -> dict[str, Any]:
        return self.arguments

    def get_original_request(self) -> ActionRequest | None:
        return self.original_request

    def get_original_request_mapping_results(self) -> Result:
        return self.original_request_mapping_results

    def is_resubmission(self) -> bool:
        return self.original_request is not None

    def forward(
        self, original: ActionRequest, mapping_results: Result | None = None
    ) -> ActionRequest:
        """Return a copy of this request that re-renders ``original`` after it failed validation."""
        return replace(
            self,
            original_request=original,
            original_request_mapping_results=mapping_results or Result(),
        )
