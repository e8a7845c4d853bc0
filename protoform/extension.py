"""Plugin namespace resolution for form field names."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from protoform.request import ActionRequest

logger = logging.getLogger(__name__)


class ExtensionService:
    """Resolves the namespace that prefixes every field name of a plugin.

    The default namespace is derived from the extension and plugin names:
        ExtensionService().get_plugin_namespace("BlogExample", "Post")
        -> "tx_blogexample_post"

    Explicit namespaces are configured as ``{"BlogExample.Post": "blog"}``.
    """

    def __init__(self, namespaces: dict[str, str] | None = None):
        self.namespaces = dict(namespaces or {})

    def get_plugin_namespace(self, extension_name: str, plugin_name: str) -> str:
        configured = self.namespaces.get(f"{extension_name}.{plugin_name}")
        if configured:
            return configured
        extension_key = extension_name.replace("_", "").lower()
        return f"tx_{extension_key}_{plugin_name.lower()}"

    def get_field_name_prefix(self, request: ActionRequest | None) -> str:
        """Namespace for the request's plugin, or ``""`` without a plugin identity."""
        if request is None:
            return ""
        extension_name = request.get_controller_extension_name()
        plugin_name = request.get_plugin_name()
        if not extension_name or not plugin_name:
            logger.debug("No plugin identity on request, field names stay unprefixed")
            return ""
        return self.get_plugin_namespace(extension_name, plugin_name)
