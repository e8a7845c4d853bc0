"""Litestar integration: build an ActionRequest from an incoming request.

Route handlers declare their plugin identity through ``opt``:

    @get("/posts/new", opt={"extension": "BlogExample", "plugin": "Post",
                            "controller": "Post", "action": "new"})
    async def new_post(request: Request) -> Template:
        action_request = await action_request_from_litestar(request)
        form = Form(action_request, object_name="post")
        ...
"""

from __future__ import annotations

import logging
from typing import Any

from litestar import Request

from protoform.arguments import namespaced, unflatten
from protoform.extension import ExtensionService
from protoform.request import ActionRequest

logger = logging.getLogger(__name__)

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


async def submitted_arguments(request: Request) -> dict[str, Any]:
    """Query string and form body merged and unflattened; body values win."""
    pairs = list(request.query_params.multi_items())
    if request.method in _BODY_METHODS:
        form_data = await request.form()
        pairs.extend(form_data.multi_items())
    return unflatten(pairs)


async def action_request_from_litestar(
    request: Request,
    *,
    extension_name: str | None = None,
    plugin_name: str | None = None,
    controller_name: str | None = None,
    action_name: str | None = None,
    extension_service: ExtensionService | None = None,
) -> ActionRequest:
    """Describe a Litestar request as an ActionRequest.

    Identity not passed explicitly is read from the route handler's ``opt``
    (``extension``, ``plugin``, ``controller``, ``action``). The arguments
    are the submitted values below the plugin's namespace.
    """
    opt = request.route_handler.opt if request.scope.get("route_handler") else {}

    action_request = ActionRequest(
        extension_name=extension_name or opt.get("extension"),
        plugin_name=plugin_name or opt.get("plugin"),
        controller_name=controller_name or opt.get("controller"),
        action_name=action_name or opt.get("action"),
    )

    namespace = (extension_service or ExtensionService()).get_field_name_prefix(action_request)
    action_request.arguments = namespaced(await submitted_arguments(request), namespace)

    logger.debug(
        "Built action request %s->%s with %d arguments",
        action_request.controller_name,
        action_request.action_name,
        len(action_request.arguments),
    )
    return action_request
