"""Markup helpers for rendered form payloads."""

from __future__ import annotations

from typing import Any

from markupsafe import Markup, escape


def render_attrs(attrs: dict[str, Any]) -> str:
    """Render a dict as HTML attributes. Returns '' or ' key="val" key2="val2"'.

    None values render as empty strings. Python-style keys are converted:
    ``class_`` -> ``class``, ``data_id`` -> ``data-id``.
    """
    if not attrs:
        return ""
    parts = []
    for k, v in attrs.items():
        attr_name = k.rstrip("_").replace("_", "-")
        parts.append(f'{attr_name}="{escape("" if v is None else str(v))}"')
    return " " + " ".join(parts)


def input_tag(rendered_field: dict[str, Any], type: str = "text") -> Markup:
    """Render an ``<input>`` for a rendered field; a ``type`` attribute on the field wins."""
    attrs = {"type": type, **rendered_field}
    return Markup(f"<input{render_attrs(attrs)}>")


def hidden_inputs(rendered_form: dict[str, Any]) -> Markup:
    """Render every hidden field of a form payload, one ``<input type="hidden">`` per line."""
    return Markup("\n").join(
        input_tag({**field, "type": "hidden"}) for field in rendered_form["hiddenFields"]
    )
