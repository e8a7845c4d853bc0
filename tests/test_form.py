"""Tests for the Form class from protoform.forms.core."""

from __future__ import annotations

import base64
import json
from unittest.mock import MagicMock

import pytest

from protoform.exceptions import InvalidArgumentForHashGenerationError
from protoform.extension import ExtensionService
from protoform.forms.core import Form, TRUSTED_PROPERTIES_FIELD_NAME
from protoform.forms.fields import Field
from protoform.referrer import read_referrer
from protoform.request import ActionRequest

PREFIX = "tx_blogexample_post"

GENERATED_NAMES = [
    f"{PREFIX}[__trustedProperties]",
    f"{PREFIX}[__referrer][@extension]",
    f"{PREFIX}[__referrer][@controller]",
    f"{PREFIX}[__referrer][@action]",
    f"{PREFIX}[__referrer][arguments]",
    f"{PREFIX}[__referrer][@request]",
]


# ---------------------------------------------------------------------------
# Field creation
# ---------------------------------------------------------------------------


class TestCreateField:
    def test_name_defaults_to_identifier(self, make_form, make_request):
        form = make_form(make_request())
        field = form.create_field("title")
        assert field.get_name() == "title"
        assert form.get_field("title") is field

    def test_explicit_name(self, make_form, make_request):
        form = make_form(make_request())
        field = form.create_field("search", "q[term]")
        assert field.render_name() == f"{PREFIX}[q][term]"

    def test_object_form_creates_property_fields(self, make_form, make_request):
        form = make_form(make_request(), object_name="post")
        field = form.create_field("title")
        assert field.is_property_field()
        assert field.render_name() == f"{PREFIX}[post][title]"

    def test_plain_form_creates_plain_fields(self, make_form, make_request):
        form = make_form(make_request())
        assert form.create_field("title").is_plain_field()

    def test_property_field_override(self, make_form, make_request):
        form = make_form(make_request(), object_name="post")
        assert form.create_field("page", property_field=False).is_plain_field()

    def test_fields_share_form_context(self, make_form, make_request):
        form = make_form(make_request())
        a = form.create_field("a")
        b = form.create_field("b")
        assert a.form_context is form.form_context
        assert b.form_context is form.form_context

    def test_returned_field_is_chainable(self, make_form, make_request):
        form = make_form(make_request())
        form.create_field("title").set_attribute("type", "text").set_default_value("x")
        assert form.render()["fields"]["title"]["type"] == "text"

    def test_hidden_field_is_registered_twice(self, make_form, make_request):
        form = make_form(make_request(), object_name="post")
        field = form.create_hidden_field("id")
        assert field.is_property_field()
        assert form.fields["id"] is field
        assert form.hidden_fields["id"] is field

    def test_plain_hidden_field_forces_plain(self, make_form, make_request):
        form = make_form(make_request(), object_name="post")
        field = form.create_plain_hidden_field("page")
        assert field.is_plain_field()
        assert form.hidden_fields["page"] is field

    def test_container_protocol(self, make_form, make_request):
        form = make_form(make_request())
        form.create_field("a")
        form.create_field("b")
        assert "a" in form
        assert len(form) == 2
        assert [f.get_name() for f in form] == ["a", "b"]
        assert form["b"].get_name() == "b"


class TestAddField:
    def test_add_field_uses_name_as_identifier(self, make_form, make_request):
        form = make_form(make_request())
        field = Field("title")
        form.add_field(field)
        assert form.fields["title"] is field
        assert field.form_context is form.form_context

    def test_add_field_with_identifier(self, make_form, make_request):
        form = make_form(make_request())
        form.add_field(Field("title"), "headline")
        assert "headline" in form

    def test_last_add_wins_ownership(self, make_form, make_request):
        first = make_form(make_request())
        second = make_form(make_request(action_name="edit"))
        field = Field("title")
        first.add_field(field)
        second.add_field(field)
        assert field.form_context is second.form_context
        # the first form still lists it, but renders it with the second context
        assert first.fields["title"].form_context is second.form_context

    def test_adopted_fields_use_form_namespace(self, make_request, hash_service):
        form = Form(
            make_request(),
            extension_service=ExtensionService({"BlogExample.Post": "blog"}),
            hash_service=hash_service,
        )
        form.create_field("title")
        form.add_field(Field("body"))
        form.add_hidden_field(Field("token"))

        rendered = form.render()

        assert rendered["fields"]["body"]["name"] == "blog[body]"
        assert rendered["fields"]["token"]["name"] == "blog[token]"
        token = rendered["hiddenFields"][1]["value"]
        assert form.mapping_service.decode_trusted_properties(token) == {
            "title": 1,
            "body": 1,
            "token": 1,
        }

    def test_add_hidden_field(self, make_form, make_request):
        form = make_form(make_request())
        field = Field("token")
        form.add_hidden_field(field)
        assert form.fields["token"] is field
        assert form.hidden_fields["token"] is field
        assert field.form_context is form.form_context


class TestContext:
    def test_set_object_name_switches_future_fields(self, make_form, make_request):
        form = make_form(make_request())
        form.set_object_name("post")
        assert form.form_context.is_object_form()
        assert form.create_field("title").is_property_field()

    def test_set_object_feeds_property_values(self, make_form, make_request):
        form = make_form(make_request(), object_name="post")
        form.set_object({"title": "Stored"})
        assert form.create_field("title").render_value() == "Stored"

    def test_set_request_replaces_context(self, make_form, make_request):
        form = make_form(make_request(), object_name="post")
        old_context = form.form_context
        form.set_request(make_request(action_name="edit"))
        assert form.form_context is not old_context
        assert not form.form_context.is_object_form()


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    def test_fields_keyed_by_identifier(self, make_form, make_request):
        form = make_form(make_request(), object_name="post")
        form.create_field("title").set_default_value("Hello")
        form.create_field("search", "q", property_field=False)
        rendered = form.render()
        assert rendered["fields"] == {
            "title": {"name": f"{PREFIX}[post][title]", "value": "Hello"},
            "search": {"name": f"{PREFIX}[q]", "value": None},
        }

    def test_hidden_fields_end_with_six_generated_fields(self, make_form, make_request):
        form = make_form(make_request())
        form.create_field("title")
        rendered = form.render()
        names = [f["name"] for f in rendered["hiddenFields"]]
        assert names == GENERATED_NAMES

    def test_registered_hidden_fields_come_first(self, make_form, make_request):
        form = make_form(make_request())
        form.create_plain_hidden_field("b").set_value("2")
        form.create_plain_hidden_field("a").set_value("1")
        hidden = form.render()["hiddenFields"]
        assert len(hidden) == 8
        assert [f["name"] for f in hidden[:2]] == [f"{PREFIX}[b]", f"{PREFIX}[a]"]
        assert [f["name"] for f in hidden[2:]] == GENERATED_NAMES

    def test_plain_referrer_values(self, make_form, make_request):
        form = make_form(make_request())
        hidden = form.render()["hiddenFields"]
        assert hidden[1]["value"] == "BlogExample"
        assert hidden[2]["value"] == "Post"
        assert hidden[3]["value"] == "new"

    def test_signed_referrer_values(self, make_form, make_request, hash_service):
        form = make_form(make_request({"page": "2", "filter": {"tag": "python"}}))
        hidden = form.render()["hiddenFields"]

        arguments = hash_service.validate_and_strip_hmac(hidden[4]["value"])
        assert json.loads(base64.b64decode(arguments)) == {"page": "2", "filter": {"tag": "python"}}

        action_request = hash_service.validate_and_strip_hmac(hidden[5]["value"])
        assert json.loads(action_request) == {
            "@extension": "BlogExample",
            "@controller": "Post",
            "@action": "new",
        }

    def test_trusted_properties_cover_all_fields(self, make_form, make_request):
        form = make_form(make_request(), object_name="post")
        form.create_field("title")
        form.create_field("tags", "tags[]", property_field=False)
        form.create_hidden_field("id")
        token = form.render()["hiddenFields"][1]["value"]
        assert form.mapping_service.decode_trusted_properties(token) == {
            "post": {"title": 1, "id": 1},
            "tags": {"0": 1},
        }

    def test_generated_fields_ignore_submitted_values(self, make_form, make_request):
        original = make_request({
            TRUSTED_PROPERTIES_FIELD_NAME: "forged",
            "__referrer": {"@action": "forged"},
        })
        request = make_request().forward(original)
        hidden = make_form(request).render()["hiddenFields"]
        assert hidden[0]["value"] != "forged"
        assert hidden[3]["value"] == "new"

    def test_render_is_idempotent(self, make_form, make_request):
        form = make_form(make_request({"page": "1"}), object_name="post")
        form.create_field("title").set_default_value("x")
        form.create_plain_hidden_field("page").set_value("1")
        first = form.render()
        second = form.render()
        assert first == second
        assert len(form.hidden_fields) == 1
        assert len(form.fields) == 2

    def test_trusted_properties_use_mapping_service(self, make_request, hash_service, extension_service):
        mapping_service = MagicMock()
        mapping_service.generate_trusted_properties_token.return_value = "token"
        form = Form(
            make_request(),
            extension_service=extension_service,
            hash_service=hash_service,
            mapping_service=mapping_service,
        )
        form.create_field("title")
        form.create_field("body")
        hidden = form.render()["hiddenFields"]
        assert hidden[0]["value"] == "token"
        mapping_service.generate_trusted_properties_token.assert_called_once_with(
            [f"{PREFIX}[title]", f"{PREFIX}[body]"], PREFIX
        )

    def test_conflicting_field_names_raise(self, make_form, make_request):
        form = make_form(make_request())
        form.create_field("a", "filter")
        form.create_field("b", "filter[tag]")
        with pytest.raises(InvalidArgumentForHashGenerationError):
            form.render()

    def test_unprefixed_form_without_plugin(self, make_form):
        form = make_form(ActionRequest(controller_name="Post", action_name="list"))
        form.create_field("q")
        hidden = form.render()["hiddenFields"]
        assert [f["name"] for f in hidden] == [
            "__trustedProperties",
            "__referrer[@extension]",
            "__referrer[@controller]",
            "__referrer[@action]",
            "__referrer[arguments]",
            "__referrer[@request]",
        ]
        assert form.mapping_service.decode_trusted_properties(hidden[0]["value"]) == {"q": 1}

    def test_rendered_referrer_round_trips(self, make_form, make_request, hash_service):
        form = make_form(make_request({"page": "3"}))
        submitted = {"__referrer": {}}
        for field in form.render()["hiddenFields"][1:]:
            key = field["name"][len(f"{PREFIX}[__referrer]["):-1]
            submitted["__referrer"][key] = field["value"]
        referrer = read_referrer(submitted, hash_service)
        assert (referrer.extension, referrer.controller, referrer.action) == ("BlogExample", "Post", "new")
        assert referrer.arguments == {"page": "3"}


class TestDefaultServices:
    def test_services_built_from_settings(self, monkeypatch, make_request, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SECRET_KEY", "from-env")
        (tmp_path / "app.yaml").write_text(
            "forms:\n  plugin_namespaces:\n    BlogExample.Post: blog\n"
        )
        form = Form(make_request())
        assert form.create_field("title").render_name() == "blog[title]"
        assert form.hash_service.generate_hmac("x") != ""
