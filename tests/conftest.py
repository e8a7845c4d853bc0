"""Shared pytest fixtures."""

import pytest

from protoform import observability
from protoform.config import get_settings
from protoform.extension import ExtensionService
from protoform.forms.core import Form
from protoform.request import ActionRequest
from protoform.security import HashService

SECRET = "test-secret-key"


@pytest.fixture
def hash_service():
    return HashService(SECRET)


@pytest.fixture
def extension_service():
    return ExtensionService()


@pytest.fixture
def make_request():
    """Factory for plugin requests of the BlogExample/Post plugin (namespace tx_blogexample_post)."""
    def _make(arguments=None, **overrides):
        values = {
            "extension_name": "BlogExample",
            "plugin_name": "Post",
            "controller_name": "Post",
            "action_name": "new",
            "arguments": arguments if arguments is not None else {},
        }
        values.update(overrides)
        return ActionRequest(**values)
    return _make


@pytest.fixture
def make_form(hash_service, extension_service):
    """Factory for forms with test services, so no settings are needed."""
    def _make(request, object_name=None):
        return Form(
            request,
            object_name=object_name,
            extension_service=extension_service,
            hash_service=hash_service,
        )
    return _make


@pytest.fixture(autouse=True)
def clean_settings():
    """Reset cached settings and tracing around each test."""
    get_settings.cache_clear()
    observability.reset()
    yield
    get_settings.cache_clear()
    observability.reset()
