"""protoform - render MVC form fields with signed trusted-properties and referrer fields."""

from protoform.exceptions import (
    FormContextError,
    InvalidArgumentForHashGenerationError,
    InvalidHashError,
    InvalidReferrerError,
    ProtoformError,
)
from protoform.extension import ExtensionService
from protoform.forms import Field, Form, FormContext
from protoform.mapping import PropertyMappingConfigurationService
from protoform.referrer import Referrer, read_referrer
from protoform.request import ActionRequest
from protoform.security import HashService
from protoform.validation import Message, Result

__all__ = [
    "ActionRequest",
    "ExtensionService",
    "Field",
    "Form",
    "FormContext",
    "FormContextError",
    "HashService",
    "InvalidArgumentForHashGenerationError",
    "InvalidHashError",
    "InvalidReferrerError",
    "Message",
    "PropertyMappingConfigurationService",
    "ProtoformError",
    "Referrer",
    "Result",
    "read_referrer",
]
