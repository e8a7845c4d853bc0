"""Request-bound forms with trusted-properties and referrer hidden fields."""

from protoform.forms.context import FormContext
from protoform.forms.core import Form, TRUSTED_PROPERTIES_FIELD_NAME
from protoform.forms.fields import Field
from protoform.forms.html import hidden_inputs, input_tag

__all__ = ["Form", "Field", "FormContext", "TRUSTED_PROPERTIES_FIELD_NAME", "hidden_inputs", "input_tag"]
