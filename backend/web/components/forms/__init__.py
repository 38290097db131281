"""
Form components for SIAKAD.
"""

from .fields import FormField, SelectField, TextInputField
from .submit import PostButton, SubmitButton

__all__ = [
    "FormField",
    "TextInputField",
    "SelectField",
    "SubmitButton",
    "PostButton",
]
