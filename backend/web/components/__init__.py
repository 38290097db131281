# SIAKAD component system
# Pure Python components for escaped, server-rendered HTML

from .base import Component
from .layout import Layout
from .navigation import Navigation
from .cards import Card, StatCard
from .forms import FormField, TextInputField, SelectField, SubmitButton, PostButton
from .tables import DataTable

__all__ = [
    "Component",
    "Layout",
    "Navigation",
    "Card",
    "StatCard",
    "FormField",
    "TextInputField",
    "SelectField",
    "SubmitButton",
    "PostButton",
    "DataTable",
]
