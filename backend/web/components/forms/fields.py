"""
Form field components.

Small wrappers that keep labels, help and error text consistent across the
login, registration, attendance and profile forms.
"""

from typing import Optional, Sequence, Tuple

from ..base import Component


class FormField(Component):
    """Wrapper that renders label, input slot, help, and error text."""

    def __init__(
        self,
        field_id: str,
        label: str,
        *,
        required: bool = False,
        help_text: Optional[str] = None,
        error_text: Optional[str] = None,
    ) -> None:
        self.field_id = field_id
        self.label = label
        self.required = required
        self.help_text = help_text
        self.error_text = error_text

    def _aria(self) -> dict:
        return {
            "aria_describedby": f"{self.field_id}-help" if self.help_text else None,
            "aria_invalid": "true" if self.error_text else "false",
        }

    def render(self, input_html: str) -> str:
        required_marker = '<span class="form-required" aria-hidden="true">*</span>' if self.required else ""
        help_html = (
            f'<p class="form-help" id="{self.field_id}-help">{self.escape(self.help_text)}</p>'
            if self.help_text
            else ""
        )
        error_html = (
            f'<p class="form-error" role="alert" id="{self.field_id}-error">{self.escape(self.error_text)}</p>'
            if self.error_text
            else ""
        )
        label_attrs = self.attributes(for_=self.field_id, class_="form-label")
        return (
            f'<div class="{self.classes("form-field", form_field__error=bool(self.error_text))}">'
            f"<label {label_attrs}>{self.escape(self.label)}{required_marker}</label>"
            f"{input_html}{help_html}{error_html}"
            "</div>"
        )


class TextInputField(FormField):
    """Single-line input; `input_type` is one of text, email, password, search."""

    def render(
        self,
        *,
        value: str = "",
        input_type: str = "text",
        autocomplete: Optional[str] = None,
        placeholder: Optional[str] = None,
        **attrs: str,
    ) -> str:
        input_attrs = self.attributes(
            id=self.field_id,
            name=self.field_id,
            type=input_type,
            value=value if input_type != "password" else None,
            autocomplete=autocomplete,
            placeholder=placeholder,
            required=self.required,
            class_="form-input",
            **self._aria(),
            **attrs,
        )
        return super().render(f"<input {input_attrs}>")


class SelectField(FormField):
    """Dropdown over (value, label) options."""

    def render(self, *, options: Sequence[Tuple[str, str]], selected: Optional[str] = None, **attrs: str) -> str:
        opts = "".join(
            f'<option {self.attributes(value=value, selected=(value == selected))}>{self.escape(label)}</option>'
            for value, label in options
        )
        select_attrs = self.attributes(
            id=self.field_id,
            name=self.field_id,
            required=self.required,
            class_="form-select",
            **self._aria(),
            **attrs,
        )
        return super().render(f"<select {select_attrs}>{opts}</select>")
