"""
Submit button component.
"""

from typing import Optional

from ..base import Component


class SubmitButton(Component):
    """Form action button; `variant` maps to the btn-* style."""

    def __init__(
        self,
        label: str,
        *,
        variant: str = "primary",
        disabled: bool = False,
        name: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        self.label = label
        self.variant = variant
        self.disabled = disabled
        self.name = name
        self.value = value

    def render(self) -> str:
        attrs = self.attributes(
            type="submit",
            class_=f"btn btn-{self.variant}",
            disabled=self.disabled,
            name=self.name,
            value=self.value,
        )
        return f"<button {attrs}>{self.escape(self.label)}</button>"


class PostButton(Component):
    """A one-button POST form (approve, reject, delete, logout)."""

    def __init__(self, action: str, label: str, *, variant: str = "primary", confirm: Optional[str] = None) -> None:
        self.action = action
        self.label = label
        self.variant = variant
        self.confirm = confirm

    def render(self) -> str:
        form_attrs = self.attributes(
            method="post",
            action=self.action,
            class_="inline-form",
            data_confirm=self.confirm,
        )
        return f"<form {form_attrs}>{SubmitButton(self.label, variant=self.variant).render()}</form>"
