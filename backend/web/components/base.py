"""
Base component class for the SIAKAD server-rendered UI.

Pages are assembled from small Python classes that return HTML strings. Every
interpolated value goes through `escape`, so record data (names, titles,
announcement bodies) can never inject markup.
"""

from typing import Any, Iterable, Optional
import html


class Component:
    """Base class for all UI components."""

    def render(self) -> str:
        raise NotImplementedError("Subclasses must implement render()")

    def __str__(self) -> str:
        return self.render()

    @staticmethod
    def escape(text: Optional[Any]) -> str:
        """Escape HTML entities; None renders as an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*args: str, **conditionals: bool) -> str:
        """Build a CSS class string with conditional classes.

        Example:
            >>> Component.classes("nav-item", active=True, muted=False)
            "nav-item active"
        """
        names = [a for a in args if a]
        names.extend(key.replace("_", "-") for key, value in conditionals.items() if value)
        return " ".join(names)

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Build HTML attributes from keyword arguments.

        A trailing underscore is stripped (class_ -> class, for_ -> for), inner
        underscores become hyphens (aria_label -> aria-label). True renders a
        boolean attribute; False and None are omitted.
        """
        result = []
        for key, value in attrs.items():
            key = key[:-1] if key.endswith("_") else key.replace("_", "-")
            if value is True:
                result.append(key)
            elif value is not False and value is not None:
                result.append(f'{key}="{html.escape(str(value))}"')
        return " ".join(result)

    @staticmethod
    def join(parts: Iterable[Any]) -> str:
        """Concatenate rendered children (components or strings)."""
        return "".join(str(p) for p in parts)
