"""
Card and stat-card components.

Cards group one topic on a dashboard (an announcement list, a form, a
table). Stat cards show one headline count.
"""

from typing import Optional

from ..base import Component


class Card(Component):
    """Titled panel around pre-rendered body HTML."""

    def __init__(self, title: Optional[str], body_html: str, *, subtitle: Optional[str] = None, card_id: Optional[str] = None):
        self.title = title
        self.body_html = body_html
        self.subtitle = subtitle
        self.card_id = card_id

    def render(self) -> str:
        header = ""
        if self.title:
            sub = f'<p class="card-subtitle">{self.escape(self.subtitle)}</p>' if self.subtitle else ""
            header = f'<header class="card-header"><h2 class="card-title">{self.escape(self.title)}</h2>{sub}</header>'
        attrs = self.attributes(class_="card", id=self.card_id)
        return f'<section {attrs}>{header}<div class="card-body">{self.body_html}</div></section>'


class StatCard(Component):
    def __init__(self, label: str, value: int, *, tone: str = "default"):
        self.label = label
        self.value = value
        self.tone = tone

    def render(self) -> str:
        return (
            f'<div class="{self.classes("stat-card", f"stat-card--{self.tone}")}">'
            f'<span class="stat-value">{self.escape(self.value)}</span>'
            f'<span class="stat-label">{self.escape(self.label)}</span>'
            "</div>"
        )
