"""
Simple data table component.

Cells are escaped unless the column is declared as trusted HTML (used for
action buttons rendered by other components).
"""

from typing import Iterable, List, Optional, Sequence

from .base import Component


class DataTable(Component):
    def __init__(
        self,
        headers: Sequence[str],
        rows: Iterable[Sequence[object]],
        *,
        html_columns: Sequence[int] = (),
        empty_message: str = "Tidak ada data.",
        caption: Optional[str] = None,
    ):
        self.headers = list(headers)
        self.rows: List[Sequence[object]] = list(rows)
        self.html_columns = set(html_columns)
        self.empty_message = empty_message
        self.caption = caption

    def _cell(self, index: int, value: object) -> str:
        content = str(value) if index in self.html_columns else self.escape(value)
        return f"<td>{content}</td>"

    def render(self) -> str:
        if not self.rows:
            return f'<p class="empty-state">{self.escape(self.empty_message)}</p>'
        caption = f'<caption class="sr-only">{self.escape(self.caption)}</caption>' if self.caption else ""
        head = "".join(f'<th scope="col">{self.escape(h)}</th>' for h in self.headers)
        body = "".join(
            "<tr>" + "".join(self._cell(i, v) for i, v in enumerate(row)) + "</tr>" for row in self.rows
        )
        return f'<table class="data-table">{caption}<thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>'
