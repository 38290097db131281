"""
Layout component for SIAKAD.

Wraps pre-rendered page content into a complete HTML document, with the
role-based sidebar when a profile is known.
"""

from typing import Optional

from identity_access.domain import Profile

from .base import Component
from .navigation import Navigation


class Layout(Component):
    """Main layout component that assembles the complete page"""

    def __init__(
        self,
        title: str,
        content: str,
        profile: Optional[Profile] = None,
        current_path: str = "/",
        flash: Optional[str] = None,
        head_extra: str = "",
    ):
        """
        Args:
            title: Page title (will be escaped)
            content: Main content HTML (pre-rendered components)
            profile: Resolved profile; the sidebar is only shown when set
            current_path: Current URL path for active navigation highlighting
            flash: One-shot notice shown above the content (will be escaped)
            head_extra: Trusted markup appended to <head> (e.g. meta refresh)
        """
        self.title = title
        self.content = content
        self.profile = profile
        self.current_path = current_path
        self.flash = flash
        self.head_extra = head_extra

    def render(self) -> str:
        nav_html = Navigation(self.profile, self.current_path).render() if self.profile else ""
        body_class = self.classes("app", with_sidebar=self.profile is not None)
        flash_html = (
            f'<div class="alert alert-info" role="status">{self.escape(self.flash)}</div>' if self.flash else ""
        )
        return f"""<!DOCTYPE html>
<html lang="id">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="description" content="SIAKAD - Sistem Informasi Akademik">
    <title>{self.escape(self.title)} - SIAKAD</title>
    <link rel="stylesheet" href="/static/css/siakad.css">
    <script src="/static/js/siakad.js" defer></script>
    {self.head_extra}
</head>
<body class="{body_class}">
    <a href="#main-content" class="skip-link">Langsung ke konten utama</a>
    {nav_html}
    <main id="main-content" class="main-content" role="main">
        {flash_html}
        {self.content}
        <footer class="content-footer" role="contentinfo">
            <p class="text-muted">SIAKAD &middot; Sistem Informasi Akademik</p>
        </footer>
    </main>
</body>
</html>"""
