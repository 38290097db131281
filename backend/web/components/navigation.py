"""
Sidebar navigation for SIAKAD.

Role-based: students see their learning pages, teachers/admins see the
management pages. The logout control is a POST form so it passes the
same-origin check like every other state change.
"""

from typing import List, Optional, Tuple

from identity_access.domain import Profile, Role

from .base import Component


NavItem = Tuple[str, str, str]  # (href, label, icon)

STUDENT_ITEMS: List[NavItem] = [
    ("/", "Dashboard", "🏠"),
    ("/student/materials", "Materi Pelajaran", "📚"),
    ("/student/assignments", "Tugas", "📝"),
    ("/student/attendance", "Absensi", "✅"),
    ("/profile", "Profil", "👤"),
]

ADMIN_ITEMS: List[NavItem] = [
    ("/", "Dashboard", "🏠"),
    ("/admin/registrations", "Manajemen Pendaftaran", "📋"),
    ("/admin/users", "Manajemen Pengguna", "👥"),
    ("/profile", "Profil", "👤"),
]


def items_for(profile: Optional[Profile]) -> List[NavItem]:
    if profile is None:
        return []
    if profile.role is Role.TEACHER_ADMIN:
        return ADMIN_ITEMS
    if profile.role is Role.STUDENT:
        return STUDENT_ITEMS
    return []


def active_href(items: List[NavItem], current_path: str) -> Optional[str]:
    """Best prefix match; "/" only matches itself."""
    best = None
    for href, _, _ in items:
        if href == "/":
            if current_path == "/":
                return href
            continue
        if current_path == href or current_path.startswith(href + "/"):
            if best is None or len(href) > len(best):
                best = href
    return best


class Navigation(Component):
    def __init__(self, profile: Optional[Profile] = None, current_path: str = "/"):
        self.profile = profile
        self.current_path = current_path

    def render(self) -> str:
        items = items_for(self.profile)
        active = active_href(items, self.current_path)
        links = "".join(self._render_link(href, label, icon, href == active) for href, label, icon in items)
        if self.profile is not None:
            links += self._render_logout()
        name = self.profile.full_name if self.profile else ""
        role = self.profile.role_label if self.profile else ""
        return f"""
    <aside class="sidebar" id="sidebar" aria-label="Bilah samping">
        <nav class="sidebar-nav" role="navigation" aria-label="Navigasi utama">
            <div class="sidebar-header">
                <span class="sidebar-title">SIAKAD</span>
                <span class="sidebar-subtitle">SMK Korespondensi</span>
            </div>
            <div class="sidebar-items">
                {links}
            </div>
            <div class="sidebar-footer">
                <div class="user-name">{self.escape(name)}</div>
                <div class="user-role">{self.escape(role)}</div>
            </div>
        </nav>
    </aside>"""

    def _render_link(self, href: str, label: str, icon: str, active: bool) -> str:
        attrs = self.attributes(
            href=href,
            class_=self.classes("nav-item", active=active),
            aria_current="page" if active else None,
        )
        return f'<a {attrs}><span class="nav-icon" aria-hidden="true">{icon}</span><span class="nav-text">{self.escape(label)}</span></a>'

    def _render_logout(self) -> str:
        return """
                <form method="post" action="/auth/logout" class="nav-logout">
                    <button type="submit" class="nav-item nav-item-logout">
                        <span class="nav-icon" aria-hidden="true">🚪</span><span class="nav-text">Keluar</span>
                    </button>
                </form>"""


__all__ = ["Navigation", "STUDENT_ITEMS", "ADMIN_ITEMS", "items_for", "active_href"]
