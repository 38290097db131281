"""
Server-rendered components: escaping, navigation and tables.
"""
from __future__ import annotations

import pytest

from identity_access.domain import AccountStatus, Profile, Role
from web.components import Layout
from web.components.base import Component
from web.components.navigation import ADMIN_ITEMS, STUDENT_ITEMS, Navigation, active_href, items_for
from web.components.pages import LoginPage, UsersPage
from web.components.tables import DataTable


def _profile(role: Role = Role.STUDENT, name: str = "Andi") -> Profile:
    return Profile(id="u1", full_name=name, role=role, status=AccountStatus.APPROVED)


def test_attributes_and_classes_helpers():
    attrs = Component.attributes(href="/x", class_="btn", aria_current=None, data_confirm="Yakin?", hidden=False)
    assert attrs == 'href="/x" class="btn" data-confirm="Yakin?"'
    assert Component.classes("tab", active=True, is_disabled=False) == "tab active"


def test_items_for_roles():
    assert items_for(_profile(Role.STUDENT)) == STUDENT_ITEMS
    assert items_for(_profile(Role.TEACHER_ADMIN)) == ADMIN_ITEMS
    assert items_for(None) == []


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/", "/"),
        ("/student/materials", "/student/materials"),
        ("/student/materials/abc", "/student/materials"),
        ("/studentx", None),
        ("/profile", "/profile"),
    ],
)
def test_active_href_prefix_match(path, expected):
    assert active_href(STUDENT_ITEMS, path) == expected


def test_navigation_marks_active_item_and_escapes_name():
    html = Navigation(_profile(name="<b>Andi</b>"), current_path="/student/attendance").render()
    assert 'href="/student/attendance" class="nav-item active" aria-current="page"' in html
    assert "&lt;b&gt;Andi&lt;/b&gt;" in html
    assert 'action="/auth/logout"' in html


def test_layout_without_profile_has_no_sidebar():
    html = Layout("Masuk", "<p>x</p>", flash="<script>alert(1)</script>").render()
    assert 'class="sidebar"' not in html
    assert "<title>Masuk - SIAKAD</title>" in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


def test_data_table_escapes_cells_except_html_columns():
    html = DataTable(["Nama", "Aksi"], [("<i>x</i>", "<button>ok</button>")], html_columns=(1,)).render()
    assert "&lt;i&gt;x&lt;/i&gt;" in html
    assert "<button>ok</button>" in html


def test_data_table_empty_state():
    html = DataTable(["Nama"], [], empty_message="Kosong.").render()
    assert '<p class="empty-state">Kosong.</p>' in html
    assert "<table" not in html


def test_login_page_never_echoes_password_value():
    html = LoginPage(email='a"@b.c', error="Email atau password salah.").render()
    assert 'value="a&quot;@b.c"' in html
    assert 'type="password"' in html
    assert html.count("value=") == 1


def test_users_page_quotes_ids_in_action_urls():
    user = Profile(id="a/b", full_name="Budi", role=Role.STUDENT, status=AccountStatus.APPROVED)
    html = UsersPage([user]).render()
    assert 'action="/admin/users/a%2Fb/delete"' in html
    assert 'data-confirm="Hapus pengguna Budi?"' in html
