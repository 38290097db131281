"""
Teacher/admin pages: analytics home, registration approvals, user management.
"""

from typing import List, Optional
from urllib.parse import quote

from academics.analytics import PortalStats
from identity_access.domain import AccountStatus, Profile

from ..base import Component
from ..cards import Card, StatCard
from ..forms import PostButton, SubmitButton, TextInputField
from ..tables import DataTable


STATUS_LABELS = {
    AccountStatus.PENDING: "Menunggu",
    AccountStatus.APPROVED: "Disetujui",
    AccountStatus.REJECTED: "Ditolak",
}


def status_label(profile: Profile) -> str:
    if profile.status is None:
        return profile.raw_status or "-"
    return STATUS_LABELS[profile.status]


def _error(message: Optional[str]) -> str:
    return f'<div class="alert alert-error" role="alert">{Component.escape(message)}</div>' if message else ""


class AdminHomePage(Component):
    def __init__(self, profile: Profile, stats: Optional[PortalStats], *, error: Optional[str] = None):
        self.profile = profile
        self.stats = stats
        self.error = error

    def render(self) -> str:
        header = f"""
        <header class="page-header">
            <h1>Dashboard Guru / Admin</h1>
            <p class="text-muted">Masuk sebagai {self.escape(self.profile.full_name)}.</p>
        </header>"""
        if self.stats is None:
            return header + _error(self.error or "Statistik tidak dapat dimuat.")
        pending_link = (
            '<p><a class="btn btn-primary" href="/admin/registrations">Tinjau pendaftaran</a></p>'
            if self.stats.pending
            else ""
        )
        return f"""
        {header}
        <div class="stat-grid">
            {StatCard("Siswa aktif", self.stats.students).render()}
            {StatCard("Guru / Admin aktif", self.stats.teachers).render()}
            {StatCard("Menunggu persetujuan", self.stats.pending, tone="warning").render()}
        </div>
        {pending_link}"""


class RegistrationsPage(Component):
    def __init__(self, pending: Optional[List[Profile]], *, error: Optional[str] = None):
        self.pending = pending
        self.error = error

    def render(self) -> str:
        if self.pending is None:
            body = ""
        else:
            rows = []
            for p in self.pending:
                uid = quote(p.id, safe="")
                actions = (
                    PostButton(f"/admin/registrations/{uid}/approve", "Setujui").render()
                    + PostButton(f"/admin/registrations/{uid}/reject", "Tolak", variant="danger").render()
                )
                rows.append((p.full_name, p.pending_email or "-", p.role_label, actions))
            body = DataTable(
                ["Nama", "Email", "Peran", "Aksi"],
                rows,
                html_columns=(3,),
                empty_message="Tidak ada pendaftaran yang menunggu persetujuan.",
                caption="Pendaftaran menunggu persetujuan",
            ).render()
        return f"""
        <header class="page-header"><h1>Manajemen Pendaftaran</h1></header>
        {_error(self.error)}
        {Card(None, body).render()}"""


class UsersPage(Component):
    def __init__(self, users: Optional[List[Profile]], *, term: str = "", error: Optional[str] = None):
        self.users = users
        self.term = term
        self.error = error

    def render(self) -> str:
        search = TextInputField("q", "Cari nama atau email").render(value=self.term, input_type="search")
        filters = f"""
        <form method="get" action="/admin/users" class="filter-bar">
            {search}
            {SubmitButton("Cari", variant="secondary").render()}
        </form>"""
        body = ""
        if self.users is not None:
            rows = []
            for p in self.users:
                delete = PostButton(
                    f"/admin/users/{quote(p.id, safe='')}/delete",
                    "Hapus",
                    variant="danger",
                    confirm=f"Hapus pengguna {p.full_name}?",
                ).render()
                rows.append((p.full_name, p.pending_email or "-", p.role_label, status_label(p), delete))
            body = DataTable(
                ["Nama", "Email", "Peran", "Status", "Aksi"],
                rows,
                html_columns=(4,),
                empty_message="Tidak ada pengguna yang cocok.",
                caption="Daftar pengguna",
            ).render()
        return f"""
        <header class="page-header"><h1>Manajemen Pengguna</h1></header>
        {_error(self.error)}
        {filters}
        {Card(None, body).render()}"""
