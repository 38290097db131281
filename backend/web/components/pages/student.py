"""
Student dashboard pages: home, materials, assignments and attendance.
"""

from typing import List, Optional

from academics.assignments import AssignmentOverview
from academics.attendance import ATTENDANCE_STATUSES, AttendanceOverview
from academics.clock import parse_timestamp
from academics.materials import ALL_COURSES, Course, Material
from academics.student_home import StudentHome
from identity_access.domain import Profile

from ..base import Component
from ..cards import Card, StatCard
from ..forms import SelectField, SubmitButton, TextInputField
from ..tables import DataTable


def format_date(value: object, *, with_time: bool = False) -> str:
    ts = parse_timestamp(value)
    if ts is None:
        return str(value or "-")
    return ts.strftime("%d/%m/%Y %H:%M" if with_time else "%d/%m/%Y")


def _error(message: Optional[str]) -> str:
    return f'<div class="alert alert-error" role="alert">{Component.escape(message)}</div>' if message else ""


class StudentHomePage(Component):
    def __init__(self, profile: Profile, home: Optional[StudentHome], *, error: Optional[str] = None):
        self.profile = profile
        self.home = home
        self.error = error

    def render(self) -> str:
        header = f"""
        <header class="page-header">
            <h1>Selamat datang, {self.escape(self.profile.full_name)}</h1>
            <p class="text-muted">Ringkasan kegiatan belajar Anda.</p>
        </header>"""
        if self.home is None:
            return header + _error(self.error or "Data dashboard tidak dapat dimuat.")
        return f"""
        {header}
        <div class="stat-grid">
            {StatCard("Notifikasi belum dibaca", self.home.unread_notifications, tone="info").render()}
            {StatCard("Tugas mendatang", len(self.home.upcoming)).render()}
        </div>
        <div class="grid">
            {Card("Tugas Mendatang", self._render_upcoming()).render()}
            {Card("Pengumuman Terbaru", self._render_announcements()).render()}
        </div>"""

    def _render_upcoming(self) -> str:
        if not self.home.upcoming:
            return '<p class="empty-state">Tidak ada tugas mendatang.</p>'
        items = "".join(
            f"""<li class="list-item">
                <div><strong>{self.escape(a.title)}</strong><span class="text-muted"> &middot; {self.escape(a.course_name)}</span></div>
                <span class="badge badge-warning">{self.escape(a.days_left_label)}</span>
            </li>"""
            for a in self.home.upcoming
        )
        return f'<ul class="item-list">{items}</ul>'

    def _render_announcements(self) -> str:
        if not self.home.announcements:
            return '<p class="empty-state">Belum ada pengumuman.</p>'
        items = "".join(
            f"""<article class="announcement">
                <h3>{self.escape(a.title)}</h3>
                <p class="text-muted">{self.escape(a.author_name)} &middot; {self.escape(format_date(a.created_at))}</p>
                <p>{self.escape(a.content)}</p>
            </article>"""
            for a in self.home.announcements
        )
        return items


class MaterialsPage(Component):
    def __init__(
        self,
        courses: List[Course],
        materials: List[Material],
        *,
        course_id: str = ALL_COURSES,
        term: str = "",
        error: Optional[str] = None,
    ):
        self.courses = courses
        self.materials = materials
        self.course_id = course_id or ALL_COURSES
        self.term = term
        self.error = error

    def render(self) -> str:
        options = [(ALL_COURSES, "Semua Mata Pelajaran")] + [(c.id, c.course_name) for c in self.courses]
        course_select = SelectField("course", "Mata Pelajaran").render(options=options, selected=self.course_id)
        search = TextInputField("q", "Cari materi").render(value=self.term, input_type="search")
        filters = f"""
        <form method="get" action="/student/materials" class="filter-bar">
            {course_select}
            {search}
            {SubmitButton("Terapkan", variant="secondary").render()}
        </form>"""
        return f"""
        <header class="page-header"><h1>Materi Pelajaran</h1></header>
        {_error(self.error)}
        {filters}
        <div class="grid">{self._render_materials()}</div>"""

    def _render_materials(self) -> str:
        if not self.materials:
            return '<p class="empty-state">Tidak ada materi yang cocok.</p>'
        cards = []
        for m in self.materials:
            link = (
                f'<a class="btn btn-secondary" href="{self.escape(m.file_url)}" target="_blank" rel="noopener">Buka Materi</a>'
                if m.file_url
                else ""
            )
            module = f'<span class="badge">{self.escape(m.module)}</span>' if m.module else ""
            body = f"<p>{self.escape(m.description or '')}</p>{module}{link}"
            cards.append(Card(m.title, body, subtitle=m.course_name).render())
        return "".join(cards)


class AssignmentsPage(Component):
    TABS = (("active", "Tugas Aktif"), ("history", "Riwayat Pengumpulan"))

    def __init__(self, overview: Optional[AssignmentOverview], *, tab: str = "active", error: Optional[str] = None):
        self.overview = overview
        self.tab = tab if tab in dict(self.TABS) else "active"
        self.error = error

    def render(self) -> str:
        tabs = "".join(
            f'<a {self.attributes(href=f"/student/assignments?tab={key}", class_=self.classes("tab", active=key == self.tab), aria_current="page" if key == self.tab else None)}>{self.escape(label)}</a>'
            for key, label in self.TABS
        )
        if self.overview is None:
            body = _error(self.error or "Data tugas tidak dapat dimuat.")
        elif self.tab == "history":
            body = DataTable(
                ["Tugas", "Mata Pelajaran", "Dikumpulkan", "Status", "Nilai", "Umpan Balik"],
                [
                    (
                        s.title,
                        s.course_name,
                        format_date(s.submitted_at, with_time=True),
                        s.status_label,
                        "-" if s.grade is None else f"{s.grade:g}",
                        s.feedback or "-",
                    )
                    for s in self.overview.history
                ],
                empty_message="Belum ada tugas yang dikumpulkan.",
            ).render()
        else:
            body = DataTable(
                ["Tugas", "Mata Pelajaran", "Deskripsi", "Batas Waktu"],
                [(a.title, a.course_name, a.description, format_date(a.due_date, with_time=True)) for a in self.overview.active],
                empty_message="Tidak ada tugas aktif.",
            ).render()
        return f"""
        <header class="page-header"><h1>Tugas</h1></header>
        <nav class="tabs" aria-label="Tab tugas">{tabs}</nav>
        {body}"""


class AttendancePage(Component):
    def __init__(self, overview: Optional[AttendanceOverview], *, error: Optional[str] = None):
        self.overview = overview
        self.error = error

    def render(self) -> str:
        if self.overview is None:
            return f'<header class="page-header"><h1>Absensi</h1></header>{_error(self.error or "Data absensi tidak dapat dimuat.")}'
        if self.overview.today_status:
            today = f'<p>Status hari ini: <span class="badge badge-success">{self.escape(self.overview.today_status)}</span></p>'
        else:
            buttons = "".join(
                SubmitButton(status, variant="secondary", name="status", value=status).render()
                for status in ATTENDANCE_STATUSES
            )
            today = f"""
            <form method="post" action="/student/attendance" class="button-row">
                {buttons}
            </form>"""
        history = DataTable(
            ["Tanggal", "Status"],
            [(format_date(e.date), e.status) for e in self.overview.history],
            empty_message="Belum ada riwayat absensi.",
        ).render()
        return f"""
        <header class="page-header"><h1>Absensi</h1></header>
        {_error(self.error)}
        {Card(f"Absensi Hari Ini ({format_date(self.overview.today)})", today).render()}
        {Card("Riwayat Absensi", history).render()}"""
