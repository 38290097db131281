"""
Login and registration pages.
"""

from typing import Mapping, Optional

from identity_access.domain import Role

from ..base import Component
from ..forms import SelectField, SubmitButton, TextInputField


ROLE_OPTIONS = [
    (Role.STUDENT.value, "Siswa"),
    (Role.TEACHER_ADMIN.value, "Guru / Admin"),
]


def _alert(message: Optional[str], kind: str) -> str:
    if not message:
        return ""
    role = "alert" if kind == "error" else "status"
    return f'<div class="alert alert-{kind}" role="{role}">{Component.escape(message)}</div>'


class LoginPage(Component):
    def __init__(self, *, email: str = "", error: Optional[str] = None, notice: Optional[str] = None):
        self.email = email
        self.error = error
        self.notice = notice

    def render(self) -> str:
        email = TextInputField("email", "Email", required=True).render(
            value=self.email, input_type="email", autocomplete="username"
        )
        password = TextInputField("password", "Password", required=True).render(
            input_type="password", autocomplete="current-password"
        )
        return f"""
        <div class="auth-panel">
            <h1>Masuk ke SIAKAD</h1>
            <p class="text-muted">Sistem Informasi Akademik</p>
            {_alert(self.notice, "success")}
            {_alert(self.error, "error")}
            <form method="post" action="/auth/login" class="form">
                {email}
                {password}
                {SubmitButton("Masuk").render()}
            </form>
            <p class="auth-switch">Belum punya akun? <a href="/auth/register">Daftar di sini</a></p>
        </div>"""


class RegistrationPage(Component):
    def __init__(
        self,
        *,
        values: Optional[Mapping[str, str]] = None,
        error: Optional[str] = None,
        allowed_domains: tuple = (),
    ):
        self.values = dict(values or {})
        self.error = error
        self.allowed_domains = allowed_domains

    def render(self) -> str:
        domains_help = (
            "Gunakan email dengan domain: " + ", ".join(self.allowed_domains) if self.allowed_domains else None
        )
        full_name = TextInputField("full_name", "Nama Lengkap", required=True).render(
            value=self.values.get("full_name", ""), autocomplete="name"
        )
        email = TextInputField("email", "Email", required=True, help_text=domains_help).render(
            value=self.values.get("email", ""), input_type="email", autocomplete="email"
        )
        password = TextInputField("password", "Password", required=True, help_text="Minimal 6 karakter.").render(
            input_type="password", autocomplete="new-password"
        )
        role = SelectField("role", "Daftar sebagai", required=True).render(
            options=ROLE_OPTIONS, selected=self.values.get("role", Role.STUDENT.value)
        )
        return f"""
        <div class="auth-panel">
            <h1>Daftar Akun Baru</h1>
            <p class="text-muted">Akun baru harus disetujui Guru/Admin sebelum dapat digunakan.</p>
            {_alert(self.error, "error")}
            <form method="post" action="/auth/register" class="form">
                {full_name}
                {email}
                {password}
                {role}
                {SubmitButton("Daftar").render()}
            </form>
            <p class="auth-switch">Sudah punya akun? <a href="/auth/login">Masuk</a></p>
        </div>"""
