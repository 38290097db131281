"""
Profile page: display name and password change forms.
"""

from typing import Optional

from identity_access.domain import Profile

from ..base import Component
from ..cards import Card
from ..forms import SubmitButton, TextInputField


class ProfilePage(Component):
    def __init__(
        self,
        profile: Profile,
        *,
        email: Optional[str] = None,
        name_error: Optional[str] = None,
        password_error: Optional[str] = None,
    ):
        self.profile = profile
        self.email = email
        self.name_error = name_error
        self.password_error = password_error

    def render(self) -> str:
        name_field = TextInputField("full_name", "Nama Lengkap", required=True, error_text=self.name_error).render(
            value=self.profile.full_name, autocomplete="name"
        )
        name_form = f"""
        <form method="post" action="/profile" class="form">
            {name_field}
            {SubmitButton("Simpan Nama").render()}
        </form>"""
        password = TextInputField("password", "Password Baru", required=True, help_text="Minimal 6 karakter.").render(
            input_type="password", autocomplete="new-password"
        )
        confirm = TextInputField(
            "password_confirm", "Konfirmasi Password", required=True, error_text=self.password_error
        ).render(input_type="password", autocomplete="new-password")
        password_form = f"""
        <form method="post" action="/profile/password" class="form">
            {password}
            {confirm}
            {SubmitButton("Ubah Password").render()}
        </form>"""
        info = f"""
        <dl class="meta-list">
            <dt>Email</dt><dd>{self.escape(self.email or self.profile.pending_email or "-")}</dd>
            <dt>Peran</dt><dd>{self.escape(self.profile.role_label)}</dd>
        </dl>"""
        return f"""
        <header class="page-header"><h1>Profil Saya</h1></header>
        {Card("Informasi Akun", info).render()}
        {Card("Ubah Nama", name_form).render()}
        {Card("Ubah Password", password_form).render()}"""
