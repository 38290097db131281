"""
Gate status pages: loading, pending approval, account problem.

These are the views a signed-in principal sees when no dashboard is allowed
yet (or at all). Each offers logout as the only action.
"""

from typing import Optional

from identity_access.domain import Profile

from ..base import Component
from ..forms import PostButton


LOGOUT_ACTION = "/auth/logout"


class LoadingPage(Component):
    """Shown while the profile lookup is still in flight; refreshes itself."""

    REFRESH_SECONDS = 1

    def __init__(self, target: str = "/"):
        self.target = target

    def head_extra(self) -> str:
        return f'<meta http-equiv="refresh" content="{self.REFRESH_SECONDS};url={self.escape(self.target)}">'

    def render(self) -> str:
        return """
        <div class="center-panel" aria-busy="true">
            <div class="spinner" aria-hidden="true"></div>
            <p class="text-muted">Memuat data akun...</p>
        </div>"""


class PendingApprovalPage(Component):
    def __init__(self, profile: Optional[Profile] = None):
        self.profile = profile

    def render(self) -> str:
        name = self.profile.full_name if self.profile else ""
        greeting = f"Halo, {self.escape(name)}." if name else "Halo."
        return f"""
        <div class="center-panel">
            <h1>Menunggu Persetujuan</h1>
            <p>{greeting} Akun Anda sudah terdaftar dan sedang menunggu persetujuan dari Guru/Admin.</p>
            <p class="text-muted">Silakan coba masuk kembali setelah akun Anda disetujui.</p>
            {PostButton(LOGOUT_ACTION, "Keluar", variant="secondary").render()}
        </div>"""


class AccountProblemPage(Component):
    """Fallback for any account state without a dashboard (e.g. rejected)."""

    def render(self) -> str:
        return f"""
        <div class="center-panel">
            <h1>Terjadi Masalah</h1>
            <p>Status akun Anda tidak dikenali atau tidak memiliki akses ke portal ini.</p>
            <p class="text-muted">Hubungi Guru/Admin sekolah bila menurut Anda ini keliru.</p>
            {PostButton(LOGOUT_ACTION, "Keluar", variant="secondary").render()}
        </div>"""


class ServiceUnavailablePage(Component):
    def render(self) -> str:
        return """
        <div class="center-panel">
            <h1>Layanan Tidak Tersedia</h1>
            <p>Server data sedang tidak dapat dihubungi. Silakan coba beberapa saat lagi.</p>
            <a class="btn btn-secondary" href="/">Muat ulang</a>
        </div>"""
