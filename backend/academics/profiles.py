"""Self-service profile edits: display name and password."""
from __future__ import annotations

from identity_access.data_access import DataAccess
from identity_access.domain import PROFILES_COLLECTION

from .errors import ValidationFailure


MIN_PASSWORD_LENGTH = 6
MAX_NAME_LENGTH = 120


async def update_full_name(access: DataAccess, user_id: str, full_name: str) -> str:
    name = " ".join((full_name or "").split())
    if not name:
        raise ValidationFailure("Nama lengkap wajib diisi.")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationFailure("Nama lengkap terlalu panjang.")
    await access.update(PROFILES_COLLECTION, {"id": user_id}, {"full_name": name})
    return name


def validate_new_password(password: str, confirm: str) -> None:
    if password != confirm:
        raise ValidationFailure("Password dan konfirmasi password tidak cocok.")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationFailure("Password minimal harus 6 karakter.")


async def change_password(access: DataAccess, password: str, confirm: str) -> None:
    """Validate locally, then update the credentials of the signed-in principal.

    Raises ValidationFailure, or AuthFailure when the backend rejects it.
    """
    validate_new_password(password, confirm)
    await access.update_credentials(password=password)


__all__ = ["MIN_PASSWORD_LENGTH", "update_full_name", "validate_new_password", "change_password"]
