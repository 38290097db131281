"""
Portal session store: one gate and one data access handle per browsing context.
"""
from __future__ import annotations

import pytest

from identity_access import stores
from identity_access.data_access import Credentials
from identity_access.gate import View
from identity_access.stores import PortalSessionStore


pytestmark = pytest.mark.anyio("asyncio")


async def test_create_starts_gate_and_registers(backend):
    store = PortalSessionStore()
    portal = await store.create(backend)
    assert len(store) == 1
    assert portal.gate.view is View.LOGIN
    assert await store.get(portal.session_id) is portal


async def test_sessions_are_isolated(backend):
    store = PortalSessionStore()
    first = await store.create(backend)
    second = await store.create(backend)
    assert first.session_id != second.session_id

    await first.access.sign_in(Credentials("siswa@sekolah.sch.id", "siswa123"))
    await first.gate.settle()
    assert first.gate.view is View.STUDENT_DASHBOARD
    assert second.gate.view is View.LOGIN


async def test_expired_session_is_discarded(backend, monkeypatch: pytest.MonkeyPatch):
    store = PortalSessionStore(ttl_seconds=60)
    portal = await store.create(backend)
    now = stores._now()
    monkeypatch.setattr(stores, "_now", lambda: now + 120)
    assert await store.get(portal.session_id) is None
    assert len(store) == 0


async def test_get_slides_expiry(backend, monkeypatch: pytest.MonkeyPatch):
    store = PortalSessionStore(ttl_seconds=60)
    portal = await store.create(backend)
    now = stores._now()
    monkeypatch.setattr(stores, "_now", lambda: now + 30)
    await store.get(portal.session_id)
    assert portal.expires_at == now + 90


async def test_rotate_moves_session_to_new_id(backend):
    store = PortalSessionStore()
    portal = await store.create(backend)
    old = portal.session_id
    rotated = store.rotate(old)
    assert rotated is portal
    assert portal.session_id != old
    assert await store.get(old) is None
    assert await store.get(portal.session_id) is portal
    assert store.rotate("unknown") is None


async def test_prune_and_close_all(backend, monkeypatch: pytest.MonkeyPatch):
    store = PortalSessionStore(ttl_seconds=60)
    await store.create(backend)
    await store.create(backend)
    now = stores._now()
    monkeypatch.setattr(stores, "_now", lambda: now + 120)
    assert await store.prune() == 2

    await store.create(backend)
    await store.close_all()
    assert len(store) == 0


async def test_flash_is_consumed_once(backend):
    store = PortalSessionStore()
    portal = await store.create(backend)
    portal.flash = "Tersimpan."
    assert portal.pop_flash() == "Tersimpan."
    assert portal.pop_flash() is None


async def test_anonymous_sessions_get_short_ttl_until_sign_in(backend):
    store = PortalSessionStore(ttl_seconds=3600, anonymous_ttl_seconds=300)
    portal = await store.create(backend)
    now = stores._now()
    assert portal.signed_in is False
    assert portal.expires_at <= now + 300

    await portal.access.sign_in(Credentials("siswa@sekolah.sch.id", "siswa123"))
    await portal.gate.settle()
    store.rotate(portal.session_id)
    assert portal.signed_in is True
    assert portal.expires_at >= now + 3600

    await store.get(portal.session_id)
    assert portal.expires_at >= now + 3600


async def test_anonymous_sessions_are_capped_least_recent_first(backend):
    store = PortalSessionStore(max_anonymous=3)
    signed_in = await store.create(backend)
    await signed_in.access.sign_in(Credentials("admin@sekolah.sch.id", "admin123"))
    await signed_in.gate.settle()

    anonymous = [await store.create(backend) for _ in range(3)]
    for portal in anonymous:
        portal.expires_at -= 10
    await store.get(anonymous[0].session_id)

    newest = await store.create(backend)
    assert len(store) == 4
    assert await store.get(anonymous[1].session_id) is None
    assert await store.get(anonymous[0].session_id) is anonymous[0]
    assert await store.get(newest.session_id) is newest
    assert await store.get(signed_in.session_id) is signed_in
