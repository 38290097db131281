"""
Authorization gate: pure transition function and view decision.

Why:
    The transition function is the single place that decides which profile may
    be paired with which principal. These tests pin its invariants without any
    I/O: stale lookups never commit, every fault leads to a forced sign-out and
    dashboards require an approved, recognized profile.
"""
from __future__ import annotations

import pytest

from identity_access.domain import Principal, Profile
from identity_access.gate import (
    Effect,
    GateState,
    LogoutRequested,
    Phase,
    PrincipalChanged,
    ProfileFound,
    ProfileLookupFailed,
    ProfileMissing,
    SessionRestored,
    View,
    decide_view,
    transition,
)


ALICE = Principal(id="alice", email="alice@sekolah.sch.id")
BOB = Principal(id="bob", email="bob@sekolah.sch.id")


def _profile(user_id: str = "alice", role: str = "Siswa", status: str = "approved") -> Profile:
    return Profile.from_record({"id": user_id, "full_name": "Alice", "role": role, "status": status})


def _resolving(principal: Principal = ALICE) -> GateState:
    return transition(GateState(), SessionRestored(principal))


def test_initial_state_is_loading():
    state = GateState()
    assert state.phase is Phase.INITIALIZING
    assert state.loading is True
    assert decide_view(state) is View.LOADING


def test_restored_without_principal_is_unauthenticated():
    state = transition(GateState(), SessionRestored(None))
    assert state.phase is Phase.UNAUTHENTICATED
    assert state.effect is Effect.NONE
    assert decide_view(state) is View.LOGIN


def test_restored_principal_requests_profile_lookup():
    state = _resolving()
    assert state.phase is Phase.RESOLVING_PROFILE
    assert state.principal == ALICE
    assert state.profile is None
    assert state.effect is Effect.RESOLVE_PROFILE
    assert decide_view(state) is View.LOADING


def test_profile_found_authenticates():
    state = _resolving()
    state = transition(state, ProfileFound("alice", state.generation, _profile()))
    assert state.phase is Phase.AUTHENTICATED
    assert state.profile.id == "alice"
    assert state.effect is Effect.NONE
    assert decide_view(state) is View.STUDENT_DASHBOARD


@pytest.mark.parametrize(
    "event_factory",
    [
        lambda gen: ProfileMissing("alice", gen),
        lambda gen: ProfileLookupFailed("alice", gen, "DataAccessError"),
        lambda gen: ProfileFound("alice", gen, _profile(user_id="mallory")),
    ],
    ids=["not-found", "fault", "id-mismatch"],
)
def test_lookup_failures_force_sign_out(event_factory):
    state = _resolving()
    state = transition(state, event_factory(state.generation))
    assert state.phase is Phase.UNAUTHENTICATED
    assert state.principal is None
    assert state.profile is None
    assert state.effect is Effect.SIGN_OUT
    assert decide_view(state) is View.LOGIN


def test_superseded_lookup_is_discarded():
    first = _resolving(ALICE)
    second = transition(first, PrincipalChanged(BOB))
    assert second.generation > first.generation

    # Alice's late result must not commit against Bob.
    late = transition(second, ProfileFound("alice", first.generation, _profile("alice")))
    assert late.phase is Phase.RESOLVING_PROFILE
    assert late.principal == BOB
    assert late.profile is None
    assert late.effect is Effect.NONE

    done = transition(late, ProfileFound("bob", second.generation, _profile("bob", role="Guru/Admin")))
    assert done.phase is Phase.AUTHENTICATED
    assert done.profile.id == "bob"
    assert decide_view(done) is View.ADMIN_DASHBOARD


def test_same_principal_reappearing_discards_older_generation():
    first = _resolving(ALICE)
    again = transition(first, PrincipalChanged(ALICE))
    stale = transition(again, ProfileMissing("alice", first.generation))
    assert stale.phase is Phase.RESOLVING_PROFILE
    assert stale.effect is Effect.NONE


def test_lookup_result_after_logout_is_ignored():
    state = _resolving()
    gen = state.generation
    state = transition(state, LogoutRequested())
    state = transition(state, ProfileFound("alice", gen, _profile()))
    assert state.phase is Phase.UNAUTHENTICATED
    assert state.profile is None


def test_new_principal_clears_profile_and_shows_loading():
    state = _resolving()
    state = transition(state, ProfileFound("alice", state.generation, _profile()))
    state = transition(state, PrincipalChanged(BOB))
    assert state.profile is None
    assert state.loading is True
    assert decide_view(state) is View.LOADING


def test_vanished_principal_is_unauthenticated_without_sign_out_effect():
    state = _resolving()
    state = transition(state, ProfileFound("alice", state.generation, _profile()))
    state = transition(state, PrincipalChanged(None))
    assert state.phase is Phase.UNAUTHENTICATED
    assert state.profile is None
    assert state.effect is Effect.NONE


def test_session_restored_after_change_notification_is_ignored():
    state = transition(GateState(), PrincipalChanged(ALICE))
    after = transition(state, SessionRestored(None))
    assert after.phase is Phase.RESOLVING_PROFILE
    assert after.principal == ALICE
    assert after.effect is Effect.NONE


def test_logout_twice_stays_unauthenticated():
    state = _resolving()
    once = transition(state, LogoutRequested())
    twice = transition(once, LogoutRequested())
    assert once.phase is twice.phase is Phase.UNAUTHENTICATED
    assert twice.effect is Effect.NONE


def test_unknown_event_raises_type_error():
    with pytest.raises(TypeError):
        transition(GateState(), object())


@pytest.mark.parametrize(
    "role, status, expected",
    [
        ("Siswa", "pending", View.PENDING_APPROVAL),
        ("Guru/Admin", "pending", View.PENDING_APPROVAL),
        ("Siswa", "approved", View.STUDENT_DASHBOARD),
        ("Student", "APPROVED", View.STUDENT_DASHBOARD),
        ("Guru/Admin", "approved", View.ADMIN_DASHBOARD),
        ("Teacher/Admin", "approved", View.ADMIN_DASHBOARD),
        ("Siswa", "rejected", View.ACCOUNT_PROBLEM),
        ("Kepala Sekolah", "approved", View.ACCOUNT_PROBLEM),
        ("Siswa", "suspended", View.ACCOUNT_PROBLEM),
        (None, None, View.ACCOUNT_PROBLEM),
    ],
)
def test_view_decision_by_role_and_status(role, status, expected):
    state = _resolving()
    profile = _profile(role=role, status=status)
    state = transition(state, ProfileFound("alice", state.generation, profile))
    assert decide_view(state) is expected


def test_pending_wins_over_unrecognized_role():
    state = _resolving()
    state = transition(state, ProfileFound("alice", state.generation, _profile(role="Unknown", status="pending")))
    assert decide_view(state) is View.PENDING_APPROVAL


def test_authenticated_without_matching_profile_is_account_problem():
    # Not reachable through `transition`, but the decision must still refuse dashboards.
    state = GateState(phase=Phase.AUTHENTICATED, principal=ALICE, profile=_profile("mallory"))
    assert decide_view(state) is View.ACCOUNT_PROBLEM
    assert decide_view(GateState(phase=Phase.AUTHENTICATED, principal=ALICE)) is View.ACCOUNT_PROBLEM
