"""
Authorization gate: decides what a browsing context may see right now.

Why:
    Identity state (is someone signed in?) and profile state (which role and
    approval status does that someone have?) arrive asynchronously and can
    change underneath each other. The gate reconciles both and guarantees that
    role- or status-gated content is never shown without a profile resolved
    for the *current* principal.

Design:
    - `transition(state, event) -> state` is a pure function over frozen
      dataclasses. It never performs I/O; it requests side effects through
      `GateState.effect`.
    - `AuthorizationGate` is the driver: it feeds events into `transition`,
      runs the requested effects on the asyncio loop and subscribes to
      identity changes.
    - Every principal appearance bumps `generation`. Lookup results carry the
      generation they were started for, so a superseded lookup can never
      commit a profile for the wrong principal.

Failure semantics:
    All identity/profile faults degrade to Unauthenticated (forced sign-out).
    No retries; one attempt per transition.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Set, Union
import asyncio
import logging

from .data_access import DataAccess, Unsubscribe
from .domain import AccountStatus, PROFILES_COLLECTION, Principal, Profile, Role


logger = logging.getLogger("siakad.identity_access")


class Phase(str, Enum):
    INITIALIZING = "initializing"
    RESOLVING_PROFILE = "resolving_profile"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Effect(str, Enum):
    """Side effect the driver must run after committing a state."""

    NONE = "none"
    RESOLVE_PROFILE = "resolve_profile"
    SIGN_OUT = "sign_out"


class View(str, Enum):
    LOADING = "loading"
    LOGIN = "login"
    PENDING_APPROVAL = "pending_approval"
    STUDENT_DASHBOARD = "student_dashboard"
    ADMIN_DASHBOARD = "admin_dashboard"
    ACCOUNT_PROBLEM = "account_problem"


@dataclass(frozen=True)
class GateState:
    phase: Phase = Phase.INITIALIZING
    principal: Optional[Principal] = None
    profile: Optional[Profile] = None
    generation: int = 0
    effect: Effect = Effect.NONE

    @property
    def loading(self) -> bool:
        return self.phase in (Phase.INITIALIZING, Phase.RESOLVING_PROFILE)


# --- Events ---------------------------------------------------------------------


@dataclass(frozen=True)
class SessionRestored:
    """Result of the initial current-principal query."""

    principal: Optional[Principal]


@dataclass(frozen=True)
class PrincipalChanged:
    """Identity change notification (sign-in, refresh, sign-out, expiry)."""

    principal: Optional[Principal]


@dataclass(frozen=True)
class ProfileFound:
    principal_id: str
    generation: int
    profile: Profile


@dataclass(frozen=True)
class ProfileMissing:
    principal_id: str
    generation: int


@dataclass(frozen=True)
class ProfileLookupFailed:
    principal_id: str
    generation: int
    reason: str = ""


@dataclass(frozen=True)
class LogoutRequested:
    pass


LookupResult = Union[ProfileFound, ProfileMissing, ProfileLookupFailed]
GateEvent = Union[SessionRestored, PrincipalChanged, LookupResult, LogoutRequested]


# --- Pure transition function ---------------------------------------------------


def _signed_out(state: GateState, effect: Effect = Effect.NONE) -> GateState:
    return GateState(phase=Phase.UNAUTHENTICATED, generation=state.generation + 1, effect=effect)


def _enter(state: GateState, principal: Optional[Principal]) -> GateState:
    if principal is None:
        return _signed_out(state)
    # Profile is cleared so a stale profile never pairs with the new principal.
    return GateState(
        phase=Phase.RESOLVING_PROFILE,
        principal=principal,
        generation=state.generation + 1,
        effect=Effect.RESOLVE_PROFILE,
    )


def is_current(state: GateState, event: LookupResult) -> bool:
    """True when a lookup result belongs to the lookup the state is waiting for."""
    return (
        state.phase is Phase.RESOLVING_PROFILE
        and state.principal is not None
        and state.principal.id == event.principal_id
        and state.generation == event.generation
    )


def transition(state: GateState, event: GateEvent) -> GateState:
    """Return the state that follows `state` after `event`."""
    if isinstance(event, SessionRestored):
        if state.phase is not Phase.INITIALIZING:
            # A change notification already superseded the initial query.
            return replace(state, effect=Effect.NONE)
        return _enter(state, event.principal)

    if isinstance(event, PrincipalChanged):
        return _enter(state, event.principal)

    if isinstance(event, LogoutRequested):
        return _signed_out(state)

    if isinstance(event, (ProfileFound, ProfileMissing, ProfileLookupFailed)):
        if not is_current(state, event):
            return replace(state, effect=Effect.NONE)
        if isinstance(event, ProfileFound) and event.profile.id == event.principal_id:
            return replace(state, phase=Phase.AUTHENTICATED, profile=event.profile, effect=Effect.NONE)
        # Not found, fault, or a record that does not belong to the principal.
        return _signed_out(state, effect=Effect.SIGN_OUT)

    raise TypeError(f"unknown gate event: {event!r}")


def decide_view(state: GateState) -> View:
    """Map a gate state to the top-level view it allows."""
    if state.phase is Phase.INITIALIZING:
        return View.LOADING
    if state.principal is None:
        return View.LOGIN
    if state.loading:
        return View.LOADING
    profile = state.profile
    if profile is None or profile.id != state.principal.id:
        return View.ACCOUNT_PROBLEM
    if profile.status is AccountStatus.PENDING:
        return View.PENDING_APPROVAL
    if profile.status is AccountStatus.APPROVED:
        if profile.role is Role.STUDENT:
            return View.STUDENT_DASHBOARD
        if profile.role is Role.TEACHER_ADMIN:
            return View.ADMIN_DASHBOARD
    return View.ACCOUNT_PROBLEM


# --- Driver ---------------------------------------------------------------------


class AuthorizationGate:
    """Drives `transition` for one browsing context.

    All methods must be called from the event loop that owns the data access
    handle; state changes are serialized on that loop.
    """

    def __init__(self, access: DataAccess, *, profiles_collection: str = PROFILES_COLLECTION) -> None:
        self._access = access
        self._collection = profiles_collection
        self._state = GateState()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def view(self) -> View:
        return decide_view(self._state)

    async def start(self) -> GateState:
        """Subscribe to identity changes, restore the session and settle."""
        if self._unsubscribe is None:
            self._unsubscribe = self._access.on_principal_change(self._on_principal_change)
        principal = await self._access.get_current_principal()
        self.dispatch(SessionRestored(principal))
        return await self.settle()

    def dispatch(self, event: GateEvent) -> GateState:
        previous = self._state
        if isinstance(event, (ProfileFound, ProfileMissing, ProfileLookupFailed)) and not is_current(previous, event):
            logger.debug("Discarding superseded profile lookup for %s", event.principal_id)
        state = transition(previous, event)
        self._state = state
        if state.phase is not previous.phase:
            logger.debug("Gate %s -> %s", previous.phase.value, state.phase.value)
        if state.effect is Effect.RESOLVE_PROFILE and state.principal is not None:
            self._spawn(self._resolve_profile(state.principal, state.generation))
        elif state.effect is Effect.SIGN_OUT:
            self._spawn(self._forced_sign_out())
        return state

    async def logout(self) -> GateState:
        """Clear local state, then ask the backend to sign out.

        Local state is cleared first; a backend fault is logged and never
        blocks the logout.
        """
        self.dispatch(LogoutRequested())
        try:
            await self._access.sign_out()
        except Exception as exc:
            logger.warning("Sign-out failed, local session cleared anyway: %s: %s", exc.__class__.__name__, str(exc))
        return await self.settle()

    async def refresh(self) -> GateState:
        """Re-resolve the profile of the current principal (after a profile edit)."""
        principal = await self._access.get_current_principal()
        self.dispatch(PrincipalChanged(principal))
        return await self.settle()

    async def settle(self, timeout: Optional[float] = None) -> GateState:
        """Wait until no profile lookup or forced sign-out is in flight.

        With a timeout, return the state reached so far once it elapses; the
        in-flight work keeps running and commits later.
        """
        if timeout is None:
            while self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            return self._state
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while self._tasks:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            await asyncio.wait(list(self._tasks), timeout=remaining)
        return self._state

    async def close(self) -> None:
        """Unsubscribe and cancel in-flight work. Safe to call twice."""
        self._closed = True
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # --- Internals -----------------------------------------------------------

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_principal_change(self, principal: Optional[Principal]) -> None:
        if self._closed:
            return
        self.dispatch(PrincipalChanged(principal))

    async def _resolve_profile(self, principal: Principal, generation: int) -> None:
        event: LookupResult
        try:
            record = await self._access.find_one(self._collection, {"id": principal.id})
        except Exception as exc:
            logger.warning("Profile lookup failed for %s: %s: %s", principal.id, exc.__class__.__name__, str(exc))
            event = ProfileLookupFailed(principal.id, generation, exc.__class__.__name__)
        else:
            if record is None:
                logger.info("No profile for %s, forcing sign-out", principal.id)
                event = ProfileMissing(principal.id, generation)
            else:
                event = ProfileFound(principal.id, generation, Profile.from_record(record))
        if not self._closed:
            self.dispatch(event)

    async def _forced_sign_out(self) -> None:
        try:
            await self._access.sign_out()
        except Exception as exc:
            logger.warning("Forced sign-out failed: %s: %s", exc.__class__.__name__, str(exc))


__all__ = [
    "Phase",
    "Effect",
    "View",
    "GateState",
    "SessionRestored",
    "PrincipalChanged",
    "ProfileFound",
    "ProfileMissing",
    "ProfileLookupFailed",
    "LogoutRequested",
    "transition",
    "decide_view",
    "is_current",
    "AuthorizationGate",
]
