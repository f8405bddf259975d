"""
Temporal controller: owns the "current year" and resolves it to a snapshot.

State machine
-------------
::

    Idle ──request_year──▶ PendingDebounce(year) ──quiet for DEBOUNCE──▶ Resolving(year, token)
                                 ▲    │                                       │
                                 └────┘ (another request restarts the timer)  ├─▶ Resolved(year, snapshot)
                                                                              └─▶ Failed(year, reason)

Every request bumps a monotonic *generation token*. A resolution remembers
the token it started with and, when it finishes, applies its outcome only if
that token is still current. A slow answer for a year the user has already
scrolled past is therefore dropped on arrival, whatever order the answers
come back in. The underlying generator call is never aborted.

Resolution order
----------------
1. Cache (skipped on a forced refresh). A hit resolves immediately.
2. No generator configured: year 0 resolves to the bundled fallback (which
   is written to the cache); any other year fails as ``unavailable``.
3. Generator: the raw record is validated; success is cached and applied,
   failure becomes ``Failed(reason)`` and the cache is left untouched.

A failure never clears :attr:`TemporalController.displayed`; the last good
snapshot stays on screen next to the error.

Everything runs on one asyncio event loop. ``request_year`` must be called
from inside a running loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any, Literal

from chronomap.core.cache import SnapshotCache
from chronomap.core.contracts.snapshot import Civilization, Snapshot, validate_snapshot
from chronomap.core.errors import FailureReason, GeneratorError
from chronomap.core.fallback import FALLBACK_YEAR, fallback_for
from chronomap.core.settings import LocaleName, get_logger
from chronomap.core.years import YEAR_MAX, YEAR_MIN, clamp_year
from chronomap.generator.snapshot_generator import SnapshotGenerator

DEBOUNCE_SECONDS = 0.8
AUTOPLAY_STEP = 50
AUTOPLAY_INTERVAL = 3.0
KEYBOARD_STEP = 10

SnapshotSource = Literal["cache", "generator", "fallback"]

logger = get_logger("chronomap.temporal")


# ---- States -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Idle:
    """Nothing requested yet."""


@dataclass(frozen=True, slots=True)
class PendingDebounce:
    year: int


@dataclass(frozen=True, slots=True)
class Resolving:
    year: int
    token: int


@dataclass(frozen=True, slots=True)
class Resolved:
    year: int
    snapshot: Snapshot = field(repr=False)
    source: SnapshotSource = "cache"


@dataclass(frozen=True, slots=True)
class Failed:
    year: int
    reason: FailureReason
    detail: str = ""

    @property
    def retryable(self) -> bool:
        """Transport errors may succeed on a manual refresh; the others will not."""
        return self.reason is FailureReason.TRANSPORT


ControllerState = Idle | PendingDebounce | Resolving | Resolved | Failed
Outcome = Resolved | Failed
StateListener = Callable[[ControllerState], None]
SelectionListener = Callable[[Civilization | None], None]


class TemporalController:
    """Debounced, cache-first, token-guarded year resolution.

    Parameters
    ----------
    cache:
        Snapshot cache; the only resource shared between requests.
    generator:
        Optional snapshot generator. ``None`` means offline: only cached
        years and the bundled year-0 snapshot can be shown.
    locale:
        Language passed to the generator.
    debounce_seconds, autoplay_step, autoplay_interval:
        Timing knobs; the defaults are the module constants.
    """

    def __init__(
        self,
        cache: SnapshotCache,
        generator: SnapshotGenerator | None = None,
        *,
        locale: LocaleName = "en",
        debounce_seconds: float = DEBOUNCE_SECONDS,
        autoplay_step: int = AUTOPLAY_STEP,
        autoplay_interval: float = AUTOPLAY_INTERVAL,
    ) -> None:
        self._cache = cache
        self._generator = generator
        self._locale: LocaleName = locale
        self._debounce = debounce_seconds
        self._autoplay_step = autoplay_step
        self._autoplay_interval = autoplay_interval

        self._state: ControllerState = Idle()
        self._year: int = FALLBACK_YEAR
        self._token: int = 0
        self._displayed: Snapshot | None = None
        self._selection: Civilization | None = None
        self._closed = False

        self._listeners: list[StateListener] = []
        self._selection_listeners: list[SelectionListener] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self._debounce_task: asyncio.Task[Any] | None = None
        self._autoplay_task: asyncio.Task[Any] | None = None

    # ------------------------------- Read side -------------------------------

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def year(self) -> int:
        """The most recently requested (clamped) year."""
        return self._year

    @property
    def token(self) -> int:
        return self._token

    @property
    def displayed(self) -> Snapshot | None:
        """The last successfully resolved snapshot."""
        return self._displayed

    @property
    def error(self) -> Failed | None:
        return self._state if isinstance(self._state, Failed) else None

    @property
    def selection(self) -> Civilization | None:
        return self._selection

    @property
    def locale(self) -> LocaleName:
        return self._locale

    @property
    def generator_configured(self) -> bool:
        return self._generator is not None

    @property
    def autoplaying(self) -> bool:
        return self._autoplay_task is not None and not self._autoplay_task.done()

    # ------------------------------ Observers --------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener(state)`` after every transition; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def subscribe_selection(self, listener: SelectionListener) -> Callable[[], None]:
        self._selection_listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._selection_listeners:
                self._selection_listeners.remove(listener)

        return _unsubscribe

    def _transition(self, state: ControllerState) -> None:
        self._state = state
        logger.debug("state -> %r", state)
        for listener in list(self._listeners):
            listener(state)

    # ------------------------------ Year requests ----------------------------

    def request_year(self, year: int, *, force_refresh: bool = False) -> int:
        """Debounced request for ``year``; returns the clamped year.

        Supersedes any pending or in-flight request.
        """
        if self._closed:
            raise RuntimeError("controller is closed")
        target = self._supersede(year)
        self._transition(PendingDebounce(target))
        self._debounce_task = self._spawn(self._debounced(target, self._token, force_refresh))
        return target

    async def resolve_now(self, year: int, *, force_refresh: bool = False) -> Outcome:
        """Resolve ``year`` immediately, bypassing the debounce.

        Returns the outcome of this request. It is applied to the controller
        state only if no newer request arrived while it was running.
        """
        if self._closed:
            raise RuntimeError("controller is closed")
        target = self._supersede(year)
        return await self._resolve(target, self._token, force_refresh)

    def refresh(self) -> int:
        """Forced refresh of the current year: skip the cache, ask the generator again."""
        return self.request_year(self._year, force_refresh=True)

    def step_year(self, delta: int = KEYBOARD_STEP) -> int:
        """Relative scrub; stops auto-advance."""
        self.stop_autoplay()
        return self.request_year(self._year + delta)

    def set_locale(self, locale: LocaleName) -> None:
        """Switch generator language and re-request the current year."""
        if locale == self._locale:
            return
        self._locale = locale
        self.request_year(self._year)

    def _supersede(self, year: int) -> int:
        target = clamp_year(year)
        self._year = target
        self._token += 1
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None
        return target

    async def _debounced(self, year: int, token: int, force_refresh: bool) -> None:
        await asyncio.sleep(self._debounce)
        if token != self._token:
            return
        self._debounce_task = None
        self._spawn(self._resolve(year, token, force_refresh))

    # ------------------------------ Resolution -------------------------------

    async def _resolve(self, year: int, token: int, force_refresh: bool) -> Outcome:
        self.clear_selection()
        self._transition(Resolving(year, token))

        try:
            outcome = await self._lookup(year, force_refresh)
        except Exception as exc:
            # Never leave the controller parked in Resolving.
            logger.exception("resolution of %s raised unexpectedly", year)
            outcome = Failed(year, FailureReason.TRANSPORT, f"{type(exc).__name__}: {exc}")

        if token != self._token:
            logger.info("dropping superseded result for %s (token %s < %s)", year, token, self._token)
            return outcome
        if isinstance(outcome, Resolved):
            self._displayed = outcome.snapshot
        else:
            logger.warning("year %s failed: %s (%s)", year, outcome.reason.value, outcome.detail)
        self._transition(outcome)
        return outcome

    async def _lookup(self, year: int, force_refresh: bool) -> Outcome:
        if not force_refresh:
            cached = self._cache.get(year)
            if cached is not None:
                return Resolved(year, cached, "cache")

        if self._generator is None:
            fallback = fallback_for(year)
            if fallback is not None:
                self._cache.put(year, fallback)
                return Resolved(year, fallback, "fallback")
            return Failed(
                year,
                FailureReason.UNAVAILABLE,
                "No local data for this year and no generator is configured.",
            )

        try:
            raw = await self._generator.generate(year, self._locale)
        except GeneratorError as exc:
            return Failed(year, exc.reason, str(exc))
        except Exception as exc:
            logger.exception("generator raised unexpectedly for %s", year)
            return Failed(year, FailureReason.TRANSPORT, f"{type(exc).__name__}: {exc}")

        validated = validate_snapshot(raw)
        if validated.is_err():
            return Failed(year, FailureReason.MALFORMED, validated.unwrap_err())
        snapshot = validated.unwrap()
        if snapshot.year != year:
            return Failed(
                year,
                FailureReason.MALFORMED,
                f"generator answered for year {snapshot.year}, expected {year}",
            )

        self._cache.put(year, snapshot)
        return Resolved(year, snapshot, "generator")

    # ------------------------------ Selection --------------------------------

    def select_civilization(self, name: str) -> Civilization | None:
        """Focus a civilization of the displayed snapshot; unknown names clear focus."""
        civ = self._displayed.civilization(name) if self._displayed is not None else None
        self._set_selection(civ)
        return civ

    def clear_selection(self) -> None:
        self._set_selection(None)

    def _set_selection(self, civ: Civilization | None) -> None:
        if civ is self._selection:
            return
        self._selection = civ
        for listener in list(self._selection_listeners):
            listener(civ)

    # ------------------------------ Auto-advance -----------------------------

    def start_autoplay(self) -> None:
        """Request ``year + step`` every interval; sticks at the upper bound."""
        if self._closed:
            raise RuntimeError("controller is closed")
        if self.autoplaying:
            return
        self._autoplay_task = self._spawn(self._autoplay_loop())

    def stop_autoplay(self) -> None:
        if self._autoplay_task is not None and not self._autoplay_task.done():
            self._autoplay_task.cancel()
        self._autoplay_task = None

    async def _autoplay_loop(self) -> None:
        while True:
            await asyncio.sleep(self._autoplay_interval)
            self.request_year(min(self._year + self._autoplay_step, YEAR_MAX))

    # ------------------------------ Lifecycle --------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("background task failed: %r", exc)

    async def settle(self) -> None:
        """Wait until no debounce timer or resolution is outstanding."""
        while True:
            pending = [t for t in self._tasks if t is not self._autoplay_task and not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        """Stop timers and make any in-flight result inert."""
        self._closed = True
        self._token += 1
        self.stop_autoplay()
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None


__all__ = [
    "YEAR_MIN",
    "YEAR_MAX",
    "DEBOUNCE_SECONDS",
    "AUTOPLAY_STEP",
    "AUTOPLAY_INTERVAL",
    "KEYBOARD_STEP",
    "clamp_year",
    "Idle",
    "PendingDebounce",
    "Resolving",
    "Resolved",
    "Failed",
    "ControllerState",
    "Outcome",
    "TemporalController",
]
