"""Time-driven reveal state machine.

A reveal moves ``idle -> running(cursor) -> complete -> idle``. While running,
the cursor advances by one every ``tick_interval`` seconds until it reaches
``total``; after ``settle_delay`` more seconds the reveal settles back to idle.
The timer only drives :meth:`RevealScheduler.tick` and
:meth:`RevealScheduler.settle`, so both can be called by hand for
deterministic stepping.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Literal, TypeAlias

from decision_reveal.core._exceptions import NoActiveReveal


logger = logging.getLogger(__name__)

RevealState: TypeAlias = Literal["idle", "running", "complete"]
Sleep: TypeAlias = Callable[[float], Awaitable[None]]
Listener: TypeAlias = Callable[["RevealScheduler"], None]


class RevealScheduler:
    """Cursor over ``total`` items, advanced at a fixed cadence.

    Each instance runs once. Starting a new reveal means creating a new
    instance and cancelling the old one.

    Args:
        total: Number of items to reveal.
        tick_interval: Seconds between cursor increments.
        settle_delay: Seconds between completion and settling back to idle.
        name: Name used in logs and for the asyncio task.
        sleep: Coroutine function used to wait. Defaults to ``asyncio.sleep``.
    """

    def __init__(
        self,
        total: int,
        tick_interval: float,
        settle_delay: float = 0.0,
        *,
        name: str = "reveal",
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if total < 0:
            raise ValueError("total must be >= 0")
        if tick_interval < 0:
            raise ValueError("tick_interval must be >= 0")
        if settle_delay < 0:
            raise ValueError("settle_delay must be >= 0")

        self.total = total
        self.tick_interval = tick_interval
        self.settle_delay = settle_delay
        self.name = name

        self._sleep = sleep
        self._state: RevealState = "idle"
        self._cursor = 0
        self._started = False
        self._settled = False
        self._cancelled = False
        self._task: asyncio.Task[None] | None = None
        self._listeners: List[Listener] = []

    @property
    def state(self) -> RevealState:
        return self._state

    @property
    def cursor(self) -> int:
        """Number of items revealed so far."""
        return self._cursor

    @property
    def active(self) -> bool:
        """Whether the reveal is running or waiting to settle."""
        return self._state != "idle"

    @property
    def settled(self) -> bool:
        """Whether the reveal ran to the end, including the settle delay."""
        return self._settled

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return min(self._cursor / self.total * 100, 100.0)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every transition. Returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def begin(self) -> None:
        """Enter the running state with the cursor at 0."""
        if self._started:
            raise RuntimeError(f"The {self.name} reveal has already been started")
        self._started = True
        self._state = "running"
        self._cursor = 0
        logger.debug(f"Starting {self.name} reveal over {self.total} items")
        self._on_start()
        self._notify()
        if self.total == 0:
            self._complete()

    def tick(self) -> int:
        """Advance the cursor by one. Returns the new cursor."""
        if self._state != "running":
            raise RuntimeError(f"Cannot tick a {self._state} {self.name} reveal")
        self._cursor += 1
        self._on_tick(self._cursor)
        self._notify()
        if self._cursor >= self.total:
            self._complete()
        return self._cursor

    def _complete(self) -> None:
        self._state = "complete"
        logger.debug(f"The {self.name} reveal is complete")
        self._on_complete()
        self._notify()

    def settle(self) -> None:
        """Leave the complete state after the settle delay."""
        if self._state != "complete":
            raise RuntimeError(f"Cannot settle a {self._state} {self.name} reveal")
        self._state = "idle"
        self._settled = True
        self._on_settle()
        self._notify()

    def cancel(self, missing_ok: bool = True) -> bool:
        """Stop further ticks, keeping the cursor at its last value.

        Args:
            missing_ok: If False, raise when there is nothing to cancel.

        Returns:
            True if an active reveal was cancelled.

        Raises:
            NoActiveReveal: If nothing is running and ``missing_ok`` is False.
        """
        if self._state == "idle":
            if not missing_ok:
                raise NoActiveReveal(f"No active {self.name} reveal to cancel")
            return False

        self._cancelled = True
        self._state = "idle"
        if (
            self._task is not None
            and not self._task.done()
            and self._task is not asyncio.current_task()
        ):
            self._task.cancel()
        logger.info(
            f"Cancelled {self.name} reveal at {self._cursor}/{self.total} items"
        )
        self._on_cancel()
        self._notify()
        return True

    async def _drive(self) -> None:
        while self._state == "running":
            await self._sleep(self.tick_interval)
            if self._state != "running":
                return
            self.tick()
        if self._state == "complete":
            await self._sleep(self.settle_delay)
            if self._state == "complete":
                self.settle()

    async def run(self) -> None:
        """Run the whole reveal in the current task."""
        self.begin()
        await self._drive()

    def start(self) -> asyncio.Task[None]:
        """Begin the reveal now and drive it from a background task."""
        self.begin()
        self._task = asyncio.get_running_loop().create_task(
            self._drive(), name=f"{self.name}-reveal"
        )
        return self._task

    async def wait(self) -> None:
        """Wait for the background task to finish, whether settled or cancelled."""
        if self._task is None:
            return
        await asyncio.wait({self._task})
        if not self._task.cancelled():
            self._task.result()

    def _on_start(self) -> None:
        pass

    def _on_tick(self, cursor: int) -> None:
        pass

    def _on_complete(self) -> None:
        pass

    def _on_settle(self) -> None:
        pass

    def _on_cancel(self) -> None:
        pass
