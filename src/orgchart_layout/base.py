"""
Base classes for the layout engine.

This module provides abstract base classes that define the common
interface and shared functionality for the simulations:

- BaseLayout: Abstract base with event system and random seed
- IterativeLayout: For layouts driven by a tick loop with alpha cooling
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

from .types import Event, EventCallback, EventType

#: Default per-tick alpha decay: alpha reaches 0.001 after 300 ticks.
DEFAULT_ALPHA_DECAY = 1 - 0.001 ** (1 / 300)


class BaseLayout(ABC):
    """
    Abstract base class for all layouts.

    Provides shared infrastructure:
    - Event system (one callback per event type plus an observer that
      receives every event)
    - Random seed for reproducible layouts
    """

    def __init__(
        self,
        *,
        random_seed: Optional[int] = None,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
        observer: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize layout with configuration.

        Args:
            random_seed: Random seed for reproducible layouts
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
            observer: Callback receiving every event (structured diagnostics)
        """
        self._events: dict[EventType, EventCallback] = {}
        self._observer: Optional[EventCallback] = observer
        self._random_seed: Optional[int] = None

        if random_seed is not None:
            self.random_seed = random_seed

        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def random_seed(self) -> Optional[int]:
        """Get random seed for reproducible layouts."""
        return self._random_seed

    @random_seed.setter
    def random_seed(self, value: Optional[int]) -> None:
        """Set random seed for reproducible layouts."""
        self._random_seed = value

    @property
    def observer(self) -> Optional[EventCallback]:
        """Get the observer receiving every event."""
        return self._observer

    @observer.setter
    def observer(self, value: Optional[EventCallback]) -> None:
        self._observer = value

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Optional[EventCallback]) -> Self:
        """
        Subscribe to a layout event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires; None unsubscribes

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        if callback is None:
            self._events.pop(event, None)
        else:
            self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback and the observer.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)
        if self._observer is not None:
            self._observer(event)

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    @abstractmethod
    def run(self, **kwargs: Any) -> Self:
        """
        Run the layout to completion.

        Returns:
            self (for chaining)
        """
        pass

    def stop(self) -> Self:
        """
        Stop the layout.

        Returns:
            self (for chaining)
        """
        return self


class IterativeLayout(BaseLayout):
    """
    Base class for tick-driven layouts with alpha cooling.

    Alpha is the simulation energy. Each tick moves it toward
    ``alpha_target`` by ``alpha_decay``; the layout has converged once
    alpha drops below ``alpha_min``.
    """

    def __init__(
        self,
        *,
        random_seed: Optional[int] = None,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
        observer: Optional[EventCallback] = None,
        # IterativeLayout-specific parameters
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_decay: float = DEFAULT_ALPHA_DECAY,
        alpha_target: float = 0.0,
        iterations: int = 300,
    ) -> None:
        """
        Initialize iterative layout.

        Args:
            random_seed: Random seed for reproducible layouts
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
            observer: Callback receiving every event
            alpha: Initial alpha (0 to 1)
            alpha_min: Minimum alpha for convergence threshold
            alpha_decay: Fraction of the gap to alpha_target closed per tick (0 to 1)
            alpha_target: Alpha the simulation cools toward (0 to 1)
            iterations: Maximum number of ticks per run()
        """
        super().__init__(
            random_seed=random_seed,
            on_start=on_start,
            on_tick=on_tick,
            on_end=on_end,
            observer=observer,
        )
        self._alpha: float = max(0.0, min(1.0, float(alpha)))
        self._alpha_min: float = float(alpha_min)
        self._alpha_decay: float = max(0.0, min(1.0, float(alpha_decay)))
        self._alpha_target: float = max(0.0, min(1.0, float(alpha_target)))
        self._running: bool = False
        self._iterations: int = max(1, int(iterations))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def alpha(self) -> float:
        """Get current alpha (temperature/energy)."""
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        """Set alpha (temperature/energy), clamped to [0, 1]."""
        self._alpha = max(0.0, min(1.0, float(value)))

    @property
    def alpha_min(self) -> float:
        """Get minimum alpha (convergence threshold)."""
        return self._alpha_min

    @alpha_min.setter
    def alpha_min(self, value: float) -> None:
        """Set minimum alpha (convergence threshold)."""
        self._alpha_min = float(value)

    @property
    def alpha_decay(self) -> float:
        """Get alpha decay rate."""
        return self._alpha_decay

    @alpha_decay.setter
    def alpha_decay(self, value: float) -> None:
        """Set alpha decay rate, clamped to [0, 1]."""
        self._alpha_decay = max(0.0, min(1.0, float(value)))

    @property
    def alpha_target(self) -> float:
        """Get the alpha the simulation cools toward."""
        return self._alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        """Set alpha target, clamped to [0, 1]."""
        self._alpha_target = max(0.0, min(1.0, float(value)))

    @property
    def iterations(self) -> int:
        """Get maximum iterations."""
        return self._iterations

    @iterations.setter
    def iterations(self, value: int) -> None:
        """Set maximum iterations (minimum 1)."""
        self._iterations = max(1, int(value))

    @property
    def converged(self) -> bool:
        """True once alpha has cooled below alpha_min."""
        return self._alpha < self._alpha_min

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    @abstractmethod
    def tick(self) -> bool:
        """
        Perform one iteration of the layout.

        Returns:
            True if converged/done, False if more iterations needed.
        """
        pass

    def kick(self) -> None:
        """Run tick() repeatedly until convergence or max iterations."""
        for _ in range(self._iterations):
            if self.tick():
                break

    def stop(self) -> Self:
        """Stop the layout."""
        self._running = False
        return self


__all__ = [
    "DEFAULT_ALPHA_DECAY",
    "BaseLayout",
    "IterativeLayout",
]
