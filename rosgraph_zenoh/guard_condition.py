"""Guard conditions and the wait-set data they wake."""

from __future__ import annotations

import threading
from typing import Optional


class WaitSetData:
    """The condition a waiting thread sleeps on, with its triggered flag."""

    def __init__(self) -> None:
        self.condition = threading.Condition(threading.Lock())
        self.triggered = False

    def notify(self) -> None:
        """Mark the wait set as triggered and wake one waiting thread."""
        with self.condition:
            self.triggered = True
            self.condition.notify()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until triggered or until ``timeout`` seconds pass; return the flag."""
        with self.condition:
            self.condition.wait_for(lambda: self.triggered, timeout)
            return self.triggered


class GuardCondition:
    """A flag that can be triggered by one thread and waited on by another."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._has_triggered = False
        self._wait_set_data: Optional[WaitSetData] = None

    def trigger(self) -> None:
        """Set the trigger and wake the attached wait set, if any."""
        # Setting the flag must be exclusive with the check made before waiting.
        with self._lock:
            self._has_triggered = True
            if self._wait_set_data is not None:
                self._wait_set_data.notify()

    def check_and_attach_condition_if_not(self, wait_set_data: WaitSetData) -> bool:
        """Return True if already triggered; otherwise attach ``wait_set_data``."""
        with self._lock:
            if self._has_triggered:
                return True
            self._wait_set_data = wait_set_data
            return False

    def detach_condition_and_is_trigger_set(self) -> bool:
        """Detach the wait set and return whether the trigger was set, clearing it."""
        with self._lock:
            self._wait_set_data = None
            was_triggered = self._has_triggered
            self._has_triggered = False
            return was_triggered