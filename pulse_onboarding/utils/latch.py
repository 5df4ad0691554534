"""
One-shot gate for side effects that must happen at most once, such as the
redirect out of onboarding.
"""
import threading


class OneShotLatch:
    """A flag that can be flipped from False to True exactly once."""

    def __init__(self, fired: bool = False):
        self._fired = fired
        self._lock = threading.Lock()

    @property
    def fired(self) -> bool:
        return self._fired

    def try_fire(self) -> bool:
        """
        Fire the latch.

        Returns:
            True for the call that fired it, False for every later call
        """
        with self._lock:
            if self._fired:
                return False
            self._fired = True
            return True
