"""
Synchronous change notification.
"""

import itertools
from typing import Any, Callable


Listener = Callable[[Any], None]


class Observable:
    """
    Keeps change listeners and calls them in registration order.

    Listeners run inside changed(), before it returns. An exception in a
    listener propagates to whoever triggered the change.
    """

    def __init__(self):
        self._listeners: dict[int, Listener] = {}
        self._keys = itertools.count()

    def on_change(self, listener: Listener) -> int:
        """
        Register a listener.

        Returns:
            Key to pass to un_change()
        """
        key = next(self._keys)
        self._listeners[key] = listener
        return key

    def un_change(self, key: int) -> None:
        """Remove a listener; unknown keys are ignored."""
        self._listeners.pop(key, None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def changed(self, payload: Any = None) -> None:
        """Call every listener with payload."""
        for listener in list(self._listeners.values()):
            listener(payload)
