"""Change monitor for suppressing duplicate discovery notifications.

Remembers the last value seen per logical key. Has no effect on resolution
results and may be reset at any time.
"""

import threading
from typing import Any


class ChangeMonitor:
    """Track last-observed value per key and report changes.

    Example:
        >>> monitor = ChangeMonitor()
        >>> monitor.has_changed("kubernetes-version", "1.29.2")
        True
        >>> monitor.has_changed("kubernetes-version", "1.29.2")
        False
    """

    def __init__(self):
        self._last_values: dict[str, Any] = {}
        self._lock = threading.Lock()

    def has_changed(self, key: str, value: Any) -> bool:
        """Record value for key.

        Args:
            key: Logical key
            value: Newly observed value

        Returns:
            True if value differs from the previous one (or is the first)
        """
        with self._lock:
            missing = object()
            previous = self._last_values.get(key, missing)
            self._last_values[key] = value
            return previous is missing or previous != value

    def reset(self) -> None:
        """Forget all observed values."""
        with self._lock:
            self._last_values.clear()


__all__ = ["ChangeMonitor"]
