"""
Production Progress Tracker.
Append-only progress log keyed by run id.
"""
import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

from .models import ProgressEvent

logger = logging.getLogger(__name__)


ProgressListener = Callable[[str, ProgressEvent], None]


def clamp_percent(percent) -> int:
    return max(0, min(100, int(percent)))


class BaseProgressStore(ABC):
    """
    Abstract progress store.

    Stages are opaque strings; the store only orders and clamps.
    Listeners added with subscribe() are called after every update, in
    subscription order, with (run_id, event).
    """

    def __init__(self):
        self._listeners: List[Tuple[Optional[str], ProgressListener]] = []
        self._listeners_lock = Lock()

    def subscribe(self, listener: ProgressListener, run_id: Optional[str] = None) -> Callable[[], None]:
        """
        Push every new event to `listener`.

        Args:
            listener: Called as listener(run_id, event)
            run_id: Only events of this run; None for all runs

        Returns:
            Zero-argument function that unsubscribes the listener
        """
        entry = (run_id, listener)
        with self._listeners_lock:
            self._listeners.append(entry)

        def unsubscribe():
            with self._listeners_lock:
                if entry in self._listeners:
                    self._listeners.remove(entry)

        return unsubscribe

    def unsubscribe(self, listener: ProgressListener) -> None:
        """Remove every subscription of `listener`."""
        with self._listeners_lock:
            self._listeners = [e for e in self._listeners if e[1] is not listener]

    def _notify(self, run_id: str, event: ProgressEvent) -> None:
        with self._listeners_lock:
            listeners = [fn for rid, fn in self._listeners if rid is None or rid == run_id]
        for listener in listeners:
            try:
                listener(run_id, event)
            except Exception as e:
                logger.warning(f"[PROGRESS] Listener failed for {run_id}: {e}")

    @abstractmethod
    def update(self, run_id: str, stage: str, percent: int, message: str = "") -> ProgressEvent:
        """Append an event (percent clamped to 0..100)."""
        pass

    @abstractmethod
    def get_history(self, run_id: str) -> List[ProgressEvent]:
        """All events for a run, oldest first."""
        pass

    @abstractmethod
    def clear(self, run_id: str) -> None:
        """Drop a run's log."""
        pass

    def get_latest(self, run_id: str) -> Optional[ProgressEvent]:
        history = self.get_history(run_id)
        return history[-1] if history else None


class InMemoryProgressStore(BaseProgressStore):
    """
    In-memory progress store.

    Thread-safe. Lost on restart.
    """

    def __init__(self):
        super().__init__()
        self._events: Dict[str, List[ProgressEvent]] = {}
        self._lock = Lock()

    def update(self, run_id: str, stage: str, percent: int, message: str = "") -> ProgressEvent:
        event = ProgressEvent(stage=stage, percent=clamp_percent(percent), message=message)
        with self._lock:
            self._events.setdefault(run_id, []).append(event)
        logger.debug(f"[PROGRESS] {run_id}: {event.stage} {event.percent}% {message}")
        self._notify(run_id, event)
        return event

    def get_history(self, run_id: str) -> List[ProgressEvent]:
        with self._lock:
            return list(self._events.get(run_id, []))

    def get_latest(self, run_id: str) -> Optional[ProgressEvent]:
        with self._lock:
            events = self._events.get(run_id)
            return events[-1] if events else None

    def clear(self, run_id: str) -> None:
        with self._lock:
            self._events.pop(run_id, None)

    def run_count(self) -> int:
        with self._lock:
            return len(self._events)


# Singleton instance
_progress_store: Optional[BaseProgressStore] = None


def get_progress_store() -> BaseProgressStore:
    """Get the process-wide progress store."""
    global _progress_store
    if _progress_store is None:
        _progress_store = InMemoryProgressStore()
    return _progress_store
