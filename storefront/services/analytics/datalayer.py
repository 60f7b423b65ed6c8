from collections import deque
from typing import Any, Dict, List

from storefront.services.analytics.base import AnalyticsChannel


class DataLayer(AnalyticsChannel):
    """Bounded in-memory event list, the server side twin of a tag manager dataLayer."""

    def __init__(self, maxlen: int = 1000):
        self._events = deque(maxlen=maxlen)

    def emit(self, event_name, payload):
        self._events.append({"event": event_name, **payload})

    @property
    def events(self) -> List[Dict[str, Any]]:
        return list(self._events)

    def names(self) -> List[str]:
        return [e["event"] for e in self._events]

    def clear(self):
        self._events.clear()
