from abc import ABC, abstractmethod
from typing import Any, Dict


class AnalyticsChannel(ABC):
    @abstractmethod
    def emit(self, event_name: str, payload: Dict[str, Any]):
        """
        Deliver one analytics event.
        Channels may raise; the emitter isolates the cart from their failures.
        """
        pass

    def close(self):
        """Release network clients and other resources held by the channel."""
        pass
