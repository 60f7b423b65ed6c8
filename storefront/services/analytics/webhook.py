import logging

import httpx

from storefront.core.exceptions import AnalyticsDeliveryError
from storefront.services.analytics.base import AnalyticsChannel

logger = logging.getLogger(__name__)


class WebhookAnalytics(AnalyticsChannel):
    """POSTs each event as JSON to an external collector."""

    def __init__(self, url: str, timeout: float = 2.0, client: httpx.Client | None = None):
        self.url = url
        self.client = client or httpx.Client(timeout=timeout)

    def emit(self, event_name, payload):
        try:
            response = self.client.post(self.url, json={"event": event_name, **payload})
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise AnalyticsDeliveryError(f"{event_name} not delivered to {self.url}: {e}") from e

    def close(self):
        self.client.close()
