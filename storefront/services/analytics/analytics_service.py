import json
import logging
from typing import Any, Dict, List, Optional

from storefront.core.config import settings
from storefront.services.analytics.base import AnalyticsChannel
from storefront.services.analytics.datalayer import DataLayer
from storefront.services.analytics.log_channel import LogAnalytics
from storefront.services.analytics.webhook import WebhookAnalytics

logger = logging.getLogger(__name__)


class AnalyticsEmitter:
    """
    Fire-and-forget fan out of business events.
    emit() never raises: a failing channel is logged and skipped.
    """

    def __init__(self, channels: Optional[List[AnalyticsChannel]] = None):
        self.channels = list(channels or [])

    def emit(self, event_name, payload: Optional[Dict[str, Any]] = None):
        event_name = getattr(event_name, "value", event_name)
        # Normalise Decimals and other non JSON types once for every channel
        try:
            payload = json.loads(json.dumps(payload or {}, default=str))
        except (TypeError, ValueError):
            logger.exception(f"Analytics payload for {event_name} is not serializable")
            return

        for channel in self.channels:
            try:
                channel.emit(event_name, payload)
            except Exception:
                logger.exception(
                    f"Analytics channel {type(channel).__name__} failed for {event_name}"
                )

    def close(self):
        for channel in self.channels:
            channel.close()


def build_emitter(channel_names: List[str] = None, datalayer: DataLayer = None) -> AnalyticsEmitter:
    channels: List[AnalyticsChannel] = []

    for name in channel_names if channel_names is not None else settings.analytics_channels:
        if name == "log":
            channels.append(LogAnalytics())
        elif name == "datalayer":
            channels.append(datalayer or DataLayer())
        elif name == "webhook":
            if not settings.analytics_webhook_url:
                logger.warning("Webhook analytics requested but ANALYTICS_WEBHOOK_URL is not set")
                continue
            channels.append(
                WebhookAnalytics(settings.analytics_webhook_url, timeout=settings.analytics_timeout)
            )
        else:
            logger.warning(f"Unknown analytics channel '{name}' ignored")

    return AnalyticsEmitter(channels)
