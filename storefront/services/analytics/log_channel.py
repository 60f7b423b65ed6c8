import logging

from storefront.services.analytics.base import AnalyticsChannel

logger = logging.getLogger("storefront.analytics")


class LogAnalytics(AnalyticsChannel):
    def emit(self, event_name, payload):
        logger.info(f"Analytics event: {event_name}", extra={"event": {"event": event_name, **payload}})
