import logging
import sys
import json
from contextvars import ContextVar

request_id_var = ContextVar("request_id", default="system")
cart_session_var = ContextVar("cart_session", default="-")

class RequestContextFilter(logging.Filter):
    def filter(self, record):
        record.request_id = request_id_var.get()
        record.cart_session = cart_session_var.get()
        return True

class JSONFormatter(logging.Formatter):
    """Custom formatter to ensure valid JSON and proper escaping."""
    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "file": f"{record.module}.py:{record.lineno}",
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "system"),
            "cart_session": getattr(record, "cart_session", "-"),
        }
        # Structured extras, e.g. analytics payloads
        event = getattr(record, "event", None)
        if event is not None:
            log_record["event"] = event

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)

def setup_logging(level: int = logging.INFO):
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.addHandler(handler)

    # Keep Uvicorn's critical info but hide per-request access lines
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
