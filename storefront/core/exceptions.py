class ProductNotFound(Exception):
    """
    Raised when a product id is not part of the storefront catalog.

    Expected Result: 404 Not Found
    """
    pass

class UnknownControl(Exception):
    """
    Raised when a UI control name cannot be mapped to a cart action.

    Expected Result: 400 Bad Request
    """
    pass

class AnalyticsDeliveryError(Exception):
    """Raised by an analytics channel that could not deliver an event."""
    pass
