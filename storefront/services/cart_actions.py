import logging
from typing import Any, Callable, Dict, Optional, Union

from storefront.core.enums import AnalyticsEvent
from storefront.schemas.cart import CartItemCreate, LineItem
from storefront.services.analytics.analytics_service import AnalyticsEmitter
from storefront.services.cart_store import CartStore

logger = logging.getLogger(__name__)


class CartActions:
    """UI click handlers: each one drives the CartStore, then reports to analytics."""

    def __init__(
        self,
        store: CartStore,
        analytics: Optional[AnalyticsEmitter] = None,
        schedule: Optional[Callable[..., Any]] = None,
    ):
        """
        schedule, when given, defers delivery (e.g. BackgroundTasks.add_task)
        so that slow channels never hold up the request.
        """
        self.store = store
        self.analytics = analytics
        self.schedule = schedule

    def add_to_cart(
        self, item_in: Union[CartItemCreate, dict], location: Optional[str] = None
    ) -> LineItem:
        if isinstance(item_in, dict):
            item_in = CartItemCreate.model_validate(item_in)

        item = self.store.add(item_in)
        self._emit(
            AnalyticsEvent.ADD_TO_CART,
            item=item.as_event_item(),
            location=location or item_in.location,
        )
        return item

    def remove_one_from_cart(self, item_id: str) -> bool:
        item = self.store.get(item_id)
        if item is None or not self.store.adjust_quantity(item_id, -1):
            return False

        self._emit(
            AnalyticsEvent.REMOVE_ONE_FROM_CART,
            item=item.as_event_item(),
            location="cart",
        )
        return True

    def remove_cart_item(self, item_id: str) -> Optional[LineItem]:
        removed = self.store.remove(item_id)
        if removed is None:
            return None

        self._emit(
            AnalyticsEvent.REMOVE_CART_ITEM,
            item=removed.as_event_item(),
            quantity=-removed.quantity,
            location="cart",
        )
        return removed

    def checkout(self) -> Dict[str, Any]:
        """Report the cart being checked out, then empty it."""
        items = self.store.list()
        summary = {
            "items": list(items),
            "total_price": self.store.total(),
            "total_quantity": self.store.total_quantity(),
        }

        self._emit(
            AnalyticsEvent.GO_TO_CHECKOUT,
            location="cart",
            cart=[item.model_dump(mode="json", by_alias=True) for item in items],
            totalPrice=summary["total_price"],
            totalQuantity=summary["total_quantity"],
        )
        logger.info(
            f"Checkout: {len(items)} line(s), {summary['total_quantity']} unit(s), "
            f"total {summary['total_price']}"
        )

        self.store.clear()
        return summary

    def contact_form_submit(self, form: Dict[str, Any]):
        self._emit(AnalyticsEvent.CONTACT_FORM_SUBMIT, location="contact", contact=form)

    def _emit(self, event: AnalyticsEvent, **payload):
        if self.analytics is None:
            return
        if self.schedule is not None:
            self.schedule(self._deliver, event, payload)
        else:
            self._deliver(event, payload)

    def _deliver(self, event: AnalyticsEvent, payload: Dict[str, Any]):
        try:
            self.analytics.emit(event, payload)
        except Exception:
            # Analytics is best-effort; the cart mutation has already been committed
            logger.exception(f"Analytics emit failed for {event.value}")
