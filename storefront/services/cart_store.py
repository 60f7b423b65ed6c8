import logging
from decimal import Decimal
from typing import Callable, List, Optional, Tuple, Union

from storefront.crud.cart import CartCRUD
from storefront.schemas.cart import CartItemCreate, LineItem

logger = logging.getLogger(__name__)

Subscriber = Callable[[], None]


class CartStore:
    """
    Single source of truth for one cart.

    Every successful mutation is applied in memory, written to storage and
    only then announced to subscribers, so a callback always reads the
    state it was notified about.
    """

    def __init__(self, cart_crud: CartCRUD):
        self.cart_crud = cart_crud
        self._items: List[LineItem] = cart_crud.load_items()
        self._subscribers: List[Subscriber] = []

    # READS
    def list(self) -> Tuple[LineItem, ...]:
        return tuple(item.model_copy() for item in self._items)

    def get(self, item_id: str) -> Optional[LineItem]:
        index = self._index(item_id)
        return None if index is None else self._items[index].model_copy()

    def exists(self, item_id: str) -> bool:
        return self._index(item_id) is not None

    def total(self) -> Decimal:
        return sum((item.subtotal for item in self._items), Decimal("0"))

    def total_quantity(self) -> int:
        return sum(item.quantity for item in self._items)

    # MUTATIONS
    def add(self, item_in: Union[CartItemCreate, dict]) -> LineItem:
        """
        Add one unit of a product. An existing line item is incremented,
        otherwise a new one is appended with quantity 1.
        """
        if isinstance(item_in, dict):
            item_in = CartItemCreate.model_validate(item_in)

        index = self._index(item_in.id)
        if index is not None:
            item = self._items[index]
            item.quantity += 1
        else:
            item = LineItem(
                id=item_in.id,
                name=item_in.name,
                unit_price=item_in.unit_price,
                quantity=1,
            )
            self._items.append(item)

        logger.info(f"Cart add: {item.id} now x{item.quantity}")
        self._commit()
        return item.model_copy()

    def adjust_quantity(self, item_id: str, delta: int) -> bool:
        """
        Shift the quantity of an item by delta. Items that would reach
        zero or below are removed. Unknown ids are ignored.
        """
        index = self._index(item_id)
        if index is None:
            logger.debug(f"Cart adjust ignored: {item_id} not in cart")
            return False

        new_quantity = self._items[index].quantity + delta
        if new_quantity <= 0:
            del self._items[index]
            logger.info(f"Cart adjust: {item_id} removed")
        else:
            self._items[index].quantity = new_quantity
            logger.info(f"Cart adjust: {item_id} now x{new_quantity}")

        self._commit()
        return True

    def remove(self, item_id: str) -> Optional[LineItem]:
        index = self._index(item_id)
        if index is None:
            logger.debug(f"Cart remove ignored: {item_id} not in cart")
            return None

        removed = self._items.pop(index)
        logger.info(f"Cart remove: {item_id}")
        self._commit()
        return removed

    def clear(self):
        self._items = []
        logger.info("Cart cleared")
        self._commit()

    # SUBSCRIPTIONS
    def on_change(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _index(self, item_id: str) -> Optional[int]:
        return next(
            (i for i, item in enumerate(self._items) if item.id == str(item_id)),
            None,
        )

    def _commit(self):
        self.cart_crud.save_items(self._items)

        # Copy so a callback may unsubscribe while we iterate
        for callback in list(self._subscribers):
            callback()
