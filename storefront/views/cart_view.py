"""Server side rendering of the cart badge, table rows and total."""

import logging
from decimal import Decimal, ROUND_HALF_UP, localcontext
from pathlib import Path
from typing import Any, Dict, Optional

import jinja2

from storefront.core.config import settings
from storefront.core.enums import CartControl
from storefront.core.exceptions import UnknownControl
from storefront.schemas.cart import CartFragments
from storefront.services.cart_actions import CartActions
from storefront.services.cart_store import CartStore

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(TEMPLATE_DIR),
    autoescape=jinja2.select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def format_price(amount: Decimal, currency: Optional[str] = None) -> str:
    amount = Decimal(amount)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the cents
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        cents = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{cents}{settings.currency_symbol if currency is None else currency}"


class CartView:
    def __init__(
        self,
        store: CartStore,
        actions: Optional[CartActions] = None,
        currency: Optional[str] = None,
    ):
        self.store = store
        self.actions = actions or CartActions(store)
        self.currency = settings.currency_symbol if currency is None else currency

        self.badge = ""
        self.rows = ""
        self.total = ""
        self.render_count = 0

        self._unsubscribe = store.on_change(self.render)
        self.render()

    def render(self):
        items = self.store.list()

        self.badge = str(sum(item.quantity for item in items))
        self.rows = _env.get_template("cart_rows.html").render(
            items=items,
            price=self._price,
        )
        self.total = self._price(self.store.total())
        self.render_count += 1

    def fragments(self) -> CartFragments:
        return CartFragments(badge=self.badge, rows=self.rows, total=self.total)

    def dispatch(self, control: str, dataset: Dict[str, Any]):
        """Route a clicked control, carrying its data-* attributes, to the matching action."""
        try:
            control = CartControl(control)
        except ValueError:
            raise UnknownControl(f"Unknown cart control '{control}'")

        if control == CartControl.ADD_TO_CART:
            return self.actions.add_to_cart(
                {
                    "id": dataset.get("id"),
                    "name": dataset.get("name") or "",
                    "unitPrice": dataset.get("price"),
                },
                location=dataset.get("location") or "catalog",
            )
        if control == CartControl.REMOVE_FROM_CART:
            return self.actions.remove_one_from_cart(dataset.get("id"))
        if control == CartControl.CART_ITEM_REMOVE:
            return self.actions.remove_cart_item(dataset.get("id"))
        return self.actions.checkout()

    def detach(self):
        self._unsubscribe()

    def _price(self, amount: Decimal) -> str:
        return format_price(amount, self.currency)
