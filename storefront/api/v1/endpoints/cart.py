import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from starlette import status

from storefront.core.deps import get_cart_view
from storefront.schemas.cart import CartItemCreate, CartRead, CheckoutRead, QuantityAdjust
from storefront.views.cart_view import CartView


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/cart",
    tags=["Cart"],
)


def _cart_read(view: CartView) -> CartRead:
    store = view.store
    return CartRead(
        items=list(store.list()),
        total=store.total(),
        total_quantity=store.total_quantity(),
        view=view.fragments(),
    )


# -------------------------------
# VIEW CART
# -------------------------------
@router.get("", response_model=CartRead)
def view_cart(view: CartView = Depends(get_cart_view)):
    """
    Retrieve the current cart with its rendered badge, rows and total.
    """
    return _cart_read(view)


# -------------------------------
# ADD ITEM TO CART
# -------------------------------
@router.post("/items", response_model=CartRead, status_code=status.HTTP_200_OK)
def add_to_cart(
    item_in: CartItemCreate,
    view: CartView = Depends(get_cart_view),
):
    """
    Add one unit of a product. Adding an id already in the cart increments it.
    """
    view.actions.add_to_cart(item_in)
    return _cart_read(view)


# -------------------------------
# REMOVE ONE UNIT
# -------------------------------
@router.post("/items/{item_id}/decrement", response_model=CartRead)
def remove_one_from_cart(item_id: str, view: CartView = Depends(get_cart_view)):
    """
    Decrease quantity by one; the line item disappears when it reaches zero.
    """
    view.actions.remove_one_from_cart(item_id)
    return _cart_read(view)


# -------------------------------
# ADJUST QUANTITY
# -------------------------------
@router.patch("/items/{item_id}", response_model=CartRead)
def adjust_quantity(
    item_id: str,
    adjust_in: QuantityAdjust,
    view: CartView = Depends(get_cart_view),
):
    view.store.adjust_quantity(item_id, adjust_in.delta)
    return _cart_read(view)


# -------------------------------
# REMOVE SINGLE ITEM
# -------------------------------
@router.delete("/items/{item_id}", response_model=CartRead)
def remove_cart_item(item_id: str, view: CartView = Depends(get_cart_view)):
    """
    Remove a line item whatever its quantity. Unknown ids leave the cart unchanged.
    """
    view.actions.remove_cart_item(item_id)
    return _cart_read(view)


# -------------------------------
# CLEAR CART
# -------------------------------
@router.delete("", response_model=CartRead)
def clear_cart(view: CartView = Depends(get_cart_view)):
    """
    Empty the cart completely.
    """
    view.store.clear()
    return _cart_read(view)


# -------------------------------
# CHECKOUT
# -------------------------------
@router.post("/checkout", response_model=CheckoutRead)
def checkout(view: CartView = Depends(get_cart_view)):
    """
    Report the cart to analytics and empty it.
    """
    summary = view.actions.checkout()
    return CheckoutRead(**summary, cart=_cart_read(view))


# -------------------------------
# UI CONTROLS
# -------------------------------
@router.post("/controls/{control}", response_model=CartRead)
def dispatch_control(
    control: str,
    dataset: Dict[str, Any] = Body(default_factory=dict),
    view: CartView = Depends(get_cart_view),
):
    """
    Apply a clicked storefront control using its data-* attributes
    (id, name, price, location).
    """
    view.dispatch(control, dataset)
    return _cart_read(view)
