from enum import Enum


class StorageBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"


class AnalyticsEvent(str, Enum):
    ADD_TO_CART = "addToCart"
    REMOVE_CART_ITEM = "removeCartItem"
    REMOVE_ONE_FROM_CART = "removeOneFromCart"
    GO_TO_CHECKOUT = "goToCheckout"
    CONTACT_FORM_SUBMIT = "contactFormSubmit"


class CartControl(str, Enum):
    ADD_TO_CART = "add-to-cart"
    REMOVE_FROM_CART = "remove-from-cart"
    CART_ITEM_REMOVE = "cart-item-remove"
    CHECKOUT = "checkout-button"
