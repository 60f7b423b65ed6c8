from fastapi import APIRouter

from storefront.api.v1.endpoints import cart, contact, store

router = APIRouter()

router.include_router(store.router)
router.include_router(cart.router)
router.include_router(contact.router)
