import logging
import uuid
from functools import lru_cache

from fastapi import BackgroundTasks, Depends, Request, Response
from redis import Redis

from storefront.core.config import settings
from storefront.core.enums import StorageBackend
from storefront.core.logging import cart_session_var
from storefront.crud.cart import CartCRUD
from storefront.services.analytics.analytics_service import AnalyticsEmitter, build_emitter
from storefront.services.cart_actions import CartActions
from storefront.services.cart_store import CartStore
from storefront.services.product_service import ProductService
from storefront.storage.base import StorageInterface
from storefront.storage.memory_storage import MemoryStorage
from storefront.storage.redis_storage import RedisStorage
from storefront.views.cart_view import CartView


logger = logging.getLogger(__name__)

# One process-wide store per backend
_memory_storage = MemoryStorage()


@lru_cache
def get_redis() -> Redis:
    # Redis keeps its own connection pool
    return Redis.from_url(settings.redis_url, decode_responses=True)


def get_storage() -> StorageInterface:
    if settings.cart_storage == StorageBackend.REDIS.value:
        return RedisStorage(get_redis())
    return _memory_storage


@lru_cache
def get_catalog() -> ProductService:
    return ProductService.from_file(settings.catalog_path)


@lru_cache
def get_analytics() -> AnalyticsEmitter:
    return build_emitter()


async def get_cart_session(request: Request, response: Response) -> str:
    """
    Identify the client's cart by cookie, issuing a new session id on first visit.
    """
    session_id = request.cookies.get(settings.cart_cookie_name)

    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(
            settings.cart_cookie_name,
            session_id,
            max_age=settings.cart_ttl,
            httponly=True,
            samesite="lax",
        )
        logger.info("New cart session issued")

    cart_session_var.set(session_id)
    return session_id


def get_cart_store(
    session_id: str = Depends(get_cart_session),
    storage: StorageInterface = Depends(get_storage),
) -> CartStore:
    cart_crud = CartCRUD(
        storage,
        session_id,
        namespace=settings.cart_storage_key,
        ttl=settings.cart_ttl,
    )
    return CartStore(cart_crud)


def get_cart_view(
    background_tasks: BackgroundTasks,
    store: CartStore = Depends(get_cart_store),
    analytics: AnalyticsEmitter = Depends(get_analytics),
) -> CartView:
    # Analytics is delivered after the response is sent
    actions = CartActions(store, analytics, schedule=background_tasks.add_task)
    return CartView(store, actions)


def shutdown_analytics():
    """Release channel resources held by the cached emitter, if one was built."""
    if get_analytics.cache_info().currsize:
        get_analytics().close()
        get_analytics.cache_clear()
