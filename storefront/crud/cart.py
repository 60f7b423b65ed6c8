import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from storefront.schemas.cart import CartPayload, LineItem
from storefront.storage.base import StorageInterface

logger = logging.getLogger(__name__)


class CartCRUD:
    def __init__(
        self,
        storage: StorageInterface,
        session_id: str,
        namespace: str = "cart",
        ttl: Optional[int] = None,
    ):
        self.storage = storage
        self.session_id = session_id
        self.namespace = namespace
        self.ttl = ttl

    @property
    def key(self) -> str:
        return f"{self.namespace}:{self.session_id}"

    def load_items(self) -> List[LineItem]:
        """
        Read the persisted cart. Anything that does not parse into a valid
        CartState is dropped from storage and an empty cart is returned.
        """
        data = self.storage.get(self.key)

        if not data:
            return []

        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            return self._discard("invalid JSON")

        if isinstance(payload, list):  # backward compatibility
            payload = {"items": payload}

        if not isinstance(payload, dict):
            return self._discard("unexpected payload type")

        try:
            items = CartPayload.model_validate(payload).items
        except ValidationError as e:
            return self._discard(f"{e.error_count()} validation error(s)")

        ids = [item.id for item in items]
        if len(ids) != len(set(ids)):
            return self._discard("duplicate line item ids")

        return items

    def save_items(self, items: List[LineItem]):
        payload = CartPayload(items=list(items))

        self.storage.set(
            self.key,
            payload.model_dump_json(by_alias=True),
            ttl=self.ttl,
        )

    def _discard(self, reason: str) -> List[LineItem]:
        logger.warning(f"Discarding malformed cart {self.key}: {reason}")
        self.storage.delete(self.key)
        return []
