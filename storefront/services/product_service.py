import json
import logging
from pathlib import Path
from typing import List, Optional

from storefront.core.exceptions import ProductNotFound
from storefront.schemas.product import ProductRead

logger = logging.getLogger(__name__)


class ProductService:
    """Read-only storefront catalog backed by a static JSON file."""

    def __init__(self, products: List[ProductRead]):
        self.products = products
        self._by_id = {p.id: p for p in products}

    @classmethod
    def from_file(cls, path: str) -> "ProductService":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        products = [ProductRead.model_validate(p) for p in raw]
        logger.info(f"Catalog loaded: {len(products)} products from {path}")
        return cls(products)

    def get(self, product_id: str) -> ProductRead:
        product = self._by_id.get(product_id)
        if not product:
            raise ProductNotFound(f"Product {product_id} not found")
        return product

    def get_catalog(
        self, search: Optional[str] = None, skip: int = 0, limit: int = 20
    ) -> List[ProductRead]:
        """Fetch storefront products, optionally filtered by a name search."""
        products = self.products
        if search:
            needle = search.lower()
            products = [p for p in products if needle in p.name.lower()]
        return products[skip: skip + limit]
