import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from storefront.core.deps import get_catalog
from storefront.schemas.product import ProductRead
from storefront.services.product_service import ProductService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/store", tags=["Storefront"])


@router.get("", response_model=List[ProductRead])
def storefront_list(
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    catalog: ProductService = Depends(get_catalog),
):
    """Public storefront listing."""
    return catalog.get_catalog(search=search, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductRead)
def storefront_product(product_id: str, catalog: ProductService = Depends(get_catalog)):
    # ProductNotFound is mapped to 404 by the app exception handler
    return catalog.get(product_id)
