import logging

from fastapi import APIRouter, Depends, Request
from starlette import status

from storefront.core.config import settings
from storefront.core.deps import get_cart_view
from storefront.core.limiter import limiter
from storefront.schemas.product import ContactForm
from storefront.views.cart_view import CartView


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post("", status_code=status.HTTP_202_ACCEPTED)
@limiter.limit(settings.contact_rate_limit)
def contact_form_submit(
    request: Request,
    form_in: ContactForm,
    view: CartView = Depends(get_cart_view),
):
    """
    Accept a storefront contact message and report it to analytics.
    """
    view.actions.contact_form_submit(form_in.model_dump(mode="json"))
    logger.info("Contact form received")
    return {"message": "Thanks, we will get back to you soon."}
