import logging
import time

from bson import ObjectId

from app.core.errors import NotFound
from app.domain.models.product import ProductDetail
from app.domain.services.pricing import compute_display_price

logger = logging.getLogger(__name__)


async def get_product_detail_svc(product_repo, ledger, product_id: ObjectId) -> ProductDetail:
    """
    Product detail for one session:
      1. load the active product (NotFound otherwise; pricing is never reached)
      2. count this view in the session ledger
      3. price with the session's count, current view included
      4. bump the global visit counter ($inc in storage)
    """
    t0 = time.perf_counter()
    pid = str(product_id)

    doc = await product_repo.get_with_category(product_id, active_only=True)
    if not doc:
        logger.info("product_detail not_found product_id=%s", pid)
        raise NotFound("Product not found")

    user_visits = await ledger.increment(pid)
    base_price = float(doc["base_price"])
    dynamic_price = compute_display_price(base_price, user_visits)

    await product_repo.increment_visit_count(product_id)

    total_dt = time.perf_counter() - t0
    logger.info(
        "product_detail done product_id=%s user_visits=%s base_price=%s dynamic_price=%s total_time=%.3fs",
        pid, user_visits, base_price, dynamic_price, total_dt,
    )
    return ProductDetail.model_validate({
        **doc,
        "dynamic_price": dynamic_price,
        "user_visits": user_visits,
        "price_adjustment": dynamic_price != base_price,
    })
