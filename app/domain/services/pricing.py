from decimal import Decimal, ROUND_HALF_UP

from app.domain.services.constants import PRICE_VISIT_THRESHOLD, PRICE_STEP, PRICE_MAX_MULTIPLIER

_CENT = Decimal("0.01")


def visit_multiplier(session_visit_count: int) -> Decimal:
    """
    Price multiplier for a session that has viewed a product `session_visit_count`
    times (the current view included): 1.0 below 3 views, then +10% per full
    block of 3 views, never above 1.5.
    """
    if session_visit_count < PRICE_VISIT_THRESHOLD:
        return Decimal(1)
    level = session_visit_count // PRICE_VISIT_THRESHOLD
    return min(Decimal(1) + level * PRICE_STEP, PRICE_MAX_MULTIPLIER)


def compute_display_price(base_price: float, session_visit_count: int) -> float:
    """
    Session-adjusted price shown to one visitor.

    Pure and deterministic. Inputs are assumed validated upstream
    (non-negative, finite base price). Rounding is half-up on the cent, done
    in Decimal so that e.g. 89.99 * 1.5 = 134.985 gives 134.99.
    """
    price = Decimal(str(base_price)) * visit_multiplier(session_visit_count)
    return float(price.quantize(_CENT, rounding=ROUND_HALF_UP))
