# Constants for dynamic pricing and catalog listing.
from decimal import Decimal

# Dynamic pricing: +10% every 3 views within one session, capped at +50%
PRICE_VISIT_THRESHOLD = 3
PRICE_STEP = Decimal("0.10")
PRICE_MAX_MULTIPLIER = Decimal("1.5")

# Sort keys accepted by listing/search endpoints -> (field, direction)
SORT_NEWEST = "newest"
SORT_PRICE_LOW = "price-low"
SORT_PRICE_HIGH = "price-high"
SORT_NAME = "name"
SORT_RATING = "rating"
DEFAULT_SORT = SORT_NEWEST

SORT_FIELDS = {
    SORT_PRICE_LOW: ("current_price", 1),
    SORT_PRICE_HIGH: ("current_price", -1),
    SORT_NAME: ("name", 1),
    SORT_RATING: ("rating", -1),
    SORT_NEWEST: ("created_at", -1),
}

# Fields matched by free-text search (tags is an array: matched by membership)
TEXT_SEARCH_FIELDS = ("name", "description", "brand")

# Page sizes per endpoint: (default, max)
LIST_LIMIT = (12, 100)
SEARCH_LIMIT = (10, 50)
ADVANCED_LIMIT = (12, 50)
SUGGESTIONS_LIMIT = (8, 20)
FEATURED_LIMIT = 8

# Roles
ROLE_ADMIN = "admin"
ROLE_USER = "user"
