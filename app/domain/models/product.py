from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Annotated, Dict, List, Optional
from datetime import datetime

# Mongo ObjectIds travel as their 24-hex string form outside the repositories
PyObjectId = Annotated[str, BeforeValidator(lambda v: str(v) if v is not None else v)]


class CatalogModel(BaseModel):
    """snake_case in Mongo and in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,  # immuable = safe
    )


class CategoryRef(CatalogModel):
    id: PyObjectId = Field(alias="_id")
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None


class Category(CatalogModel):
    id: PyObjectId = Field(alias="_id")
    name: str
    slug: str
    description: Optional[str] = None
    product_count: int = 0
    is_active: bool = True
    created_by: Optional[PyObjectId] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Product(CatalogModel):
    id: PyObjectId = Field(alias="_id")
    name: str
    description: Optional[str] = None
    base_price: float = Field(ge=0)
    current_price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    category_id: Optional[PyObjectId] = None
    category: Optional[CategoryRef] = None
    image: Optional[str] = None
    image_type: str = "url"
    brand: Optional[str] = None
    rating: float = Field(default=0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    is_active: bool = True
    is_featured: bool = False
    tags: List[str] = []
    specifications: Dict[str, str] = {}
    visit_count: int = 0
    created_by: Optional[PyObjectId] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductDetail(Product):
    """A product as seen by one session: catalog record + session-adjusted price."""
    dynamic_price: float
    user_visits: int
    price_adjustment: bool


class User(CatalogModel):
    id: PyObjectId = Field(alias="_id")
    name: str
    email: str
    role: str = "user"
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(CatalogModel):
    current_page: int
    total_pages: int
    total_products: int
    has_next_page: bool
    has_prev_page: bool


class PriceRange(CatalogModel):
    min_price: float = 0
    max_price: float = 0


class SearchFacets(CatalogModel):
    price_range: PriceRange
    brands: List[str]


class ProductPage(CatalogModel):
    products: List[Product]
    pagination: Pagination


class AdvancedSearchResult(ProductPage):
    filters: SearchFacets
