# api/v1/schemas/catalog.py
from typing import Annotated, Dict, List, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.utils.ids import is_object_id


def _object_id(value: str) -> str:
    if not is_object_id(value):
        raise ValueError("Invalid ID format")
    return value

ObjectIdStr = Annotated[str, AfterValidator(_object_id)]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ApiIn(BaseModel):
    # accept camelCase (front end) and snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class ProductIn(ApiIn):
    name: str = Field(min_length=2, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    base_price: float = Field(ge=0, allow_inf_nan=False)
    stock: int = Field(ge=0)
    category: ObjectIdStr
    image_url: str = Field(min_length=1)
    brand: Optional[str] = Field(default=None, max_length=50)
    tags: List[str] = []
    specifications: Dict[str, str] = {}
    is_featured: bool = False


class ProductUpdate(ApiIn):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=1000)
    base_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    stock: Optional[int] = Field(default=None, ge=0)
    category: Optional[ObjectIdStr] = None
    image_url: Optional[str] = None
    brand: Optional[str] = Field(default=None, max_length=50)
    tags: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class CategoryIn(ApiIn):
    name: str = Field(min_length=2, max_length=30)
    description: Optional[str] = Field(default=None, max_length=200)


class CategoryUpdate(ApiIn):
    name: Optional[str] = Field(default=None, min_length=2, max_length=30)
    description: Optional[str] = Field(default=None, max_length=200)
    is_active: Optional[bool] = None


class UserUpdate(ApiIn):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)


class PasswordChange(ApiIn):
    model_config = ConfigDict(str_strip_whitespace=False)

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class MessageOut(BaseModel):
    message: str
