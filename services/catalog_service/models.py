from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

class ProductStatus(str, Enum):
    LIVE = "live"
    DRAFT = "draft"
    HOLD = "hold" # unavailable for purchase

class Product(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    title: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    status: ProductStatus = ProductStatus.LIVE
