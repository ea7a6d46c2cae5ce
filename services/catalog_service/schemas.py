from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import ProductStatus

class ProductCreate(BaseModel):
    title: str = Field(min_length=1)
    price: float = Field(ge=0)
    status: ProductStatus = ProductStatus.LIVE

class ProductUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)

class ProductStatusUpdate(BaseModel):
    status: ProductStatus

class ProductResponse(BaseModel):
    id: str
    title: str
    price: float
    status: ProductStatus

    model_config = ConfigDict(from_attributes=True)
