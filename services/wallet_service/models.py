from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

class Wallet(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str
    balance: Decimal = Field(default=Decimal("0"), ge=0) # never negative after a debit
