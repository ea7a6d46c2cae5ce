from pydantic import BaseModel, ConfigDict

class RechargeRequest(BaseModel):
    amount: float

class WalletResponse(BaseModel):
    user_id: str
    balance: float

    model_config = ConfigDict(from_attributes=True)
