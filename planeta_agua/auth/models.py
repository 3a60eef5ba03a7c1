from pydantic import BaseModel
from typing import Optional


class TokenData(BaseModel):
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
