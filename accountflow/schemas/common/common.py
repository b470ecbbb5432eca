# accountflow/schemas/common/common.py
from pydantic import BaseModel
from typing import Dict, Optional


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Dict[str, str] = {}
    kind: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
