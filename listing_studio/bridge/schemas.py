from pydantic import BaseModel
from typing import Optional, Any

class BridgeRequest(BaseModel):
    id: str
    method: str
    data: Any = None

    def to_message(self) -> dict:
        return {"type": "bridgeRequest", "payload": self.model_dump()}

class BridgeResponse(BaseModel):
    id: str
    ok: bool
    data: Any = None
    error: Optional[str] = None

class UiResult(BaseModel):
    """Result envelope the UI context puts inside a successful response."""
    ok: bool = False
    bytes: Optional[list[int]] = None
    error: Optional[str] = None
