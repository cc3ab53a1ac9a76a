from pydantic import BaseModel

class ProductPlacedResponse(BaseModel):
    id: str
    width: float
    height: float

class SceneNodeSummary(BaseModel):
    id: str
    type: str
    name: str
    x: float
    y: float
    width: float
    height: float
    children: int
