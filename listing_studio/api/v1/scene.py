from fastapi import APIRouter, HTTPException, Request

from listing_studio.api.schemas import SceneNodeSummary, ProductPlacedResponse
from listing_studio.context import get_plugin_context
from listing_studio.errors import HostError
from listing_studio.host.memory import InMemoryScene

router = APIRouter()


def _memory_scene() -> InMemoryScene:
    host = get_plugin_context().host
    if not isinstance(host, InMemoryScene):
        raise HTTPException(status_code=404, detail="Scene endpoints need the in-memory host")
    return host


@router.post("/product", response_model=ProductPlacedResponse)
async def place_product(request: Request, name: str = "Product"):
    """
    Place an uploaded product image on the page and select it.

    The request body is the raw encoded image.
    """
    scene = _memory_scene()
    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Empty image body")
    try:
        node = scene.add_product_image(data, name=name)
    except HostError as e:
        raise HTTPException(status_code=415, detail=e.message)
    return ProductPlacedResponse(id=node.id, width=node.width, height=node.height)


@router.get("/nodes", response_model=list[SceneNodeSummary])
async def list_nodes():
    scene = _memory_scene()
    return [
        SceneNodeSummary(
            id=node.id,
            type=node.type.value,
            name=node.name,
            x=node.x,
            y=node.y,
            width=node.width,
            height=node.height,
            children=len(node.children),
        )
        for node in scene.top_level_nodes()
    ]
