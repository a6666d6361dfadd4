"""
Layer routes: /api/layers
"""

from fastapi import APIRouter

from layerlint.server.deps import get_engine


router = APIRouter(prefix="/api/layers", tags=["layers"])


@router.get("")
async def get_all_layers():
    """List all registered layers."""
    return {"layers": [d.to_dict() for d in get_engine().describe_layers()]}
