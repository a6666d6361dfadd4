"""
Analysis routes: /api/analyze
"""

from fastapi import APIRouter
from pydantic import BaseModel

from layerlint.server.deps import get_engine


router = APIRouter(prefix="/api/analyze", tags=["analyze"])


class AnalyzeRequest(BaseModel):
    text: str
    filename: str | None = None


@router.post("")
async def analyze(req: AnalyzeRequest):
    """Detect fixable issues and recommend layers."""
    return get_engine().analyze(req.text, req.filename).to_dict()
