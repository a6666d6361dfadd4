"""
Run routes: /api/runs
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from layerlint.core.errors import UnknownLayer
from layerlint.core.run import RunOptions
from layerlint.server.deps import get_engine, get_run_store


router = APIRouter(prefix="/api/runs", tags=["runs"])


class CreateRunRequest(BaseModel):
    text: str
    filename: str | None = None
    layers: list[int] | None = None
    dry_run: bool = False
    verbose: bool = False
    timeout: float | None = Field(default=None, gt=0)
    use_cache: bool = True


@router.post("")
def create_run(req: CreateRunRequest, db: int = 0):
    """Run layers over the posted text and store the result."""
    options = RunOptions(
        dry_run=req.dry_run,
        verbose=req.verbose,
        timeout=req.timeout,
        use_cache=req.use_cache,
    )
    try:
        result = get_engine().run_layers(req.text, req.layers, options, req.filename)
    except UnknownLayer as e:
        raise HTTPException(status_code=400, detail=str(e))

    return get_run_store(db).save(result.to_dict())


@router.get("/{run_id}")
def get_run(run_id: str, db: int = 0):
    run = get_run_store(db).get(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return run
