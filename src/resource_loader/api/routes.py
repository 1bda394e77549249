from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..loader import DefaultResourceLoader
from ..main import describe, loader

router = APIRouter()


def get_loader() -> DefaultResourceLoader:
    return loader


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/resource")
def get_resource(location: str, resource_loader: DefaultResourceLoader = Depends(get_loader)):
    """Resolve ``location`` and describe the resource; 404 if its content is absent."""
    resource = resource_loader.get_resource(location)
    summary = describe(resource)
    if not summary["exists"]:
        raise HTTPException(status_code=404, detail=f"{resource.description} does not exist")
    return summary
