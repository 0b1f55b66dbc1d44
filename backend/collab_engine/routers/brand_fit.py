"""
Collab Engine - Brand-Fit Router
Read and edit the signed-in creator's Brand-Fit survey.
"""
from typing import Any, Dict, List, Optional
import logging
import threading

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import BaseModel

from ..auth import CurrentUser, get_current_user
from ..models.brand_fit import BrandFitProfile
from ..services.brand_fit_store import BrandFitFormRegistry, BrandFitStoreError, SqlBrandFitStore
from ..services.scoring import calculate_brand_fit_completion

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/brand-fit", tags=["brand-fit"])

_registry: Optional[BrandFitFormRegistry] = None
_registry_lock = threading.Lock()


def get_brand_fit_registry() -> BrandFitFormRegistry:
    """Process-wide form registry backed by the brand_fit_data table."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = BrandFitFormRegistry(SqlBrandFitStore())
        return _registry


def close_brand_fit_forms() -> None:
    """Flush every pending debounced edit (called on shutdown)."""
    with _registry_lock:
        registry = _registry
    if registry is not None:
        registry.close()


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class BrandFitData(BaseModel):
    brand_categories: List[str] = []
    alcohol_openness: str = ""
    personal_assets: List[str] = []
    driving_comfort: str = ""
    content_styles: List[str] = []
    camera_comfort: str = ""
    avoided_topics: str = ""
    audience_type: str = ""
    collaboration_type: str = ""
    creative_control: str = ""


class BrandFitResponse(BaseModel):
    exists: bool
    saved: bool
    completion_percent: int
    data: BrandFitData


def _response(profile: Optional[BrandFitProfile], saved: bool = True) -> BrandFitResponse:
    return BrandFitResponse(
        exists=profile is not None,
        saved=saved,
        completion_percent=calculate_brand_fit_completion(profile),
        data=BrandFitData(**(profile or BrandFitProfile()).to_dict()),
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=BrandFitResponse)
async def get_brand_fit(
    current_user: CurrentUser = Depends(get_current_user),
    registry: BrandFitFormRegistry = Depends(get_brand_fit_registry),
):
    """Current stored Brand-Fit record (never a half-applied edit)."""
    try:
        profile = registry.store.load(current_user.id)
    except BrandFitStoreError as e:
        logger.error(f"Brand-Fit read failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Brand-Fit storage unavailable")
    return _response(profile)


@router.patch("", response_model=BrandFitResponse)
async def patch_brand_fit(
    fields: Dict[str, Any] = Body(..., description="Field name (snake or camelCase) -> new value"),
    defer: bool = Query(False, description="Coalesce with further edits instead of saving now"),
    current_user: CurrentUser = Depends(get_current_user),
    registry: BrandFitFormRegistry = Depends(get_brand_fit_registry),
):
    """
    Apply per-field edits. The latest value for each field wins.

    With `defer=true` the edit joins the debounce window and the response
    shows the unsaved draft; otherwise the record is written immediately.
    """
    form = registry.controller(current_user.id)
    try:
        form.update(fields)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e.args[0]))

    if defer:
        return _response(form.draft(), saved=False)

    try:
        profile = form.flush()
    except BrandFitStoreError as e:
        logger.error(f"Brand-Fit write failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Brand-Fit storage unavailable")
    return _response(profile)
