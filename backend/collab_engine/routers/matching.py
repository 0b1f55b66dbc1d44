"""
Collab Engine - Campaign Matching Router
Personalized campaign catalog for the signed-in creator.
"""
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import CurrentUser, get_current_user
from ..database import get_db
from ..models.campaign import MatchedCampaign
from ..services.matching import CampaignCatalogService, CampaignMatchingEngine, get_matching_engine
from ..services.scoring import calculate_match_rate_impact

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class MatchedCampaignResponse(BaseModel):
    """Campaign card with match evaluation."""
    id: str
    campaign_name: str
    commission: float
    categories: List[str]
    socials: List[str]
    is_regulated: bool
    requires_vehicle: bool
    content_type: List[str]
    requirement_met: bool
    is_new: bool
    image_url: str
    language: str
    country: str
    country_flag: str
    camera_requirement: Optional[str] = None
    collaboration_length: Optional[str] = None
    creative_control_level: Optional[str] = None
    match_score: int
    match_reasons: List[str]
    is_top_match: bool
    excluded: bool
    scored: bool


class MatchesResponse(BaseModel):
    """Catalog view plus profile-completion context for the banner."""
    view: str
    campaigns: List[MatchedCampaignResponse]
    total: int
    has_profile_data: bool
    top_match_count: int
    completion_percent: int
    effective_completion: int
    match_rate_boost: int  # percentage points gained from connected socials


def get_catalog_service(db: Session = Depends(get_db)) -> CampaignCatalogService:
    return CampaignCatalogService(db)


def _to_response(item: MatchedCampaign) -> MatchedCampaignResponse:
    return MatchedCampaignResponse(**item.to_dict())


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/matches", response_model=MatchesResponse)
async def get_matches(
    view: str = Query("matched", pattern="^(matched|all)$"),
    rank: bool = Query(False, description="Sort by match score, then new campaigns first"),
    current_user: CurrentUser = Depends(get_current_user),
    catalog: CampaignCatalogService = Depends(get_catalog_service),
    engine: CampaignMatchingEngine = Depends(get_matching_engine),
):
    """
    Score the active catalog against the creator's Brand-Fit profile.

    `view=matched` returns campaigns scoring 40+ (or everything while the
    profile is below the cold-start threshold); `view=all` returns the
    full catalog with exclusions marked.
    """
    profile = catalog.brand_fit(current_user.id)
    survey = catalog.survey_score(current_user.id)
    accounts = catalog.linked_accounts(current_user.id)
    campaigns = catalog.active_campaigns(accounts)

    result = engine.match(profile, campaigns, survey, rank=rank)
    items = result.matched if view == "matched" else result.all

    logger.info(
        f"Matches for {current_user.id}: view={view}, {len(items)} campaigns, "
        f"profile data={result.has_profile_data}"
    )
    return MatchesResponse(
        view=view,
        campaigns=[_to_response(m) for m in items],
        total=len(items),
        has_profile_data=result.has_profile_data,
        top_match_count=result.top_match_count,
        completion_percent=result.completion_percent,
        effective_completion=result.effective_completion,
        match_rate_boost=calculate_match_rate_impact(accounts),
    )
