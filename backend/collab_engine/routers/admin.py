"""
Collab Engine - Admin Router
Read-only intelligence console over brands, creators and platform health.
Admin observes and diagnoses - never mutates.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import CurrentUser, require_admin
from ..database import get_db
from ..models.intelligence import (
    BrandIntelligence,
    BrandIntelligenceSummary,
    BrandStats,
    CreatorIntelligenceSummary,
)
from ..services.intelligence import (
    BrandIntelligenceService,
    CreatorIntelligenceService,
    SystemIntegrityService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class AuditLogItem(BaseModel):
    """Audit event with display category and labels."""
    id: str
    action: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    category: str
    formatted_action: str
    formatted_entity_type: str


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_brand_service(db: Session = Depends(get_db)) -> BrandIntelligenceService:
    return BrandIntelligenceService(db)


def get_creator_service(db: Session = Depends(get_db)) -> CreatorIntelligenceService:
    return CreatorIntelligenceService(db)


def get_integrity_service(db: Session = Depends(get_db)) -> SystemIntegrityService:
    return SystemIntegrityService(db)


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.get("/brands", response_model=List[BrandIntelligenceSummary])
async def list_brands(
    service: BrandIntelligenceService = Depends(get_brand_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Brand roster with structure and roster risk score, newest first."""
    return service.get_summaries()


@router.get("/brands/stats", response_model=BrandStats)
async def get_brand_stats(
    service: BrandIntelligenceService = Depends(get_brand_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Platform-wide brand and campaign totals."""
    return service.get_stats()


@router.get("/brands/{brand_id}", response_model=BrandIntelligence)
async def get_brand_detail(
    brand_id: str,
    service: BrandIntelligenceService = Depends(get_brand_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Full intelligence record for one brand, including risk signals."""
    intelligence = service.get_detail(brand_id)
    if intelligence is None:
        raise HTTPException(status_code=404, detail="Brand not found")
    return intelligence


@router.get("/creators", response_model=List[CreatorIntelligenceSummary])
async def list_creators(
    service: CreatorIntelligenceService = Depends(get_creator_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Creator roster with weighted scores and tiers, newest first."""
    return service.get_summaries()


@router.get("/system-integrity")
async def get_system_integrity(
    service: SystemIntegrityService = Depends(get_integrity_service),
    admin: CurrentUser = Depends(require_admin),
) -> Dict[str, Any]:
    """
    Data freshness, system metrics and safeguards.

    `stale_days` is null for tables that have never been written.
    """
    return service.get_report().to_dict()


@router.get("/audit-logs", response_model=List[AuditLogItem])
async def get_audit_logs(
    category: Optional[str] = Query(None, description="role_changes, config_changes, ... or all"),
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=1000),
    service: SystemIntegrityService = Depends(get_integrity_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Recent audit events, categorised for the admin log view."""
    return service.get_audit_logs(category=category, date_from=date_from, date_to=date_to, limit=limit)
