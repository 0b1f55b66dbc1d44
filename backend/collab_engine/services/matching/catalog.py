"""
Campaign Catalog

Loads everything the matching engine needs for one creator: the active
campaign catalog, their Brand-Fit record, survey results and connected
platforms.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

from ...models.brand_fit import BrandFitProfile, parse_brand_fit
from ...models.campaign import Campaign
from ...models.db_models import BrandFitDataDB, CampaignDB, CampaignStatus, LinkedAccountDB, SurveyResponseDB
from ...models.survey import SurveyScore
from ..scoring import LinkedAccount, score_surveys
from ..timeutils import to_datetime, utcnow

logger = logging.getLogger(__name__)

NEW_CAMPAIGN_DAYS = 7


def requirement_met(campaign_socials: List[str], connected: Set[str]) -> bool:
    """True when every platform the campaign asks for is connected."""
    return all(s.lower() in connected for s in campaign_socials)


def is_new_campaign(created_at, now: datetime) -> bool:
    created = to_datetime(created_at)
    return created is not None and now - created <= timedelta(days=NEW_CAMPAIGN_DAYS)


class CampaignCatalogService:
    """Per-request reader for the matching endpoint."""

    def __init__(self, db: Session):
        self.db = db

    def brand_fit(self, user_id: str) -> Optional[BrandFitProfile]:
        row = self.db.query(BrandFitDataDB).filter(BrandFitDataDB.user_id == user_id).first()
        return parse_brand_fit(row.data) if row else None

    def survey_score(self, user_id: str) -> SurveyScore:
        rows = (
            self.db.query(SurveyResponseDB)
            .filter(SurveyResponseDB.user_id == user_id)
            .order_by(SurveyResponseDB.created_at.asc())
            .all()
        )
        # Oldest first, so the latest answers per survey win
        responses: Dict[str, dict] = {}
        for row in rows:
            responses[row.survey_id] = row.answers or {}
        return score_surveys(responses)

    def linked_accounts(self, user_id: str) -> List[LinkedAccount]:
        rows = self.db.query(LinkedAccountDB).filter(LinkedAccountDB.user_id == user_id).all()
        return [LinkedAccount.from_row(r) for r in rows]

    def active_campaigns(self, accounts: List[LinkedAccount], now: Optional[datetime] = None) -> List[Campaign]:
        now = to_datetime(now) or utcnow()
        connected = {a.platform.lower() for a in accounts if a.connected}
        rows = (
            self.db.query(CampaignDB)
            .filter(CampaignDB.status == CampaignStatus.ACTIVE.value)
            .order_by(CampaignDB.created_at.desc())
            .all()
        )
        campaigns = [
            Campaign.from_row(
                row,
                requirement_met=requirement_met(list(row.socials or []), connected),
                is_new=is_new_campaign(row.created_at, now),
            )
            for row in rows
        ]
        logger.debug(f"Loaded {len(campaigns)} active campaigns")
        return campaigns
