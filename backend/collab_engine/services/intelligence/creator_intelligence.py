"""
Creator Intelligence

Admin roster of creators: a weighted overall score, a tier and a data
completeness figure per creator.
"""
import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ...models.db_models import (
    BrandFitDataDB,
    CampaignHistoryDB,
    CampaignInvitationDB,
    CreatorProfileDB,
    LinkedAccountDB,
    SurveyResponseDB,
)
from ...models.intelligence import Confidence, CreatorIntelligenceSummary, CreatorScores, DataSource
from ..numeric import round_half_up
from ..scoring import (
    CampaignHistory,
    LinkedAccount,
    calculate_brand_fit_completion,
    calculate_engagement_score,
    calculate_linked_accounts_score,
    calculate_performance_score,
    calculate_profile_completion,
    calculate_response_score,
    calculate_tier,
)
from ..timeutils import latest, to_datetime, utcnow
from .brand_intelligence import calculate_confidence

logger = logging.getLogger(__name__)

# Overall score weights, sum to 1.0
SCORE_WEIGHTS = {
    "profile": 0.15,
    "brand_fit": 0.20,
    "social_reach": 0.15,
    "engagement": 0.20,
    "reliability": 0.20,
    "responsiveness": 0.10,
}

PROFILE_FIELDS = (
    "name", "username", "location", "website", "bio",
    "avatar_url", "pricing_enabled", "pricing_min", "pricing_max",
)


def profile_mapping(profile: Any) -> Dict[str, Any]:
    return {key: getattr(profile, key, None) for key in PROFILE_FIELDS}


def calculate_data_completeness(profile: Any, has_brand_fit: bool, account_count: int) -> int:
    """Four profile points, five for Brand-Fit, up to three for linked accounts."""
    points = sum(1 for key in ("name", "bio", "location", "avatar_url") if getattr(profile, key, None))
    if has_brand_fit:
        points += 5
    points += min(3, account_count)
    return round_half_up(points / 12 * 100)


def build_creator_summary(
    profile: Any,
    accounts: Sequence[LinkedAccount],
    brand_fit: Optional[Any],
    history: Optional[Any],
    accepted_invitations: int = 0,
    survey_responses: Sequence[Any] = (),
    now: Optional[datetime] = None,
) -> CreatorIntelligenceSummary:
    """
    Build one creator's roster row.

    Args:
        profile: creator_profiles row
        accounts: the creator's linked accounts
        brand_fit: brand_fit_data row or None
        history: campaign_history row or None
        accepted_invitations: number of accepted campaign invitations
        survey_responses: survey_responses rows
        now: reference time for data source confidence
    """
    now = to_datetime(now) or utcnow()
    history_data = CampaignHistory.from_row(history)

    profile_score = calculate_profile_completion(profile_mapping(profile))
    brand_fit_score = calculate_brand_fit_completion(brand_fit.data if brand_fit else None)
    social_score = calculate_linked_accounts_score(accounts)
    engagement_score = calculate_engagement_score(accounts)
    reliability_score = calculate_performance_score(history_data)
    responsiveness_score = calculate_response_score(history_data.avg_response_time)

    overall = round_half_up(
        profile_score * SCORE_WEIGHTS["profile"]
        + brand_fit_score * SCORE_WEIGHTS["brand_fit"]
        + social_score * SCORE_WEIGHTS["social_reach"]
        + engagement_score * SCORE_WEIGHTS["engagement"]
        + reliability_score * SCORE_WEIGHTS["reliability"]
        + responsiveness_score * SCORE_WEIGHTS["responsiveness"]
    )
    total_followers = sum(a.followers for a in accounts)

    accounts_updated = latest(a.updated_at for a in accounts)
    last_survey = latest(r.created_at for r in survey_responses)
    data_sources = [
        DataSource(
            name="Profile",
            available=True,
            last_updated=to_datetime(profile.updated_at),
            confidence=calculate_confidence(profile.updated_at, now),
        ),
        DataSource(
            name="Brand Fit",
            available=brand_fit is not None,
            last_updated=to_datetime(brand_fit.updated_at) if brand_fit else None,
            confidence=calculate_confidence(brand_fit.updated_at, now) if brand_fit else Confidence.NONE,
        ),
        DataSource(
            name="Social Accounts",
            available=bool(accounts),
            last_updated=accounts_updated,
            confidence=calculate_confidence(accounts_updated, now),
        ),
        DataSource(
            name="Campaign History",
            available=history is not None,
            last_updated=to_datetime(history.updated_at) if history else None,
            confidence=calculate_confidence(history.updated_at, now) if history else Confidence.NONE,
        ),
        DataSource(
            name="Surveys",
            available=bool(survey_responses),
            last_updated=last_survey,
            confidence=calculate_confidence(last_survey, now),
        ),
    ]

    return CreatorIntelligenceSummary(
        id=str(profile.id),
        user_id=str(profile.user_id),
        name=profile.name or "Unnamed Creator",
        username=profile.username or "",
        email=profile.email or "",
        avatar_url=profile.avatar_url,
        overall_score=overall,
        tier=calculate_tier(overall, total_followers, history_data.total_completed),
        platform_count=sum(1 for a in accounts if a.connected),
        total_followers=total_followers,
        completed_campaigns=history_data.total_completed,
        accepted_invitations=accepted_invitations,
        data_completeness=calculate_data_completeness(profile, brand_fit is not None, len(accounts)),
        scores=CreatorScores(
            overall=overall,
            profile=profile_score,
            brand_fit=brand_fit_score,
            social_reach=social_score,
            engagement=round_half_up(engagement_score),
            reliability=reliability_score,
            responsiveness=responsiveness_score,
        ),
        created_at=to_datetime(profile.created_at),
        data_sources=data_sources,
    )


class CreatorIntelligenceService:
    """Loads every creator's rows in bulk and builds the roster."""

    def __init__(self, db: Session):
        self.db = db

    def get_summaries(self, now: Optional[datetime] = None) -> List[CreatorIntelligenceSummary]:
        profiles = self.db.query(CreatorProfileDB).order_by(CreatorProfileDB.created_at.desc()).all()

        accounts_by_user: Dict[str, List[LinkedAccount]] = defaultdict(list)
        for row in self.db.query(LinkedAccountDB).all():
            accounts_by_user[row.user_id].append(LinkedAccount.from_row(row))
        brand_fit_by_user = {r.user_id: r for r in self.db.query(BrandFitDataDB).all()}
        history_by_user = {r.user_id: r for r in self.db.query(CampaignHistoryDB).all()}
        responses_by_user: Dict[str, List[Any]] = defaultdict(list)
        for row in self.db.query(SurveyResponseDB).all():
            responses_by_user[row.user_id].append(row)
        accepted = Counter(
            i.creator_user_id
            for i in self.db.query(CampaignInvitationDB).filter(CampaignInvitationDB.status == "accepted").all()
        )

        summaries = [
            build_creator_summary(
                p,
                accounts_by_user.get(p.user_id, []),
                brand_fit_by_user.get(p.user_id),
                history_by_user.get(p.user_id),
                accepted_invitations=accepted.get(p.user_id, 0),
                survey_responses=responses_by_user.get(p.user_id, []),
                now=now,
            )
            for p in profiles
        ]
        logger.info(f"Built {len(summaries)} creator summaries")
        return summaries
