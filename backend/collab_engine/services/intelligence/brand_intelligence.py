"""
Brand Intelligence

Derives the admin view of a brand (team structure, campaign and financial
metrics, creator engagement, compliance risk, data freshness) from rows
the caller has already fetched. Nothing here writes to the database.

Two risk figures exist and are deliberately not reconciled:
    detail_risk_score  - weighted count of fired risk signals (detail page)
    summary_risk_score - direct formula over campaign rows (roster table)
"""
import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ...models.db_models import (
    BrandMembershipDB,
    BrandProfileDB,
    BrandUserRoleDB,
    CampaignDB,
    CampaignInvitationDB,
    CampaignNegotiationDB,
    TeamInvitationDB,
)
from ...models.intelligence import (
    ActivityMetrics,
    BrandIntelligence,
    BrandIntelligenceSummary,
    BrandStats,
    BrandStructure,
    CampaignMetrics,
    Compliance,
    Confidence,
    CreatorEngagement,
    DataSource,
    FinancialMetrics,
    HealthTier,
    RiskSignal,
    RolesBreakdown,
    SignalType,
    StructureType,
)
from ..numeric import percent, round_half_up, round_tenth
from ..timeutils import Timestamp, days_between, days_since, latest, to_datetime, utcnow

logger = logging.getLogger(__name__)

AGENCY_TEAM_SIZE = 2  # more members than this means agency
SIGNAL_WEIGHTS = {SignalType.CRITICAL: 30, SignalType.WARNING: 15, SignalType.INFO: 5}
ACTIVE_WINDOW_DAYS = 30


def _num(value: Any) -> float:
    return float(value or 0)


# =============================================================================
# PURE RULES
# =============================================================================

def calculate_confidence(last_updated: Timestamp, now: Optional[datetime] = None) -> Confidence:
    """Confidence in a data source from its age in whole days."""
    age = days_since(last_updated, now)
    if age is None:
        return Confidence.NONE
    if age <= 7:
        return Confidence.HIGH
    if age <= 30:
        return Confidence.MEDIUM
    return Confidence.LOW


def classify_structure(team_size: int) -> StructureType:
    return StructureType.AGENCY if team_size > AGENCY_TEAM_SIZE else StructureType.SINGLE_BRAND


def compute_risk_signals(
    campaigns: Sequence[Any],
    invitations: Sequence[Any],
    team_size: int,
    days_since_creation: int,
) -> List[RiskSignal]:
    """
    Evaluate the brand behaviour rules, in a fixed order.

    Args:
        campaigns: rows with status, total_budget, allocated_budget
        invitations: rows with status, offered_payout, base_payout
        team_size: memberships + role assignments
        days_since_creation: whole days since the brand profile was created

    Returns:
        Fired signals (possibly empty)
    """
    signals: List[RiskSignal] = []
    total_campaigns = len(campaigns)
    total_invitations = len(invitations)

    cancelled = sum(1 for c in campaigns if c.status == "cancelled")
    if total_campaigns > 3 and cancelled / total_campaigns > 0.3:
        signals.append(RiskSignal(
            type=SignalType.WARNING,
            category="Campaign Management",
            message="High campaign cancellation rate",
            details=f"{percent(cancelled, total_campaigns)}% of campaigns were cancelled",
        ))

    total_budget = sum(_num(c.total_budget) for c in campaigns)
    allocated = sum(_num(c.allocated_budget) for c in campaigns)
    if total_budget > 0 and allocated / total_budget < 0.5:
        signals.append(RiskSignal(
            type=SignalType.INFO,
            category="Financial",
            message="Low budget utilization",
            details=f"Only {percent(allocated, total_budget)}% of total budget has been allocated",
        ))

    accepted = sum(1 for i in invitations if i.status == "accepted")
    if total_invitations > 10 and accepted / total_invitations < 0.2:
        signals.append(RiskSignal(
            type=SignalType.WARNING,
            category="Creator Relations",
            message="Low creator acceptance rate",
            details=f"Only {percent(accepted, total_invitations)}% of invitations accepted",
        ))

    modified = sum(1 for i in invitations if _num(i.offered_payout) != _num(i.base_payout))
    if total_invitations > 5 and modified / total_invitations > 0.5:
        signals.append(RiskSignal(
            type=SignalType.INFO,
            category="Negotiations",
            message="Frequent payout negotiations",
            details=f"{percent(modified, total_invitations)}% of invitations have modified payouts",
        ))

    if days_since_creation < 30 and total_campaigns > 5:
        signals.append(RiskSignal(
            type=SignalType.INFO,
            category="Growth",
            message="Rapid campaign creation",
            details=f"{total_campaigns} campaigns created within first month",
        ))

    if team_size == 0 and total_campaigns > 10:
        signals.append(RiskSignal(
            type=SignalType.INFO,
            category="Operations",
            message="Solo operation with high volume",
            details="Managing many campaigns without team support",
        ))

    return signals


def detail_risk_score(signals: Iterable[RiskSignal]) -> int:
    """min(100, 30 per critical + 15 per warning + 5 per info)."""
    return min(100, sum(SIGNAL_WEIGHTS[s.type] for s in signals))


def compute_health(signals: Sequence[RiskSignal]) -> Tuple[int, HealthTier]:
    """Detail-page risk score and tier. Any critical/warning signal forces the tier."""
    score = detail_risk_score(signals)
    types = {s.type for s in signals}
    if score > 50 or SignalType.CRITICAL in types:
        return score, HealthTier.CRITICAL
    if score > 25 or SignalType.WARNING in types:
        return score, HealthTier.ATTENTION
    return score, HealthTier.HEALTHY


def summary_risk_score(campaigns: Sequence[Any]) -> Tuple[int, HealthTier]:
    """Roster risk score from cancellations and budget utilization, tier by score only."""
    risk = 0.0
    total = len(campaigns)
    if total > 3:
        cancelled = sum(1 for c in campaigns if c.status == "cancelled")
        risk += cancelled / total * 30

    total_budget = sum(_num(c.total_budget) for c in campaigns)
    if total_budget > 0:
        utilization = sum(_num(c.allocated_budget) for c in campaigns) / total_budget
        if utilization < 0.5:
            risk += (1 - utilization) * 20

    if risk > 50:
        health = HealthTier.CRITICAL
    elif risk > 25:
        health = HealthTier.ATTENTION
    else:
        health = HealthTier.HEALTHY
    return round_half_up(risk), health


# =============================================================================
# ASSEMBLY
# =============================================================================

def build_brand_intelligence(
    brand: Any,
    campaigns: Sequence[Any],
    memberships: Sequence[Any],
    roles: Sequence[Any],
    team_invitations: Sequence[Any],
    invitations: Sequence[Any],
    negotiations: Sequence[Any],
    now: Optional[datetime] = None,
) -> BrandIntelligence:
    """Assemble the full BrandIntelligence record for one brand."""
    now = to_datetime(now) or utcnow()
    days_since_creation = days_since(brand.created_at, now) or 0

    # Structure
    role_counts = Counter(r.role for r in roles)
    team_size = len(memberships) + len(roles)
    structure = BrandStructure(
        type=classify_structure(team_size),
        team_size=team_size,
        roles_breakdown=RolesBreakdown(
            agency_admin=role_counts.get("agency_admin", 0),
            campaign_manager=role_counts.get("campaign_manager", 0),
            finance=role_counts.get("finance", 0),
        ),
    )

    # Campaigns
    status_counts = Counter(c.status for c in campaigns)
    with_duration = [c for c in campaigns if c.timeline_start and c.timeline_end]
    avg_duration = (
        sum(days_between(c.timeline_start, c.timeline_end) for c in with_duration) / len(with_duration)
        if with_duration else 0
    )
    avg_influencers = (
        sum(c.influencer_count or 0 for c in campaigns) / len(campaigns) if campaigns else 0
    )
    campaign_metrics = CampaignMetrics(
        total=len(campaigns),
        active=status_counts.get("active", 0),
        completed=status_counts.get("completed", 0),
        draft=status_counts.get("draft", 0),
        cancelled=status_counts.get("cancelled", 0),
        avg_duration=round_half_up(avg_duration),
        avg_influencer_count=round_half_up(avg_influencers),
    )

    # Financials
    total_budget = sum(_num(c.total_budget) for c in campaigns)
    total_spent = sum(_num(c.allocated_budget) for c in campaigns)
    accepted = [i for i in invitations if i.status == "accepted"]
    avg_payout = sum(_num(i.offered_payout) for i in accepted) / len(accepted) if accepted else 0
    financials = FinancialMetrics(
        total_budget_allocated=total_budget,
        total_spent=total_spent,
        avg_campaign_budget=round_half_up(total_budget / len(campaigns)) if campaigns else 0,
        avg_payout_per_creator=round_half_up(avg_payout),
        budget_utilization_rate=percent(total_spent, total_budget),
    )

    # Creator engagement
    invitation_ids = {i.id for i in invitations}
    rounds = [n for n in negotiations if n.invitation_id in invitation_ids]
    engagement = CreatorEngagement(
        total_invitations_sent=len(invitations),
        accepted_invitations=len(accepted),
        declined_invitations=sum(1 for i in invitations if i.status == "declined"),
        pending_invitations=sum(1 for i in invitations if i.status == "pending"),
        acceptance_rate=percent(len(accepted), len(invitations)),
        avg_negotiation_rounds=round_tenth(len(rounds) / len(invitations)) if invitations else 0.0,
        unique_creators_engaged=len({i.creator_user_id for i in invitations}),
    )

    # Compliance
    signals = compute_risk_signals(campaigns, invitations, team_size, days_since_creation)
    risk_score, health = compute_health(signals)

    # Activity
    last_campaign = latest(c.created_at for c in campaigns)
    last_campaign_update = latest(c.updated_at for c in campaigns)
    months_active = max(1.0, days_since_creation / 30)
    cutoff = now - timedelta(days=ACTIVE_WINDOW_DAYS)
    updates = [to_datetime(c.updated_at) for c in campaigns]
    recently_updated = any(u is not None and u > cutoff for u in updates)
    activity = ActivityMetrics(
        last_campaign_created=last_campaign,
        last_team_member_added=latest(t.created_at for t in team_invitations),
        avg_campaigns_per_month=round_tenth(len(campaigns) / months_active),
        is_active=recently_updated or campaign_metrics.active > 0,
    )

    # Data sources
    team_updated = latest([m.updated_at for m in memberships] + [r.updated_at for r in roles])
    data_sources = [
        DataSource(
            name="Brand Profile",
            available=True,
            last_updated=to_datetime(brand.updated_at),
            confidence=calculate_confidence(brand.updated_at, now),
        ),
        DataSource(
            name="Team Structure",
            available=team_size > 0,
            last_updated=team_updated,
            confidence=calculate_confidence(team_updated, now) if team_size > 0 else Confidence.NONE,
        ),
        DataSource(
            name="Campaigns",
            available=bool(campaigns),
            last_updated=last_campaign_update,
            confidence=calculate_confidence(last_campaign_update, now) if campaigns else Confidence.NONE,
        ),
        DataSource(
            name="Creator Invitations",
            available=bool(invitations),
            last_updated=latest(i.updated_at for i in invitations),
            confidence=(
                Confidence.HIGH if len(invitations) > 5
                else Confidence.MEDIUM if invitations
                else Confidence.NONE
            ),
        ),
        DataSource(
            name="Financial Data",
            available=total_budget > 0,
            last_updated=last_campaign_update,
            confidence=(
                Confidence.HIGH if len(campaigns) > 3
                else Confidence.MEDIUM if campaigns
                else Confidence.NONE
            ),
        ),
    ]

    return BrandIntelligence(
        id=str(brand.id),
        user_id=str(brand.user_id),
        company_name=brand.company_name or "Unnamed Brand",
        email=brand.email or "",
        industry=brand.industry,
        website=brand.website,
        company_size=brand.company_size,
        logo_url=brand.logo_url,
        description=brand.description,
        created_at=to_datetime(brand.created_at),
        structure=structure,
        campaigns=campaign_metrics,
        financials=financials,
        creator_engagement=engagement,
        compliance=Compliance(overall_health=health, risk_score=risk_score, signals=signals),
        activity=activity,
        data_sources=data_sources,
    )


def build_brand_summary(brand: Any, campaigns: Sequence[Any], team_size: int) -> BrandIntelligenceSummary:
    """Roster row for one brand. A brand with no recorded team counts as one person."""
    team_size = team_size or 1
    risk_score, health = summary_risk_score(campaigns)
    return BrandIntelligenceSummary(
        id=str(brand.id),
        user_id=str(brand.user_id or ""),
        company_name=brand.company_name or "Unnamed Brand",
        email=brand.email or "",
        logo_url=brand.logo_url,
        industry=brand.industry,
        structure_type=classify_structure(team_size),
        team_size=team_size,
        total_campaigns=len(campaigns),
        active_campaigns=sum(1 for c in campaigns if c.status == "active"),
        total_budget=sum(_num(c.total_budget) for c in campaigns),
        risk_score=risk_score,
        health_status=health,
        created_at=to_datetime(brand.created_at),
    )


def build_brand_stats(
    brands: Sequence[Any],
    campaigns: Sequence[Any],
    memberships: Sequence[Any],
) -> BrandStats:
    """Platform-wide brand overview."""
    member_counts = Counter(m.brand_id for m in memberships)
    agency_count = sum(1 for b in brands if member_counts.get(b.id, 0) > AGENCY_TEAM_SIZE)
    status_counts = Counter(c.status for c in campaigns)
    total_budget = sum(_num(c.total_budget) for c in campaigns)
    total_allocated = sum(_num(c.allocated_budget) for c in campaigns)
    return BrandStats(
        total_brands=len(brands),
        agency_count=agency_count,
        single_brand_count=len(brands) - agency_count,
        total_campaigns=len(campaigns),
        active_campaigns=status_counts.get("active", 0),
        completed_campaigns=status_counts.get("completed", 0),
        total_budget=total_budget,
        total_allocated=total_allocated,
        utilization_rate=percent(total_allocated, total_budget),
    )


# =============================================================================
# SERVICE
# =============================================================================

class BrandIntelligenceService:
    """Fetches brand rows and hands them to the pure builders above."""

    def __init__(self, db: Session):
        self.db = db

    def get_summaries(self) -> List[BrandIntelligenceSummary]:
        brands = self.db.query(BrandProfileDB).order_by(BrandProfileDB.created_at.desc()).all()
        campaigns = self.db.query(CampaignDB).all()
        memberships = self.db.query(BrandMembershipDB).all()
        roles = self.db.query(BrandUserRoleDB).all()

        campaigns_by_brand: Dict[str, List[Any]] = defaultdict(list)
        for campaign in campaigns:
            if campaign.brand_id:
                campaigns_by_brand[campaign.brand_id].append(campaign)
        team_sizes = Counter(m.brand_id for m in memberships) + Counter(r.brand_id for r in roles)

        summaries = [
            build_brand_summary(b, campaigns_by_brand.get(b.id, []), team_sizes.get(b.id, 0))
            for b in brands
        ]
        logger.info(f"Built {len(summaries)} brand summaries from {len(campaigns)} campaigns")
        return summaries

    def get_detail(self, brand_id: str, now: Optional[datetime] = None) -> Optional[BrandIntelligence]:
        brand = self.db.query(BrandProfileDB).filter(BrandProfileDB.id == brand_id).first()
        if not brand:
            return None

        campaigns = self.db.query(CampaignDB).filter(CampaignDB.brand_user_id == brand.user_id).all()
        memberships = self.db.query(BrandMembershipDB).filter(BrandMembershipDB.brand_id == brand_id).all()
        roles = self.db.query(BrandUserRoleDB).filter(BrandUserRoleDB.brand_id == brand_id).all()
        team_invitations = self.db.query(TeamInvitationDB).filter(TeamInvitationDB.brand_id == brand_id).all()

        invitations: List[Any] = []
        negotiations: List[Any] = []
        campaign_ids = [c.id for c in campaigns]
        if campaign_ids:
            invitations = self.db.query(CampaignInvitationDB).filter(
                CampaignInvitationDB.campaign_id.in_(campaign_ids)
            ).all()
        if invitations:
            negotiations = self.db.query(CampaignNegotiationDB).filter(
                CampaignNegotiationDB.invitation_id.in_([i.id for i in invitations])
            ).all()

        intelligence = build_brand_intelligence(
            brand, campaigns, memberships, roles, team_invitations, invitations, negotiations, now
        )
        logger.info(
            f"Brand {brand_id}: risk {intelligence.compliance.risk_score} "
            f"({intelligence.compliance.overall_health.value}), "
            f"{len(intelligence.compliance.signals)} signals"
        )
        return intelligence

    def get_stats(self) -> BrandStats:
        return build_brand_stats(
            self.db.query(BrandProfileDB).all(),
            self.db.query(CampaignDB).all(),
            self.db.query(BrandMembershipDB).all(),
        )
