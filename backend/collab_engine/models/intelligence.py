"""
Collab Engine - Admin Intelligence Models

View-models produced by the admin aggregators. All are computed fresh per
request from already-fetched rows and never persisted.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


# =============================================================================
# ENUMS
# =============================================================================

class SignalType(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class HealthTier(str, Enum):
    HEALTHY = "healthy"
    ATTENTION = "attention"
    CRITICAL = "critical"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class StructureType(str, Enum):
    SINGLE_BRAND = "single_brand"
    AGENCY = "agency"


class CreatorTier(str, Enum):
    PREMIUM = "premium"
    ESTABLISHED = "established"
    EMERGING = "emerging"
    NEW = "new"


class FreshnessStatus(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    CRITICAL = "critical"
    EMPTY = "empty"


class MetricStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class SafeguardState(str, Enum):
    ACTIVE = "active"
    WARNING = "warning"
    INACTIVE = "inactive"


# =============================================================================
# SHARED
# =============================================================================

@dataclass(frozen=True)
class RiskSignal:
    """One fired risk/compliance rule."""
    type: SignalType
    category: str
    message: str
    details: Optional[str] = None


@dataclass(frozen=True)
class DataSource:
    """Freshness/confidence record for one underlying table."""
    name: str
    available: bool
    last_updated: Optional[datetime]
    confidence: Confidence


# =============================================================================
# BRAND INTELLIGENCE
# =============================================================================

@dataclass
class RolesBreakdown:
    agency_admin: int = 0
    campaign_manager: int = 0
    finance: int = 0


@dataclass
class BrandStructure:
    type: StructureType
    team_size: int
    roles_breakdown: RolesBreakdown = field(default_factory=RolesBreakdown)


@dataclass
class CampaignMetrics:
    total: int = 0
    active: int = 0
    completed: int = 0
    draft: int = 0
    cancelled: int = 0
    avg_duration: int = 0
    avg_influencer_count: int = 0


@dataclass
class FinancialMetrics:
    total_budget_allocated: float = 0.0
    total_spent: float = 0.0
    avg_campaign_budget: int = 0
    avg_payout_per_creator: int = 0
    budget_utilization_rate: int = 0


@dataclass
class CreatorEngagement:
    total_invitations_sent: int = 0
    accepted_invitations: int = 0
    declined_invitations: int = 0
    pending_invitations: int = 0
    acceptance_rate: int = 0
    avg_negotiation_rounds: float = 0.0
    unique_creators_engaged: int = 0


@dataclass
class Compliance:
    overall_health: HealthTier
    risk_score: int
    signals: List[RiskSignal] = field(default_factory=list)


@dataclass
class ActivityMetrics:
    last_campaign_created: Optional[datetime] = None
    last_team_member_added: Optional[datetime] = None
    avg_campaigns_per_month: float = 0.0
    is_active: bool = False


@dataclass
class BrandIntelligence:
    id: str
    user_id: str
    company_name: str
    email: str
    industry: Optional[str]
    website: Optional[str]
    company_size: Optional[str]
    logo_url: Optional[str]
    description: Optional[str]
    created_at: Optional[datetime]
    structure: BrandStructure
    campaigns: CampaignMetrics
    financials: FinancialMetrics
    creator_engagement: CreatorEngagement
    compliance: Compliance
    activity: ActivityMetrics
    data_sources: List[DataSource] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BrandIntelligenceSummary:
    id: str
    user_id: str
    company_name: str
    email: str
    logo_url: Optional[str]
    industry: Optional[str]
    structure_type: StructureType
    team_size: int
    total_campaigns: int
    active_campaigns: int
    total_budget: float
    risk_score: int
    health_status: HealthTier
    created_at: Optional[datetime]


@dataclass
class BrandStats:
    total_brands: int
    agency_count: int
    single_brand_count: int
    total_campaigns: int
    active_campaigns: int
    completed_campaigns: int
    total_budget: float
    total_allocated: float
    utilization_rate: int


# =============================================================================
# CREATOR INTELLIGENCE
# =============================================================================

@dataclass
class CreatorScores:
    overall: int
    profile: int
    brand_fit: int
    social_reach: int
    engagement: int
    reliability: int
    responsiveness: int


@dataclass
class CreatorIntelligenceSummary:
    id: str
    user_id: str
    name: str
    username: str
    email: str
    avatar_url: Optional[str]
    overall_score: int
    tier: CreatorTier
    platform_count: int
    total_followers: int
    completed_campaigns: int
    accepted_invitations: int
    data_completeness: int
    scores: CreatorScores
    created_at: Optional[datetime]
    data_sources: List[DataSource] = field(default_factory=list)


# =============================================================================
# SYSTEM INTEGRITY
# =============================================================================

@dataclass(frozen=True)
class TableSnapshot:
    """Input: newest timestamp and row count of one monitored table."""
    table: str
    label: str
    last_updated: Optional[datetime]
    record_count: int


@dataclass
class DataFreshnessMetric:
    table: str
    label: str
    last_updated: Optional[datetime]
    record_count: int
    stale_days: float  # math.inf when the table has never been written
    status: FreshnessStatus

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # JSON has no infinity
        if math.isinf(self.stale_days):
            data["stale_days"] = None
        return data


@dataclass
class SystemHealthMetric:
    name: str
    value: float
    unit: str
    status: MetricStatus
    threshold_warning: float
    threshold_critical: float
    description: str


@dataclass
class SafeguardStatus:
    id: str
    name: str
    description: str
    enabled: bool
    last_checked: datetime
    status: SafeguardState
    details: Optional[str] = None


@dataclass
class AuditSummary:
    total_events: int = 0
    today_events: int = 0
    role_changes: int = 0
    config_changes: int = 0
    survey_changes: int = 0
    campaign_changes: int = 0
    recent_errors: int = 0


@dataclass
class IntegrityReport:
    overall_health: MetricStatus
    health_score: int
    critical_count: int
    warning_count: int
    data_freshness: List[DataFreshnessMetric]
    system_metrics: List[SystemHealthMetric]
    safeguards: List[SafeguardStatus]
    audit_summary: AuditSummary
    last_checked: datetime

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["data_freshness"] = [m.to_dict() for m in self.data_freshness]
        return data
