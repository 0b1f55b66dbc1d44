"""
Tests for brand intelligence: risk signals, health tiers, confidence and
full record assembly.
"""
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from collab_engine.models.intelligence import (
    Confidence,
    HealthTier,
    RiskSignal,
    SignalType,
    StructureType,
)
from collab_engine.services.intelligence import (
    BrandIntelligenceService,
    build_brand_intelligence,
    build_brand_stats,
    build_brand_summary,
    calculate_confidence,
    classify_structure,
    compute_health,
    compute_risk_signals,
    summary_risk_score,
)

from conftest import NOW, days_ago


def campaign(status="active", total=1000, allocated=1000, **extra):
    row = dict(
        id=extra.pop("id", f"c-{status}"),
        status=status,
        total_budget=total,
        allocated_budget=allocated,
        influencer_count=0,
        timeline_start=None,
        timeline_end=None,
        created_at=days_ago(5),
        updated_at=days_ago(5),
    )
    row.update(extra)
    return SimpleNamespace(**row)


def invitation(status="pending", offered=100, base=100, **extra):
    row = dict(id="i", status=status, offered_payout=offered, base_payout=base,
               creator_user_id="creator", updated_at=days_ago(1))
    row.update(extra)
    return SimpleNamespace(**row)


class TestRiskSignals:
    """compute_risk_signals + compute_health"""

    def test_high_cancellation(self):
        campaigns = [campaign("active")] * 3 + [campaign("cancelled")] * 2
        signals = compute_risk_signals(campaigns, [], team_size=1, days_since_creation=100)

        assert signals == [RiskSignal(
            type=SignalType.WARNING,
            category="Campaign Management",
            message="High campaign cancellation rate",
            details="40% of campaigns were cancelled",
        )]
        assert compute_health(signals) == (15, HealthTier.ATTENTION)

    def test_cancellation_needs_more_than_three_campaigns(self):
        campaigns = [campaign("cancelled")] * 3
        assert compute_risk_signals(campaigns, [], 1, 100) == []

    def test_low_budget_utilization(self):
        signals = compute_risk_signals([campaign(total=1000, allocated=200)], [], 1, 100)
        assert len(signals) == 1
        assert signals[0].type == SignalType.INFO
        assert signals[0].details == "Only 20% of total budget has been allocated"
        assert compute_health(signals) == (5, HealthTier.HEALTHY)

    def test_low_acceptance(self):
        invitations = [invitation("accepted")] * 2 + [invitation("declined")] * 9
        signals = compute_risk_signals([], invitations, 1, 100)
        assert [s.message for s in signals] == ["Low creator acceptance rate"]
        assert signals[0].details == "Only 18% of invitations accepted"

    def test_payout_negotiations(self):
        invitations = [invitation(offered=150)] * 4 + [invitation()] * 2
        signals = compute_risk_signals([], invitations, 1, 100)
        assert [s.message for s in signals] == ["Frequent payout negotiations"]
        assert signals[0].details == "67% of invitations have modified payouts"

    def test_rapid_creation(self):
        signals = compute_risk_signals([campaign()] * 6, [], 1, days_since_creation=10)
        assert [s.details for s in signals] == ["6 campaigns created within first month"]

    def test_solo_operation(self):
        signals = compute_risk_signals([campaign()] * 11, [], 0, 100)
        assert [s.category for s in signals] == ["Operations"]

    def test_no_data(self):
        assert compute_risk_signals([], [], 0, 0) == []
        assert compute_health([]) == (0, HealthTier.HEALTHY)


class TestHealth:

    def _signals(self, *types):
        return [RiskSignal(type=t, category="x", message="x") for t in types]

    def test_critical_signal_forces_critical(self):
        assert compute_health(self._signals(SignalType.CRITICAL)) == (30, HealthTier.CRITICAL)

    def test_score_over_50_is_critical(self):
        score, health = compute_health(self._signals(*[SignalType.WARNING] * 4))
        assert (score, health) == (60, HealthTier.CRITICAL)

    def test_infos_alone_reach_attention(self):
        assert compute_health(self._signals(*[SignalType.INFO] * 6)) == (30, HealthTier.ATTENTION)

    def test_score_capped(self):
        assert compute_health(self._signals(*[SignalType.CRITICAL] * 4))[0] == 100


class TestSummaryRiskScore:
    """Roster formula, independent of the signal rules."""

    def test_cancellations(self):
        campaigns = [campaign("active")] * 2 + [campaign("cancelled")] * 2
        assert summary_risk_score(campaigns) == (15, HealthTier.HEALTHY)

    def test_cancellations_and_unused_budget(self):
        campaigns = [campaign("cancelled", total=1000, allocated=0)] * 4
        assert summary_risk_score(campaigns) == (50, HealthTier.ATTENTION)

    def test_attention_boundary(self):
        campaigns = [campaign("cancelled", total=1000, allocated=0)] * 5
        assert summary_risk_score(campaigns) == (50, HealthTier.ATTENTION)
        campaigns = [campaign("cancelled", total=1000, allocated=0)] * 4 + [campaign("active", total=1000, allocated=0)]
        assert summary_risk_score(campaigns) == (44, HealthTier.ATTENTION)

    def test_few_campaigns_ignore_cancellations(self):
        assert summary_risk_score([campaign("cancelled")] * 3) == (0, HealthTier.HEALTHY)


class TestConfidence:

    @pytest.mark.parametrize("age,expected", [
        (6, Confidence.HIGH),
        (7, Confidence.HIGH),
        (8, Confidence.MEDIUM),
        (30, Confidence.MEDIUM),
        (31, Confidence.LOW),
    ])
    def test_age_bands(self, age, expected):
        assert calculate_confidence(NOW - timedelta(days=age), NOW) == expected

    def test_missing(self):
        assert calculate_confidence(None, NOW) == Confidence.NONE

    def test_iso_string(self):
        assert calculate_confidence("2025-03-09T00:00:00Z", NOW) == Confidence.HIGH

    def test_structure(self):
        assert classify_structure(2) == StructureType.SINGLE_BRAND
        assert classify_structure(3) == StructureType.AGENCY


@pytest.fixture
def brand():
    return SimpleNamespace(
        id="b1", user_id="u1", company_name=None, email="hello@glow.example",
        industry="Beauty", website=None, company_size="11-50", logo_url=None,
        description=None, created_at=days_ago(100), updated_at=days_ago(2),
    )


@pytest.fixture
def brand_rows():
    campaigns = [
        campaign("active", id="c1", influencer_count=2, timeline_start=days_ago(40), timeline_end=days_ago(30)),
        campaign("active", id="c2", influencer_count=4, timeline_start=days_ago(40), timeline_end=days_ago(20)),
        campaign("completed", id="c3", influencer_count=3),
        campaign("cancelled", id="c4", influencer_count=1),
        campaign("cancelled", id="c5", influencer_count=0),
    ]
    memberships = [SimpleNamespace(brand_id="b1", updated_at=days_ago(3))] * 2
    roles = [SimpleNamespace(brand_id="b1", role="agency_admin", updated_at=days_ago(1))]
    invitations = [
        invitation("accepted", offered=100, base=100, id="i1", creator_user_id="k1"),
        invitation("accepted", offered=200, base=150, id="i2", creator_user_id="k2"),
        invitation("declined", id="i3", creator_user_id="k1"),
        invitation("pending", id="i4", creator_user_id="k3"),
    ]
    negotiations = [
        SimpleNamespace(invitation_id="i2"),
        SimpleNamespace(invitation_id="i2"),
        SimpleNamespace(invitation_id="other-brand"),
    ]
    return dict(
        campaigns=campaigns,
        memberships=memberships,
        roles=roles,
        team_invitations=[],
        invitations=invitations,
        negotiations=negotiations,
    )


class TestBuildBrandIntelligence:

    def test_full_record(self, brand, brand_rows):
        intel = build_brand_intelligence(brand, now=NOW, **brand_rows)

        assert intel.company_name == "Unnamed Brand"
        assert intel.structure.type == StructureType.AGENCY
        assert intel.structure.team_size == 3
        assert intel.structure.roles_breakdown.agency_admin == 1

        assert intel.campaigns.total == 5
        assert intel.campaigns.active == 2
        assert intel.campaigns.completed == 1
        assert intel.campaigns.cancelled == 2
        assert intel.campaigns.avg_duration == 15
        assert intel.campaigns.avg_influencer_count == 2

        assert intel.financials.total_budget_allocated == 5000
        assert intel.financials.avg_campaign_budget == 1000
        assert intel.financials.avg_payout_per_creator == 150
        assert intel.financials.budget_utilization_rate == 100

        engagement = intel.creator_engagement
        assert engagement.total_invitations_sent == 4
        assert engagement.accepted_invitations == 2
        assert engagement.declined_invitations == 1
        assert engagement.pending_invitations == 1
        assert engagement.acceptance_rate == 50
        assert engagement.avg_negotiation_rounds == 0.5
        assert engagement.unique_creators_engaged == 3

        assert intel.compliance.risk_score == 15
        assert intel.compliance.overall_health == HealthTier.ATTENTION

        assert intel.activity.is_active is True
        assert intel.activity.avg_campaigns_per_month == 1.5
        assert intel.activity.last_team_member_added is None

    def test_data_sources(self, brand, brand_rows):
        sources = {s.name: s for s in build_brand_intelligence(brand, now=NOW, **brand_rows).data_sources}

        assert list(sources) == [
            "Brand Profile", "Team Structure", "Campaigns", "Creator Invitations", "Financial Data",
        ]
        assert sources["Brand Profile"].confidence == Confidence.HIGH
        assert sources["Team Structure"].last_updated == days_ago(1)
        assert sources["Creator Invitations"].confidence == Confidence.MEDIUM
        assert sources["Financial Data"].confidence == Confidence.HIGH

    def test_empty_brand(self, brand):
        intel = build_brand_intelligence(brand, [], [], [], [], [], [], now=NOW)
        assert intel.campaigns.total == 0
        assert intel.financials.budget_utilization_rate == 0
        assert intel.creator_engagement.avg_negotiation_rounds == 0.0
        assert intel.compliance.overall_health == HealthTier.HEALTHY
        assert intel.activity.is_active is False
        assert all(s.confidence == Confidence.NONE for s in intel.data_sources[1:])

    def test_summary_and_detail_use_different_formulas(self, brand, brand_rows):
        summary = build_brand_summary(brand, brand_rows["campaigns"], team_size=3)
        detail = build_brand_intelligence(brand, now=NOW, **brand_rows)
        assert summary.risk_score == 12
        assert summary.health_status == HealthTier.HEALTHY
        assert detail.compliance.overall_health == HealthTier.ATTENTION

    def test_summary_without_team(self, brand):
        summary = build_brand_summary(brand, [], team_size=0)
        assert summary.team_size == 1
        assert summary.structure_type == StructureType.SINGLE_BRAND


class TestBrandStats:

    def test_stats(self):
        brands = [SimpleNamespace(id="b1"), SimpleNamespace(id="b2")]
        memberships = [SimpleNamespace(brand_id="b1")] * 3 + [SimpleNamespace(brand_id="b2")]
        campaigns = [campaign("active", total=1000, allocated=500), campaign("completed", total=1000, allocated=1000)]

        stats = build_brand_stats(brands, campaigns, memberships)

        assert stats.total_brands == 2
        assert stats.agency_count == 1
        assert stats.single_brand_count == 1
        assert stats.active_campaigns == 1
        assert stats.completed_campaigns == 1
        assert stats.total_budget == 2000
        assert stats.utilization_rate == 75


class TestBrandIntelligenceService:

    def test_missing_brand(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = None
        assert BrandIntelligenceService(db).get_detail("nope") is None
