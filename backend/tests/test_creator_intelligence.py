"""
Tests for creator component scores and the admin creator roster.
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from collab_engine.models.db_models import (
    BrandFitDataDB,
    CampaignHistoryDB,
    CampaignInvitationDB,
    CreatorProfileDB,
    LinkedAccountDB,
    SurveyResponseDB,
)
from collab_engine.models.intelligence import Confidence, CreatorTier
from collab_engine.services.intelligence import (
    CreatorIntelligenceService,
    build_creator_summary,
    calculate_data_completeness,
)
from collab_engine.services.scoring import (
    CampaignHistory,
    LinkedAccount,
    calculate_average_engagement,
    calculate_linked_accounts_score,
    calculate_match_rate_impact,
    calculate_performance_score,
    calculate_response_score,
    calculate_tier,
)

from conftest import NOW, days_ago

ACCOUNTS = [
    LinkedAccount("instagram", connected=True, verified=True, followers=30000, engagement=4.0, updated_at=days_ago(2)),
    LinkedAccount("tiktok", connected=True, verified=False, followers=10000, engagement=2.0, updated_at=days_ago(10)),
]


@pytest.fixture
def creator():
    return SimpleNamespace(
        id="p1", user_id="u1", name="Ana", username="ana", email="ana@example.com",
        bio="Slow travel and specialty coffee", location="Lisbon", website=None,
        avatar_url="https://cdn.example/ana.png", pricing_enabled=False,
        pricing_min=None, pricing_max=None,
        created_at=days_ago(60), updated_at=days_ago(1),
    )


@pytest.fixture
def brand_fit_row():
    return SimpleNamespace(
        user_id="u1",
        data={
            "brand_categories": ["Tech & Gadgets"],
            "alcohol_openness": "yes",
            "content_styles": ["Tutorials"],
            "camera_comfort": "on_camera",
            "audience_type": "Students",
        },
        updated_at=days_ago(40),
    )


class TestComponentScores:

    def test_linked_accounts(self):
        # 2 connections + 1 verification + reach over 20k
        assert calculate_linked_accounts_score(ACCOUNTS) == 55

    def test_disconnected_accounts_ignored(self):
        accounts = [LinkedAccount("youtube", connected=False, verified=True, followers=90000)]
        assert calculate_linked_accounts_score(accounts) == 0
        assert calculate_average_engagement(accounts) == 0.0

    def test_weighted_engagement(self):
        assert calculate_average_engagement(ACCOUNTS) == 3.5

    def test_performance(self):
        history = CampaignHistory(total_completed=8, total_started=10, on_time_deliveries=6, revisions_requested=2)
        assert calculate_performance_score(history) == 77

    def test_performance_without_history(self):
        assert calculate_performance_score(CampaignHistory()) == 50

    @pytest.mark.parametrize("hours,expected", [(1, 100), (2, 85), (5, 85), (10, 70), (20, 50), (24, 30)])
    def test_response(self, hours, expected):
        assert calculate_response_score(hours) == expected

    @pytest.mark.parametrize("score,followers,completed,expected", [
        (85, 150000, 12, CreatorTier.PREMIUM),
        (65, 30000, 5, CreatorTier.ESTABLISHED),
        (45, 0, 0, CreatorTier.EMERGING),
        (10, 0, 1, CreatorTier.EMERGING),
        (10, 100, 0, CreatorTier.NEW),
    ])
    def test_tier(self, score, followers, completed, expected):
        assert calculate_tier(score, followers, completed) == expected

    def test_match_rate_impact(self):
        # 2 connected * 5 + 1 verified * 3 + engagement over 3%
        assert calculate_match_rate_impact(ACCOUNTS) == 16


class TestBuildCreatorSummary:

    def test_weighted_overall(self, creator, brand_fit_row):
        summary = build_creator_summary(creator, ACCOUNTS, brand_fit_row, None, now=NOW)

        assert summary.scores.profile == 71
        assert summary.scores.brand_fit == 50
        assert summary.scores.social_reach == 55
        assert summary.scores.engagement == 53
        assert summary.scores.reliability == 50
        assert summary.scores.responsiveness == 30
        assert summary.overall_score == 52
        assert summary.tier == CreatorTier.EMERGING
        assert summary.platform_count == 2
        assert summary.total_followers == 40000
        assert summary.data_completeness == 92

    def test_data_sources(self, creator, brand_fit_row):
        summary = build_creator_summary(creator, ACCOUNTS, brand_fit_row, None, now=NOW)
        sources = {s.name: s for s in summary.data_sources}

        assert sources["Profile"].confidence == Confidence.HIGH
        assert sources["Brand Fit"].confidence == Confidence.LOW
        assert sources["Social Accounts"].last_updated == days_ago(2)
        assert sources["Campaign History"].available is False
        assert sources["Surveys"].confidence == Confidence.NONE

    def test_brand_fit_accepts_camel_case_blob(self, creator, brand_fit_row):
        brand_fit_row.data = {"brandCategories": ["Automotive"]}
        summary = build_creator_summary(creator, [], brand_fit_row, None, now=NOW)
        assert summary.scores.brand_fit == 10

    def test_unnamed_creator(self, creator):
        creator.name = None
        summary = build_creator_summary(creator, [], None, None, now=NOW)
        assert summary.name == "Unnamed Creator"
        assert summary.scores.brand_fit == 0

    def test_data_completeness(self, creator):
        assert calculate_data_completeness(creator, has_brand_fit=False, account_count=5) == 58


class TestCreatorIntelligenceService:

    def test_summaries(self, creator, brand_fit_row):
        rows = {
            CreatorProfileDB: [creator],
            LinkedAccountDB: [
                SimpleNamespace(user_id="u1", platform="instagram", connected=True, verified=True,
                                followers=30000, engagement=4.0, updated_at=days_ago(2)),
            ],
            BrandFitDataDB: [brand_fit_row],
            CampaignHistoryDB: [
                SimpleNamespace(user_id="u1", total_completed=8, total_started=10, on_time_deliveries=6,
                                revisions_requested=2, total_earnings=1200, avg_response_time=1.5,
                                updated_at=days_ago(3)),
            ],
            SurveyResponseDB: [SimpleNamespace(user_id="u1", created_at=days_ago(4))],
            CampaignInvitationDB: [SimpleNamespace(creator_user_id="u1"), SimpleNamespace(creator_user_id="u2")],
        }

        def query(model):
            q = MagicMock()
            q.all.return_value = rows[model]
            q.order_by.return_value.all.return_value = rows[model]
            q.filter.return_value.all.return_value = rows[model]
            return q

        db = MagicMock()
        db.query.side_effect = query

        summaries = CreatorIntelligenceService(db).get_summaries(now=NOW)

        assert len(summaries) == 1
        summary = summaries[0]
        assert summary.completed_campaigns == 8
        assert summary.accepted_invitations == 1
        assert summary.scores.reliability == 77
        assert summary.scores.responsiveness == 100
