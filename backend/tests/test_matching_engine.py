"""
Tests for CampaignMatchingEngine.

Expected scores are worked out rule by rule in each test so a change to a
weight shows up as a specific failing assertion.
"""
import json
from dataclasses import replace

import pytest

from collab_engine.models.brand_fit import BrandFitProfile
from collab_engine.models.campaign import Campaign
from collab_engine.models.survey import ContentAffinities, SurveyScore
from collab_engine.services.matching import CampaignMatchingEngine
from collab_engine.services.matching.engine import ALCOHOL_CONFLICT, DRIVING_CONFLICT
from collab_engine.services.matching.rules import (
    avoided_keywords,
    category_match,
    content_style_match,
    load_category_synonyms,
    DEFAULT_CATEGORY_SYNONYMS,
    DEFAULT_CONTENT_STYLE_SYNONYMS,
)


@pytest.fixture
def engine():
    return CampaignMatchingEngine()


@pytest.fixture
def studio_profile():
    """Three answered fields: exactly at the cold-start threshold."""
    return BrandFitProfile(
        brand_categories=["Tech & Gadgets"],
        personal_assets=["studio"],
        alcohol_openness="yes",
    )


def studio_catalog():
    return [
        # category 15 + non-regulated 10
        Campaign(id="low", campaign_name="Lens Launch", categories=["Audio"]),
        # category 15 + non-regulated 10 + studio asset 15
        Campaign(id="studio", campaign_name="Studio Lens Launch", categories=["Photography"]),
        Campaign(id="audio", campaign_name="Studio Audio Week", categories=["Audio"], is_new=True),
    ]


class TestColdStart:
    """Below 30% effective completion nothing is scored."""

    def test_no_profile(self, engine):
        catalog = studio_catalog()
        result = engine.match(None, catalog)

        assert result.has_profile_data is False
        assert result.completion_percent == 0
        assert result.top_match_count == 0
        assert [m.id for m in result.matched] == ["low", "studio", "audio"]
        assert [m.id for m in result.all] == ["low", "studio", "audio"]
        assert all(not m.scored and m.match_score == 0 for m in result.all)

    def test_sparse_profile(self, engine):
        profile = BrandFitProfile(brand_categories=["Tech & Gadgets"], alcohol_openness="yes")
        result = engine.match(profile, studio_catalog())
        assert result.has_profile_data is False
        assert result.completion_percent == 20

    def test_surveys_lift_profile_over_threshold(self, engine):
        profile = BrandFitProfile(brand_categories=["Tech & Gadgets"], alcohol_openness="yes")
        result = engine.match(profile, studio_catalog(), SurveyScore(total_surveys_completed=2))
        assert result.has_profile_data is True
        assert result.completion_percent == 20
        assert result.effective_completion == 30

    def test_surveys_not_enough(self, engine):
        profile = BrandFitProfile(brand_categories=["Tech & Gadgets"])
        result = engine.match(profile, studio_catalog(), SurveyScore(total_surveys_completed=3))
        assert result.effective_completion == 25
        assert result.has_profile_data is False

    def test_exactly_threshold_is_scored(self, engine, studio_profile):
        result = engine.match(studio_profile, studio_catalog())
        assert result.has_profile_data is True
        assert all(m.scored for m in result.all)


class TestScoring:
    """Per-rule contributions."""

    def test_top_match(self, engine, full_profile, beauty_campaign):
        # 30 categories + 7 style + 10 non-regulated + 5 camera + 15 home + 5 + 5
        item = engine.score_campaign(full_profile, beauty_campaign)

        assert item.match_score == 77
        assert item.is_top_match is True
        assert item.excluded is False
        assert item.match_reasons == [
            "Matches your Fashion & Apparel, Beauty & Skincare interests",
            "Suits your on-camera presence",
            "Uses your home for content",
        ]

    def test_reasons_capped_at_three(self, engine, full_profile, beauty_campaign):
        item = engine.score_campaign(full_profile, beauty_campaign)
        assert len(item.match_reasons) == 3

    def test_threshold_boundary(self, engine, studio_profile):
        result = engine.match(studio_profile, studio_catalog())
        scores = {m.id: m.match_score for m in result.all}

        assert scores == {"low": 25, "studio": 40, "audio": 40}
        assert [m.id for m in result.matched] == ["studio", "audio"]
        assert result.top_match_count == 0

    def test_off_camera_penalty(self, engine, make_profile, beauty_campaign):
        item = engine.score_campaign(make_profile(camera_comfort="off_camera"), beauty_campaign)
        assert item.match_score == 52
        assert "Suits your on-camera presence" not in item.match_reasons

    def test_voiceover_penalty(self, engine, make_profile, beauty_campaign):
        item = engine.score_campaign(make_profile(camera_comfort="voiceover"), beauty_campaign)
        assert item.match_score == 62

    def test_avoided_topic_penalty(self, engine, make_profile, beauty_campaign):
        item = engine.score_campaign(make_profile(avoided_topics="skincare"), beauty_campaign)
        assert item.match_score == 37
        assert item.is_top_match is False

    def test_score_never_negative(self, engine):
        profile = BrandFitProfile(
            brand_categories=["Tech & Gadgets"],
            alcohol_openness="yes",
            avoided_topics="launch, audio",
        )
        campaign = Campaign(id="low", campaign_name="Lens Launch", categories=["Audio"])
        item = engine.score_campaign(profile, campaign)
        assert item.match_score == 0
        assert item.excluded is False

    def test_flat_style_bonus_without_content_type(self, engine, full_profile):
        campaign = Campaign(id="snack", campaign_name="Healthy Cooking Box", categories=["Food"])
        # flat style 10 + non-regulated 10
        assert engine.score_campaign(full_profile, campaign).match_score == 20

    def test_food_affinity(self, engine, full_profile):
        campaign = Campaign(id="snack", campaign_name="Healthy Cooking Box", categories=["Food"])
        survey = SurveyScore(content_affinities=ContentAffinities(food_content=True))
        item = engine.score_campaign(full_profile, campaign, survey)
        assert item.match_score == 30
        assert item.match_reasons == ["Matches your food content focus"]

    def test_survey_completion_bonus(self, engine, full_profile, beauty_campaign):
        survey = SurveyScore(total_surveys_completed=3)
        assert engine.score_campaign(full_profile, beauty_campaign, survey).match_score == 83

    def test_score_capped_at_100(self, engine, make_profile):
        profile = make_profile(
            brand_categories=["Fashion & Apparel", "Beauty & Skincare", "Luxury & Premium"],
            content_styles=["Reviews", "Lifestyle", "Day-in-the-life"],
        )
        campaign = Campaign(
            id="lux",
            campaign_name="Luxury Home Beauty Vlog",
            categories=["Fashion", "Beauty", "Luxury"],
            content_type=["Review", "Lifestyle Vlog", "Daily routine"],
            collaboration_length="long_term",
            creative_control_level="collaborative",
        )
        survey = SurveyScore(total_surveys_completed=3)
        assert engine.score_campaign(profile, campaign, survey).match_score == 100


class TestRegulatedAndVehicle:
    """Policy filters exclude outright; preferences only add points."""

    @pytest.fixture
    def wine(self):
        return Campaign(
            id="wine",
            campaign_name="Vineyard Tasting",
            categories=["Beverage"],
            is_regulated=True,
        )

    def test_alcohol_refusal_excludes(self, engine, make_profile, wine):
        result = engine.match(make_profile(alcohol_openness="no"), [wine])
        item = result.all[0]

        assert item.excluded is True
        assert item.match_score == 0
        assert item.match_reasons == [ALCOHOL_CONFLICT]
        assert result.matched == []

    def test_survey_refusal_excludes(self, engine, full_profile, wine):
        item = engine.score_campaign(full_profile, wine, SurveyScore(alcohol_comfort="no"))
        assert item.excluded is True

    def test_survey_acceptance_cannot_override_refusal(self, engine, make_profile, wine):
        profile = make_profile(alcohol_openness="no")
        item = engine.score_campaign(profile, wine, SurveyScore(alcohol_comfort="yes"))
        assert item.excluded is True
        assert item.match_score == 0

    def test_exclusion_beats_strong_signals(self, engine, make_profile, beauty_campaign):
        regulated = replace(beauty_campaign, is_regulated=True)
        item = engine.score_campaign(make_profile(alcohol_openness="no"), regulated)
        assert item.excluded is True
        assert item.is_top_match is False
        assert item.match_reasons == [ALCOHOL_CONFLICT]

    def test_survey_yes_wins_over_guidelines(self, engine, make_profile, wine):
        profile = make_profile(alcohol_openness="yes_guidelines")
        item = engine.score_campaign(profile, wine, SurveyScore(alcohol_comfort="yes"))
        # flat style 10 + survey yes 15
        assert item.match_score == 25
        assert item.match_reasons == ["Matches your regulated brand preference"]

    def test_guidelines(self, engine, make_profile, wine):
        item = engine.score_campaign(make_profile(alcohol_openness="yes_guidelines"), wine)
        assert item.match_score == 20
        assert item.match_reasons == ["Regulated brand (within your guidelines)"]

    @pytest.mark.parametrize("comfort", ["not_comfortable", "passenger_only"])
    def test_driving_refusal_excludes(self, engine, make_profile, comfort):
        campaign = Campaign(id="road", campaign_name="Road Trip", requires_vehicle=True)
        item = engine.score_campaign(make_profile(driving_comfort=comfort), campaign)
        assert item.excluded is True
        assert item.match_reasons == [DRIVING_CONFLICT]

    def test_both_conflicts_reported(self, engine, make_profile):
        campaign = Campaign(id="x", campaign_name="Brewery Run", is_regulated=True, requires_vehicle=True)
        profile = make_profile(alcohol_openness="no", driving_comfort="not_comfortable")
        item = engine.score_campaign(profile, campaign)
        assert item.match_reasons == [ALCOHOL_CONFLICT, DRIVING_CONFLICT]

    def test_comfortable_driver(self, engine, full_profile):
        campaign = Campaign(id="road", campaign_name="Road Trip", requires_vehicle=True)
        item = engine.score_campaign(full_profile, campaign)
        # flat style 10 + non-regulated 10 + very comfortable 10
        assert item.match_score == 30
        assert item.match_reasons == ["Fits your driving content comfort"]


class TestOrdering:
    """Declaration order by default, score order when ranking."""

    def test_idempotent(self, engine, full_profile, beauty_campaign):
        catalog = [beauty_campaign] + studio_catalog()
        assert engine.match(full_profile, catalog) == engine.match(full_profile, catalog)

    def test_declaration_order_by_default(self, engine, studio_profile):
        result = engine.match(studio_profile, studio_catalog())
        assert [m.id for m in result.all] == ["low", "studio", "audio"]

    def test_rank_by_score_then_new(self, engine, studio_profile):
        result = engine.match(studio_profile, studio_catalog(), rank=True)
        assert [m.id for m in result.all] == ["audio", "studio", "low"]
        assert [m.id for m in result.matched] == ["audio", "studio"]

    def test_top_match_count(self, engine, full_profile, beauty_campaign):
        wine = Campaign(id="wine", campaign_name="Vineyard", is_regulated=True)
        result = engine.match(full_profile, [beauty_campaign, wine])
        assert result.top_match_count == 1


class TestSynonyms:
    """Category and content style lookups."""

    def test_unknown_category_maps_to_itself(self):
        points, matched = category_match(["Pets"], ["Pets & Animals"], DEFAULT_CATEGORY_SYNONYMS)
        assert points == 15
        assert matched == ["Pets"]

    def test_category_cap(self):
        user = ["Fashion & Apparel", "Beauty & Skincare", "Tech & Gadgets"]
        points, matched = category_match(user, ["Fashion", "Beauty", "Tech"], DEFAULT_CATEGORY_SYNONYMS)
        assert points == 40
        assert len(matched) == 3

    def test_empty_category_never_matches(self):
        assert category_match([""], ["Fashion"], {}) == (0, [])

    def test_style_points(self):
        styles = ["Reviews", "Tutorials", "Comedy"]
        assert content_style_match(styles, ["Unboxing", "How-To guide"], DEFAULT_CONTENT_STYLE_SYNONYMS) == 14

    def test_custom_table(self, full_profile):
        engine = CampaignMatchingEngine(category_synonyms={"Pets": ["Dog", "Cat"]})
        profile = BrandFitProfile(**{**full_profile.to_dict(), "brand_categories": ["Pets"]})
        campaign = Campaign(id="dog", campaign_name="Treat Box", categories=["Dog Food"])

        assert engine.score_campaign(profile, campaign).match_reasons[0] == "Matches your Pets interests"
        assert CampaignMatchingEngine().score_campaign(profile, campaign).match_reasons == []

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"Pets": ["Dog", "Cat"]}))
        assert load_category_synonyms(str(path)) == {"Pets": ["Dog", "Cat"]}

    def test_load_rejects_bad_shape(self, tmp_path):
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"Pets": "Dog"}))
        with pytest.raises(ValueError):
            load_category_synonyms(str(path))


class TestAvoidedKeywords:

    def test_split_and_filter(self):
        assert avoided_keywords("Gambling, fast food\nab") == ["gambling", "fast food"]

    def test_blank(self):
        assert avoided_keywords("   ") == []
