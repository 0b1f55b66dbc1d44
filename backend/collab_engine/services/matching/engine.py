"""
Collab Engine - Campaign Matching Engine

Scores every campaign in a catalog against one creator's Brand-Fit profile
and lifestyle survey results.

Rules are additive and independent. Two of them are policy filters rather
than preferences (regulated brands the creator refuses, vehicle campaigns
for creators who won't drive): when either fires the campaign is excluded
outright and no other signal can bring it back.
"""
import logging
from functools import lru_cache
from typing import List, Mapping, Optional, Sequence, Tuple

from ...config import CATEGORY_SYNONYMS_PATH
from ...models.brand_fit import BrandFitProfile
from ...models.campaign import Campaign, MatchedCampaign, MatchingResult
from ...models.survey import EMPTY_SURVEY_SCORE, SurveyScore
from ..numeric import clamp
from ..scoring.completion import calculate_brand_fit_completion, calculate_effective_completion
from .rules import (
    DEFAULT_CATEGORY_SYNONYMS,
    DEFAULT_CONTENT_STYLE_SYNONYMS,
    ETHICAL_KEYWORDS,
    FITNESS_KEYWORDS,
    FOOD_KEYWORDS,
    SUSTAINABILITY_KEYWORDS,
    asset_match,
    avoided_keywords,
    campaign_text,
    category_match,
    contains_any,
    content_style_match,
    load_category_synonyms,
    needs_on_camera,
)

logger = logging.getLogger(__name__)

ALCOHOL_CONFLICT = "Conflicts with your alcohol preference"
DRIVING_CONFLICT = "Requires driving content you prefer to avoid"


class CampaignMatchingEngine:
    """
    Deterministic campaign scorer.

    Usage:
        engine = CampaignMatchingEngine()
        result = engine.match(profile, campaigns, survey)
        for item in result.matched:
            print(item.campaign.campaign_name, item.match_score)
    """

    TOP_MATCH_THRESHOLD = 70
    MATCH_THRESHOLD = 40
    COLD_START_COMPLETION = 30
    MAX_REASONS = 3

    def __init__(
        self,
        category_synonyms: Optional[Mapping[str, Sequence[str]]] = None,
        content_style_synonyms: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self.category_synonyms = category_synonyms or DEFAULT_CATEGORY_SYNONYMS
        self.content_style_synonyms = content_style_synonyms or DEFAULT_CONTENT_STYLE_SYNONYMS

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def match(
        self,
        profile: Optional[BrandFitProfile],
        campaigns: Sequence[Campaign],
        survey: Optional[SurveyScore] = None,
        rank: bool = False,
    ) -> MatchingResult:
        """
        Evaluate a catalog for one creator.

        Args:
            profile: validated Brand-Fit profile, or None if never filled in
            campaigns: catalog in declaration order
            survey: lifestyle survey results (empty when None)
            rank: sort by score (desc) then new campaigns first

        Returns:
            MatchingResult. Below the cold-start threshold every campaign is
            returned unscored in both lists.
        """
        survey = survey or EMPTY_SURVEY_SCORE
        completion = calculate_brand_fit_completion(profile)
        effective = calculate_effective_completion(completion, survey)
        has_profile_data = profile is not None and effective >= self.COLD_START_COMPLETION

        if not has_profile_data:
            unscored = [MatchedCampaign(campaign=c, scored=False) for c in campaigns]
            logger.debug(f"Cold start ({effective}% effective completion): {len(unscored)} campaigns unscored")
            return MatchingResult(
                matched=list(unscored),
                all=unscored,
                has_profile_data=False,
                top_match_count=0,
                completion_percent=completion,
                effective_completion=effective,
            )

        scored = [self.score_campaign(profile, c, survey) for c in campaigns]
        if rank:
            scored = sorted(scored, key=lambda m: (-m.match_score, not m.campaign.is_new))

        matched = [
            m for m in scored
            if not m.excluded and m.match_score >= self.MATCH_THRESHOLD
        ]
        top_match_count = sum(1 for m in scored if m.is_top_match)

        logger.info(
            f"Matched {len(matched)}/{len(scored)} campaigns "
            f"({top_match_count} top, {sum(1 for m in scored if m.excluded)} excluded)"
        )
        return MatchingResult(
            matched=matched,
            all=scored,
            has_profile_data=True,
            top_match_count=top_match_count,
            completion_percent=completion,
            effective_completion=effective,
        )

    def score_campaign(
        self,
        profile: BrandFitProfile,
        campaign: Campaign,
        survey: Optional[SurveyScore] = None,
    ) -> MatchedCampaign:
        """Score a single campaign. Never raises on partial data."""
        survey = survey or EMPTY_SURVEY_SCORE
        score, reasons, conflicts = self._raw_score(profile, campaign, survey)

        if conflicts:
            return MatchedCampaign(
                campaign=campaign,
                match_score=0,
                match_reasons=conflicts[: self.MAX_REASONS],
                is_top_match=False,
                excluded=True,
            )

        final = clamp(score)
        return MatchedCampaign(
            campaign=campaign,
            match_score=final,
            match_reasons=reasons[: self.MAX_REASONS],
            is_top_match=final >= self.TOP_MATCH_THRESHOLD,
        )

    # =========================================================================
    # RULES
    # =========================================================================

    def _raw_score(
        self,
        profile: BrandFitProfile,
        campaign: Campaign,
        survey: SurveyScore,
    ) -> Tuple[int, List[str], List[str]]:
        score = 0
        reasons: List[str] = []
        conflicts: List[str] = []
        text = campaign_text(campaign.campaign_name, campaign.categories)

        # Category (max 40)
        points, matched_categories = category_match(
            profile.brand_categories, campaign.categories, self.category_synonyms
        )
        score += points
        if matched_categories:
            reasons.append(f"Matches your {', '.join(matched_categories[:2])} interests")

        # Content style (max 20)
        if profile.content_styles and campaign.content_type:
            points = content_style_match(
                profile.content_styles, campaign.content_type, self.content_style_synonyms
            )
            score += points
            if points > 10:
                reasons.append("Matches your content style")
        elif profile.content_styles:
            score += 10

        # Regulated brands
        if campaign.is_regulated:
            if profile.alcohol_openness == "no" or survey.alcohol_comfort == "no":
                conflicts.append(ALCOHOL_CONFLICT)
            elif survey.alcohol_comfort == "yes":
                score += 15
                reasons.append("Matches your regulated brand preference")
            elif survey.alcohol_comfort in ("limited", "restricted"):
                score += 5
            elif profile.alcohol_openness == "yes_guidelines":
                score += 10
                reasons.append("Regulated brand (within your guidelines)")
            elif profile.alcohol_openness == "yes":
                score += 15
        else:
            score += 10

        # Vehicle
        if campaign.requires_vehicle:
            if profile.driving_comfort in ("not_comfortable", "passenger_only"):
                conflicts.append(DRIVING_CONFLICT)
            elif profile.driving_comfort == "very_comfortable":
                score += 10
                reasons.append("Fits your driving content comfort")
            elif profile.driving_comfort == "somewhat_comfortable":
                score += 5

        # Camera comfort
        if needs_on_camera(campaign.content_type, campaign.camera_requirement):
            if profile.camera_comfort == "off_camera":
                score -= 20
            elif profile.camera_comfort == "voiceover":
                score -= 10
            elif profile.camera_comfort == "on_camera":
                score += 5
                reasons.append("Suits your on-camera presence")

        # Personal assets (max 15)
        asset = asset_match(profile.personal_assets, text)
        if asset:
            score += 15
            reasons.append(f"Uses your {asset} for content")

        # Survey content affinities
        affinities = survey.content_affinities
        if affinities.food_content and contains_any(text, FOOD_KEYWORDS):
            score += 10
            reasons.append("Matches your food content focus")
        if affinities.fitness_content and contains_any(text, FITNESS_KEYWORDS):
            score += 10
            reasons.append("Aligns with your fitness focus")
        if affinities.sustainability_content and contains_any(text, SUSTAINABILITY_KEYWORDS):
            score += 10
            reasons.append("Matches your sustainability values")

        # Sustainability stance
        if survey.sustainability_stance in ("strict", "preferred"):
            if contains_any(text, ETHICAL_KEYWORDS):
                score += 10
            if survey.sustainability_stance == "strict" and "fast fashion" in text:
                score -= 20

        # Avoided topics
        keywords = avoided_keywords(profile.avoided_topics)
        if keywords and contains_any(text, keywords):
            score -= 40

        # Collaboration preferences (advisory)
        if campaign.collaboration_length and profile.collaboration_type in (
            "any", campaign.collaboration_length
        ):
            score += 5
            reasons.append("Fits your preferred collaboration length")
        if campaign.creative_control_level and profile.creative_control == campaign.creative_control_level:
            score += 5
            reasons.append("Matches your creative control preference")

        # Survey completion
        score += survey.total_surveys_completed * 2

        return score, reasons, conflicts


@lru_cache(maxsize=1)
def get_matching_engine() -> CampaignMatchingEngine:
    """Process-wide engine, using CATEGORY_SYNONYMS_PATH when set."""
    synonyms = load_category_synonyms(CATEGORY_SYNONYMS_PATH) if CATEGORY_SYNONYMS_PATH else None
    return CampaignMatchingEngine(category_synonyms=synonyms)


def match_campaigns(
    profile: Optional[BrandFitProfile],
    campaigns: Sequence[Campaign],
    survey: Optional[SurveyScore] = None,
    rank: bool = False,
) -> MatchingResult:
    return get_matching_engine().match(profile, campaigns, survey, rank=rank)
