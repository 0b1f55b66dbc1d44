"""
Collab Engine - Scoring

Completion percentages, lifestyle-survey scoring and creator component
scores. Pure functions shared by matching and admin intelligence.
"""
from .completion import (
    calculate_brand_fit_completion,
    calculate_effective_completion,
    calculate_profile_completion,
)
from .survey_scoring import score_surveys
from .creator_scoring import (
    LinkedAccount,
    CampaignHistory,
    calculate_linked_accounts_score,
    calculate_average_engagement,
    calculate_engagement_score,
    calculate_performance_score,
    calculate_response_score,
    calculate_tier,
    calculate_match_rate_impact,
)

__all__ = [
    "calculate_brand_fit_completion",
    "calculate_effective_completion",
    "calculate_profile_completion",
    "score_surveys",
    "LinkedAccount",
    "CampaignHistory",
    "calculate_linked_accounts_score",
    "calculate_average_engagement",
    "calculate_engagement_score",
    "calculate_performance_score",
    "calculate_response_score",
    "calculate_tier",
    "calculate_match_rate_impact",
]
