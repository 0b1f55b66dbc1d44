"""
Campaign Matching

Brand-Fit driven campaign scoring and policy filtering.
"""
from .engine import (
    ALCOHOL_CONFLICT,
    DRIVING_CONFLICT,
    CampaignMatchingEngine,
    get_matching_engine,
    match_campaigns,
)
from .catalog import CampaignCatalogService, is_new_campaign, requirement_met
from .rules import (
    DEFAULT_CATEGORY_SYNONYMS,
    DEFAULT_CONTENT_STYLE_SYNONYMS,
    avoided_keywords,
    category_match,
    content_style_match,
    load_category_synonyms,
)

__all__ = [
    "CampaignCatalogService",
    "is_new_campaign",
    "requirement_met",
    "ALCOHOL_CONFLICT",
    "DRIVING_CONFLICT",
    "CampaignMatchingEngine",
    "get_matching_engine",
    "match_campaigns",
    "DEFAULT_CATEGORY_SYNONYMS",
    "DEFAULT_CONTENT_STYLE_SYNONYMS",
    "avoided_keywords",
    "category_match",
    "content_style_match",
    "load_category_synonyms",
]
