"""Collab Engine - Data Models"""
from .brand_fit import (
    AlcoholOpenness, DrivingComfort, CameraComfort, CollaborationType, CreativeControl,
    BRAND_FIT_FIELDS, BrandFitProfile, parse_brand_fit, merge_fields,
)
from .campaign import Campaign, MatchedCampaign, MatchingResult
from .survey import SurveyScore, ContentAffinities, RegulatedBrandPreferences, EMPTY_SURVEY_SCORE
from .intelligence import (
    SignalType, HealthTier, Confidence, StructureType, CreatorTier,
    FreshnessStatus, MetricStatus, SafeguardState,
    RiskSignal, DataSource, BrandIntelligence, BrandIntelligenceSummary, BrandStats,
    CreatorIntelligenceSummary, TableSnapshot, DataFreshnessMetric, IntegrityReport,
)

__all__ = [
    "AlcoholOpenness", "DrivingComfort", "CameraComfort", "CollaborationType", "CreativeControl",
    "BRAND_FIT_FIELDS", "BrandFitProfile", "parse_brand_fit", "merge_fields",
    "Campaign", "MatchedCampaign", "MatchingResult",
    "SurveyScore", "ContentAffinities", "RegulatedBrandPreferences", "EMPTY_SURVEY_SCORE",
    "SignalType", "HealthTier", "Confidence", "StructureType", "CreatorTier",
    "FreshnessStatus", "MetricStatus", "SafeguardState",
    "RiskSignal", "DataSource", "BrandIntelligence", "BrandIntelligenceSummary", "BrandStats",
    "CreatorIntelligenceSummary", "TableSnapshot", "DataFreshnessMetric", "IntegrityReport",
]
