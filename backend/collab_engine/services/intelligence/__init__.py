"""
Collab Engine - Admin Intelligence

Read-only aggregators behind the admin dashboard.
"""
from .brand_intelligence import (
    BrandIntelligenceService,
    build_brand_intelligence,
    build_brand_stats,
    build_brand_summary,
    calculate_confidence,
    classify_structure,
    compute_health,
    compute_risk_signals,
    detail_risk_score,
    summary_risk_score,
)
from .creator_intelligence import (
    CreatorIntelligenceService,
    build_creator_summary,
    calculate_data_completeness,
)
from .system_integrity import (
    SystemIntegrityService,
    build_freshness_metric,
    build_integrity_report,
    calculate_stale_days,
    categorize_audit_log,
    format_action,
    format_entity_type,
    freshness_status,
)

__all__ = [
    "BrandIntelligenceService",
    "build_brand_intelligence",
    "build_brand_stats",
    "build_brand_summary",
    "calculate_confidence",
    "classify_structure",
    "compute_health",
    "compute_risk_signals",
    "detail_risk_score",
    "summary_risk_score",
    "CreatorIntelligenceService",
    "build_creator_summary",
    "calculate_data_completeness",
    "SystemIntegrityService",
    "build_freshness_metric",
    "build_integrity_report",
    "calculate_stale_days",
    "categorize_audit_log",
    "format_action",
    "format_entity_type",
    "freshness_status",
]
