"""
Profile and Brand-Fit completion percentages.

This is the single implementation every surface uses (matching banner,
brand-fit page, creator intelligence). Do not re-derive the ratio elsewhere.
"""
from typing import Any, Mapping, Optional

from ...models.brand_fit import BRAND_FIT_FIELDS, BrandFitProfile, parse_brand_fit
from ...models.survey import SurveyScore
from ..numeric import round_half_up

# Each completed lifestyle survey raises effective completion by this much
SURVEY_COMPLETION_STEP = 5

PROFILE_FIELD_COUNT = 7
MIN_BIO_LENGTH = 20


def is_field_filled(value: Any) -> bool:
    """Non-empty list/set, or a string with non-whitespace content."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) > 0
    return bool(value)


def count_filled_fields(profile: Optional[BrandFitProfile]) -> int:
    if profile is None:
        return 0
    return sum(1 for name in BRAND_FIT_FIELDS if is_field_filled(getattr(profile, name)))


def calculate_brand_fit_completion(profile: Any) -> int:
    """
    Brand-Fit completion percentage (0-100).

    Accepts a BrandFitProfile or any raw payload `parse_brand_fit` accepts.
    """
    if not isinstance(profile, BrandFitProfile):
        profile = parse_brand_fit(profile)
    filled = count_filled_fields(profile)
    return round_half_up(filled / len(BRAND_FIT_FIELDS) * 100)


def calculate_effective_completion(completion: int, survey: Optional[SurveyScore]) -> int:
    """Brand-Fit completion boosted by completed lifestyle surveys, capped at 100."""
    completed = survey.total_surveys_completed if survey else 0
    return min(100, completion + completed * SURVEY_COMPLETION_STEP)


def calculate_profile_completion(profile: Optional[Mapping[str, Any]]) -> int:
    """
    Creator profile completion over seven fields.

    `profile` is a creator_profiles row rendered as a mapping.
    """
    if not profile:
        return 0

    completed = 0
    for key in ("name", "username", "location", "website"):
        if is_field_filled(profile.get(key)):
            completed += 1

    bio = profile.get("bio") or ""
    if isinstance(bio, str) and bio.strip() and len(bio) >= MIN_BIO_LENGTH:
        completed += 1
    if profile.get("avatar_url"):
        completed += 1
    if profile.get("pricing_enabled") and profile.get("pricing_min") and profile.get("pricing_max"):
        completed += 1

    return round_half_up(completed / PROFILE_FIELD_COUNT * 100)
