"""
Collab Engine - Brand-Fit Profile Model

The Brand-Fit survey is the creator-declared preference set that drives
campaign matching. It is stored as an opaque JSON blob, so every read goes
through `parse_brand_fit`, which validates the payload and defaults any
missing or malformed field instead of letting bad values reach scoring.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class AlcoholOpenness(str, Enum):
    YES = "yes"
    YES_GUIDELINES = "yes_guidelines"
    NO = "no"


class DrivingComfort(str, Enum):
    VERY_COMFORTABLE = "very_comfortable"
    SOMEWHAT_COMFORTABLE = "somewhat_comfortable"
    PASSENGER_ONLY = "passenger_only"
    NOT_COMFORTABLE = "not_comfortable"


class CameraComfort(str, Enum):
    ON_CAMERA = "on_camera"
    VOICEOVER = "voiceover"
    OFF_CAMERA = "off_camera"


class CollaborationType(str, Enum):
    ONE_OFF = "one_off"
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"
    ANY = "any"


class CreativeControl(str, Enum):
    FULL = "full"
    COLLABORATIVE = "collaborative"
    BRAND_LED = "brand_led"


# The ten tracked fields, in survey order. Completion is computed over these.
BRAND_FIT_FIELDS: Tuple[str, ...] = (
    "brand_categories",
    "alcohol_openness",
    "personal_assets",
    "driving_comfort",
    "content_styles",
    "camera_comfort",
    "avoided_topics",
    "audience_type",
    "collaboration_type",
    "creative_control",
)

LIST_FIELDS = frozenset({"brand_categories", "personal_assets", "content_styles"})

ENUM_FIELDS: Dict[str, type] = {
    "alcohol_openness": AlcoholOpenness,
    "driving_comfort": DrivingComfort,
    "camera_comfort": CameraComfort,
    "collaboration_type": CollaborationType,
    "creative_control": CreativeControl,
}

# Client storage uses camelCase keys, database rows use snake_case
CAMEL_CASE_KEYS: Dict[str, str] = {
    "brandCategories": "brand_categories",
    "alcoholOpenness": "alcohol_openness",
    "personalAssets": "personal_assets",
    "drivingComfort": "driving_comfort",
    "contentStyles": "content_styles",
    "cameraComfort": "camera_comfort",
    "avoidedTopics": "avoided_topics",
    "audienceType": "audience_type",
    "collaborationType": "collaboration_type",
    "creativeControl": "creative_control",
}


# =============================================================================
# DOMAIN MODEL
# =============================================================================

@dataclass(frozen=True)
class BrandFitProfile:
    """
    Validated Brand-Fit answers. Empty string / empty list means unanswered.

    Enum-typed answers are kept as their string values so the profile
    round-trips through JSON unchanged.
    """
    brand_categories: List[str] = field(default_factory=list)
    alcohol_openness: str = ""
    personal_assets: List[str] = field(default_factory=list)
    driving_comfort: str = ""
    content_styles: List[str] = field(default_factory=list)
    camera_comfort: str = ""
    avoided_topics: str = ""
    audience_type: str = ""
    collaboration_type: str = ""
    creative_control: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_client_dict(self) -> Dict[str, Any]:
        """camelCase rendering used by the dashboard."""
        data = self.to_dict()
        return {camel: data[snake] for camel, snake in CAMEL_CASE_KEYS.items()}


# =============================================================================
# DESERIALIZATION BOUNDARY
# =============================================================================

class BrandFitRecord(BaseModel):
    """
    Lenient schema for persisted Brand-Fit JSON.

    Validators run in "before" mode and never reject: anything that does not
    fit a field becomes that field's empty default.
    """
    model_config = ConfigDict(extra="ignore")

    brand_categories: List[str] = []
    alcohol_openness: str = ""
    personal_assets: List[str] = []
    driving_comfort: str = ""
    content_styles: List[str] = []
    camera_comfort: str = ""
    avoided_topics: str = ""
    audience_type: str = ""
    collaboration_type: str = ""
    creative_control: str = ""

    @field_validator("brand_categories", "personal_assets", "content_styles", mode="before")
    @classmethod
    def _coerce_string_list(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple, set)):
            return []
        seen: List[str] = []
        for item in value:
            if isinstance(item, str) and item.strip() and item not in seen:
                seen.append(item)
        return seen

    @field_validator("avoided_topics", "audience_type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator(*ENUM_FIELDS.keys(), mode="before")
    @classmethod
    def _coerce_enum(cls, value: Any, info) -> str:
        enum_cls = ENUM_FIELDS[info.field_name]
        if isinstance(value, Enum):
            value = value.value
        if not isinstance(value, str):
            return ""
        allowed = {member.value for member in enum_cls}
        return value if value in allowed else ""


def normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase keys onto snake_case, snake_case wins on conflict."""
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        snake = CAMEL_CASE_KEYS.get(key, key)
        if snake in normalized and key != snake:
            continue
        normalized[snake] = value
    return normalized


def parse_brand_fit(raw: Any) -> Optional[BrandFitProfile]:
    """
    Validate a persisted Brand-Fit payload.

    Args:
        raw: dict, JSON string, BrandFitProfile, or None

    Returns:
        BrandFitProfile, or None when there is no usable payload at all
    """
    if raw is None:
        return None
    if isinstance(raw, BrandFitProfile):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Discarding Brand-Fit payload that is not valid JSON")
            return None
    if not isinstance(raw, dict):
        logger.warning(f"Discarding Brand-Fit payload of type {type(raw).__name__}")
        return None

    try:
        record = BrandFitRecord.model_validate(normalize_keys(raw))
    except ValidationError as e:
        # Only reachable if a validator above is changed to reject
        logger.warning(f"Brand-Fit payload failed validation: {e}")
        return None
    return BrandFitProfile(**record.model_dump())


def merge_fields(base: Optional[BrandFitProfile], updates: Dict[str, Any]) -> BrandFitProfile:
    """
    Overlay per-field updates on a profile and re-validate the result.

    Unknown keys are ignored; the latest value for each key wins.
    """
    data = base.to_dict() if base else BrandFitProfile().to_dict()
    for key, value in normalize_keys(updates).items():
        if key in BRAND_FIT_FIELDS:
            data[key] = value
    return parse_brand_fit(data) or BrandFitProfile()
