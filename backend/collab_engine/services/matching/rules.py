"""
Campaign Matching Rules

Synonym tables and the per-signal scoring functions used by
CampaignMatchingEngine. Each function is independent and returns points
(plus whatever it matched, for building reasons).
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# SYNONYM TABLES
# =============================================================================

# Brand-Fit category -> campaign categories it matches
DEFAULT_CATEGORY_SYNONYMS: Dict[str, List[str]] = {
    "Fashion & Apparel": ["Fashion", "Streetwear", "Jewelry", "Apparel"],
    "Beauty & Skincare": ["Beauty", "Skincare", "Fragrances", "Cosmetics"],
    "Tech & Gadgets": ["Tech", "Audio", "Photography", "Digital Marketing", "Business"],
    "Health & Wellness": ["Health", "Wellness", "Fitness", "Sports"],
    "Food & Beverage": ["Food", "Beverage", "Cooking", "Nutrition"],
    "Travel & Hospitality": ["Travel", "Hospitality", "Adventure"],
    "Fitness & Sports": ["Fitness", "Sports", "Athletic"],
    "Home & Lifestyle": ["Home", "Lifestyle", "Interior"],
    "Finance & Banking": ["Finance", "Banking", "Investment", "Business"],
    "Automotive": ["Automotive", "Cars", "Vehicles"],
    "Gaming & Entertainment": ["Gaming", "Entertainment", "Media"],
    "Education & Learning": ["Education", "Learning", "Courses"],
    "Sustainable & Eco-friendly": ["Sustainability", "Eco", "Green", "Ethical"],
    "Luxury & Premium": ["Luxury", "Premium", "High-end"],
    "Family & Parenting": ["Family", "Parenting", "Kids", "Children"],
}

# Brand-Fit content style -> campaign content-type keywords
DEFAULT_CONTENT_STYLE_SYNONYMS: Dict[str, List[str]] = {
    "Educational": ["educational", "tutorial", "how-to"],
    "Entertaining": ["entertaining", "fun", "engaging"],
    "Storytelling": ["storytelling", "narrative", "story"],
    "Reviews": ["review", "unboxing", "comparison"],
    "Lifestyle": ["lifestyle", "daily", "vlog"],
    "Comedy": ["comedy", "funny", "humor"],
    "Tutorials": ["tutorial", "how-to", "guide"],
    "Trends": ["trends", "trending", "viral"],
    "Behind-the-scenes": ["bts", "behind-the-scenes", "making-of"],
    "Day-in-the-life": ["day-in-the-life", "routine", "daily"],
}

# Personal asset -> campaign text keywords
ASSET_KEYWORDS: Dict[str, List[str]] = {
    "car": ["car", "vehicle", "driving", "automotive", "road"],
    "gym": ["fitness", "gym", "workout", "athletic", "sports"],
    "home": ["home", "interior", "lifestyle", "living"],
    "studio": ["photography", "creative", "studio", "professional"],
    "travel": ["travel", "adventure", "destination", "hospitality"],
    "office": ["business", "professional", "corporate", "office"],
}

# Content formats that put the creator in front of the camera
ON_CAMERA_CONTENT = ("review", "unboxing", "vlog", "day-in-the-life")

FOOD_KEYWORDS = ("food", "cooking", "beverage")
FITNESS_KEYWORDS = ("fitness", "wellness", "health")
SUSTAINABILITY_KEYWORDS = ("sustainable", "eco", "green")
ETHICAL_KEYWORDS = ("sustainable", "eco", "ethical")

CATEGORY_POINTS = 15
CATEGORY_CAP = 40
STYLE_POINTS = 7
STYLE_CAP = 20


def load_category_synonyms(path: str) -> Dict[str, List[str]]:
    """
    Load a category synonym table from a JSON object file.

    Raises:
        ValueError: if the file is not {str: [str, ...]}
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, list) and all(isinstance(i, str) for i in v)
        for k, v in data.items()
    ):
        raise ValueError(f"Category synonym file {path} must map strings to lists of strings")
    logger.info(f"Loaded {len(data)} category synonym entries from {path}")
    return data


# =============================================================================
# MATCHING PRIMITIVES
# =============================================================================

def _overlaps(term: str, candidate: str) -> bool:
    """Case-insensitive substring match in either direction."""
    term = term.lower()
    candidate = candidate.lower()
    if not term or not candidate:
        return False
    return term in candidate or candidate in term


def campaign_text(campaign_name: str, categories: Sequence[str]) -> str:
    return f"{campaign_name} {' '.join(categories)}".lower()


def category_match(
    user_categories: Sequence[str],
    campaign_categories: Sequence[str],
    synonyms: Mapping[str, Sequence[str]],
) -> Tuple[int, List[str]]:
    """
    15 points per Brand-Fit category that hits any campaign category, max 40.

    Returns:
        (points, matched Brand-Fit categories in profile order)
    """
    matched: List[str] = []
    for user_cat in user_categories:
        mapped = synonyms.get(user_cat) or [user_cat]
        if any(_overlaps(m, c) for c in campaign_categories for m in mapped):
            if user_cat not in matched:
                matched.append(user_cat)
    return min(CATEGORY_CAP, len(matched) * CATEGORY_POINTS), matched


def content_style_match(
    user_styles: Sequence[str],
    campaign_styles: Sequence[str],
    synonyms: Mapping[str, Sequence[str]],
) -> int:
    """7 points per Brand-Fit style found in the campaign's content types, max 20."""
    matches = 0
    for style in user_styles:
        mapped = synonyms.get(style) or [style.lower()]
        if any(_overlaps(m, c) for c in campaign_styles for m in mapped):
            matches += 1
    return min(STYLE_CAP, matches * STYLE_POINTS)


def asset_match(personal_assets: Sequence[str], text: str) -> Optional[str]:
    """First personal asset whose keywords appear in the campaign text."""
    for asset in personal_assets:
        if any(k in text for k in ASSET_KEYWORDS.get(asset, [])):
            return asset
    return None


def needs_on_camera(content_types: Sequence[str], camera_requirement: Optional[str]) -> bool:
    if camera_requirement == "on_camera":
        return True
    return any(fmt in ct.lower() for ct in content_types for fmt in ON_CAMERA_CONTENT)


def avoided_keywords(avoided_topics: str) -> List[str]:
    """Comma/newline separated keywords, lowercased, longer than two characters."""
    if not avoided_topics or not avoided_topics.strip():
        return []
    parts = avoided_topics.lower().replace("\n", ",").split(",")
    return [p.strip() for p in parts if len(p.strip()) > 2]


def contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(k in text for k in keywords)
