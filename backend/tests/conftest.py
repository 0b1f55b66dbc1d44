"""
Shared fixtures for Collab Engine tests.

DATABASE_URL must be set before any collab_engine import so the engine is
created against in-memory SQLite instead of PostgreSQL.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest

from collab_engine.models.brand_fit import BrandFitProfile
from collab_engine.models.campaign import Campaign


NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


FULL_PROFILE = dict(
    brand_categories=["Fashion & Apparel", "Beauty & Skincare"],
    alcohol_openness="yes",
    personal_assets=["home"],
    driving_comfort="very_comfortable",
    content_styles=["Reviews", "Lifestyle"],
    camera_comfort="on_camera",
    avoided_topics="",
    audience_type="Gen Z",
    collaboration_type="long_term",
    creative_control="collaborative",
)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def full_profile():
    """Nine of ten Brand-Fit fields answered (no avoided topics)."""
    return BrandFitProfile(**FULL_PROFILE)


@pytest.fixture
def make_profile():
    def _make(**overrides):
        data = dict(FULL_PROFILE)
        data.update(overrides)
        return BrandFitProfile(**data)
    return _make


@pytest.fixture
def beauty_campaign():
    """Hits categories, style, camera, home asset, collaboration and control."""
    return Campaign(
        id="beauty",
        campaign_name="Glow Home Skincare",
        categories=["Beauty", "Skincare", "Fashion"],
        content_type=["Review"],
        collaboration_length="long_term",
        creative_control_level="collaborative",
    )
