"""
Tests for Brand-Fit parsing at the persistence boundary.
"""
import json

from collab_engine.models.brand_fit import (
    BrandFitProfile,
    merge_fields,
    normalize_keys,
    parse_brand_fit,
)


class TestParseBrandFit:
    """Malformed payloads degrade to defaults, never to errors."""

    def test_none(self):
        assert parse_brand_fit(None) is None

    def test_invalid_json_string(self):
        assert parse_brand_fit("{not json") is None

    def test_non_object_payload(self):
        assert parse_brand_fit([1, 2, 3]) is None
        assert parse_brand_fit(json.dumps(["a"])) is None

    def test_json_string(self):
        profile = parse_brand_fit(json.dumps({"brand_categories": ["Automotive"], "driving_comfort": "very_comfortable"}))
        assert profile.brand_categories == ["Automotive"]
        assert profile.driving_comfort == "very_comfortable"

    def test_unknown_enum_value_becomes_unanswered(self):
        profile = parse_brand_fit({"camera_comfort": "sometimes", "creative_control": "full"})
        assert profile.camera_comfort == ""
        assert profile.creative_control == "full"

    def test_wrong_types_become_defaults(self):
        profile = parse_brand_fit({
            "brand_categories": "Fashion & Apparel",
            "avoided_topics": 42,
            "alcohol_openness": True,
        })
        assert profile == BrandFitProfile()

    def test_list_items_deduplicated_and_filtered(self):
        profile = parse_brand_fit({"content_styles": ["Reviews", "Reviews", 3, "", "Comedy"]})
        assert profile.content_styles == ["Reviews", "Comedy"]

    def test_extra_keys_ignored(self):
        profile = parse_brand_fit({"audience_type": "Parents", "favourite_colour": "teal"})
        assert profile.audience_type == "Parents"

    def test_profile_passthrough(self, full_profile):
        assert parse_brand_fit(full_profile) is full_profile


class TestKeyNormalization:

    def test_camel_case_keys(self):
        profile = parse_brand_fit({"brandCategories": ["Gaming & Entertainment"], "cameraComfort": "voiceover"})
        assert profile.brand_categories == ["Gaming & Entertainment"]
        assert profile.camera_comfort == "voiceover"

    def test_snake_case_wins_either_order(self):
        assert normalize_keys({"brand_categories": ["A"], "brandCategories": ["B"]}) == {"brand_categories": ["A"]}
        assert normalize_keys({"brandCategories": ["B"], "brand_categories": ["A"]}) == {"brand_categories": ["A"]}

    def test_client_dict_round_trip(self, full_profile):
        assert parse_brand_fit(full_profile.to_client_dict()) == full_profile


class TestMergeFields:

    def test_overlay(self, full_profile):
        merged = merge_fields(full_profile, {"cameraComfort": "voiceover", "bogus": 1})
        assert merged.camera_comfort == "voiceover"
        assert merged.brand_categories == full_profile.brand_categories

    def test_from_nothing(self):
        merged = merge_fields(None, {"audience_type": "Students"})
        assert merged == BrandFitProfile(audience_type="Students")

    def test_invalid_value_clears_field(self, full_profile):
        merged = merge_fields(full_profile, {"driving_comfort": "maybe"})
        assert merged.driving_comfort == ""
