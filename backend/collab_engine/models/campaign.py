"""
Collab Engine - Campaign Matching Models

`Campaign` is the brand-declared opportunity as the creator catalog sees it.
`MatchedCampaign` is the ephemeral per-(profile, campaign) evaluation; it is
never persisted and is recomputed on every request.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Campaign:
    """Campaign row as consumed by the matching engine."""
    id: str
    campaign_name: str = ""
    commission: float = 0.0  # percent, 0-100
    categories: List[str] = field(default_factory=list)
    socials: List[str] = field(default_factory=list)
    is_regulated: bool = False
    requires_vehicle: bool = False
    content_type: List[str] = field(default_factory=list)
    requirement_met: bool = False
    is_new: bool = False

    # Display metadata
    image_url: str = ""
    language: str = ""
    country: str = ""
    country_flag: str = ""

    # Optional matching hints
    camera_requirement: Optional[str] = None
    collaboration_length: Optional[str] = None
    creative_control_level: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any, *, requirement_met: bool = False, is_new: bool = False) -> "Campaign":
        """
        Build from a CampaignDB row (or anything with the same attributes).

        `requirement_met` and `is_new` depend on the viewing creator and the
        current time, so the caller computes them.
        """
        return cls(
            id=str(row.id),
            campaign_name=row.name or "",
            commission=float(row.commission or 0),
            categories=list(row.categories or []),
            socials=list(row.socials or []),
            is_regulated=bool(row.is_regulated),
            requires_vehicle=bool(row.requires_vehicle),
            content_type=list(row.content_type or []),
            requirement_met=requirement_met,
            is_new=is_new,
            image_url=row.image_url or "",
            language=row.language or "",
            country=row.country or "",
            country_flag=row.country_flag or "",
            camera_requirement=row.camera_requirement,
            collaboration_length=row.collaboration_length,
            creative_control_level=row.creative_control_level,
        )


@dataclass(frozen=True)
class MatchedCampaign:
    """A campaign plus its match evaluation."""
    campaign: Campaign
    match_score: int = 0
    match_reasons: List[str] = field(default_factory=list)
    is_top_match: bool = False
    excluded: bool = False  # policy filter fired (regulated / vehicle)
    scored: bool = True     # False on the cold-start path

    @property
    def id(self) -> str:
        return self.campaign.id

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self.campaign)
        data.update(
            match_score=self.match_score,
            match_reasons=list(self.match_reasons),
            is_top_match=self.is_top_match,
            excluded=self.excluded,
            scored=self.scored,
        )
        return data


@dataclass(frozen=True)
class MatchingResult:
    """Output of one matching pass over a catalog."""
    matched: List[MatchedCampaign]
    all: List[MatchedCampaign]
    has_profile_data: bool
    top_match_count: int
    completion_percent: int
    effective_completion: int = 0  # completion plus survey bonus
