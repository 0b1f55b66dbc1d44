"""
Creator Scoring

Component scores behind the creator health score and the admin creator
roster. Every function is pure; inputs are plain dataclasses built from
linked_accounts / campaign_history rows.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Sequence

from ...models.intelligence import CreatorTier
from ..numeric import round_half_up, round_tenth

# Used when a creator has no recorded response time yet
DEFAULT_RESPONSE_HOURS = 24.0


@dataclass(frozen=True)
class LinkedAccount:
    platform: str
    connected: bool = True
    verified: bool = False
    followers: int = 0
    engagement: float = 0.0
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Any) -> "LinkedAccount":
        return cls(
            platform=row.platform,
            connected=True if row.connected is None else bool(row.connected),
            verified=bool(row.verified),
            followers=int(row.followers or 0),
            engagement=float(row.engagement or 0),
            updated_at=row.updated_at,
        )


@dataclass(frozen=True)
class CampaignHistory:
    total_completed: int = 0
    total_started: int = 0
    on_time_deliveries: int = 0
    revisions_requested: int = 0
    total_earnings: float = 0.0
    avg_response_time: float = DEFAULT_RESPONSE_HOURS

    @classmethod
    def from_row(cls, row: Optional[Any]) -> "CampaignHistory":
        if row is None:
            return cls()
        return cls(
            total_completed=row.total_completed or 0,
            total_started=row.total_started or 0,
            on_time_deliveries=row.on_time_deliveries or 0,
            revisions_requested=row.revisions_requested or 0,
            total_earnings=float(row.total_earnings or 0),
            avg_response_time=float(row.avg_response_time or DEFAULT_RESPONSE_HOURS),
        )


def calculate_linked_accounts_score(accounts: Sequence[LinkedAccount]) -> int:
    """Connections (20 each, max 60) + verifications (10 each, max 30) + reach bonus."""
    connected = [a for a in accounts if a.connected]
    verified = [a for a in connected if a.verified]

    connection_score = min(60, len(connected) * 20)
    verification_bonus = min(30, len(verified) * 10)
    total_followers = sum(a.followers for a in connected)
    if total_followers > 50000:
        reach_bonus = 10
    elif total_followers > 20000:
        reach_bonus = 5
    else:
        reach_bonus = 0

    return min(100, connection_score + verification_bonus + reach_bonus)


def calculate_average_engagement(accounts: Sequence[LinkedAccount]) -> float:
    """Follower-weighted engagement rate across connected accounts."""
    connected = [a for a in accounts if a.connected]
    total_followers = sum(a.followers for a in connected)
    if not connected or total_followers == 0:
        return 0.0
    weighted = sum(a.engagement * (a.followers / total_followers) for a in connected)
    return round_tenth(weighted)


def calculate_engagement_score(accounts: Sequence[LinkedAccount]) -> float:
    return min(100, calculate_average_engagement(accounts) * 15)


def calculate_performance_score(history: CampaignHistory) -> int:
    """Completion (40) + on-time (35) + low revisions (25). Neutral 50 with no history."""
    if history.total_started == 0:
        return 50

    completion_rate = history.total_completed / history.total_started
    if history.total_completed > 0:
        on_time_rate = history.on_time_deliveries / history.total_completed
        revision_rate = history.revisions_requested / history.total_completed
    else:
        on_time_rate = 0.0
        revision_rate = 0.0

    return round_half_up(
        completion_rate * 40
        + on_time_rate * 35
        + max(0.0, (1 - revision_rate) * 25)
    )


def calculate_response_score(avg_response_hours: float) -> int:
    if avg_response_hours < 2:
        return 100
    if avg_response_hours < 6:
        return 85
    if avg_response_hours < 12:
        return 70
    if avg_response_hours < 24:
        return 50
    return 30


def calculate_tier(overall_score: int, total_followers: int, completed_campaigns: int) -> CreatorTier:
    if overall_score >= 80 and total_followers >= 100000 and completed_campaigns >= 10:
        return CreatorTier.PREMIUM
    if overall_score >= 60 and total_followers >= 25000 and completed_campaigns >= 5:
        return CreatorTier.ESTABLISHED
    if overall_score >= 40 or total_followers >= 5000 or completed_campaigns >= 1:
        return CreatorTier.EMERGING
    return CreatorTier.NEW


def calculate_match_rate_impact(accounts: List[LinkedAccount]) -> int:
    """
    Percentage-point boost in expected matches from connected socials.

    5 per connected account, 3 per verified one, plus 5 (engagement > 5%)
    or 3 (engagement > 3%).
    """
    connected = [a for a in accounts if a.connected]
    verified = [a for a in connected if a.verified]
    improvement = len(connected) * 5 + len(verified) * 3

    avg_engagement = calculate_average_engagement(accounts)
    if avg_engagement > 5:
        improvement += 5
    elif avg_engagement > 3:
        improvement += 3
    return improvement
