"""
Collab Engine - Survey Score Model

Derived from the optional lifestyle surveys (diet, climate, alcohol and
regulated brands). Feeds bonuses and filters into campaign matching.
"""
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RegulatedBrandPreferences:
    """Whether the creator accepts each regulated vertical. Default: allowed."""
    tobacco: bool = True
    gambling: bool = True
    pharma: bool = True


@dataclass(frozen=True)
class ContentAffinities:
    food_content: bool = False
    fitness_content: bool = False
    sustainability_content: bool = False


@dataclass(frozen=True)
class SurveyScore:
    total_surveys_completed: int = 0
    total_surveys: int = 3
    survey_completion_bonus: int = 0
    dietary_preference: Optional[str] = None
    sustainability_stance: Optional[str] = None
    alcohol_comfort: Optional[str] = None
    regulated_brand_preferences: RegulatedBrandPreferences = field(
        default_factory=RegulatedBrandPreferences
    )
    content_affinities: ContentAffinities = field(default_factory=ContentAffinities)


EMPTY_SURVEY_SCORE = SurveyScore()
