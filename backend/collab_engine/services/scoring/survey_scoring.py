"""
Survey Scoring

Turns answers to the three lifestyle surveys into a SurveyScore that the
matching engine reads for bonuses and the alcohol filter.

Answers are the option labels shown to the creator, so parsing is by
substring on those labels.
"""
from typing import Any, Dict, Iterable, Mapping, Optional

from ...models.survey import ContentAffinities, RegulatedBrandPreferences, SurveyScore

DIET_SURVEY_ID = "diet-lifestyle"
CLIMATE_SURVEY_ID = "climate-sustainability"
ALCOHOL_SURVEY_ID = "alcohol-regulated"

LIFESTYLE_SURVEY_IDS = (DIET_SURVEY_ID, CLIMATE_SURVEY_ID, ALCOHOL_SURVEY_ID)

TOTAL_SURVEYS = len(LIFESTYLE_SURVEY_IDS)
BONUS_PER_SURVEY = 5
MAX_SURVEY_BONUS = 15


def parse_dietary_preference(answer: str) -> str:
    for label, value in (
        ("Vegan", "vegan"),
        ("Vegetarian", "vegetarian"),
        ("Pescatarian", "pescatarian"),
        ("Flexitarian", "flexitarian"),
        ("Keto", "keto"),
        ("Omnivore", "omnivore"),
    ):
        if label in answer:
            return value
    return "unspecified"


def parse_sustainability_stance(answer: str) -> str:
    if "Very important" in answer:
        return "strict"
    if "Important -" in answer:
        return "preferred"
    if "Somewhat important" in answer:
        return "flexible"
    if "Not important" in answer:
        return "neutral"
    return "contextual"


def parse_alcohol_comfort(answer: str) -> str:
    if "Very comfortable" in answer:
        return "yes"
    if "Somewhat comfortable" in answer:
        return "limited"
    if "Limited" in answer:
        return "restricted"
    if "Not comfortable" in answer:
        return "no"
    return "contextual"


def _answers(responses: Mapping[str, Any], survey_id: str) -> Dict[str, str]:
    entry = responses.get(survey_id)
    if isinstance(entry, Mapping) and "answers" in entry:
        entry = entry["answers"]
    if not isinstance(entry, Mapping):
        return {}
    return {k: v for k, v in entry.items() if isinstance(v, str)}


def score_surveys(
    responses: Optional[Mapping[str, Any]],
    completed_ids: Optional[Iterable[str]] = None,
) -> SurveyScore:
    """
    Build a SurveyScore from survey answers.

    Args:
        responses: {survey_id: {question_id: answer}} (or {"answers": {...}})
        completed_ids: survey ids the creator finished; defaults to the
            surveys present in `responses`. Only the lifestyle surveys
            count, so the total never exceeds TOTAL_SURVEYS.

    Returns:
        SurveyScore (empty defaults when nothing was answered)
    """
    responses = responses or {}
    completed_ids = completed_ids if completed_ids is not None else responses.keys()
    completed = {survey_id for survey_id in completed_ids if survey_id in LIFESTYLE_SURVEY_IDS}
    total_completed = len(completed)

    dietary_preference: Optional[str] = None
    sustainability_stance: Optional[str] = None
    alcohol_comfort: Optional[str] = None
    food = fitness = sustainability = False
    tobacco = gambling = pharma = True

    # Diet & Lifestyle
    diet = _answers(responses, DIET_SURVEY_ID)
    if diet.get("q1-diet"):
        dietary_preference = parse_dietary_preference(diet["q1-diet"])
    if diet.get("q2-diet-content"):
        answer = diet["q2-diet-content"]
        food = "Very frequently" in answer or "Often" in answer
    if diet.get("q4-fitness"):
        answer = diet["q4-fitness"]
        fitness = "central to my brand" in answer or "regularly share" in answer

    # Climate & Sustainability
    climate = _answers(responses, CLIMATE_SURVEY_ID)
    if climate.get("q1-climate"):
        sustainability_stance = parse_sustainability_stance(climate["q1-climate"])
    if climate.get("q2-eco-content"):
        answer = climate["q2-eco-content"]
        sustainability = "core part" in answer or "Occasionally" in answer

    # Alcohol & Regulated Brands
    alcohol = _answers(responses, ALCOHOL_SURVEY_ID)
    if alcohol.get("q1-alcohol"):
        alcohol_comfort = parse_alcohol_comfort(alcohol["q1-alcohol"])
    if alcohol.get("q2-tobacco"):
        tobacco = "avoid all" not in alcohol["q2-tobacco"]
    if alcohol.get("q3-gambling"):
        gambling = "avoid all" not in alcohol["q3-gambling"]
    if alcohol.get("q4-pharma"):
        pharma = "avoid" not in alcohol["q4-pharma"]

    return SurveyScore(
        total_surveys_completed=total_completed,
        total_surveys=TOTAL_SURVEYS,
        survey_completion_bonus=min(MAX_SURVEY_BONUS, total_completed * BONUS_PER_SURVEY),
        dietary_preference=dietary_preference,
        sustainability_stance=sustainability_stance,
        alcohol_comfort=alcohol_comfort,
        regulated_brand_preferences=RegulatedBrandPreferences(
            tobacco=tobacco, gambling=gambling, pharma=pharma,
        ),
        content_affinities=ContentAffinities(
            food_content=food,
            fitness_content=fitness,
            sustainability_content=sustainability,
        ),
    )
