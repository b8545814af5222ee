import pytest

from gina.services.intake import (
    DEFAULT_SUGGESTION,
    EMPTY_SUMMARY,
    submit_intake,
    suggest_therapy,
    summarize_intake,
)


@pytest.mark.parametrize("issues,symptoms,expected", [
    ("childhood trauma", None, "Trauma-focused CBT or EMDR"),
    ("Panic attacks", "", "CBT (with exposure)"),
    (None, "low mood most days", "CBT or Behavioral Activation"),
    ("self-harm urges", None, "DBT (Dialectical Behavior Therapy)"),
    ("checking compulsions", None, "ERP (Exposure and Response Prevention)"),
    ("couples conflict", None, "Couples Therapy (Emotion-Focused or Gottman)"),
    ("work stress", "poor sleep", DEFAULT_SUGGESTION),
])
def test_suggest_therapy(issues, symptoms, expected):
    assert suggest_therapy(issues, symptoms) == expected


def test_first_matching_rule_wins():
    assert suggest_therapy("anxiety after trauma", None) == "Trauma-focused CBT or EMDR"


def test_summary_lists_known_fields_and_summary():
    intake = {"full_name": "Sam", "age": 29, "goals": None, "suggestion": "CBT (with exposure)"}
    facts = {"summary": "Sam is anxious about exams."}

    assert summarize_intake(intake, facts) == (
        "Name: Sam\n"
        "Age: 29\n"
        "Suggested therapy: CBT (with exposure)\n"
        "Conversation summary: Sam is anxious about exams."
    )
    assert summarize_intake(None, None) == EMPTY_SUMMARY


@pytest.mark.asyncio
async def test_submit_intake_saves_suggestion_and_syncs_memory(store, user_id):
    await store.replace_facts(user_id, {"location": "York", "hobbies": "chess"})

    record = await submit_intake(store, user_id, {
        "full_name": "Sam",
        "pronouns": "they/them",
        "presenting_issues": "panic attacks",
    })

    assert record["suggestion"] == "CBT (with exposure)"
    facts = await store.get_facts(user_id)
    assert facts["preferredName"] == "Sam"
    assert facts["pronouns"] == "they/them"
    assert facts["location"] == "York"
    assert facts["hobbies"] == "chess"
    assert facts["presentingIssues"] == "panic attacks"
    assert facts["therapySuggestion"] == "CBT (with exposure)"
    assert "intakeLastUpdated" in facts
