"""Tests for extraction and normalization of untrusted generator output."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from futureyou.errors import ParseError
from futureyou.validation.response_validator import (
    extract_json_object,
    normalize_insights,
    normalize_outcome,
    normalize_scenario,
    parse_outcome,
    parse_scenario,
)


class TestExtractJsonObject:
    """The bracket-matching scanner."""

    def test_plain_object(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_object_wrapped_in_prose_and_fences(self):
        text = 'Here you go:\n```json\n{"title": "Move", "choices": []}\n```\nEnjoy!'
        assert extract_json_object(text) == {"title": "Move", "choices": []}

    def test_skips_prose_braces_before_the_object(self):
        text = 'Sure {not json} here: {"title": "A {nested} title", "n": {"x": 1}} and a stray }'
        assert extract_json_object(text) == {"title": "A {nested} title", "n": {"x": 1}}

    def test_escaped_quotes_inside_strings(self):
        text = r'{"t": "say \"hi\" {"}'
        assert extract_json_object(text) == {"t": 'say "hi" {'}

    def test_returns_first_object_when_several(self):
        assert extract_json_object('{"a": 1} {"b": 2}') == {"a": 1}

    def test_no_object_raises(self):
        with pytest.raises(ParseError):
            extract_json_object("I cannot help with that.")

    def test_unbalanced_object_raises(self):
        with pytest.raises(ParseError):
            extract_json_object('{"title": "cut off')

    def test_top_level_array_raises(self):
        with pytest.raises(ParseError):
            extract_json_object("[1, 2, 3]")

    def test_non_text_raises(self):
        with pytest.raises(ParseError):
            extract_json_object(None)  # type: ignore[arg-type]


class TestNormalizeScenario:
    """Scenario defaults, truncation and padding."""

    def test_empty_object_is_padded_twice(self):
        scenario = normalize_scenario({})
        assert scenario["title"] == "Life Crossroads"
        assert scenario["description"] == "You face an important decision."
        assert scenario["context"] == "Life has brought you to this moment."
        assert len(scenario["choices"]) == 2
        for choice in scenario["choices"]:
            assert choice["text"] == "Stay the course"
            assert choice["riskLevel"] == "low"
            assert choice["category"] == "life"
            assert choice["potentialOutcomes"] == ["Maintain stability"]

    def test_padding_choices_are_independent_copies(self):
        scenario = normalize_scenario({})
        scenario["choices"][0]["potentialOutcomes"].append("mutated")
        assert scenario["choices"][1]["potentialOutcomes"] == ["Maintain stability"]
        assert normalize_scenario({})["choices"][0]["potentialOutcomes"] == ["Maintain stability"]

    def test_single_choice_padded_to_two(self):
        scenario = normalize_scenario({"choices": [{"text": "Run", "riskLevel": "high"}]})
        assert [c["text"] for c in scenario["choices"]] == ["Run", "Stay the course"]

    def test_choices_capped_at_three(self):
        scenario = normalize_scenario({"choices": [{"text": f"C{i}"} for i in range(5)]})
        assert [c["text"] for c in scenario["choices"]] == ["C0", "C1", "C2"]

    def test_truncation(self):
        scenario = normalize_scenario({
            "title": "T" * 80,
            "choices": [{"text": "x" * 45}, {"text": "ok"}],
        })
        assert scenario["title"] == "T" * 50
        assert scenario["choices"][0]["text"] == "x" * 30

    def test_choice_field_defaults(self):
        scenario = normalize_scenario({"choices": [{}, {"riskLevel": "extreme", "category": "fun"}]})
        first, second = scenario["choices"]
        assert first["text"] == "Option 1"
        assert first["description"] == "An interesting path forward."
        assert first["riskLevel"] == "medium"
        assert first["potentialOutcomes"] == ["Unknown outcome"]
        assert first["category"] == "life"
        assert second["text"] == "Option 2"
        assert second["riskLevel"] == "medium"
        assert second["category"] == "life"

    def test_potential_outcomes_capped(self):
        scenario = normalize_scenario({
            "choices": [{"potentialOutcomes": ["a", "b", "c", "d"]}, {}],
        })
        assert scenario["choices"][0]["potentialOutcomes"] == ["a", "b", "c"]

    def test_wrong_types_fall_back_to_defaults(self):
        scenario = normalize_scenario({"title": 42, "choices": "many", "description": ["x"]})
        assert scenario["title"] == "Life Crossroads"
        assert scenario["description"] == "You face an important decision."
        assert len(scenario["choices"]) == 2

    def test_non_object_payload_treated_as_empty(self):
        assert normalize_scenario(["nope"])["title"] == "Life Crossroads"

    def test_parse_scenario_from_text(self):
        scenario = parse_scenario('Result: {"title": "Gap Year", "choices": [{"text": "Travel", "category": "life"}]}')
        assert scenario["title"] == "Gap Year"
        assert len(scenario["choices"]) == 2


class TestNormalizeOutcome:
    """Stat change filtering, clamping and synthesis."""

    def test_positive_impact_without_changes_synthesizes_one(self):
        outcome = normalize_outcome({"impact": "positive"}, "money")
        assert outcome["statChanges"] == [
            {"stat": "money", "change": 5, "reason": "The result of your choice"},
        ]

    def test_negative_impact_on_life_category_targets_relationships(self):
        outcome = normalize_outcome({"impact": "negative", "statChanges": []}, "life")
        assert outcome["statChanges"] == [
            {"stat": "relationships", "change": -5, "reason": "The result of your choice"},
        ]

    def test_invalid_impact_defaults_to_neutral_and_zero_change(self):
        outcome = normalize_outcome({"impact": "great"}, "health")
        assert outcome["impact"] == "neutral"
        assert outcome["statChanges"][0] == {
            "stat": "health", "change": 0, "reason": "The result of your choice",
        }

    def test_stat_changes_are_filtered_coerced_and_clamped(self):
        outcome = normalize_outcome({
            "impact": "negative",
            "statChanges": [
                {"stat": "happiness", "change": 10, "reason": "nope"},
                {"stat": "luck", "change": 3},
                {"stat": "money", "change": "15", "reason": "bonus"},
                {"stat": "health", "change": -99},
                {"stat": "career", "change": "a lot"},
                {"stat": "relationships", "change": 3.6},
                "garbage",
            ],
        })
        assert outcome["statChanges"] == [
            {"stat": "money", "change": 15, "reason": "bonus"},
            {"stat": "health", "change": -20, "reason": "Life happened"},
            {"stat": "career", "change": 0, "reason": "Life happened"},
            {"stat": "relationships", "change": 4, "reason": "Life happened"},
        ]

    def test_years_to_advance_bounds(self):
        assert normalize_outcome({"yearsToAdvance": 9})["yearsToAdvance"] == 5
        assert normalize_outcome({"yearsToAdvance": -4})["yearsToAdvance"] == 1
        assert normalize_outcome({"yearsToAdvance": 0.2})["yearsToAdvance"] == 1
        assert normalize_outcome({"yearsToAdvance": "3"})["yearsToAdvance"] == 3
        assert normalize_outcome({"yearsToAdvance": "soon"})["yearsToAdvance"] == 2
        assert normalize_outcome({})["yearsToAdvance"] == 2

    def test_title_and_description_defaults(self):
        outcome = normalize_outcome({"title": ""})
        assert outcome["title"] == "The Outcome"
        assert outcome["description"] == "Your choice has shaped your path."

    def test_parse_outcome_from_text(self):
        outcome = parse_outcome('{"impact": "positive", "title": "Promoted"}', "career")
        assert outcome["title"] == "Promoted"
        assert outcome["statChanges"][0]["stat"] == "career"


class TestNormalizeInsights:
    """Insights, score and achievements."""

    def test_empty_achievements_synthesizes_life_explorer(self):
        insights = normalize_insights({"achievements": []})
        assert insights["achievements"] == [
            {"title": "Life Explorer", "description": "Completed the life simulation", "rarity": "common"},
        ]

    def test_defaults(self):
        insights = normalize_insights({})
        assert insights["insights"] == ["Your journey was unique."]
        assert insights["lifeScore"] == 50
        assert len(insights["achievements"]) == 1

    def test_caps_and_clamps(self):
        insights = normalize_insights({
            "insights": [f"i{n}" for n in range(7)],
            "lifeScore": 150,
            "achievements": [{"title": f"a{n}", "rarity": "mythic"} for n in range(6)],
        })
        assert insights["insights"] == ["i0", "i1", "i2", "i3", "i4"]
        assert insights["lifeScore"] == 100
        assert len(insights["achievements"]) == 4
        assert all(a["rarity"] == "common" for a in insights["achievements"])
        assert insights["achievements"][0]["description"] == "You lived and learned."

    def test_life_score_coercion(self):
        assert normalize_insights({"lifeScore": "88"})["lifeScore"] == 88
        assert normalize_insights({"lifeScore": -3})["lifeScore"] == 0
        assert normalize_insights({"lifeScore": None})["lifeScore"] == 50
        assert normalize_insights({"lifeScore": 1})["lifeScore"] == 1

    def test_achievement_defaults(self):
        insights = normalize_insights({"achievements": [{"rarity": "epic"}]})
        assert insights["achievements"] == [
            {"title": "Life Experience", "description": "You lived and learned.", "rarity": "epic"},
        ]


class TestZeroAndMissingValues:
    """A zero years or score counts as missing; a missing insights list differs from an empty one."""

    def test_zero_years_to_advance_takes_default(self):
        assert normalize_outcome({"yearsToAdvance": 0})["yearsToAdvance"] == 2
        assert normalize_outcome({"yearsToAdvance": "0"})["yearsToAdvance"] == 2

    def test_zero_life_score_takes_default(self):
        assert normalize_insights({"lifeScore": 0})["lifeScore"] == 50
        assert normalize_insights({"lifeScore": "0"})["lifeScore"] == 50

    def test_zero_stat_change_is_kept(self):
        outcome = normalize_outcome({"statChanges": [{"stat": "money", "change": 0}]})
        assert outcome["statChanges"][0]["change"] == 0

    def test_non_list_insights(self):
        assert normalize_insights({"insights": "Live well"})["insights"] == ["Your journey was unique."]

    def test_empty_insights_list(self):
        insights = normalize_insights({"insights": []})
        assert insights["insights"] == ["Every choice matters in the grand scheme of life."]
