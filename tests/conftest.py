"""Shared fixtures: scripted text generators and deterministic ids."""

import itertools
import json
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from futureyou.generation.client import TextGenerator


class ScriptedGenerator(TextGenerator):
    """Returns canned responses in order; exceptions in the script are raised."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.prompts = []

    def generate_content(self, prompt):
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("ScriptedGenerator ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response


@pytest.fixture
def make_generator():
    """Factory for ScriptedGenerator."""
    return ScriptedGenerator


@pytest.fixture
def id_factory():
    """Sequential ids: id-0, id-1, ..."""
    counter = itertools.count()
    return lambda: f"id-{next(counter)}"


SCENARIO_JSON = {
    "title": "Job Offer Abroad",
    "description": "A company in Lisbon wants you.",
    "context": "You have been job hunting for months.",
    "choices": [
        {
            "text": "Take the job",
            "description": "Move to Lisbon.",
            "riskLevel": "high",
            "potentialOutcomes": ["Adventure", "Homesickness"],
            "category": "career",
        },
        {
            "text": "Stay home",
            "description": "Keep your current life.",
            "riskLevel": "low",
            "potentialOutcomes": ["Comfort"],
            "category": "relationships",
        },
    ],
}


def outcome_json(title="Hired", impact="positive", years=2, changes=None):
    return {
        "title": title,
        "description": f"{title} happened.",
        "statChanges": changes if changes is not None else [
            {"stat": "career", "change": 10, "reason": "New role"},
        ],
        "impact": impact,
        "yearsToAdvance": years,
    }


INSIGHTS_JSON = {
    "insights": ["You took chances.", "You kept your friends."],
    "lifeScore": 81,
    "achievements": [
        {"title": "Globetrotter", "description": "Moved abroad", "rarity": "rare"},
    ],
}


@pytest.fixture
def scenario_json():
    return json.loads(json.dumps(SCENARIO_JSON))


@pytest.fixture
def make_outcome():
    return outcome_json


@pytest.fixture
def insights_json():
    return json.loads(json.dumps(INSIGHTS_JSON))
