"""Tests for the HTTP generation endpoints."""

import json
import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from futureyou.api.routes import create_app
from futureyou.errors import TransportError
from futureyou.generation.service import GenerationService

STATS = {"money": 50, "health": 80, "career": 40, "relationships": 60}


@pytest.fixture
def client_for(make_generator):
    def build(responses):
        generator = make_generator(responses)
        return TestClient(create_app(GenerationService(generator))), generator
    return build


class TestGenerateScenario:
    """POST /api/generate-scenario"""

    def test_success(self, client_for, scenario_json):
        client, generator = client_for([f"Sure!\n```json\n{json.dumps(scenario_json)}\n```"])
        response = client.post("/api/generate-scenario", json={
            "currentAge": 32,
            "stats": STATS,
            "previousChoices": ["Moved out"],
            "timelineContext": "Left home: Got a flat.",
        })
        assert response.status_code == 200
        scenario = response.json()["scenario"]
        assert scenario["title"] == "Job Offer Abroad"
        assert [c["text"] for c in scenario["choices"]] == ["Take the job", "Stay home"]
        assert "1. Moved out" in generator.prompts[0]
        assert "- Age: 32 years old" in generator.prompts[0]

    def test_generator_failure_is_500(self, client_for):
        client, _ = client_for([TransportError("quota exceeded")])
        response = client.post("/api/generate-scenario", json={"currentAge": 30, "stats": STATS})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate scenario", "message": "quota exceeded"}

    def test_unparseable_output_is_500(self, client_for):
        client, _ = client_for(["no json today"])
        response = client.post("/api/generate-scenario", json={"currentAge": 30, "stats": STATS})
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to generate scenario"
        assert response.json()["message"]

    def test_missing_field_is_500(self, client_for):
        client, generator = client_for([])
        response = client.post("/api/generate-scenario", json={"stats": STATS})
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to generate scenario"
        assert generator.prompts == []


class TestProcessChoice:
    """POST /api/process-choice"""

    CHOICE = {
        "id": "c1",
        "text": "Run a marathon",
        "description": "Train for months.",
        "riskLevel": "medium",
        "category": "health",
    }

    def test_success(self, client_for, make_outcome):
        client, generator = client_for([make_outcome(title="Finished", years=9, changes=[
            {"stat": "health", "change": 35, "reason": "Fit"},
        ])])
        response = client.post("/api/process-choice", json={
            "choice": self.CHOICE,
            "currentAge": 30,
            "stats": STATS,
            "timelineContext": "",
        })
        assert response.status_code == 200
        outcome = response.json()["outcome"]
        assert outcome["title"] == "Finished"
        assert outcome["yearsToAdvance"] == 5
        assert outcome["statChanges"] == [{"stat": "health", "change": 20, "reason": "Fit"}]
        assert 'The person chose: "Run a marathon"' in generator.prompts[0]

    def test_synthesized_change_uses_choice_category(self, client_for):
        client, _ = client_for(['{"impact": "negative"}'])
        response = client.post("/api/process-choice", json={"choice": self.CHOICE, "currentAge": 30, "stats": STATS})
        assert response.json()["outcome"]["statChanges"] == [
            {"stat": "health", "change": -5, "reason": "The result of your choice"},
        ]

    def test_failure_is_500(self, client_for):
        client, _ = client_for([RuntimeError("boom")])
        response = client.post("/api/process-choice", json={"choice": self.CHOICE, "currentAge": 30, "stats": STATS})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process choice", "message": "boom"}


class TestGenerateInsights:
    """POST /api/generate-insights"""

    def test_success_returns_object_directly(self, client_for, insights_json):
        client, generator = client_for([insights_json])
        response = client.post("/api/generate-insights", json={
            "timeline": [{"year": 2030, "title": "Hired", "impact": "positive"}],
            "finalStats": STATS,
            "choices": ["Take the job"],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["lifeScore"] == 81
        assert body["achievements"][0]["rarity"] == "rare"
        assert "- Year 2030: Hired (positive)" in generator.prompts[0]

    def test_failure_is_500(self, client_for):
        client, _ = client_for(["[]"])
        response = client.post("/api/generate-insights", json={"finalStats": STATS})
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to generate insights"
