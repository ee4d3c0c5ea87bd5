"""Export functionality for CSV and JSON, plus the history summary."""

import json
from typing import Any, Dict, Optional

import pandas as pd

from ..engine.models import SimulationInsights
from ..simulation.state_machine import SimulationState

TIMELINE_COLUMNS = [
    'year', 'age', 'title', 'description', 'category', 'impact',
    'choice', 'risk_level', 'money', 'health', 'career', 'relationships',
]


def timeline_dataframe(state: SimulationState) -> pd.DataFrame:
    """One row per timeline event with the stat deltas spread into columns."""
    data = []
    for event in state.timeline:
        row: Dict[str, Any] = {
            'year': event.year,
            'age': event.age,
            'title': event.title,
            'description': event.description,
            'category': event.category,
            'impact': event.impact,
            'choice': event.choice_made.text if event.choice_made else None,
            'risk_level': event.choice_made.risk_level if event.choice_made else None,
            'money': 0,
            'health': 0,
            'career': 0,
            'relationships': 0,
        }
        for change in event.stat_changes:
            row[change.stat] += change.change
        data.append(row)

    return pd.DataFrame(data, columns=TIMELINE_COLUMNS)


def summarize_history(state: SimulationState) -> Dict[str, Any]:
    """Counts shown on the history view."""
    impacts = [event.impact for event in state.timeline]
    return {
        'name': state.profile.name if state.profile else None,
        'events': len(impacts),
        'positive': impacts.count('positive'),
        'negative': impacts.count('negative'),
        'neutral': impacts.count('neutral'),
        'started_at_age': state.start_age,
        'current_age': state.current_age,
        'target_age': state.target_age,
        'complete': state.simulation_complete,
    }


def export_csv(state: SimulationState, filepath: str):
    """Export the timeline to CSV."""
    timeline_dataframe(state).to_csv(filepath, index=False)


def export_json(state: SimulationState, filepath: str, insights: Optional[SimulationInsights] = None):
    """Export profile, final stats, timeline and insights to JSON."""
    insights = insights or state.insights
    export_data = {
        'profile': state.profile.to_dict() if state.profile else None,
        'summary': summarize_history(state),
        'stats': state.stats.to_dict(),
        'meters': {
            'regret': state.regret_meter,
            'reward': state.reward_meter,
        },
        'timeline': [event.to_dict() for event in state.timeline],
        'insights': insights.to_dict() if insights else None,
    }

    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(export_data, f, indent=2, ensure_ascii=False)
