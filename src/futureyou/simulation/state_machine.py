"""Simulation state machine - the single aggregate for one user's simulated life.

Phases:
    IDLE -> PLAYING -> OUTCOME -> PLAYING ... -> RESULTS

Every transition replaces the immutable ``SimulationState`` snapshot and then
notifies subscribers (UI layers, persistence) with the new snapshot. The
machine never calls out to the generator; that is the orchestrator's job.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from ..engine.models import (
    Choice,
    IdFactory,
    LifeScenario,
    Outcome,
    SimulationInsights,
    TimelineEvent,
    UserProfile,
    generate_id,
)
from ..engine.stats import INITIAL_STATS, LifeStats, apply_changes, clamp_meter
from ..errors import InvalidTransitionError

logger = logging.getLogger(__name__)

DEFAULT_START_AGE = 25
DEFAULT_TARGET_AGE = 65


class SimulationPhase(Enum):
    """Where the simulation is in its loop."""
    IDLE = "idle"
    PLAYING = "playing"
    OUTCOME = "outcome"
    RESULTS = "results"


@dataclass(frozen=True)
class SimulationState:
    """Snapshot of the aggregate.

    ``timeline`` is a tuple: a transition can only produce a new snapshot with
    a longer tuple, never edit an existing entry.
    """
    profile: Optional[UserProfile] = None
    current_age: int = DEFAULT_START_AGE
    start_age: int = DEFAULT_START_AGE
    target_age: int = DEFAULT_TARGET_AGE
    stats: LifeStats = INITIAL_STATS
    timeline: Tuple[TimelineEvent, ...] = ()
    current_scenario: Optional[LifeScenario] = None
    regret_meter: int = 0
    reward_meter: int = 0
    is_simulating: bool = False
    simulation_complete: bool = False
    phase: SimulationPhase = SimulationPhase.IDLE
    insights: Optional[SimulationInsights] = None

    @property
    def target_reached(self) -> bool:
        return self.current_age >= self.target_age

    @property
    def years_elapsed(self) -> int:
        return self.current_age - self.start_age


Listener = Callable[[SimulationState], None]


@dataclass
class MeterSettings:
    """Random increment range for regret/reward meters: base + [0, span)."""
    increment_base: int = 10
    increment_span: int = 10
    maximum: int = 100


class SimulationStateMachine:
    """Owns the simulation aggregate and enforces transition order."""

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        initial_stats: LifeStats = INITIAL_STATS,
        meters: Optional[MeterSettings] = None,
        id_factory: IdFactory = generate_id,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the machine in the IDLE phase.

        Args:
            rng: Random source for meter increments (seed it for reproducible runs)
            initial_stats: Stats applied on start and reset
            meters: Meter increment settings
            id_factory: Source of timeline event ids
            clock: Source of the real-world current year
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.initial_stats = initial_stats
        self.meters = meters or MeterSettings()
        self._id_factory = id_factory
        self._clock = clock
        self._listeners: List[Listener] = []
        self._state = SimulationState(stats=initial_stats)

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def phase(self) -> SimulationPhase:
        return self._state.phase

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: SimulationState) -> SimulationState:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return state

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, profile: UserProfile, start_age: int, target_age: int) -> SimulationState:
        """
        Begin a new simulation.

        Valid from IDLE, or from RESULTS to play again.

        Raises:
            InvalidTransitionError: If a simulation is already running
            ValueError: If target_age is not above start_age
        """
        if self.phase not in (SimulationPhase.IDLE, SimulationPhase.RESULTS):
            raise InvalidTransitionError(f"Cannot start a simulation while {self.phase.value}")
        if target_age <= start_age:
            raise ValueError(f"target_age ({target_age}) must be greater than start_age ({start_age})")

        logger.debug("Starting simulation for %s: age %d -> %d", profile.name, start_age, target_age)
        return self._commit(SimulationState(
            profile=profile.with_age(start_age),
            current_age=start_age,
            start_age=start_age,
            target_age=target_age,
            stats=self.initial_stats,
            phase=SimulationPhase.PLAYING,
            is_simulating=True,
            simulation_complete=False,
        ))

    def set_scenario(self, scenario: LifeScenario) -> bool:
        """Make ``scenario`` the current one. Ignored outside PLAYING."""
        if self.phase is not SimulationPhase.PLAYING:
            logger.warning("Ignoring scenario %r while %s", scenario.title, self.phase.value)
            return False
        self._commit(replace(self._state, current_scenario=scenario))
        return True

    def record_choice(self, choice: Choice, outcome: Outcome) -> Optional[TimelineEvent]:
        """
        Apply the outcome of ``choice`` and move to OUTCOME.

        Ignored (returns None) unless PLAYING with a current scenario that
        offers this choice, so a repeated submission cannot apply stat
        changes twice.

        Returns:
            The appended timeline event
        """
        state = self._state
        scenario = state.current_scenario
        if self.phase is not SimulationPhase.PLAYING or scenario is None:
            logger.warning("Ignoring choice %r: no scenario is awaiting a decision", choice.text)
            return None
        if scenario.find_choice(choice.id) is None:
            logger.warning("Ignoring choice %r: not offered by scenario %r", choice.text, scenario.title)
            return None

        event = TimelineEvent(
            id=self._id_factory(),
            year=self._clock().year + state.years_elapsed,
            age=state.current_age,
            title=outcome.title,
            description=outcome.description,
            category=choice.category,
            impact=outcome.impact,
            stat_changes=tuple(outcome.stat_changes),
            choice_made=choice,
        )

        regret, reward = state.regret_meter, state.reward_meter
        if outcome.impact == "positive":
            reward += self._meter_increment()
        elif outcome.impact == "negative":
            regret += self._meter_increment()

        self._commit(replace(
            state,
            stats=apply_changes(state.stats, outcome.stat_changes),
            timeline=state.timeline + (event,),
            regret_meter=clamp_meter(regret, self.meters.maximum),
            reward_meter=clamp_meter(reward, self.meters.maximum),
            current_scenario=None,
            phase=SimulationPhase.OUTCOME,
        ))
        return event

    def _meter_increment(self) -> int:
        base = self.meters.increment_base
        return int(self.rng.integers(base, base + self.meters.increment_span))

    def advance_age(self, years: int) -> SimulationState:
        """
        Move the clock forward by ``years``.

        Raises:
            InvalidTransitionError: Outside PLAYING/OUTCOME
            ValueError: If years is negative (age never decreases)
        """
        if self.phase not in (SimulationPhase.PLAYING, SimulationPhase.OUTCOME):
            raise InvalidTransitionError(f"Cannot advance age while {self.phase.value}")
        if years < 0:
            raise ValueError(f"Cannot advance age by a negative amount ({years})")

        state = self._state
        new_age = state.current_age + int(years)
        profile = state.profile.with_age(new_age) if state.profile else None
        return self._commit(replace(state, current_age=new_age, profile=profile))

    def continue_or_complete(self, insights: Optional[SimulationInsights] = None) -> SimulationPhase:
        """
        Finish the simulation if the target age is reached, else await a new scenario.

        The orchestrator generates ``insights`` before calling this once the
        target is reached; they are stored with the completed state.

        Returns:
            The new phase (RESULTS or PLAYING)
        """
        if self.phase not in (SimulationPhase.PLAYING, SimulationPhase.OUTCOME):
            raise InvalidTransitionError(f"Cannot continue while {self.phase.value}")

        state = self._state
        if state.target_reached:
            logger.debug("Target age %d reached at %d", state.target_age, state.current_age)
            self._commit(replace(
                state,
                phase=SimulationPhase.RESULTS,
                simulation_complete=True,
                is_simulating=False,
                current_scenario=None,
                insights=insights,
            ))
        else:
            self._commit(replace(state, phase=SimulationPhase.PLAYING))
        return self.phase

    def reset(self) -> SimulationState:
        """Wipe everything and return to IDLE. Valid from any phase."""
        return self._commit(SimulationState(stats=self.initial_stats))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_persisted(self) -> Dict[str, Any]:
        """The persisted subset; scenario, phase and UI flags are excluded."""
        state = self._state
        return {
            "profile": state.profile.to_dict() if state.profile else None,
            "timeline": [event.to_dict() for event in state.timeline],
            "stats": state.stats.to_dict(),
            "currentAge": state.current_age,
            "startAge": state.start_age,
            "targetAge": state.target_age,
            "regretMeter": state.regret_meter,
            "rewardMeter": state.reward_meter,
            "simulationComplete": state.simulation_complete,
        }

    def restore(self, persisted: Dict[str, Any]) -> SimulationState:
        """
        Load a persisted record.

        A completed record resumes in RESULTS; one with a profile resumes in
        PLAYING with no current scenario (the orchestrator requests a fresh
        one); anything else resumes in IDLE.
        """
        profile_data = persisted.get("profile")
        profile = UserProfile.from_dict(profile_data) if profile_data else None
        complete = bool(persisted.get("simulationComplete", False))

        if complete:
            phase = SimulationPhase.RESULTS
        elif profile is not None:
            phase = SimulationPhase.PLAYING
        else:
            phase = SimulationPhase.IDLE

        stats_data = persisted.get("stats")
        return self._commit(SimulationState(
            profile=profile,
            current_age=int(persisted.get("currentAge", DEFAULT_START_AGE)),
            start_age=int(persisted.get("startAge", DEFAULT_START_AGE)),
            target_age=int(persisted.get("targetAge", DEFAULT_TARGET_AGE)),
            stats=LifeStats.from_dict(stats_data) if stats_data else self.initial_stats,
            timeline=tuple(TimelineEvent.from_dict(e) for e in persisted.get("timeline", ())),
            regret_meter=clamp_meter(persisted.get("regretMeter", 0), self.meters.maximum),
            reward_meter=clamp_meter(persisted.get("rewardMeter", 0), self.meters.maximum),
            is_simulating=phase is SimulationPhase.PLAYING,
            simulation_complete=complete,
            phase=phase,
        ))
