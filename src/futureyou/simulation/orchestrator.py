"""Orchestration flow - drives the simulation loop against the generator.

    begin -> request scenario -> choose -> proceed -> request scenario ...
                                            \\-> (target age reached) insights -> RESULTS

Every generation call goes through ``_generate``: a transport or parse
failure is logged and replaced by the matching entry of the fallback table,
so the loop always has a usable scenario, outcome or set of insights.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional

from ..engine.models import (
    IdFactory,
    LifeScenario,
    Outcome,
    SimulationInsights,
    UserProfile,
    choice_texts,
    generate_id,
    stats_payload,
)
from ..errors import ParseError, TransportError
from ..generation.service import GenerationService
from .fallbacks import CallType, FallbackContext, fallback_for
from .state_machine import SimulationPhase, SimulationStateMachine

logger = logging.getLogger(__name__)

CONTEXT_EVENTS = 3


class OrchestrationFlow:
    """Phase sequencing for one simulation session."""

    def __init__(
        self,
        machine: SimulationStateMachine,
        service: Optional[GenerationService] = None,
        id_factory: IdFactory = generate_id,
    ):
        """
        Args:
            machine: The state machine to drive
            service: Generation collaborator; None runs entirely on fallbacks
            id_factory: Source of profile, scenario, choice and achievement ids
        """
        self.machine = machine
        self.service = service
        self._id_factory = id_factory
        self._pending = False
        self.last_outcome: Optional[Outcome] = None
        self.fallbacks_used: Dict[CallType, int] = {call_type: 0 for call_type in CallType}

    @property
    def is_pending(self) -> bool:
        return self._pending

    @contextmanager
    def _exclusive(self, action: str):
        """Yield True if no other request is in flight, False otherwise."""
        if self._pending:
            logger.warning("Ignoring %s: a generation request is already in flight", action)
            yield False
            return
        self._pending = True
        try:
            yield True
        finally:
            self._pending = False

    # ------------------------------------------------------------------
    # Request payloads
    # ------------------------------------------------------------------

    def timeline_context(self) -> str:
        """Title and description of the last few events, space separated."""
        recent = self.machine.state.timeline[-CONTEXT_EVENTS:]
        return " ".join(f"{e.title}: {e.description}" for e in recent)

    def scenario_request(self) -> Dict[str, Any]:
        state = self.machine.state
        return {
            "currentAge": state.current_age,
            "stats": stats_payload(state.stats),
            "previousChoices": choice_texts(list(state.timeline)),
            "timelineContext": self.timeline_context(),
        }

    def insights_request(self) -> Dict[str, Any]:
        state = self.machine.state
        return {
            "timeline": [
                {"year": e.year, "title": e.title, "impact": e.impact}
                for e in state.timeline
            ],
            "finalStats": stats_payload(state.stats),
            "choices": choice_texts(list(state.timeline)),
        }

    # ------------------------------------------------------------------
    # Generation with fallback
    # ------------------------------------------------------------------

    def _generate(
        self,
        call_type: CallType,
        call: Callable[[GenerationService], Dict[str, Any]],
        ctx: FallbackContext,
    ) -> Dict[str, Any]:
        if self.service is not None:
            try:
                return call(self.service)
            except (TransportError, ParseError) as exc:
                logger.warning("%s generation failed, using fallback: %s", call_type.value, exc)
            except Exception:
                logger.exception("%s generation raised unexpectedly, using fallback", call_type.value)
        self.fallbacks_used[call_type] += 1
        return fallback_for(call_type, ctx)

    def _fallback_context(self, choice=None) -> FallbackContext:
        return FallbackContext(stats=self.machine.state.stats, rng=self.machine.rng, choice=choice)

    def _fetch_scenario(self) -> LifeScenario:
        request = self.scenario_request()
        payload = self._generate(
            CallType.SCENARIO,
            lambda service: service.generate_scenario(
                request["currentAge"],
                request["stats"],
                request["previousChoices"],
                request["timelineContext"],
            ),
            self._fallback_context(),
        )
        state = self.machine.state
        scenario = LifeScenario.from_generated(payload, state.current_age, state.stats, self._id_factory)
        self.machine.set_scenario(scenario)
        return scenario

    def _fetch_insights(self) -> SimulationInsights:
        request = self.insights_request()
        payload = self._generate(
            CallType.INSIGHTS,
            lambda service: service.generate_insights(
                request["timeline"],
                request["finalStats"],
                request["choices"],
            ),
            self._fallback_context(),
        )
        return SimulationInsights.from_generated(payload, self.machine.state.current_age, self._id_factory)

    # ------------------------------------------------------------------
    # Flow operations
    # ------------------------------------------------------------------

    def begin(
        self,
        name: str,
        gender: str = "other",
        start_age: int = 25,
        target_age: int = 65,
    ) -> Optional[LifeScenario]:
        """Create the profile, start the machine and fetch the first scenario."""
        profile = UserProfile.create(name, start_age, gender, self._id_factory)
        self.last_outcome = None
        self.machine.start(profile, start_age, target_age)
        return self.request_scenario()

    def request_scenario(self) -> Optional[LifeScenario]:
        """Fetch a scenario for the current age; None if a request is in flight."""
        with self._exclusive("scenario request") as acquired:
            if not acquired:
                return None
            return self._fetch_scenario()

    def choose(self, choice_id: str) -> Optional[Outcome]:
        """
        Resolve the chosen option of the current scenario.

        Records the outcome, advances the age and returns the outcome. Returns
        None when the choice is not on offer or a request is already pending.
        """
        scenario = self.machine.state.current_scenario
        choice = scenario.find_choice(choice_id) if scenario else None
        if choice is None:
            logger.warning("Ignoring unknown choice %r", choice_id)
            return None

        with self._exclusive("choice") as acquired:
            if not acquired:
                return None
            state = self.machine.state
            request = {
                "choice": choice.to_request(),
                "currentAge": state.current_age,
                "stats": stats_payload(state.stats),
                "timelineContext": self.timeline_context(),
            }
            payload = self._generate(
                CallType.OUTCOME,
                lambda service: service.process_choice(
                    request["choice"],
                    request["currentAge"],
                    request["stats"],
                    request["timelineContext"],
                ),
                self._fallback_context(choice),
            )
            outcome = Outcome.from_dict(payload)
            if self.machine.record_choice(choice, outcome) is None:
                return None
            self.machine.advance_age(outcome.years_to_advance)
            self.last_outcome = outcome
            return outcome

    def proceed(self) -> SimulationPhase:
        """After an outcome: finish with insights at the target age, else fetch the next scenario."""
        with self._exclusive("continue") as acquired:
            if not acquired:
                return self.machine.phase
            if self.machine.state.target_reached:
                insights = self._fetch_insights()
                return self.machine.continue_or_complete(insights)
            phase = self.machine.continue_or_complete()
            self._fetch_scenario()
            return phase

    def resume(self) -> SimulationPhase:
        """After restoring a saved session, fetch a scenario if one is needed."""
        state = self.machine.state
        if state.phase is SimulationPhase.PLAYING and state.current_scenario is None:
            self.request_scenario()
        return self.machine.phase

    def restart(self):
        """Discard the session and return to setup."""
        self.last_outcome = None
        self.machine.reset()

    @property
    def insights(self) -> Optional[SimulationInsights]:
        return self.machine.state.insights

    def fallback_summary(self) -> List[str]:
        """Call types that fell back at least once."""
        return [call_type.value for call_type, count in self.fallbacks_used.items() if count]
