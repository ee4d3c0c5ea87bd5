"""Terminal front end: play a simulated life from the command line.

Usage:
    futureyou-sim --name Ada --start-age 25 --target-age 65
    futureyou-sim --offline          # never call the generator
    futureyou-sim --resume default   # continue a saved session
"""

import argparse
import logging
import os
import sys
from typing import Callable, List, Optional

from .config.loader import load_config
from .generation.client import OpenAITextGenerator
from .reporting.export import export_json, summarize_history
from .simulation.orchestrator import OrchestrationFlow
from .simulation.persistence import JsonFileStore, attach_store
from .simulation.runner import create_flow, validate_ages
from .simulation.state_machine import SimulationPhase

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def _print_stats(flow: OrchestrationFlow, write: Writer):
    state = flow.machine.state
    stats = state.stats
    write(
        f"Age {state.current_age}/{state.target_age} | "
        f"money {stats.money} health {stats.health} career {stats.career} "
        f"relationships {stats.relationships} happiness {stats.happiness} | "
        f"regret {state.regret_meter} reward {state.reward_meter}"
    )


def _ask_choice(flow: OrchestrationFlow, read: Reader, write: Writer) -> Optional[str]:
    scenario = flow.machine.state.current_scenario
    if scenario is None:
        return None
    write("")
    write(f"== {scenario.title} ==")
    write(scenario.description)
    write(scenario.context)
    for number, choice in enumerate(scenario.choices, start=1):
        write(f"  {number}. {choice.text} [{choice.risk_level} risk, {choice.category}] - {choice.description}")
    while True:
        answer = read("Your choice (q to quit): ").strip().lower()
        if answer in ("q", "quit"):
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(scenario.choices):
            return scenario.choices[int(answer) - 1].id
        write(f"Enter a number between 1 and {len(scenario.choices)}.")


def _print_results(flow: OrchestrationFlow, write: Writer):
    insights = flow.insights
    summary = summarize_history(flow.machine.state)
    write("")
    write("== Your life in review ==")
    write(
        f"{summary['events']} events: {summary['positive']} positive, "
        f"{summary['negative']} negative, {summary['neutral']} neutral"
    )
    _print_stats(flow, write)
    if insights is None:
        return
    write(f"Life score: {insights.life_score}/100")
    for line in insights.insights:
        write(f"  * {line}")
    for achievement in insights.achievements:
        write(f"  {achievement.icon} {achievement.title} ({achievement.rarity}) - {achievement.description}")


def play(flow: OrchestrationFlow, read: Reader = input, write: Writer = print) -> SimulationPhase:
    """Run the choose/continue loop until RESULTS or the player quits."""
    flow.resume()
    while flow.machine.phase is SimulationPhase.PLAYING:
        _print_stats(flow, write)
        choice_id = _ask_choice(flow, read, write)
        if choice_id is None:
            write("Simulation saved for later.")
            return flow.machine.phase
        outcome = flow.choose(choice_id)
        if outcome is not None:
            write(f"-> {outcome.title} ({outcome.impact}): {outcome.description}")
            for change in outcome.stat_changes:
                write(f"   {change.stat} {change.change:+d}: {change.reason}")
        flow.proceed()

    if flow.machine.phase is SimulationPhase.RESULTS:
        _print_results(flow, write)
    return flow.machine.phase


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="futureyou-sim", description="Play through a simulated life.")
    parser.add_argument("--name", default="", help="Display name (default: Anonymous)")
    parser.add_argument("--gender", choices=["male", "female", "other"], default="other")
    parser.add_argument("--start-age", type=int, default=None)
    parser.add_argument("--target-age", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None, help="Seed for meter and fallback randomness")
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument("--offline", action="store_true", help="Use local fallbacks instead of the generator")
    parser.add_argument("--resume", metavar="KEY", default=None, help="Load and keep saving the record for KEY")
    parser.add_argument("--export", metavar="PATH", default=None, help="Write the finished life to a JSON file")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None, read: Reader = input, write: Writer = print) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    generator = None
    if not args.offline:
        if os.getenv("OPENAI_API_KEY"):
            generator = OpenAITextGenerator(config.generation)
        else:
            write("OPENAI_API_KEY is not set; playing with offline scenarios.")
    flow = create_flow(config, generator, args.seed)

    if args.resume:
        attach_store(flow.machine, JsonFileStore.from_settings(config.persistence), args.resume)

    if flow.machine.phase is SimulationPhase.IDLE:
        start_age = args.start_age if args.start_age is not None else config.simulation.default_start_age
        target_age = args.target_age if args.target_age is not None else config.simulation.default_target_age
        try:
            validate_ages(config, start_age, target_age)
        except ValueError as exc:
            write(f"error: {exc}")
            return 2
        flow.begin(args.name, args.gender, start_age, target_age)

    try:
        phase = play(flow, read, write)
    except (EOFError, KeyboardInterrupt):
        write("")
        return 130

    if phase is SimulationPhase.RESULTS and args.export:
        export_json(flow.machine.state, args.export)
        write(f"Exported to {args.export}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
