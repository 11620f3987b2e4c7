"""
Senkai CLI - Command-line interface for the engine.

Usage:
    senkai cards [--color Red]          List the card catalog
    senkai decks                        List the starter decks
    senkai simulate [--seed N] ...      Play CPU vs CPU games
    senkai serve [--port 8000]          Run the HTTP API
"""

import argparse
import logging
import sys

from .logging_config import setup_logging

logger = logging.getLogger(__name__)

SIMULATION_MAX_STEPS = 5000


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Senkai - Three-lane card battle engine",
        prog="senkai",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Cards command
    cards_parser = subparsers.add_parser("cards", help="List the card catalog")
    cards_parser.add_argument("--color", help="Only cards of this color (Red, Green, Blue, Colorless)")

    # Decks command
    subparsers.add_parser("decks", help="List the starter decks")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play CPU vs CPU games")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed of the first game")
    simulate_parser.add_argument("--deck1", default="blue", help="Starter deck for seat 0")
    simulate_parser.add_argument("--deck2", default="red", help="Starter deck for seat 1")
    simulate_parser.add_argument("--games", type=int, default=1, help="Number of games")
    simulate_parser.add_argument("--max-steps", type=int, default=SIMULATION_MAX_STEPS,
                                 help="Driver step limit per game")
    simulate_parser.add_argument("--log", action="store_true", help="Print the change log of each game")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == "cards":
        cmd_cards(args)
    elif args.command == "decks":
        cmd_decks(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_cards(args):
    """List the card catalog."""
    from .catalog import default_catalog

    for card in default_catalog():
        if args.color and card.color.value.lower() != args.color.lower():
            continue
        stats = ""
        if card.ap is not None:
            stats = f" AP {card.ap} / HP {card.hp}"
        elif card.ap_modifier is not None:
            stats = f" +{card.ap_modifier} AP / +{card.hp_modifier} HP"
        keywords = ", ".join(sorted(k.value for k in card.keywords))
        print(f"{card.id:<20} {card.type.value:<10} {card.color.value:<9} cost {card.cost}{stats}  {card.name}"
              + (f"  [{keywords}]" if keywords else ""))


def cmd_decks(args):
    """List the starter decks."""
    from .catalog import STARTER_DECKS

    for deck_id, deck in STARTER_DECKS.items():
        print(f"{deck_id}: {deck.name}")
        print(f"  main ({len(deck.main_deck)}): {', '.join(sorted(set(deck.main_deck)))}")
        print(f"  magic ({len(deck.magic_deck)}): {', '.join(sorted(set(deck.magic_deck)))}")


def cmd_simulate(args):
    """Play CPU vs CPU games and report the results."""
    from .catalog import STARTER_DECKS
    from .engine_core import GameMode
    from .bots import CpuPolicy
    from .session import SessionManager, GameLoop, LoopState

    for name in (args.deck1, args.deck2):
        if name not in STARTER_DECKS:
            print(f"Error: Unknown deck: {name}. Choose from {', '.join(STARTER_DECKS)}")
            sys.exit(1)

    manager = SessionManager()
    results = {0: 0, 1: 0, "draw": 0, "stalled": 0}

    for game in range(args.games):
        seed = None if args.seed is None else args.seed + game
        session = manager.create_session(
            STARTER_DECKS[args.deck1],
            STARTER_DECKS[args.deck2],
            game_mode=GameMode.PVCPU,
            seed=seed,
            bots={0: CpuPolicy(player_id=0), 1: CpuPolicy(player_id=1)},
        )
        result = GameLoop(session, max_steps=args.max_steps).run_until_input()

        if args.log:
            for line in session.log:
                print(line)

        state = session.game_state
        if result.loop_state == LoopState.GAME_OVER:
            outcome = "draw" if result.is_draw else result.winner
            label = "Draw" if result.is_draw else f"P{result.winner + 1} wins"
        else:
            outcome = "stalled"
            label = f"Stalled ({'; '.join(result.errors)})"
        results[outcome] += 1
        print(f"Game {game + 1} (seed={seed}): {label} on turn {state.turn} after {result.steps} steps")
        manager.end_session(session.session_id)

    if args.games > 1:
        print(f"\nP1 {results[0]}  P2 {results[1]}  draws {results['draw']}  stalled {results['stalled']}")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn
    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
