"""
Lanewar CLI - Command-line interface for the engine.

Usage:
    lanewar play                 Play a match against the bot in the terminal
    lanewar simulate -n 100      Bot vs bot, prints a win tally
    lanewar catalog              List and validate the card catalog
    lanewar serve                Run the HTTP API with uvicorn
"""

import argparse
import logging
import os
import random
import sys
import time

from .bots.policy import POLICIES, BotPolicy, make_policy
from .engine_core.action_generator import legal_actions, legal_moves
from .engine_core.events import EventType
from .engine_core.state import GameConfig, GameState, Side
from .engine_core.turn import Scheduler, TurnEngine

LANEWAR_LOG_LEVEL = os.getenv("LANEWAR_LOG_LEVEL", "WARNING")
LANEWAR_BOT_DELAY_MS = int(os.getenv("LANEWAR_BOT_DELAY_MS", "1000"))

PLAY_HELP = """Commands:
  place <hand#> <lane#> [slot#]   Place a card (slot defaults to the first free one)
  retract <card#>                 Take back a card placed this turn
  move <card#> <lane#>            Move a card with a move ability
  moves                           List the moves available now
  end                             End your turn
  board                           Show the board
  retreat                         Concede
  quit                            Leave the game"""


class PausingScheduler(Scheduler):
    """Sleeps for the delay, then runs the callback."""

    def schedule(self, delay_ms, callback):
        time.sleep(delay_ms / 1000)
        callback()


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Lanewar - Lane battle card game engine",
        prog="lanewar",
    )
    parser.add_argument(
        "--log-level",
        default=LANEWAR_LOG_LEVEL,
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a match against the bot")
    play_parser.add_argument("--bot", choices=sorted(POLICIES), default="greedy")
    play_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    play_parser.add_argument(
        "--delay-ms", type=int, default=LANEWAR_BOT_DELAY_MS, help="Pause before the bot plays"
    )

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Bot vs bot matches")
    simulate_parser.add_argument("--games", "-n", type=int, default=10)
    simulate_parser.add_argument("--player-bot", choices=sorted(POLICIES), default="greedy")
    simulate_parser.add_argument("--opponent-bot", choices=sorted(POLICIES), default="greedy")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed of the first game")

    # Catalog command
    subparsers.add_parser("catalog", help="List and validate the card catalog")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "catalog":
        cmd_catalog(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


# =============================================================================
# Commands
# =============================================================================

def cmd_play(args):
    """Interactive match against the bot."""
    from .session import SessionManager

    manager = SessionManager()
    config = GameConfig(bot_delay_ms=args.delay_ms, random_seed=args.seed)
    session = manager.create_session(
        config=config,
        bot_policy=make_policy(args.bot, args.seed),
        scheduler=PausingScheduler(),
    )
    engine = session.engine
    session.bus.subscribe(EventType.LOG_MESSAGE, lambda event: print(f"  > {event.message}"))

    print(f"Session {session.session_id} against the {args.bot} bot")
    print(PLAY_HELP)

    while not engine.state.is_game_over:
        print(render_board(engine.state))
        try:
            line = input(f"[turn {engine.state.current_turn}] > ").strip()
        except EOFError:
            line = "quit"
        if not line:
            continue
        if not run_play_command(engine, line.split()):
            manager.end_session(session.session_id, reason="quit")
            print("Bye.")
            return

    print(render_board(engine.state))
    print(describe_result(engine.state))
    manager.end_session(session.session_id)


def run_play_command(engine, words):
    """Apply one typed command. Returns False when the player quits."""
    command, params = words[0].lower(), words[1:]
    try:
        numbers = [int(p) for p in params]
    except ValueError:
        print("Numbers only, please.")
        return True

    if command == "quit":
        return False
    if command == "help":
        print(PLAY_HELP)
        return True
    if command == "board":
        print(render_board(engine.state))
        return True
    if command == "moves":
        print(describe_moves(engine.state))
        return True
    if command == "end":
        result = engine.end_player_turn()
    elif command == "retreat":
        result = engine.retreat()
    elif command == "place" and len(numbers) in (2, 3):
        hand_index, lane_index = numbers[0] - 1, numbers[1] - 1
        slot_index = numbers[2] - 1 if len(numbers) == 3 else _first_free(engine.state, lane_index)
        result = engine.place_card(hand_index, lane_index, slot_index)
    elif command == "retract" and len(numbers) == 1:
        result = engine.retract_card(numbers[0])
    elif command == "move" and len(numbers) == 2:
        handle, lane_index = numbers[0], numbers[1] - 1
        legal = [
            a for a in legal_moves(engine.state, Side.PLAYER)
            if a.payload.card_handle == handle and a.payload.lane_index == lane_index
        ]
        if legal:
            result = engine.apply(legal[0])
        else:
            result = engine.move_card(handle, lane_index, _first_free(engine.state, lane_index))
    else:
        print(PLAY_HELP)
        return True

    if not result.success:
        print(f"  ! {result.error}")
    for change in result.state_changes:
        print(f"  {change}")
    return True


def cmd_simulate(args):
    """Play bot against bot and print the tally."""
    from .engine_core.events import EventBus
    from .games.marvel import MARVEL_CATALOG, setup_marvel_game

    tally = {"player": 0, "opponent": 0, "draw": 0}
    for game in range(args.games):
        seed = None if args.seed is None else args.seed + game
        config = GameConfig(random_seed=seed)
        rng = random.Random(seed)
        bus = EventBus(session_id=f"sim-{game}")
        state = setup_marvel_game(bus, config=config, rng=rng)
        engine = TurnEngine(
            state=state,
            bus=bus,
            catalog=MARVEL_CATALOG,
            bot=make_policy(args.opponent_bot, seed),
            rng=rng,
        )
        engine.start()
        player_bot = make_policy(args.player_bot, None if seed is None else seed + 1)
        winner = simulate_game(engine, player_bot)
        tally[winner.value if winner else "draw"] += 1
        bus.close()

    print(f"{args.games} games: {args.player_bot} (player) vs {args.opponent_bot} (opponent)")
    for outcome, count in tally.items():
        print(f"  {outcome:<9} {count}")


def simulate_game(engine: TurnEngine, player_bot: BotPolicy):
    """Drive the player side with a policy until the game ends. Returns the winner."""
    state = engine.state
    while not state.is_game_over:
        while True:
            decision = player_bot.select_action(state, Side.PLAYER, legal_actions(state, Side.PLAYER))
            if decision.ends_turn or not engine.apply(decision.action).success:
                break
        engine.end_player_turn()
    return state.result.winner if state.result else None


def cmd_catalog(args):
    """List the built-in cards and validate them."""
    from .games.marvel import MARVEL_CARDS
    from .spec_schema.validation import validate_catalog

    print(f"{'id':>3}  {'name':<18} {'cost':>4} {'power':>5}  ability")
    for card in sorted(MARVEL_CARDS, key=lambda c: (c.cost, c.card_id)):
        print(f"{card.card_id:>3}  {card.name:<18} {card.cost:>4} {card.power:>5}  {card.description}")

    result = validate_catalog(MARVEL_CARDS)
    print(f"\n{len(MARVEL_CARDS)} cards, {'valid' if result.valid else 'INVALID'}")
    for warning in result.warnings:
        print(f"  warning: {warning}")
    for error in result.errors:
        print(f"  error: {error}")
    if not result.valid:
        sys.exit(1)


def cmd_serve(args):
    """Run the HTTP API."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    uvicorn.run(
        "lanewar.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


# =============================================================================
# Rendering
# =============================================================================

def _first_free(state: GameState, lane_index: int) -> int:
    if not 0 <= lane_index < len(state.lanes):
        return 0
    slot = state.lanes[lane_index].free_slot(Side.PLAYER)
    # An occupied index lets the engine report the full lane
    return slot.slot_index if slot is not None else 0


def render_board(state: GameState) -> str:
    """Text view of the board from the player's side."""
    from .engine_core.lane_power import all_lane_powers

    lines = []
    powers = all_lane_powers(state)
    for lane, power in zip(state.lanes, powers):
        effect = lane.effect.name if lane.effect and lane.is_revealed else "???"
        lines.append(
            f"Lane {lane.index + 1} [{effect}]  you {power.player_power} - "
            f"{power.opponent_power} opponent"
        )
        for label, side in (("you", Side.PLAYER), ("opp", Side.OPPONENT)):
            cells = []
            for slot in lane.slots_for(side):
                card = state.card_in(slot)
                if card is None:
                    cells.append("--")
                elif side is Side.OPPONENT and not card.is_revealed:
                    cells.append("(hidden)")
                else:
                    cells.append(f"#{card.handle} {card.name} {slot.power}")
            lines.append(f"    {label}: " + " | ".join(cells))

    player = state.side(Side.PLAYER)
    lines.append(f"Energy {player.energy}  Deck {len(player.deck)}")
    for i, card in enumerate(player.hand, start=1):
        lines.append(f"  {i}. {card.name} ({card.cost}/{card.power}) {card.description}")
    return "\n".join(lines)


def describe_moves(state: GameState) -> str:
    moves = legal_moves(state, Side.PLAYER)
    if not moves:
        return "No moves available"
    lines = []
    for action in moves:
        card = state.card(action.payload.card_handle)
        lines.append(f"  move {card.handle} {action.payload.lane_index + 1}   ({card.name})")
    return "\n".join(lines)


def describe_result(state: GameState) -> str:
    result = state.result
    if result is None:
        return "No result"
    if result.winner is None:
        return "Draw!"
    outcome = "You win!" if result.winner is Side.PLAYER else "The opponent wins."
    if result.retreated:
        outcome += " (retreat)"
    return outcome


if __name__ == "__main__":
    main()
