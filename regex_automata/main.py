#!/usr/bin/env python3
"""CLI for running Game of Life and Turing machines through a single regex."""

import argparse
import logging
import sys
import time

import numpy as np

from .automaton import Rule, ReferenceAutomaton
from .codec import TAPE_LENGTH, AlphabetError, BoardCodec, TapeCodec, load_board
from .compiler import CompileError
from .engine import LifeEngine, MachineEngine
from .inspection import INSPECTION_FILENAME, write_inspection
from .machine import MachineDefinition, ParseError
from .pattern import build_life_pattern, build_machine_pattern
from .presets import PRESETS
from .visualize import RENDERERS, print_frame, save_animation


def _load_rule(rule_str):
    try:
        return Rule.from_string(rule_str)
    except ValueError as e:
        print(f"Error parsing rule '{rule_str}': {e}")
        sys.exit(1)


def _load_board(path):
    try:
        return load_board(path)
    except (OSError, AlphabetError) as e:
        print(f"Error loading board '{path}': {e}")
        sys.exit(1)


def _load_machine(args):
    """Definition and default input from a preset or a rules file."""
    accept = args.accept or None
    try:
        if args.rules:
            return MachineDefinition.from_file(args.rules, accept_states=accept), None
        preset = PRESETS[args.preset]
        definition = MachineDefinition(preset.transitions, accept_states=accept or preset.accept_states)
        return definition, preset.default_input
    except ParseError as e:
        print(f"Error parsing machine definition: {e}")
        sys.exit(1)
    except OSError as e:
        print(f"Error reading machine definition '{args.rules}': {e}")
        sys.exit(1)


def cmd_life(args):
    """Run Game of Life on a board file."""
    rule = _load_rule(args.rule)
    grid = _load_board(args.board)

    try:
        engine = LifeEngine.from_board(grid, rule=rule, bordered=not args.unbordered)
    except CompileError as e:
        print(f"Error compiling rule {rule.to_string()}: {e}")
        sys.exit(1)

    if args.inspect:
        write_inspection(engine.pattern, args.inspect, example=engine.buffer)

    render = RENDERERS.get(args.render)
    frames = []

    def on_generation(gen, buffer):
        board = engine.codec.decode(buffer)
        if args.gif:
            frames.append(board)
        if render:
            print_frame(render(board))
            print(f"Generation {gen}  Population {int(board.sum())}")
        if args.delay:
            time.sleep(args.delay)

    try:
        engine.run(args.generations, callback=on_generation)
    except KeyboardInterrupt:
        print()

    if args.gif and frames:
        save_animation(frames, args.gif, cell_size=args.cell_size)
        print(f"Saved animation to: {args.gif}")


def cmd_machine(args):
    """Run a Turing machine until its tape stops changing."""
    definition, default_input = _load_machine(args)
    content = args.input if args.input is not None else default_input
    if content is None:
        print("No input given: use --input with --rules")
        sys.exit(1)

    try:
        engine = MachineEngine.from_input(
            definition, content, tape_length=args.tape_length, strict=args.strict,
        )
    except (AlphabetError, CompileError) as e:
        print(f"Error preparing machine: {e}")
        sys.exit(1)

    if args.inspect:
        example = TapeCodec(definition, tape_length=args.tape_length).encode("TAPEINPUT")
        write_inspection(engine.pattern, args.inspect, example=example)

    initial = engine.buffer

    def on_generation(gen, buffer):
        if not args.quiet:
            print(buffer)
        if args.delay:
            time.sleep(args.delay)

    try:
        result = engine.run_until_fixpoint(max_steps=args.max_steps, callback=on_generation)
    except KeyboardInterrupt:
        print()
        return

    print()
    print(f"Input: {initial}")
    print(f"Output: {result.buffer}")
    print(f"Steps: {result.steps}")
    if not result.halted:
        print(f"Did not halt within {args.max_steps} steps (state {result.state})")
    elif result.accepted is None:
        print(f"Halted in {result.state} (no accept states declared, cannot tell halt from stuck)")
    elif result.accepted:
        print(f"Accepted in {result.state}")
    else:
        print(f"Stuck in {result.state} (not an accept state)")
        sys.exit(2)


def cmd_inspect(args):
    """Write the compiled clauses without running anything."""
    if args.target == "life":
        rule = _load_rule(args.rule)
        if args.board:
            grid = _load_board(args.board)
        else:
            grid = np.zeros((args.height, args.width), dtype=np.uint8)
        codec = BoardCodec.for_board(grid, bordered=not args.unbordered)
        try:
            pattern = build_life_pattern(codec.stride, rule)
        except CompileError as e:
            print(f"Error compiling rule {rule.to_string()}: {e}")
            sys.exit(1)
        example = codec.encode(grid)
    else:
        definition, _ = _load_machine(args)
        pattern = build_machine_pattern(definition)
        example = TapeCodec(definition, tape_length=args.tape_length).encode("TAPEINPUT")

    path = write_inspection(pattern, args.output, example=example, fmt=args.format)
    print(f"Wrote {len(pattern)} clauses to {path}")


def cmd_compare(args):
    """Check the regex engine against the reference implementation."""
    rule = _load_rule(args.rule)
    grid = _load_board(args.board)

    try:
        engine = LifeEngine.from_board(grid, rule=rule)
    except CompileError as e:
        print(f"Error compiling rule {rule.to_string()}: {e}")
        sys.exit(1)
    reference = ReferenceAutomaton(grid, rule=rule)

    for gen in range(1, args.generations + 1):
        engine.step()
        reference.step()
        if not np.array_equal(engine.board, reference.grid):
            diff = np.argwhere(engine.board != reference.grid)
            print(f"Mismatch at generation {gen}: {len(diff)} cells differ, first at (row, col) {tuple(diff[0])}")
            sys.exit(1)

    print(f"Regex engine matches the reference for {args.generations} generations")


def _add_machine_source(parser):
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--preset", choices=sorted(PRESETS), default="duplicate", help="Built-in machine")
    source.add_argument("--rules", type=str, default=None, help="File with one transition per line")
    parser.add_argument("--accept", action="append", default=[], help="Accept state (repeatable)")
    parser.add_argument("--tape-length", type=int, default=TAPE_LENGTH, help="Blank cells around the input")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Regex automata - Game of Life and Turing machines as a single regex substitution"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Life command
    life_parser = subparsers.add_parser("life", help="Run Game of Life on a board file")
    life_parser.add_argument("board", type=str, help="Text file of 0's and 1's")
    life_parser.add_argument("-r", "--rule", type=str, default="B3/S23", help="Rule in B/S notation")
    life_parser.add_argument("-g", "--generations", type=int, default=None, help="Stop after N generations")
    life_parser.add_argument("--render", choices=["block", "braille", "none"], default="block", help="Terminal renderer")
    life_parser.add_argument("--delay", type=float, default=0.0, help="Seconds between generations")
    life_parser.add_argument("--unbordered", action="store_true", help="Plain row concatenation, edges never update")
    life_parser.add_argument("--inspect", type=str, default=None, help=f"Write clauses to a file (e.g. {INSPECTION_FILENAME})")
    life_parser.add_argument("--gif", type=str, default=None, help="Save the run as an animated GIF")
    life_parser.add_argument("--cell-size", type=int, default=4, help="Cell size in pixels for --gif")
    life_parser.set_defaults(func=cmd_life)

    # Machine command
    machine_parser = subparsers.add_parser("machine", help="Run a Turing machine")
    _add_machine_source(machine_parser)
    machine_parser.add_argument("-i", "--input", type=str, default=None, help="Tape input")
    machine_parser.add_argument("--strict", action="store_true", help="Reject input symbols no rule mentions")
    machine_parser.add_argument("--max-steps", type=int, default=None, help="Give up after N steps")
    machine_parser.add_argument("--delay", type=float, default=0.0, help="Seconds between steps")
    machine_parser.add_argument("-q", "--quiet", action="store_true", help="Only print the final tape")
    machine_parser.add_argument("--inspect", type=str, default=None, help=f"Write clauses to a file (e.g. {INSPECTION_FILENAME})")
    machine_parser.set_defaults(func=cmd_machine)

    # Inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Write compiled clauses to a file")
    inspect_parser.add_argument("target", choices=["life", "machine"], help="Which regex to compile")
    inspect_parser.add_argument("-o", "--output", type=str, default=INSPECTION_FILENAME, help="Output file")
    inspect_parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format")
    inspect_parser.add_argument("-r", "--rule", type=str, default="B3/S23", help="Rule in B/S notation (life)")
    inspect_parser.add_argument("--board", type=str, default=None, help="Board file (life)")
    inspect_parser.add_argument("--width", type=int, default=10, help="Board width without --board (life)")
    inspect_parser.add_argument("--height", type=int, default=10, help="Board height without --board (life)")
    inspect_parser.add_argument("--unbordered", action="store_true", help="Plain row concatenation (life)")
    _add_machine_source(inspect_parser)
    inspect_parser.set_defaults(func=cmd_inspect)

    # Compare command
    compare_parser = subparsers.add_parser("compare", help="Check the regex engine against the reference")
    compare_parser.add_argument("board", type=str, help="Text file of 0's and 1's")
    compare_parser.add_argument("-r", "--rule", type=str, default="B3/S23", help="Rule in B/S notation")
    compare_parser.add_argument("-g", "--generations", type=int, default=20, help="Generations to compare")
    compare_parser.set_defaults(func=cmd_compare)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    args.func(args)


if __name__ == "__main__":
    main()
