"""
CLI entry point. Run as: python -m stepproof --calculus <name> ...

The proof state lives in a sealed blob file between invocations, exactly as it
would live in the client between requests.
"""

import argparse
import sys

from .calculi import CALCULI
from .core.proof import check_closed
from .core.state import CONNECTEDNESS, CNF_STRATEGIES
from .errors import ProofError
from .visualization import print_state, print_history, print_close_message


def build_params(args):
    if args.calculus == "prop-tableaux":
        return {
            "connectedness": args.connectedness,
            "regular": args.regular,
            "backtracking": args.backtracking,
            "cnf_strategy": args.cnf_strategy,
        }
    return {"cnf_strategy": args.cnf_strategy,
            "highlight_selectable": args.highlight_selectable}


def build_move(args):
    """Turn --move / --resolve arguments into a move dict, or None."""
    if args.resolve:
        if len(args.resolve) not in (2, 3):
            raise ProofError("--resolve takes C1 C2 [SPELLING]")
        c1, c2 = int(args.resolve[0]), int(args.resolve[1])
        spelling = args.resolve[2] if len(args.resolve) == 3 else None
        return {"c1": c1, "c2": c2, "spelling": spelling}
    if args.move:
        kind = args.move[0].upper()
        if kind == "UNDO":
            return {"type": "UNDO", "id1": -1, "id2": -1}
        if len(args.move) != 3:
            raise ProofError(f"--move {kind} takes two ids")
        return {"type": kind, "id1": int(args.move[1]), "id2": int(args.move[2])}
    return None


def main(argv=None):
    parser = argparse.ArgumentParser(description="Stateless step-by-step proof checker")
    parser.add_argument("--calculus", choices=list(CALCULI.keys()),
                        default="prop-tableaux", help="Which calculus to use")
    parser.add_argument("--formula", type=str, default=None,
                        help="Clause set to start from, e.g. 'a,b;!a;!b'")
    parser.add_argument("--load",   type=str, default=None, help="Load state blob from file")
    parser.add_argument("--save",   type=str, default=None, help="Save state blob to file")
    parser.add_argument("--connectedness", choices=CONNECTEDNESS, default="NONE")
    parser.add_argument("--regular", action="store_true", help="Enforce regularity")
    parser.add_argument("--backtracking", action="store_true", help="Allow UNDO moves")
    parser.add_argument("--cnf-strategy", choices=CNF_STRATEGIES, default="optimal")
    parser.add_argument("--highlight-selectable", action="store_true")
    parser.add_argument("--move", nargs="+", metavar="ARG",
                        help="Tableaux move: EXPAND|CLOSE|LEMMA ID1 ID2, or UNDO")
    parser.add_argument("--resolve", nargs="+", metavar="ARG",
                        help="Resolution move: C1 C2 [SPELLING]")
    parser.add_argument("--check", action="store_true", help="Report whether the proof is closed")
    parser.add_argument("--quiet", action="store_true", help="Less output")
    args = parser.parse_args(argv)

    calc = CALCULI[args.calculus]

    try:
        # --- Load or build initial state ---
        if args.load:
            state = calc["state_cls"].load(args.load)
            print(f"Loaded state from {args.load}")
        elif args.formula is not None:
            params = calc["params_cls"].from_dict(build_params(args))
            state = calc["make_state"](args.formula, params)
        else:
            parser.error("one of --formula or --load is required")

        # --- Apply move ---
        move = build_move(args)
        if move is not None:
            state = calc["apply_move"](state, calc["move_from_dict"](move),
                                       verbose=not args.quiet)

        if not args.quiet:
            print_state(state)
            print_history(state)

        if args.check:
            print_close_message(*check_closed(state))
    except (ProofError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.save:
        state.save(args.save)
        print(f"State saved to {args.save}")


if __name__ == "__main__":
    main()
