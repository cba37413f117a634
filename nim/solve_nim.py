import argparse
import logging
import os
import sys
import time

import coloredlogs

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from mdp.Solver import Solver
from mdp.StateSpace import StateSpace
from mdp.solve_lp import solve_mdp_lp
from nim.NimMDP import NimMDP

log = logging.getLogger(__name__)


def value_table_rows(space, result, lp_values=None):
    """(stones, value, optimal_take[, lp_value]) for every agent-to-move state."""
    rows = []
    for state in sorted(s for s in space if s[1] == 1 and s[0] > 0):
        row = (state[0], result.values[state], result.policy.action_for(state))
        if lp_values is not None:
            row += (lp_values[state],)
        rows.append(row)
    return rows


def print_table(rows, file=None):
    file = file or sys.stdout
    with_lp = bool(rows) and len(rows[0]) == 4
    header = "stones | value | optimal_take" + (" | lp_value" if with_lp else "")
    print(header, file=file)
    print("-------+-------+-------------" + ("+---------" if with_lp else ""), file=file)
    for row in rows:
        line = f"{row[0]:>6} | {row[1]:+.3f} | {row[2]!s:>12}"
        if with_lp:
            line += f" | {row[3]:+.3f}"
        print(line, file=file)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Solve misere Nim with the generic MDP solver.")
    parser.add_argument('--max_stones', type=int, default=21, help='Number of stones')
    parser.add_argument('--max_take', type=int, default=3, help='Max stones to take')
    parser.add_argument('--tolerance', type=float, default=1e-9, help='Convergence tolerance')
    parser.add_argument('--max_sweeps', type=int, default=100, help='Sweep budget')
    parser.add_argument('--lp', action='store_true', help='Cross-check values with the LP solver')
    args = parser.parse_args(argv)

    coloredlogs.install(level='INFO')

    mdp = NimMDP(max_stones=args.max_stones, max_take=args.max_take)
    space = StateSpace.from_model(mdp)

    start = time.perf_counter()
    result = Solver(1.0, args.tolerance, args.max_sweeps).solve(space)
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    lp_values = solve_mdp_lp(space, 1.0) if args.lp else None
    print_table(value_table_rows(space, result, lp_values))
    print(f"solve_ms: {elapsed_ms:.3f}")
    return 0 if result.converged else 1


if __name__ == '__main__':
    sys.exit(main())
