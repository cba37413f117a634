import argparse
import logging
import random
import sys

import coloredlogs

from mdp.Solver import METHODS, UPDATES, Solver
from mdp.StateSpace import StateSpace
from mdp.solve_lp import solve_mdp_lp
from nim.NimMDP import NimMDP
from nim.solve_nim import print_table, value_table_rows
from tictactoe.TicTacToeBoard import O, X, cell_name, winner
from tictactoe.TicTacToeMDP import OPPONENTS, TicTacToeMDP
from utils import dotdict

log = logging.getLogger(__name__)

args = dotdict({
    'discount': 1.0,
    'tolerance': 1e-9,
    'max_sweeps': 1000,
    'method': 'value_iteration',
    'update_rule': 'gauss_seidel',
    'opponent': 'minimax',
    'seed': 0,
    'log_level': 'INFO',
})

EXAMPLES = ('tictactoe', 'nim')


def build_model(example, opponent):
    if example == 'tictactoe':
        return TicTacToeMDP(opponent=opponent)
    if example == 'nim':
        return NimMDP()
    raise ValueError(f"unknown example {example!r}")


def self_play(model, policy, rng):
    """
    Play one tic-tac-toe game with X following ``policy``.

    O follows the policy too when the model carries its own O states
    (minimax opponent), otherwise it answers uniformly at random.
    Returns the list of (mark, cell) moves and the winner (X, O or None).
    """
    state = model.initial_state()
    moves = []
    while not model.is_terminal(state):
        board, to_move = state
        cell = policy.action_for(state)
        moves.append((to_move, cell))
        outcomes = model.transitions(state, cell)
        weights = [p for p, _s, _r in outcomes]
        _p, state, _r = rng.choices(outcomes, weights=weights)[0]
        # a folded opponent's reply shows up as a second new mark
        for c, mark in enumerate(state[0]):
            if c != cell and mark != board[c]:
                moves.append((mark, c))
    return moves, winner(state[0])


def run(example, config):
    model = build_model(example, config.opponent)
    space = StateSpace.from_model(model)
    solver = Solver(config.discount, config.tolerance, config.max_sweeps,
                    method=config.method, update=config.update_rule)
    result = solver.solve(space)
    log.info('%s: %d states, %d policy entries, %d sweeps, status %s',
             example, len(space), len(result.policy), result.sweeps, result.status.value)

    if config.verify_lp:
        lp_values = solve_mdp_lp(space, config.discount)
        worst = result.values.max_abs_diff(lp_values)
        log.info('LP cross-check: max |V_dp - V_lp| = %.3g', worst)

    if example == 'nim':
        print_table(value_table_rows(space, result))
    else:
        log.info('Value of the opening position: %+.3f', result.values[space.initial_state])
        moves, won_by = self_play(model, result.policy, random.Random(config.seed))
        for mark, cell in moves:
            log.info('%s plays %s', 'X' if mark == X else 'O', cell_name(cell))
        outcome = {X: 'X wins', O: 'O wins', None: 'draw'}[won_by]
        log.info('Game over: %s', outcome)
    return result


def main(argv=None):
    parser = argparse.ArgumentParser(description="Solve an example MDP by dynamic programming.")
    sub = parser.add_subparsers(dest='command', required=True)
    run_parser = sub.add_parser('run', help='Train a policy for an example and use it')
    run_parser.add_argument('--example', choices=EXAMPLES, default='tictactoe')
    run_parser.add_argument('--discount', type=float, default=args.discount)
    run_parser.add_argument('--tolerance', type=float, default=args.tolerance)
    run_parser.add_argument('--max-sweeps', dest='max_sweeps', type=int, default=args.max_sweeps)
    run_parser.add_argument('--method', choices=METHODS, default=args.method)
    run_parser.add_argument('--update-rule', dest='update_rule', choices=UPDATES, default=args.update_rule)
    run_parser.add_argument('--opponent', choices=OPPONENTS, default=args.opponent)
    run_parser.add_argument('--seed', type=int, default=args.seed)
    run_parser.add_argument('--verify-lp', dest='verify_lp', action='store_true',
                            help='Cross-check the values with the LP solver')
    run_parser.add_argument('--log-level', dest='log_level', default=args.log_level)
    parsed = parser.parse_args(argv)

    coloredlogs.install(level=parsed.log_level)

    config = dotdict(args)
    config.update(vars(parsed))

    log.info('Training %s policy...', parsed.example)
    result = run(parsed.example, config)
    if not result.converged:
        log.warning('Policy is best-effort only; consider a larger --max-sweeps or looser --tolerance')
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
