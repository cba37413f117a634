import logging
from collections import namedtuple
from collections.abc import Mapping
from enum import Enum

from mdp.StateSpace import StateSpace
from mdp.tables import PolicyTable, ValueTable

log = logging.getLogger(__name__)

TIE_TOLERANCE = 1e-9

METHODS = ('value_iteration', 'policy_iteration')
UPDATES = ('gauss_seidel', 'jacobi')


class SolveStatus(Enum):
    CONVERGED = 'converged'
    MAX_ITERATIONS_EXCEEDED = 'max_iterations_exceeded'


SolveResult = namedtuple('SolveResult', ['policy', 'values', 'converged', 'sweeps', 'status', 'deltas'])
EvaluationResult = namedtuple('EvaluationResult', ['values', 'converged', 'sweeps', 'status', 'deltas'])


class Solver():
    """
    Dynamic-programming solver for a finite MDP.

    Value iteration sweeps the Bellman optimality backup over every
    non-terminal state; policy iteration alternates iterative policy
    evaluation with greedy improvement. States whose model reports
    ``is_max_state() == False`` take the minimum instead of the maximum, which
    turns both methods into minimax search for two-player zero-sum games.

    ``update='gauss_seidel'`` (the default) overwrites values in place during a
    sweep, visiting states in reverse discovery order so that states far from
    the start are refreshed first. ``update='jacobi'`` reads every backup from
    the previous sweep's values.

    A solver owns its value table for the duration of a ``solve()`` call and
    keeps no state between calls.
    """

    def __init__(self, discount, tolerance, max_sweeps, method='value_iteration', update='gauss_seidel'):
        discount = float(discount)
        tolerance = float(tolerance)
        if not 0.0 < discount <= 1.0:
            raise ValueError(f"discount must be in (0, 1], got {discount}")
        if not tolerance > 0.0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        if int(max_sweeps) != max_sweeps or max_sweeps < 0:
            raise ValueError(f"max_sweeps must be a non-negative integer, got {max_sweeps}")
        if method not in METHODS:
            raise ValueError(f"unknown method {method!r}, expected one of {METHODS}")
        if update not in UPDATES:
            raise ValueError(f"unknown update {update!r}, expected one of {UPDATES}")

        self.discount = discount
        self.tolerance = tolerance
        self.max_sweeps = int(max_sweeps)
        self.method = method
        self.update = update
        self.tie_window = tie_window(discount, tolerance)

    def solve(self, model, initial_state=None, prior=None):
        """
        Compute an optimal policy for ``model`` (an MDP or a prebuilt
        StateSpace).

        ``prior`` optionally maps states to initial value estimates.
        Returns a SolveResult; running out of sweeps is reported through
        ``status`` and a warning, and the best policy found so far is still
        returned.
        """
        space = _space_of(model, initial_state)
        values = ValueTable(space, prior)
        order = _sweep_order(space)

        log.info('Solving %d states (%d non-terminal) by %s, %s updates, discount=%g, tolerance=%g',
                 len(space), len(order), self.method, self.update, self.discount, self.tolerance)

        if self.method == 'value_iteration':
            converged, deltas = self._iterate(order, values.array, self._optimal_backup(space))
            policy = {space.states[i]: self.greedy_action(space, i, values.array) for i in order}
        else:
            policy, converged, deltas = self._policy_iteration(space, order, values.array)

        status = self._report(converged, deltas)
        return SolveResult(policy=PolicyTable(policy), values=values.freeze(), converged=converged,
                           sweeps=len(deltas), status=status, deltas=tuple(deltas))

    def evaluate_policy(self, model, policy, initial_state=None, prior=None):
        """
        Iterative evaluation of a fixed policy.

        ``policy`` maps each non-terminal state either to an action or to an
        ``{action: probability}`` mapping (a stochastic policy, see
        ``uniform_policy``).
        """
        space = _space_of(model, initial_state)
        values = ValueTable(space, prior)
        order = _sweep_order(space)

        weights = {}
        for i in order:
            weights[i] = _action_weights(space, i, policy[space.states[i]])

        def backup(i, v):
            outs = space.outcomes_at(i)
            return sum(w * self._q(outs[k], v) for k, w in weights[i])

        converged, deltas = self._iterate(order, values.array, backup)
        status = self._report(converged, deltas)
        return EvaluationResult(values=values.freeze(), converged=converged, sweeps=len(deltas),
                                status=status, deltas=tuple(deltas))

    def greedy_action(self, space, i, v):
        """Best action at state index i under values v; ties go to the earliest action."""
        return space.actions_at(i)[self._greedy_index(space, i, v)]

    def _policy_iteration(self, space, order, v):
        choice = {i: 0 for i in order}

        def backup(i, src):
            return self._q(space.outcomes_at(i)[choice[i]], src)

        deltas = []
        rounds = 0
        while True:
            evaluated, round_deltas = self._iterate(order, v, backup, budget=self.max_sweeps - len(deltas))
            deltas.extend(round_deltas)
            if not evaluated:
                converged = False
                break

            rounds += 1
            changed = 0
            for i in order:
                k = self._greedy_index(space, i, v)
                if k != choice[i]:
                    choice[i] = k
                    changed += 1
            log.debug('Improvement round %d changed %d actions', rounds, changed)
            if not changed:
                converged = True
                break

        policy = {space.states[i]: space.actions_at(i)[choice[i]] for i in order}
        return policy, converged, deltas

    def _iterate(self, order, v, backup, budget=None):
        """Sweep until max |dV| < tolerance or the sweep budget runs out."""
        if budget is None:
            budget = self.max_sweeps
        deltas = []
        if not order:
            return True, deltas

        while len(deltas) < budget:
            src = v.copy() if self.update == 'jacobi' else v
            delta = 0.0
            for i in order:
                new = backup(i, src)
                diff = abs(new - v[i])
                if diff > delta:
                    delta = diff
                v[i] = new
            deltas.append(delta)
            log.debug('Sweep %d: max |dV| = %.6g', len(deltas), delta)
            if delta < self.tolerance:
                return True, deltas
        return False, deltas

    def _optimal_backup(self, space):
        def backup(i, v):
            qs = [self._q(outs, v) for outs in space.outcomes_at(i)]
            return max(qs) if space.maximizes_at(i) else min(qs)
        return backup

    def _greedy_index(self, space, i, v):
        qs = [self._q(outs, v) for outs in space.outcomes_at(i)]
        best = max(qs) if space.maximizes_at(i) else min(qs)
        for k, q in enumerate(qs):
            if abs(q - best) <= self.tie_window:
                return k

    def _q(self, outs, v):
        gamma = self.discount
        return sum(p * (r + gamma * v[j]) for p, j, r in outs)

    def _report(self, converged, deltas):
        if converged:
            log.info('Converged after %d sweeps', len(deltas))
            return SolveStatus.CONVERGED
        last = deltas[-1] if deltas else float('nan')
        log.warning('Did not converge within %d sweeps (last max |dV| = %.6g); returning best-effort result',
                    self.max_sweeps, last)
        return SolveStatus.MAX_ITERATIONS_EXCEEDED


def tie_window(discount, tolerance):
    """
    How close two Q values must be to count as a tie.

    Once max |dV| < tolerance, values are within tolerance * discount / (1 - discount)
    of their fixed point, so Q values of equally good actions can differ by up
    to twice that.
    """
    if discount < 1.0:
        return max(TIE_TOLERANCE, 2.0 * tolerance * discount / (1.0 - discount))
    return max(TIE_TOLERANCE, tolerance)


def solve(model, discount, tolerance, max_sweeps, **kwargs):
    """
    Solve ``model`` and return ``(policy, converged, sweeps_used)``.

    Extra keyword arguments (``method``, ``update``, ``initial_state``,
    ``prior``) are forwarded to Solver.
    """
    initial_state = kwargs.pop('initial_state', None)
    prior = kwargs.pop('prior', None)
    result = Solver(discount, tolerance, max_sweeps, **kwargs).solve(model, initial_state, prior)
    return result.policy, result.converged, result.sweeps


def uniform_policy(model, initial_state=None):
    """Stochastic policy picking every legal action with equal probability."""
    space = _space_of(model, initial_state)
    policy = {}
    for i in space.non_terminal():
        actions = space.actions_at(i)
        policy[space.states[i]] = {a: 1.0 / len(actions) for a in actions}
    return policy


def _space_of(model, initial_state):
    if isinstance(model, StateSpace):
        return model
    return StateSpace.from_model(model, initial_state)


def _sweep_order(space):
    return space.non_terminal()[::-1]


def _action_weights(space, i, choice):
    actions = space.actions_at(i)
    if isinstance(choice, Mapping):
        pairs = choice.items()
    else:
        pairs = [(choice, 1.0)]

    weights = []
    for a, w in pairs:
        if a not in actions:
            raise ValueError(f"action {a!r} is not legal at state {space.states[i]!r}")
        if w:
            weights.append((actions.index(a), float(w)))
    total = sum(w for _k, w in weights)
    if abs(total - 1.0) > TIE_TOLERANCE:
        raise ValueError(f"action probabilities at state {space.states[i]!r} sum to {total}, not 1")
    return weights
