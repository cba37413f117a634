import logging

import pulp

from mdp.StateSpace import StateSpace
from mdp.tables import ValueTable

log = logging.getLogger(__name__)


def solve_mdp_lp(model, discount, initial_state=None):
    """
    Optimal state values of ``model`` (an MDP or a StateSpace) by linear
    programming, as an independent check on the dynamic-programming solver.

    Models with minimising states are solved as a mixed-integer program that
    pins each state to exactly one action.

    With discount 1 the model must be acyclic unless it provides
    ``value_bounds()``; otherwise ValueError is raised.
    """
    space = model if isinstance(model, StateSpace) else StateSpace.from_model(model, initial_state)
    gamma = float(discount)

    # For maximizing return, V* is the minimal solution of the Bellman optimality
    # inequalities V(s) >= max_a E[r + gamma V(s')], so we minimize the objective.
    vmin, vmax = _value_bounds(model, space, gamma)
    n = len(space)
    has_min_states = any(space.actions_at(i) and not space.maximizes_at(i) for i in range(n))

    prob = pulp.LpProblem("mdp_lp", pulp.LpMaximize if has_min_states else pulp.LpMinimize)
    V = [pulp.LpVariable(f"V_{i}", lowBound=vmin, upBound=vmax) for i in range(n)]

    def rhs(outs):
        return pulp.lpSum([p * (r + gamma * V[j]) for p, j, r in outs])

    for i in range(n):
        actions = space.actions_at(i)
        if not actions:
            prob += V[i] == 0.0
            continue
        maximize = space.maximizes_at(i)
        for outs in space.outcomes_at(i):
            if has_min_states and not maximize:
                prob += V[i] <= rhs(outs)
            else:
                prob += V[i] >= rhs(outs)

        if has_min_states:
            M = vmax - vmin
            y = [pulp.LpVariable(f"y_{i}_{k}", lowBound=0, upBound=1, cat="Binary")
                 for k in range(len(actions))]
            prob += pulp.lpSum(y) == 1
            for k, outs in enumerate(space.outcomes_at(i)):
                if maximize:
                    prob += V[i] <= rhs(outs) + M * (1 - y[k])
                else:
                    prob += V[i] >= rhs(outs) - M * (1 - y[k])

    if has_min_states:
        prob += pulp.lpSum([V[i] for i in range(n) if space.maximizes_at(i)])
    else:
        # Standard MDP LP: minimize the upper envelope of Bellman optimality.
        prob += pulp.lpSum(V)

    log.info('Solving LP with %d value variables (mixed-integer: %s)', n, has_min_states)
    status = prob.solve(pulp.PULP_CBC_CMD(msg=False))
    if status != pulp.LpStatusOptimal:
        raise RuntimeError(f"LP solver did not find an optimal solution ({pulp.LpStatus[status]})")

    values = ValueTable(space)
    for i in range(n):
        values.array[i] = float(pulp.value(V[i]))
    return values.freeze()


def _value_bounds(model, space, gamma):
    bounds = model.value_bounds() if hasattr(model, 'value_bounds') else None
    if bounds is not None:
        return float(bounds[0]), float(bounds[1])
    if gamma >= 1.0 and not space.is_acyclic():
        raise ValueError("undiscounted LP needs an acyclic model or model.value_bounds(); "
                         "cyclic returns are not bounded by the state count")

    r_max = 0.0
    for i in space.non_terminal():
        for outs in space.outcomes_at(i):
            for _p, _j, r in outs:
                r_max = max(r_max, abs(r))
    # undiscounted returns are bounded by the longest simple path
    horizon = 1.0 / (1.0 - gamma) if gamma < 1.0 else float(len(space))
    bound = r_max * horizon + 1.0
    return -bound, bound
