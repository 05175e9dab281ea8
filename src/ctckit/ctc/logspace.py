"""Log-domain probability arithmetic.

Every value here is a natural-log probability, with ``-inf`` standing for
probability zero. The ``*_tangent`` variants carry a forward-mode tangent next
to each value so the same recursions can produce Hessian-vector products.
"""

from __future__ import annotations

import math

NEG_INF = float("-inf")


def log_add(a: float, b: float) -> float:
    """Return ``log(exp(a) + exp(b))`` without leaving log space."""
    if a == NEG_INF:
        return b
    if b == NEG_INF:
        return a
    normalizer = max(a, b)
    return normalizer + math.log(math.exp(a - normalizer) + math.exp(b - normalizer))


def log_add_grad(a: float, b: float, upstream: float) -> tuple[float, float]:
    """Partials of ``log_add(a, b)`` scaled by ``upstream``.

    Each operand receives its softmax share of the upstream gradient.
    """
    if a == NEG_INF and b == NEG_INF:
        return 0.0, 0.0
    denom = log_add(a, b)
    return upstream * math.exp(a - denom), upstream * math.exp(b - denom)


def log_add_tangent(a: float, a_t: float, b: float, b_t: float) -> tuple[float, float]:
    """``log_add`` together with its directional derivative."""
    if a == NEG_INF:
        return b, b_t
    if b == NEG_INF:
        return a, a_t
    normalizer = max(a, b)
    exp_a = math.exp(a - normalizer)
    exp_b = math.exp(b - normalizer)
    value = normalizer + math.log(exp_a + exp_b)
    return value, (exp_a * a_t + exp_b * b_t) / (exp_a + exp_b)


def log_add_grad_tangent(
    a: float,
    a_t: float,
    b: float,
    b_t: float,
    upstream: float,
    upstream_t: float,
) -> tuple[float, float, float, float]:
    """``log_add_grad`` together with the tangents of both partials.

    Returns ``(da, da_t, db, db_t)``.
    """
    if a == NEG_INF and b == NEG_INF:
        return 0.0, 0.0, 0.0, 0.0
    denom, denom_t = log_add_tangent(a, a_t, b, b_t)
    share_a = math.exp(a - denom)
    share_b = math.exp(b - denom)
    da = upstream * share_a
    db = upstream * share_b
    da_t = upstream_t * share_a + da * (a_t - denom_t)
    db_t = upstream_t * share_b + db * (b_t - denom_t)
    return da, da_t, db, db_t
