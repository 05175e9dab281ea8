import math

import pytest

from ctckit.ctc.gradient import gradient
from ctckit.ctc.logspace import NEG_INF
from ctckit.ctc.trellis import forward, log_likelihood
from ctckit.errors import InvalidInputError


def _perturbed(frames: list[list[float]], t: int, k: int, delta: float) -> list[list[float]]:
    copy = [list(frame) for frame in frames]
    copy[t][k] += delta
    return copy


@pytest.mark.parametrize("label", [[2, 0, 1], [1, 1], [0, 0, 2], [2], []])
def test_gradient_matches_finite_differences(grad_frames, label) -> None:
    eps = 1e-6
    result = gradient(grad_frames, label)

    assert result.log_prob == log_likelihood(grad_frames, label)
    for t, frame in enumerate(grad_frames):
        for k in range(len(frame)):
            numeric = (
                log_likelihood(_perturbed(grad_frames, t, k, eps), label)
                - log_likelihood(_perturbed(grad_frames, t, k, -eps), label)
            ) / (2 * eps)
            assert result.values[t][k] == pytest.approx(numeric, abs=1e-5)


def test_gradient_matches_finite_differences_random(rng, make_frames) -> None:
    eps = 1e-6
    for _ in range(10):
        symbol_count = rng.randint(1, 4)
        frames = make_frames(rng, rng.randint(3, 7), symbol_count)
        label = [rng.randrange(symbol_count) for _ in range(rng.randint(0, 3))]
        table = forward(frames, label)
        if table.log_prob == NEG_INF:
            continue
        result = gradient(frames, label, table)
        t = rng.randrange(len(frames))
        k = rng.randrange(symbol_count + 1)
        numeric = (
            log_likelihood(_perturbed(frames, t, k, eps), label)
            - log_likelihood(_perturbed(frames, t, k, -eps), label)
        ) / (2 * eps)
        assert result.values[t][k] == pytest.approx(numeric, abs=1e-5)


def test_each_frame_gradient_sums_to_upstream(grad_frames) -> None:
    # Every alignment reads exactly one entry per frame.
    result = gradient(grad_frames, [2, 0, 1], upstream=1.0)

    for frame_grad in result.values:
        assert sum(frame_grad) == pytest.approx(1.0)


def test_gradient_reuses_table_for_any_upstream(grad_frames) -> None:
    label = [2, 0, 1]
    table = forward(grad_frames, label)
    unit = gradient(grad_frames, label, table)
    scaled = gradient(grad_frames, label, table, upstream=-2.5)

    for unit_row, scaled_row in zip(unit.values, scaled.values, strict=True):
        assert scaled_row == pytest.approx([-2.5 * value for value in unit_row])
    assert unit.tangents is None


def test_infeasible_label_has_zero_gradient() -> None:
    frames = [[math.log(0.9), math.log(0.1)]] * 2
    result = gradient(frames, [0, 0])

    assert result.log_prob == NEG_INF
    assert result.values == [[0.0, 0.0], [0.0, 0.0]]


def test_infeasible_empty_label_has_zero_gradient() -> None:
    frames = [[0.0, NEG_INF], [NEG_INF, 0.0]]
    tangents = [[1.0, 0.5], [-0.5, 2.0]]
    table = forward(frames, [], tangents=tangents)
    result = gradient(frames, [], table, upstream=3.0, upstream_tangent=1.0)

    assert result.log_prob == NEG_INF
    assert result.values == [[0.0, 0.0], [0.0, 0.0]]
    assert result.tangents == [[0.0, 0.0], [0.0, 0.0]]


def test_empty_sequence_gradient() -> None:
    result = gradient([], [])

    assert result.log_prob == 0.0
    assert result.values == []


def test_gradient_rejects_foreign_table(grad_frames) -> None:
    table = forward(grad_frames, [2, 0, 1])

    with pytest.raises(InvalidInputError):
        gradient(grad_frames, [2, 0], table)
    with pytest.raises(InvalidInputError):
        gradient(grad_frames[:-1], [2, 0, 1], table)


def test_zero_tangents_leave_gradient_identical(grad_frames) -> None:
    label = [2, 0, 0, 1]
    plain = gradient(grad_frames, label, forward(grad_frames, label))
    traced = gradient(
        grad_frames,
        label,
        forward(grad_frames, label, tangents=[[0.0] * 4 for _ in grad_frames]),
    )

    assert traced.values == plain.values
    assert traced.tangents is not None
    assert all(value == 0.0 for row in traced.tangents for value in row)


def test_gradient_tangent_is_hessian_vector_product(grad_frames) -> None:
    label = [2, 0, 1]
    direction = [
        [0.5, -0.2, 0.1, 0.3],
        [-0.7, 0.4, 0.0, 0.2],
        [0.1, 0.1, -0.6, 0.9],
        [0.0, -0.3, 0.8, -0.1],
        [0.6, 0.2, -0.2, -0.5],
    ]
    eps = 1e-5
    table = forward(grad_frames, label, tangents=direction)
    result = gradient(grad_frames, label, table)

    directional = sum(
        g * v
        for g_row, v_row in zip(result.values, direction, strict=True)
        for g, v in zip(g_row, v_row, strict=True)
    )
    assert table.log_prob_tangent == pytest.approx(directional, abs=1e-8)

    plus = [[x + eps * v for x, v in zip(f, d)] for f, d in zip(grad_frames, direction)]
    minus = [[x - eps * v for x, v in zip(f, d)] for f, d in zip(grad_frames, direction)]
    grad_plus = gradient(plus, label).values
    grad_minus = gradient(minus, label).values
    assert result.tangents is not None
    for t, tangent_row in enumerate(result.tangents):
        for k, tangent in enumerate(tangent_row):
            numeric = (grad_plus[t][k] - grad_minus[t][k]) / (2 * eps)
            assert tangent == pytest.approx(numeric, abs=1e-5)


def test_upstream_tangent_scales_gradient(grad_frames) -> None:
    label = [1, 2]
    table = forward(grad_frames, label, tangents=[[0.0] * 4 for _ in grad_frames])
    result = gradient(grad_frames, label, table, upstream=1.0, upstream_tangent=2.0)

    assert result.tangents is not None
    for value_row, tangent_row in zip(result.values, result.tangents, strict=True):
        assert tangent_row == pytest.approx([2.0 * value for value in value_row])
