import pytest

from ctckit.core import Sample, cost_gradients, total_cost
from ctckit.ctc import gradient, log_likelihood


def _samples(rng, make_frames) -> list[Sample]:
    samples: list[Sample] = []
    for frame_count in (3, 7, 5, 2, 6):
        frames = make_frames(rng, frame_count, 3)
        label = [rng.randrange(3) for _ in range(min(2, frame_count - 1))]
        samples.append(Sample(frames=frames, label=label))
    return samples


def test_total_cost_is_negated_log_likelihood_sum(rng, make_frames) -> None:
    samples = _samples(rng, make_frames)
    expected = -sum(log_likelihood(sample.frames, sample.label) for sample in samples)

    assert total_cost(samples, max_workers=2, max_batch=2) == pytest.approx(expected)
    assert total_cost(samples, max_workers=1, max_batch=16) == pytest.approx(expected)


def test_total_cost_of_no_samples() -> None:
    assert total_cost([]) == 0.0


def test_total_cost_rejects_bad_settings(rng, make_frames) -> None:
    samples = _samples(rng, make_frames)

    with pytest.raises(ValueError):
        total_cost(samples, max_batch=0)
    with pytest.raises(ValueError):
        total_cost(samples, max_workers=0)


def test_cost_gradients_keep_input_order(rng, make_frames) -> None:
    samples = _samples(rng, make_frames)
    results = cost_gradients(samples, max_workers=3)

    assert len(results) == len(samples)
    for sample, result in zip(samples, results, strict=True):
        expected = gradient(sample.frames, sample.label).values
        assert len(result.values) == len(sample.frames)
        for row, expected_row in zip(result.values, expected, strict=True):
            assert row == pytest.approx([-value for value in expected_row])
        assert result.tangents is None


def test_cost_gradients_with_tangents(rng, make_frames) -> None:
    samples = _samples(rng, make_frames)
    tangents = [[[0.0] * 4 for _ in sample.frames] for sample in samples]
    results = cost_gradients(samples, tangents=tangents)

    for result in results:
        assert result.tangents is not None
        assert len(result.tangents) == len(result.values)


def test_cost_gradients_tangent_count_mismatch(rng, make_frames) -> None:
    samples = _samples(rng, make_frames)

    with pytest.raises(ValueError):
        cost_gradients(samples, tangents=[])
