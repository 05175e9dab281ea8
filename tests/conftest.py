import math
import random

import pytest


def normalized_log_frames(
    rng: random.Random, frame_count: int, symbol_count: int
) -> list[list[float]]:
    """Random log-probability frames over ``symbol_count`` symbols plus a blank."""
    frames: list[list[float]] = []
    for _ in range(frame_count):
        weights = [rng.random() + 1e-3 for _ in range(symbol_count + 1)]
        total = sum(weights)
        frames.append([math.log(weight / total) for weight in weights])
    return frames


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20161018)


@pytest.fixture
def make_frames():
    return normalized_log_frames


@pytest.fixture
def grad_frames() -> list[list[float]]:
    # Three symbols plus blank.
    return [
        [-1.58522, -1.38379, -0.92827, -1.90226],
        [-2.87357, -2.75353, -1.11873, -0.59220],
        [-1.23140, -1.08975, -1.89920, -1.50451],
        [-1.44935, -1.51638, -1.59394, -1.07105],
        [-2.15367, -1.80056, -2.75221, -0.42320],
    ]
