"""Core pipeline."""

from ctckit.core.batch import Sample, cost_gradients, total_cost
from ctckit.core.pipeline import run_decoding, run_scoring

__all__ = ["Sample", "cost_gradients", "run_decoding", "run_scoring", "total_cost"]
