"""Evaluation utilities."""

from ctckit.eval.metrics import edit_distance, label_error_rate, summarize_decoding

__all__ = ["edit_distance", "label_error_rate", "summarize_decoding"]
