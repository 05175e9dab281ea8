"""I/O utilities."""

from ctckit.io.emissions import EmissionFile, load_emissions, to_log_probs
from ctckit.io.export import to_json, write_json

__all__ = [
    "EmissionFile",
    "load_emissions",
    "to_json",
    "to_log_probs",
    "write_json",
]
