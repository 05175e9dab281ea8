"""CTC likelihood, gradients and decoding."""

from ctckit.ctc import forward, gradient, log_add, log_add_grad, log_likelihood
from ctckit.decode import best_path, prefix_search
from ctckit.errors import InvalidInputError

__version__ = "0.1.0"

__all__ = [
    "InvalidInputError",
    "__version__",
    "best_path",
    "forward",
    "gradient",
    "log_add",
    "log_add_grad",
    "log_likelihood",
    "prefix_search",
]
