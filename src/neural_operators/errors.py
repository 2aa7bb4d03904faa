"""
Exception hierarchy for neural operator models.

Both concrete errors subclass ``ValueError`` so callers that already guard
model construction with ``except ValueError`` keep working.
"""


class NeuralOperatorError(Exception):
    """Base class for all neural operator errors."""


class ConfigurationError(NeuralOperatorError, ValueError):
    """Invalid model configuration (channel widths, modes, activations, ...)."""


class ShapeMismatchError(NeuralOperatorError, ValueError):
    """Tensor shapes observed at call time do not fit the model."""
