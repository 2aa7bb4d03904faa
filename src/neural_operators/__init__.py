"""
neural_operators: Fourier neural operators and DeepONets in PyTorch.

Models are ordinary ``nn.Module``s; ``setup``/``apply`` expose them as pure
functions of (input, parameters, state).

    from neural_operators import FourierNeuralOperator, setup, apply

    fno = FourierNeuralOperator(chs=(2, 64, 64, 128, 1), modes=(16,))
    params, state = setup(fno, seed=0)
    out, state = apply(fno, x, params, state)
"""

import logging

from .errors import NeuralOperatorError, ConfigurationError, ShapeMismatchError
from .models import (
    FourierTransform,
    OperatorConv,
    SpectralConv,
    OperatorKernel,
    SpectralKernel,
    FourierNeuralOperator,
    FNOConfig,
    MLP,
    DeepONet,
    DeepONetConfig,
    ModelRegistry,
    build_model,
)
from .utils.functional import setup, apply, parameter_count

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    'NeuralOperatorError',
    'ConfigurationError',
    'ShapeMismatchError',
    'FourierTransform',
    'OperatorConv',
    'SpectralConv',
    'OperatorKernel',
    'SpectralKernel',
    'FourierNeuralOperator',
    'FNOConfig',
    'MLP',
    'DeepONet',
    'DeepONetConfig',
    'ModelRegistry',
    'build_model',
    'setup',
    'apply',
    'parameter_count',
]
