"""
Neural operator models.

- FourierTransform: truncated real FFT pair
- OperatorConv / SpectralConv: per-frequency channel mixing
- OperatorKernel / SpectralKernel: residual spectral blocks
- FourierNeuralOperator: lifting -> spectral kernels -> projection
- DeepONet: branch/trunk operator network
"""

from .transform import FourierTransform
from .spectral_layers import OperatorConv, SpectralConv, OperatorKernel, SpectralKernel
from .fno import FourierNeuralOperator
from .fno_config import FNOConfig
from .deeponet import MLP, DeepONet, DeepONetConfig
from .model_registry import ModelRegistry, build_model

__all__ = [
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
]
