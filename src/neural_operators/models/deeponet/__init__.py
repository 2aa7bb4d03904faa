"""
DeepONet: Deep Operator Network

Reference: Lu et al., "Learning nonlinear operators via DeepONet based on the universal approximation theorem of operators"

Components:
- MLP: Width-tuple multi-layer perceptron for branch and trunk
- DeepONet: Branch-trunk operator network
- DeepONetConfig: Configuration for model instantiation
"""

from .mlp_networks import MLP
from .deeponet_base import DeepONet
from .deeponet_config import DeepONetConfig

__all__ = [
    'MLP',
    'DeepONet',
    'DeepONetConfig'
]
