"""
Fourier Neural Operator

Lifting -> stack of spectral kernels -> projection.

Reference: Li et al., "Fourier Neural Operator for Parametric Partial
Differential Equations"
"""

import logging
from typing import Any, Dict, Sequence

import torch
import torch.nn as nn

from neural_operators.errors import ConfigurationError, ShapeMismatchError
from neural_operators.models.base_classes import NeuralOperator
from neural_operators.models.spectral_layers import SpectralKernel
from neural_operators.utils.model_utils import ActivationSpec, get_activation, pointwise_layer

logger = logging.getLogger(__name__)


class FourierNeuralOperator(NeuralOperator):
    """
    Fourier neural operator for operator learning.

    A pointwise ``lifting`` layer raises the (d + 1)-channel input (field
    plus coordinates) to a wide channel dimension, ``mapping`` applies
    spectral kernels, and ``project`` narrows back to the output field
    through a hidden width with activation and a final linear map without.

    Args:
        activation: Activation for the spectral kernels and the projection
        chs: Channel widths ``(lift_in, lift_out, *mapping, pre_project,
            out)``; at least 5 entries
        modes: Retained Fourier modes per spatial axis, length ``d``
        permuted: If False, tensors are ``[B, C, n_1, ..., n_d]`` and the
            pointwise layers are 1x1 convolutions; if True, tensors are
            ``[B, n_1, ..., n_d, C]`` and the pointwise layers are Linear
        **kernel_kwargs: Forwarded to every SpectralKernel (e.g. spatial_path)

    Raises:
        ConfigurationError: If ``chs`` has fewer than 5 entries

    Example:
        >>> fno = FourierNeuralOperator(chs=(2, 64, 64, 128, 1), modes=(16,))
        >>> fno(torch.rand(5, 2, 1024)).shape
        torch.Size([5, 1, 1024])
    """

    def __init__(self, activation: ActivationSpec = "gelu",
                 chs: Sequence[int] = (2, 64, 64, 64, 64, 64, 128, 1),
                 modes: Sequence[int] = (16,), permuted: bool = False,
                 **kernel_kwargs):
        super().__init__()

        chs = tuple(int(c) for c in chs)
        modes = tuple(int(m) for m in modes)
        if len(chs) < 5:
            raise ConfigurationError(
                f"FourierNeuralOperator needs at least 5 channel widths "
                f"(lift in/out, mapping, projection hidden, output), got {len(chs)}: {chs}"
            )

        self.chs = chs
        self.modes = modes
        self.permuted = permuted
        ndim = len(modes)
        C = len(chs)

        self.lifting = pointwise_layer(chs[0], chs[1], ndim, permuted=permuted)

        self.mapping = nn.Sequential(*[
            SpectralKernel(chs[i], chs[i + 1], modes, activation=activation,
                           permuted=permuted, **kernel_kwargs)
            for i in range(1, C - 3)
        ])

        self.project = nn.Sequential(
            pointwise_layer(chs[C - 3], chs[C - 2], ndim, permuted=permuted),
            get_activation(activation),
            pointwise_layer(chs[C - 2], chs[C - 1], ndim, permuted=permuted),
        )

        logger.info(f"FourierNeuralOperator initialized with {self.get_parameter_count()} parameters "
                    f"(chs={chs}, modes={modes}, permuted={permuted})")

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Args:
            x: Input field [B, chs[0], n_1, ..., n_d] (or permuted equivalent)

        Returns:
            output: Output field [B, chs[-1], n_1, ..., n_d] (or permuted equivalent)
        """
        expected_dim = len(self.modes) + 2
        channel_axis = -1 if self.permuted else 1
        if x.dim() != expected_dim or x.shape[channel_axis] != self.chs[0]:
            raise ShapeMismatchError(
                f"Expected a {expected_dim}-dim input with {self.chs[0]} channels, "
                f"got shape {tuple(x.shape)}"
            )

        lifted = self.lifting(x)
        mapped = self.mapping(lifted)
        return self.project(mapped)

    def get_parameter_count(self) -> int:
        """Get total number of parameters."""
        return sum(p.numel() for p in self.parameters())

    def get_model_info(self) -> Dict[str, Any]:
        info = super().get_model_info()
        info.update({
            'channels': self.chs,
            'modes': self.modes,
            'permuted': self.permuted,
            'num_kernels': len(self.mapping),
        })
        return info
