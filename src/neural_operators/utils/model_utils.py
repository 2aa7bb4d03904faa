"""
Model utility functions shared across neural operator implementations.

This module provides common layer helpers used by both the Fourier neural
operator and DeepONet to avoid code duplication.
"""

from typing import Callable, Union

import torch
import torch.nn as nn

from neural_operators.errors import ConfigurationError


ActivationSpec = Union[str, nn.Module, Callable[[torch.Tensor], torch.Tensor], None]


class LambdaActivation(nn.Module):
    """Wrap a plain callable (e.g. ``torch.tanh``) as a parameter-free module."""

    def __init__(self, fn: Callable[[torch.Tensor], torch.Tensor]):
        super().__init__()
        self.fn = fn

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.fn(x)

    def extra_repr(self) -> str:
        return getattr(self.fn, '__name__', repr(self.fn))


def get_activation(activation: ActivationSpec) -> nn.Module:
    """
    Resolve an activation specification to an ``nn.Module``.

    Args:
        activation: Activation name ("gelu", "relu", "tanh", "silu",
            "sigmoid", "identity"), an ``nn.Module``, a callable, or None
            (identity).

    Returns:
        Activation module

    Raises:
        ConfigurationError: If the activation name is unknown

    Examples:
        >>> get_activation("gelu")
        GELU(approximate='none')
        >>> get_activation(None)
        Identity()
    """
    if activation is None:
        return nn.Identity()
    if isinstance(activation, nn.Module):
        return activation
    if callable(activation):
        return LambdaActivation(activation)

    name = str(activation).lower()
    if name == "gelu":
        return nn.GELU()
    elif name == "relu":
        return nn.ReLU()
    elif name == "tanh":
        return nn.Tanh()
    elif name == "silu":
        return nn.SiLU()
    elif name == "sigmoid":
        return nn.Sigmoid()
    elif name in ("identity", "linear", "none"):
        return nn.Identity()
    else:
        raise ConfigurationError(f"Unknown activation: {activation}")


def pointwise_layer(in_channels: int, out_channels: int, ndim: int,
                    permuted: bool = False, bias: bool = True) -> nn.Module:
    """
    Create a per-position channel-mixing layer.

    Channel-first tensors ``[B, C, *spatial]`` use a convolution with kernel
    size 1, channel-last tensors ``[B, *spatial, C]`` use ``nn.Linear``. Both
    compute the same map; the choice only avoids a transpose.

    Args:
        in_channels: Input channel count
        out_channels: Output channel count
        ndim: Number of spatial dimensions
        permuted: True for channel-last layout

    Returns:
        Pointwise layer

    Raises:
        ConfigurationError: If a convolution is needed for ``ndim`` outside 1..3
    """
    if permuted:
        return nn.Linear(in_channels, out_channels, bias=bias)

    conv_cls = {1: nn.Conv1d, 2: nn.Conv2d, 3: nn.Conv3d}.get(ndim)
    if conv_cls is None:
        raise ConfigurationError(
            f"Channel-first pointwise layers support 1 to 3 spatial dimensions, got {ndim}. "
            f"Use permuted=True for higher dimensional data."
        )
    return conv_cls(in_channels, out_channels, kernel_size=1, bias=bias)


def count_parameters(model: nn.Module, trainable_only: bool = False) -> int:
    """
    Count model parameters.

    Complex parameters count once per complex entry.
    """
    return sum(p.numel() for p in model.parameters() if p.requires_grad or not trainable_only)
