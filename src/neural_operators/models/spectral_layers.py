"""
Spectral Convolution Layers

Building blocks of the Fourier neural operator:

- OperatorConv: learned linear map applied per retained frequency bin
  (dense in channels, block-diagonal in frequency)
- SpectralConv: OperatorConv using the real Fourier transform
- OperatorKernel: activation(spatial(x) + operator(x)) residual block
- SpectralKernel: OperatorKernel with a pointwise spatial path and a
  SpectralConv operator path
"""

import math
from typing import Sequence, Type

import torch
import torch.nn as nn

from neural_operators.errors import ConfigurationError, ShapeMismatchError
from neural_operators.models.transform import FourierTransform
from neural_operators.utils.model_utils import ActivationSpec, get_activation, pointwise_layer


class OperatorConv(nn.Module):
    """
    Integral-kernel convolution in a truncated transform space.

    Applies ``transform`` over the spatial axes, keeps the lowest ``modes``
    bins, multiplies every bin by its own ``out_channels x in_channels``
    complex matrix and transforms back to a real field of the input's
    spatial size.

    Args:
        in_channels: Input channel count
        out_channels: Output channel count
        modes: Retained bins per spatial axis, length ``d``
        transform: Transform class constructed as ``transform(modes)``
        permuted: If False, tensors are ``[B, C, *spatial]``; if True,
            ``[B, *spatial, C]``

    Input shape:
        [B, in_channels, n_1, ..., n_d] (or permuted equivalent)

    Output shape:
        [B, out_channels, n_1, ..., n_d] (or permuted equivalent)
    """

    def __init__(self, in_channels: int, out_channels: int, modes: Sequence[int],
                 transform: Type[FourierTransform] = FourierTransform,
                 permuted: bool = False):
        super().__init__()

        if in_channels < 1 or out_channels < 1:
            raise ConfigurationError(
                f"Channel counts must be positive, got {in_channels} -> {out_channels}"
            )

        self.in_channels = in_channels
        self.out_channels = out_channels
        self.transform = transform(modes)
        self.modes = self.transform.modes
        self.permuted = permuted

        self.weight = nn.Parameter(
            torch.empty(out_channels, in_channels, *self.modes, dtype=torch.cfloat)
        )
        self.reset_parameters()

    def reset_parameters(self) -> None:
        scale = 1.0 / (self.in_channels * self.out_channels)
        with torch.no_grad():
            self.weight.copy_(scale * torch.randn(self.weight.shape, dtype=torch.cfloat))

    @property
    def ndim(self) -> int:
        return len(self.modes)

    def _mix_channels(self, x_ft: torch.Tensor) -> torch.Tensor:
        """
        Per-bin channel mix as one batched matmul.

        The bin axis is treated as the batch axis of ``torch.bmm`` and the
        true batch axis as the row axis, so all (batch x bin) matrix-vector
        products run in a single call.
        """
        batch = x_ft.shape[0]
        n_bins = math.prod(self.modes)

        x_flat = x_ft.reshape(batch, self.in_channels, n_bins).permute(2, 0, 1)         # [M, B, Cin]
        w_flat = self.weight.reshape(self.out_channels, self.in_channels, n_bins)
        w_flat = w_flat.permute(2, 1, 0).to(x_ft.dtype)                                  # [M, Cin, Cout]

        out = torch.bmm(x_flat, w_flat)                                                  # [M, B, Cout]
        return out.permute(1, 2, 0).reshape(batch, self.out_channels, *self.modes)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        if x.dim() != self.ndim + 2:
            raise ShapeMismatchError(
                f"{self.__class__.__name__} expects a {self.ndim + 2}-dim tensor "
                f"([B, C, {self.ndim} spatial]), got shape {tuple(x.shape)}"
            )
        if self.permuted:
            x = torch.movedim(x, -1, 1)

        if x.shape[1] != self.in_channels:
            raise ShapeMismatchError(
                f"{self.__class__.__name__} has weights for {self.in_channels} input channels "
                f"but received {x.shape[1]} channels"
            )

        spatial_shape = tuple(x.shape[2:])
        x_ft = self.transform.truncate_modes(self.transform.forward(x))
        out_ft = self._mix_channels(x_ft)
        out = self.transform.inverse(out_ft, spatial_shape)

        if self.permuted:
            out = torch.movedim(out, 1, -1)
        return out

    def extra_repr(self) -> str:
        return (f"{self.in_channels} => {self.out_channels}, modes={self.modes}, "
                f"permuted={self.permuted}")


class SpectralConv(OperatorConv):
    """
    Spectral convolution: OperatorConv in Fourier space.

    Equivalent to a circular convolution in physical space whose kernel is
    restricted to the lowest ``modes`` frequencies.

    Example:
        >>> layer = SpectralConv(2, 5, (16,))
        >>> layer(torch.randn(8, 2, 64)).shape
        torch.Size([8, 5, 64])
    """

    def __init__(self, in_channels: int, out_channels: int, modes: Sequence[int],
                 permuted: bool = False):
        super().__init__(in_channels, out_channels, modes,
                         transform=FourierTransform, permuted=permuted)


class OperatorKernel(nn.Module):
    """
    Residual operator block: ``activation(spatial(x) + operator(x))``.

    The operator path carries the global (spectral) part of the kernel, the
    spatial path the local part. Both receive the same input and must
    produce tensors of the same shape.

    Args:
        spatial: Local path (pointwise layer or identity)
        operator: Global path, e.g. a SpectralConv
        activation: Activation applied to the sum
    """

    def __init__(self, spatial: nn.Module, operator: nn.Module,
                 activation: ActivationSpec = "gelu"):
        super().__init__()
        self.spatial = spatial
        self.operator = operator
        self.activation = get_activation(activation)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.activation(self.spatial(x) + self.operator(x))


class SpectralKernel(OperatorKernel):
    """
    Fourier layer of the FNO: pointwise channel map plus spectral convolution.

    Args:
        in_channels: Input channel count
        out_channels: Output channel count
        modes: Retained Fourier modes per spatial axis
        activation: Activation applied after the sum
        permuted: Channel-last layout if True
        spatial_path: "pointwise" (1x1 conv / Linear) or "identity"
            (requires ``in_channels == out_channels``)
    """

    def __init__(self, in_channels: int, out_channels: int, modes: Sequence[int],
                 activation: ActivationSpec = "gelu", permuted: bool = False,
                 spatial_path: str = "pointwise"):
        modes = tuple(modes)

        if spatial_path == "pointwise":
            spatial = pointwise_layer(in_channels, out_channels, len(modes), permuted=permuted)
        elif spatial_path == "identity":
            if in_channels != out_channels:
                raise ConfigurationError(
                    f"An identity spatial path needs matching channels, got "
                    f"{in_channels} -> {out_channels}"
                )
            spatial = nn.Identity()
        else:
            raise ConfigurationError(
                f"Unknown spatial path '{spatial_path}'. Available: pointwise, identity"
            )

        super().__init__(spatial, SpectralConv(in_channels, out_channels, modes, permuted=permuted),
                         activation)
