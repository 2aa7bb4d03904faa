"""
Real-valued Fourier transform with low-pass mode truncation.

The transform acts on the trailing ``ndim`` axes of a channel-first tensor
``[B, C, n_1, ..., n_d]``. ``torch.fft.rfftn`` halves the last axis, so the
full spectrum has extents ``(n_1, ..., n_{d-1}, n_d // 2 + 1)``.

Truncation keeps the first ``m_i`` indices along every spatial axis. On the
inverse path the truncated block is zero-padded back at the high-index end
of each axis, and ``irfftn`` receives the full spatial shape so odd and even
``n_d`` are recovered exactly.
"""

from typing import Sequence, Tuple

import torch

from neural_operators.errors import ConfigurationError, ShapeMismatchError


class FourierTransform:
    """
    Forward/inverse real FFT over the spatial axes, truncated to ``modes``.

    Args:
        modes: Number of low-frequency bins kept per spatial axis. Its length
            sets the number of spatial dimensions ``d``.

    Example:
        >>> ft = FourierTransform((16,))
        >>> x = torch.randn(4, 3, 64)
        >>> x_ft = ft.truncate_modes(ft.forward(x))
        >>> x_ft.shape
        torch.Size([4, 3, 16])
        >>> ft.inverse(x_ft, (64,)).shape
        torch.Size([4, 3, 64])
    """

    def __init__(self, modes: Sequence[int]):
        modes = tuple(int(m) for m in modes)
        if len(modes) == 0:
            raise ConfigurationError("modes must name at least one spatial dimension")
        if any(m < 1 for m in modes):
            raise ConfigurationError(f"modes must be positive, got {modes}")
        self.modes = modes

    @property
    def ndim(self) -> int:
        return len(self.modes)

    @property
    def dims(self) -> Tuple[int, ...]:
        return tuple(range(-self.ndim, 0))

    def spectrum_shape(self, spatial_shape: Sequence[int]) -> Tuple[int, ...]:
        """Full frequency extents of ``rfftn`` for a real input of ``spatial_shape``."""
        spatial_shape = tuple(spatial_shape)
        return spatial_shape[:-1] + (spatial_shape[-1] // 2 + 1,)

    def _check_rank(self, x: torch.Tensor) -> None:
        if x.dim() < self.ndim + 1:
            raise ShapeMismatchError(
                f"Expected a tensor with at least {self.ndim + 1} dims "
                f"([..., C, {self.ndim} spatial]), got shape {tuple(x.shape)}"
            )

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """Full real-to-complex transform over the spatial axes."""
        self._check_rank(x)
        return torch.fft.rfftn(x, dim=self.dims)

    def truncate_modes(self, x_ft: torch.Tensor) -> torch.Tensor:
        """
        Keep the lowest ``modes`` bins on each spatial axis.

        Raises:
            ConfigurationError: If a mode count exceeds the available bins
        """
        available = tuple(x_ft.shape[-self.ndim:])
        for axis, (m, n) in enumerate(zip(self.modes, available)):
            if m > n:
                raise ConfigurationError(
                    f"Requested {m} modes on spatial axis {axis} but only {n} frequency "
                    f"bins are available (spectrum extents {available})"
                )
        index = (Ellipsis,) + tuple(slice(0, m) for m in self.modes)
        return x_ft[index]

    def pad_modes(self, x_ft: torch.Tensor, spatial_shape: Sequence[int]) -> torch.Tensor:
        """Zero-pad a truncated spectrum back to the full extent of ``spatial_shape``."""
        target = self.spectrum_shape(spatial_shape)
        current = tuple(x_ft.shape[-self.ndim:])
        if current == target:
            return x_ft
        if any(c > t for c, t in zip(current, target)):
            raise ShapeMismatchError(
                f"Spectrum extents {current} exceed the full extents {target} "
                f"of spatial shape {tuple(spatial_shape)}"
            )

        padded = x_ft.new_zeros(x_ft.shape[:-self.ndim] + target)
        index = (Ellipsis,) + tuple(slice(0, c) for c in current)
        padded[index] = x_ft
        return padded

    def inverse(self, x_ft: torch.Tensor, spatial_shape: Sequence[int]) -> torch.Tensor:
        """
        Complex-to-real inverse transform.

        Args:
            x_ft: Full or truncated spectrum
            spatial_shape: Spatial extents of the output; the last entry is the
                length of the halved axis and cannot be inferred from ``x_ft``

        Returns:
            Real tensor with spatial extents ``spatial_shape``
        """
        spatial_shape = tuple(int(n) for n in spatial_shape)
        if len(spatial_shape) != self.ndim:
            raise ShapeMismatchError(
                f"spatial_shape {spatial_shape} does not have {self.ndim} entries"
            )
        x_ft = self.pad_modes(x_ft, spatial_shape)
        return torch.fft.irfftn(x_ft, s=spatial_shape, dim=self.dims)

    def low_pass(self, x: torch.Tensor) -> torch.Tensor:
        """Filter ``x`` to its lowest ``modes`` frequencies in physical space."""
        spatial_shape = tuple(x.shape[-self.ndim:])
        return self.inverse(self.truncate_modes(self.forward(x)), spatial_shape)

    def __repr__(self) -> str:
        return f"FourierTransform(modes={self.modes})"
