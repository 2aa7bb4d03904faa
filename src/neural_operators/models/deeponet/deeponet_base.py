"""
Base DeepONet Implementation

Branch-trunk decomposition for learning operators between function spaces:

    G(u)(y) = sum_i b_i(u) * t_i(y)

The branch output may carry extra leading dimensions (vector or tensor
valued output fields); the latent axis is contracted against every query
point of the trunk output, batch axis shared.

Reference: Lu et al., "Learning nonlinear operators via DeepONet based on the
universal approximation theorem of operators"
"""

import logging
from typing import Any, Dict, Optional, Sequence, Union

import torch
import torch.nn as nn

from neural_operators.errors import ConfigurationError, ShapeMismatchError
from neural_operators.models.base_classes import NeuralOperator
from neural_operators.models.deeponet.mlp_networks import MLP
from neural_operators.utils.model_utils import ActivationSpec, LambdaActivation

logger = logging.getLogger(__name__)

NetworkSpec = Union[Sequence[int], nn.Module]

# Layers that leave the trailing width unchanged
_WIDTH_PRESERVING = (
    nn.Identity, nn.Dropout, nn.GELU, nn.ReLU, nn.Tanh, nn.SiLU, nn.Sigmoid,
    nn.BatchNorm1d, LambdaActivation,
)


def _static_width(network: nn.Module) -> Optional[int]:
    """Output width if knowable without running the network."""
    if isinstance(network, MLP):
        return network.out_features
    if isinstance(network, nn.Linear):
        return network.out_features
    if isinstance(network, nn.Sequential) and len(network) > 0:
        for layer in reversed(network):
            if isinstance(layer, (MLP, nn.Linear)):
                return layer.out_features
            if not isinstance(layer, _WIDTH_PRESERVING):
                return None
    return None


class DeepONet(NeuralOperator):
    """
    Deep Operator Network using branch-trunk architecture.

    Args:
        branch: Layer widths of the branch MLP, or any ``nn.Module`` mapping
            ``[B, *extra, n_sensors] -> [B, *extra, num_outputs * p]``
        trunk: Layer widths of the trunk MLP, or any ``nn.Module`` mapping
            ``[B, N, coord_dim] -> [B, N, p]``
        branch_activation: Activation of the branch MLP (width tuples only)
        trunk_activation: Activation of the trunk MLP (width tuples only)
        additional: Optional module applied along the latent axis of the
            per-latent product ``b * t`` instead of summing it, e.g.
            ``nn.Linear(p, q)``
        num_outputs: Split the branch output into ``num_outputs`` groups of
            width ``p``, adding a leading output axis of that size

    Input shapes:
        u: Branch input [B, *extra, n_sensors]
        y: Trunk input [B, N, coord_dim]

    Output shape:
        [B, *extra, (num_outputs,) N] or, with ``additional``,
        [B, *extra, (num_outputs,) N, q]

    Raises:
        ConfigurationError: num_outputs is not positive
        ShapeMismatchError: Latent widths of branch and trunk differ (at
            construction when both are statically known, otherwise at call
            time) or batch sizes differ

    Example:
        >>> deeponet = DeepONet(branch=(64, 32, 32, 16), trunk=(1, 8, 8, 16))
        >>> deeponet(torch.rand(5, 64), torch.rand(5, 10, 1)).shape
        torch.Size([5, 10])
    """

    def __init__(self,
                 branch: NetworkSpec = (64, 32, 32, 16),
                 trunk: NetworkSpec = (1, 8, 8, 16),
                 branch_activation: ActivationSpec = "identity",
                 trunk_activation: ActivationSpec = "identity",
                 additional: Optional[nn.Module] = None,
                 num_outputs: int = 1):
        super().__init__()

        if num_outputs < 1:
            raise ConfigurationError(f"num_outputs must be positive, got {num_outputs}")

        self.branch = branch if isinstance(branch, nn.Module) else MLP(branch, branch_activation)
        self.trunk = trunk if isinstance(trunk, nn.Module) else MLP(trunk, trunk_activation)
        self.additional = additional
        self.num_outputs = num_outputs

        branch_width = _static_width(self.branch)
        trunk_width = _static_width(self.trunk)
        if branch_width is not None and trunk_width is not None:
            if branch_width != num_outputs * trunk_width:
                raise ShapeMismatchError(self._mismatch_message(branch_width, trunk_width))

        logger.info(f"DeepONet initialized with {self.get_parameter_count()} parameters")

    def _mismatch_message(self, branch_width: int, trunk_width: int) -> str:
        expected = f"{self.num_outputs} x {trunk_width}" if self.num_outputs > 1 else f"{trunk_width}"
        return (f"Branch and trunk networks must share the same latent width "
                f"(branch {branch_width} != trunk {expected}). DeepONet will not work otherwise.")

    def combine(self, b: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
        """
        Contract branch and trunk outputs over the latent axis.

        Args:
            b: Branch output [B, *extra, p]
            t: Trunk output [B, N, p]

        Returns:
            Combined tensor [B, *extra, N], or ``additional`` applied to the
            per-latent product [B, *extra, N, p]
        """
        if b.shape[-1] != t.shape[-1]:
            raise ShapeMismatchError(self._mismatch_message(b.shape[-1], t.shape[-1]))
        if b.shape[0] != t.shape[0]:
            raise ShapeMismatchError(
                f"Branch batch size {b.shape[0]} does not match trunk batch size {t.shape[0]}"
            )
        if t.dim() != 3:
            raise ShapeMismatchError(
                f"Trunk output must be [B, N, p], got shape {tuple(t.shape)}"
            )

        batch, latent = b.shape[0], b.shape[-1]
        extra = b.shape[1:-1]
        n_query = t.shape[1]

        if self.additional is not None:
            b_flat = b.reshape(batch, -1, 1, latent)                    # [B, E, 1, p]
            product = b_flat * t.unsqueeze(1)                           # [B, E, N, p]
            out = self.additional(product)                              # [B, E, N, q]
            return out.reshape(batch, *extra, n_query, *out.shape[3:])

        b_flat = b.reshape(batch, -1, latent)                           # [B, E, p]
        out = torch.bmm(b_flat, t.transpose(1, 2))                      # [B, E, N]
        return out.reshape(batch, *extra, n_query)

    def forward(self, u: torch.Tensor, y: torch.Tensor) -> torch.Tensor:
        """
        Evaluate G(u)(y).

        Args:
            u: Input function at the sensor points [B, *extra, n_sensors]
            y: Query coordinates [B, N, coord_dim]

        Returns:
            output: Operator output [B, *extra, N] (see class docstring)
        """
        b = self.branch(u)
        t = self.trunk(y)

        if self.num_outputs > 1:
            width = b.shape[-1]
            if width % self.num_outputs != 0 or width // self.num_outputs != t.shape[-1]:
                raise ShapeMismatchError(self._mismatch_message(width, t.shape[-1]))
            b = b.reshape(*b.shape[:-1], self.num_outputs, width // self.num_outputs)

        return self.combine(b, t)

    def get_parameter_count(self) -> int:
        """Get total number of parameters."""
        return sum(p.numel() for p in self.parameters())

    def get_model_info(self) -> Dict[str, Any]:
        """Get model information for logging and debugging."""
        info = super().get_model_info()
        info.update({
            'branch_width': _static_width(self.branch),
            'trunk_width': _static_width(self.trunk),
            'num_outputs': self.num_outputs,
            'has_additional': self.additional is not None,
        })
        return info
