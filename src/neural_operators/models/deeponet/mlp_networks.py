"""
MLP Networks for DeepONet

Fully connected chains used as branch and trunk networks. They act on the
last axis of inputs of any rank, so a branch input ``[B, *extra, n_sensors]``
and a trunk input ``[B, N, coord_dim]`` need no reshaping by the caller.
"""

from typing import Sequence

import torch
import torch.nn as nn

from neural_operators.errors import ConfigurationError, ShapeMismatchError
from neural_operators.utils.model_utils import ActivationSpec, get_activation


class MLP(nn.Module):
    """
    Multi-layer perceptron given by its layer widths.

    Every ``Linear`` layer is followed by ``activation``, including the last
    one (identity by default, giving a linear final layer).

    Args:
        widths: Layer widths ``(in_features, hidden..., out_features)``
        activation: Activation applied after every layer
        batch_norm: Insert ``BatchNorm1d`` between layers (adds running
            statistics to the model state)
        dropout: Dropout rate between layers

    Example:
        >>> mlp = MLP((64, 32, 32, 16))
        >>> mlp(torch.randn(5, 3, 64)).shape
        torch.Size([5, 3, 16])
    """

    def __init__(self, widths: Sequence[int], activation: ActivationSpec = "identity",
                 batch_norm: bool = False, dropout: float = 0.0) -> None:
        super().__init__()

        widths = tuple(int(w) for w in widths)
        if len(widths) < 2:
            raise ConfigurationError(
                f"An MLP needs at least input and output widths, got {widths}"
            )
        self.widths = widths

        layers = []
        n_layers = len(widths) - 1
        for i in range(n_layers):
            layers.append(nn.Linear(widths[i], widths[i + 1]))

            # Skip normalization and dropout after the last layer
            if i < n_layers - 1 and batch_norm:
                layers.append(nn.BatchNorm1d(widths[i + 1]))

            layers.append(get_activation(activation))

            if i < n_layers - 1 and dropout > 0:
                layers.append(nn.Dropout(dropout))

        self.network = nn.Sequential(*layers)

    @property
    def in_features(self) -> int:
        return self.widths[0]

    @property
    def out_features(self) -> int:
        return self.widths[-1]

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Args:
            x: Input tensor [..., in_features]

        Returns:
            output: Tensor [..., out_features]
        """
        if x.shape[-1] != self.in_features:
            raise ShapeMismatchError(
                f"Expected {self.in_features} input features, got {x.shape[-1]}"
            )

        leading = x.shape[:-1]
        out = self.network(x.reshape(-1, self.in_features))
        return out.reshape(*leading, self.out_features)
