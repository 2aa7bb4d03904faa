"""
DeepONet Configuration

Dataclass describing a DeepONet built from width tuples, loadable from a
plain dictionary (e.g. a YAML model config).
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

import torch.nn as nn

from neural_operators.errors import ConfigurationError


@dataclass
class DeepONetConfig:
    """
    Configuration for DeepONet models.

    Attributes:
        branch: Branch MLP widths (n_sensors, hidden..., num_outputs * p)
        trunk: Trunk MLP widths (coord_dim, hidden..., p)
        branch_activation: Activation after every branch layer
        trunk_activation: Activation after every trunk layer
        additional_features: If set, an ``nn.Linear(p, additional_features)``
            transforms the per-latent product instead of summing it
        num_outputs: Number of output components carried by the branch
        batch_norm: Insert BatchNorm1d between MLP layers
        dropout: Dropout rate between MLP layers
    """

    branch: Tuple[int, ...] = (64, 32, 32, 16)
    trunk: Tuple[int, ...] = (1, 8, 8, 16)
    branch_activation: str = "identity"
    trunk_activation: str = "identity"
    additional_features: Optional[int] = None
    num_outputs: int = 1
    batch_norm: bool = False
    dropout: float = 0.0

    def __post_init__(self):
        self.branch = tuple(int(w) for w in self.branch)
        self.trunk = tuple(int(w) for w in self.trunk)

    @property
    def latent_dim(self) -> int:
        return self.trunk[-1]

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'DeepONetConfig':
        unknown = set(d) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown DeepONet config keys: {sorted(unknown)}")
        return cls(**d)

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['branch'] = list(self.branch)
        d['trunk'] = list(self.trunk)
        return d

    def build_additional(self) -> Optional[nn.Module]:
        if self.additional_features is None:
            return None
        return nn.Linear(self.latent_dim, self.additional_features)

    def __repr__(self) -> str:
        """String representation for logging."""
        branch = ' → '.join(str(w) for w in self.branch)
        trunk = ' → '.join(str(w) for w in self.trunk)
        return (
            f"DeepONetConfig(\n"
            f"  branch: [{branch}] ({self.branch_activation}),\n"
            f"  trunk: [{trunk}] ({self.trunk_activation}),\n"
            f"  num_outputs={self.num_outputs}, additional_features={self.additional_features}\n"
            f")"
        )
