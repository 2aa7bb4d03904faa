"""
Fourier Neural Operator Configuration
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

from neural_operators.errors import ConfigurationError


@dataclass
class FNOConfig:
    """
    Configuration for FourierNeuralOperator models.

    Attributes:
        chs: Channel widths (lift in, lift out, mapping..., projection hidden, out)
        modes: Retained Fourier modes per spatial axis
        activation: Activation name for kernels and projection
        permuted: Channel-last layout
        spatial_path: Spatial path of each spectral kernel ("pointwise" or "identity")
    """

    chs: Tuple[int, ...] = (2, 64, 64, 64, 64, 64, 128, 1)
    modes: Tuple[int, ...] = (16,)
    activation: str = "gelu"
    permuted: bool = False
    spatial_path: str = "pointwise"

    def __post_init__(self):
        self.chs = tuple(int(c) for c in self.chs)
        self.modes = tuple(int(m) for m in self.modes)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'FNOConfig':
        unknown = set(d) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown FNO config keys: {sorted(unknown)}")
        return cls(**d)

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['chs'] = list(self.chs)
        d['modes'] = list(self.modes)
        return d
