"""Utilities: functional interface, layer helpers, configuration, seeding, logging."""

from .functional import setup, apply, parameter_count
from .model_utils import get_activation, pointwise_layer, count_parameters
from .reproducibility import set_global_seed, set_seed_from_config
from .environment_setup import setup_logging

__all__ = [
    'setup',
    'apply',
    'parameter_count',
    'get_activation',
    'pointwise_layer',
    'count_parameters',
    'set_global_seed',
    'set_seed_from_config',
    'setup_logging',
]
