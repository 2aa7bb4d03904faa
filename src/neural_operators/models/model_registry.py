"""
Model Registry System for Neural Operators

Maps model names to their configuration dataclass and factory so that a
model can be constructed from a plain dictionary:

    model = build_model({"model": "fno", "chs": [2, 64, 64, 128, 1], "modes": [16]})

``fno`` and ``deeponet`` are registered on import.
"""

import logging
from typing import Any, Callable, Dict, Type, Union

from neural_operators.errors import ConfigurationError
from neural_operators.models.base_classes import NeuralOperator
from neural_operators.models.deeponet import MLP, DeepONet, DeepONetConfig
from neural_operators.models.fno import FourierNeuralOperator
from neural_operators.models.fno_config import FNOConfig

logger = logging.getLogger(__name__)

ModelConfig = Union[FNOConfig, DeepONetConfig]


class ModelRegistry:
    """
    Registry of neural operator models.

    Each entry pairs a config dataclass (with ``from_dict``) and a factory
    turning an instance of it into a NeuralOperator.
    """

    _configs: Dict[str, Type] = {}
    _factories: Dict[str, Callable[[Any], NeuralOperator]] = {}

    @classmethod
    def register(cls, name: str, config_class: Type,
                 factory_func: Callable[[Any], NeuralOperator]) -> None:
        """
        Register a model.

        Args:
            name: Unique identifier (e.g., 'fno', 'deeponet')
            config_class: Dataclass with a ``from_dict`` classmethod
            factory_func: Builds the model from a ``config_class`` instance
        """
        if name in cls._factories:
            logger.warning(f"Overwriting existing model registration: {name}")

        cls._configs[name] = config_class
        cls._factories[name] = factory_func
        logger.debug(f"Registered neural operator: {name} -> {config_class.__name__}")

    @classmethod
    def create(cls, name: str, config: Union[Dict[str, Any], ModelConfig, None] = None) -> NeuralOperator:
        """
        Create a registered model.

        Args:
            name: Registered model name
            config: Config dataclass instance, dictionary of its fields, or
                None for the defaults

        Raises:
            ConfigurationError: If the name is not registered or the config is invalid
        """
        if name not in cls._factories:
            available = list(cls._factories.keys())
            raise ConfigurationError(f"Unknown model type: {name}. Available: {available}")

        config_class = cls._configs[name]
        if config is None:
            config = config_class()
        elif isinstance(config, dict):
            config = config_class.from_dict(config)
        elif not isinstance(config, config_class):
            raise ConfigurationError(
                f"Model '{name}' expects a {config_class.__name__}, got {type(config).__name__}"
            )

        try:
            return cls._factories[name](config)
        except Exception as e:
            logger.error(f"Failed to create model {name}: {e}")
            raise

    @classmethod
    def list_models(cls) -> Dict[str, str]:
        """Map registered names to their config class names."""
        return {name: config_class.__name__ for name, config_class in cls._configs.items()}

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._factories


def _build_fno(config: FNOConfig) -> FourierNeuralOperator:
    return FourierNeuralOperator(
        activation=config.activation,
        chs=config.chs,
        modes=config.modes,
        permuted=config.permuted,
        spatial_path=config.spatial_path,
    )


def _build_deeponet(config: DeepONetConfig) -> DeepONet:
    branch = MLP(config.branch, config.branch_activation,
                 batch_norm=config.batch_norm, dropout=config.dropout)
    trunk = MLP(config.trunk, config.trunk_activation,
                batch_norm=config.batch_norm, dropout=config.dropout)
    return DeepONet(branch, trunk,
                    additional=config.build_additional(),
                    num_outputs=config.num_outputs)


ModelRegistry.register('fno', FNOConfig, _build_fno)
ModelRegistry.register('deeponet', DeepONetConfig, _build_deeponet)


def build_model(config: Dict[str, Any]) -> NeuralOperator:
    """
    Construct a model from a dictionary with a ``model`` key naming it.

    Example:
        >>> build_model({"model": "deeponet", "branch": [64, 16], "trunk": [1, 16]})
    """
    config = dict(config)
    if 'model' not in config:
        raise ConfigurationError("Model config needs a 'model' entry (e.g. 'fno', 'deeponet')")
    name = config.pop('model')
    return ModelRegistry.create(name, config)
