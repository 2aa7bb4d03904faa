"""
Configuration Loader Module

Loads YAML model configurations from the ``configs/`` directory and turns
them into models through the model registry.

Model configs live in ``configs/models/<name>.yaml`` and contain a ``model``
entry plus the fields of the matching config dataclass, optionally a
``random_seed``:

    model: fno
    chs: [2, 64, 64, 128, 1]
    modes: [16]
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from neural_operators.errors import ConfigurationError
from neural_operators.models.base_classes import NeuralOperator
from neural_operators.models.model_registry import build_model

logger = logging.getLogger(__name__)

# Keys in a model config file that are not model fields
RUNTIME_KEYS = ('random_seed', 'deterministic')


class ConfigLoader:
    """Loads and parses YAML configuration files."""

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the config loader.

        Args:
            config_dir: Path to configuration directory. If None, searches
                upwards from this file for a ``configs`` directory.
        """
        if config_dir is None:
            project_root = Path(__file__).resolve().parent
            while project_root.parent != project_root:
                if (project_root / 'configs').exists():
                    break
                project_root = project_root.parent
            config_dir = project_root / 'configs'

        self.config_dir = Path(config_dir)
        if not self.config_dir.exists():
            raise FileNotFoundError(f"Configuration directory not found: {config_dir}")

    def load_yaml(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load a YAML configuration file."""
        config_path = Path(config_path)
        if not config_path.is_absolute():
            config_path = self.config_dir / config_path

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict):
            raise ConfigurationError(f"Expected a mapping in {config_path}, got {type(config).__name__}")
        return config

    def load_model_config(self, name: str) -> Dict[str, Any]:
        """Load ``models/<name>.yaml``."""
        return self.load_yaml(Path('models') / f"{name}.yaml")

    def build_model(self, name: str) -> NeuralOperator:
        """
        Build the model described by ``models/<name>.yaml``.

        Runtime keys (seed, determinism) are ignored here; read them with
        :meth:`load_model_config`.
        """
        config = {k: v for k, v in self.load_model_config(name).items() if k not in RUNTIME_KEYS}
        logger.info(f"Building model from config '{name}'")
        return build_model(config)

    def list_available_configs(self) -> Dict[str, List[str]]:
        """List all available configuration files by category."""
        configs = {}
        for category_dir in self.config_dir.iterdir():
            if category_dir.is_dir():
                category_configs = [config_file.stem for config_file in category_dir.glob('*.yaml')]
                if category_configs:
                    configs[category_dir.name] = sorted(category_configs)
        return configs
