"""
Abstract Base Class for Neural Operators

Every full operator model (FourierNeuralOperator, DeepONet) derives from
NeuralOperator so that callers and the model registry can treat them
uniformly: build from a config, initialise through
``neural_operators.utils.functional.setup``, evaluate through
``neural_operators.utils.functional.apply``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import torch.nn as nn


class NeuralOperator(nn.Module, ABC):
    """
    Abstract base class for function-to-function learned mappings.

    Subclasses are pure functions of (input, parameters, buffers): they keep
    no per-call state outside of registered buffers.
    """

    @abstractmethod
    def forward(self, *inputs):
        """Evaluate the operator."""
        pass

    def get_model_info(self) -> Dict[str, Any]:
        """
        Get model information for logging and debugging.

        Returns:
            info: Dictionary containing model metadata
        """
        return {
            'type': 'neural_operator',
            'model_class': self.__class__.__name__,
            'parameter_count': sum(p.numel() for p in self.parameters()),
            'trainable_parameters': sum(p.numel() for p in self.parameters() if p.requires_grad)
        }
