"""
Centralized Seed Management for Reproducibility

Sets the random seeds of Python, NumPy and PyTorch (CPU and GPU) from a
single value, and toggles cuDNN determinism.

Usage:
    from neural_operators.utils.reproducibility import set_global_seed

    set_global_seed()       # GLOBAL_SEED
    set_global_seed(123)

Parameter initialisation through :func:`neural_operators.utils.functional.setup`
takes its own seed and does not depend on the global state set here.
"""

import logging
import os
import random
from typing import Any, Dict, Optional

import numpy as np
import torch

logger = logging.getLogger(__name__)

# Global seed value - single source of truth
GLOBAL_SEED = 42


def set_global_seed(seed: Optional[int] = None, verbose: bool = True) -> int:
    """
    Set all random seeds for reproducibility.

    Args:
        seed: Random seed value. If None, uses GLOBAL_SEED (42)
        verbose: If True, logs a confirmation message

    Returns:
        The seed that was applied
    """
    if seed is None:
        seed = GLOBAL_SEED

    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)

    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)

    # May reduce performance
    torch.backends.cudnn.deterministic = True
    torch.backends.cudnn.benchmark = False

    os.environ['PYTHONHASHSEED'] = str(seed)

    if verbose:
        logger.info(f"Global seed set to {seed}")
    return seed


def set_seed_from_config(config: Dict[str, Any], verbose: bool = True) -> int:
    """
    Set seed from a configuration dictionary.

    Args:
        config: Dictionary with optional 'random_seed' (int) and
            'deterministic' (bool, default True) entries
        verbose: If True, logs confirmation messages
    """
    seed = set_global_seed(config.get('random_seed', GLOBAL_SEED), verbose=verbose)

    if not config.get('deterministic', True):
        torch.backends.cudnn.deterministic = False
        torch.backends.cudnn.benchmark = True
        if verbose:
            logger.warning("Deterministic mode disabled for performance (results may vary)")
    return seed
