"""
Pytest configuration file for neural operator testing framework.

This file configures pytest to properly handle:
- Python path setup for imports (running without an installed package)
- Random seed initialization (centralized)
"""

import sys
from pathlib import Path

import pytest
import torch

PROJECT_ROOT = Path(__file__).parent

# Add src directory to Python path
SRC_DIR = PROJECT_ROOT / "src"
if SRC_DIR.exists() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


@pytest.fixture(autouse=True)
def reset_random_seeds():
    """Reset random seeds before each test for reproducibility."""
    from neural_operators.utils.reproducibility import set_global_seed
    set_global_seed(verbose=False)
    yield


@pytest.fixture(autouse=True)
def reset_torch_state():
    """Reset PyTorch state after each test."""
    yield
    if torch.cuda.is_available():
        torch.cuda.empty_cache()
