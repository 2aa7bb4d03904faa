"""
Functional Model Interface

Treats any ``nn.Module`` as a pure function of (input, parameters, state):

    params, state = setup(model, seed=0)
    output, new_state = apply(model, x, params, state)

Parameters and state are flat dictionaries keyed by dotted module paths
(``lifting.weight``, ``mapping.0.operator.weight``, ...), so their structure
mirrors the module tree one-to-one. State holds the module buffers (e.g.
batch-norm running statistics).

Neither call mutates the model or the records passed in: ``setup`` works on
a private replica under a forked RNG and ``apply`` runs on a copy of the
state, returning it as the new state.
"""

import copy
import logging
from typing import Any, Dict, Optional, Tuple

import torch
import torch.nn as nn
from torch.func import functional_call

logger = logging.getLogger(__name__)

ParamTree = Dict[str, torch.Tensor]
StateTree = Dict[str, torch.Tensor]


def _reset_module(module: nn.Module) -> None:
    for submodule in module.modules():
        reset = getattr(submodule, 'reset_parameters', None)
        if callable(reset):
            reset()


def setup(model: nn.Module, seed: Optional[int] = None) -> Tuple[ParamTree, StateTree]:
    """
    Initialise a fresh parameter tree and state tree for ``model``.

    Args:
        model: Module whose structure defines the trees
        seed: Seed for the initialisation RNG. If None, the current global
            torch RNG stream is used (and advanced).

    Returns:
        (params, state): flat dicts of dotted names to tensors
    """
    replica = copy.deepcopy(model)

    if seed is None:
        _reset_module(replica)
    else:
        with torch.random.fork_rng(devices=[]):
            torch.manual_seed(seed)
            _reset_module(replica)

    params = {
        name: p.detach().clone().requires_grad_(p.requires_grad)
        for name, p in replica.named_parameters()
    }
    state = {name: b.detach().clone() for name, b in replica.named_buffers()}

    logger.debug(f"setup {model.__class__.__name__}: {len(params)} parameter tensors, "
                 f"{len(state)} state tensors")
    return params, state


def apply(model: nn.Module, inputs: Any, params: ParamTree,
          state: Optional[StateTree] = None) -> Tuple[Any, StateTree]:
    """
    Evaluate ``model`` with externally supplied parameters and state.

    Args:
        model: Module defining the computation
        inputs: Single tensor, or a tuple of positional inputs (e.g. the
            ``(u, y)`` pair of a DeepONet)
        params: Parameter tree from :func:`setup` (or an optimizer)
        state: State tree from :func:`setup` or the previous ``apply``. If
            None, a copy of the module's current buffers is used, so the
            module itself is never updated.

    Returns:
        (output, new_state): the caller feeds ``new_state`` into the next call
    """
    if state is None:
        state = dict(model.named_buffers())
    new_state = {name: b.clone() for name, b in state.items()}
    args = inputs if isinstance(inputs, tuple) else (inputs,)

    output = functional_call(model, {**params, **new_state}, args, tie_weights=False)
    return output, new_state


def parameter_count(params: ParamTree) -> int:
    """Total number of entries in a parameter tree."""
    return sum(p.numel() for p in params.values())
