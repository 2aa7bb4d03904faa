"""
Unit tests for the functional setup/apply interface

Tests:
- Parameter/state trees mirror the module tree
- setup is seeded, leaves the model and the global RNG untouched
- apply matches the stateful forward, is deterministic and never mutates
  the records passed in
"""

import unittest

import torch
import torch.nn as nn

from neural_operators.models.deeponet import DeepONet, DeepONetConfig
from neural_operators.models.fno import FourierNeuralOperator
from neural_operators.models.model_registry import ModelRegistry
from neural_operators.models.spectral_layers import SpectralConv
from neural_operators.utils.functional import apply, parameter_count, setup


class TestSetup(unittest.TestCase):
    """Test suite for setup"""

    def setUp(self):
        self.fno = FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(4,))

    def test_trees_mirror_module_tree(self):
        params, state = setup(self.fno, seed=0)

        self.assertEqual(set(params), {name for name, _ in self.fno.named_parameters()})
        self.assertEqual(state, {})
        for stage in ('lifting', 'mapping', 'project'):
            with self.subTest(stage=stage):
                self.assertTrue(any(name.startswith(stage + '.') for name in params))
        self.assertIn('mapping.0.operator.weight', params)
        self.assertTrue(torch.is_complex(params['mapping.0.operator.weight']))

    def test_seeded_initialisation(self):
        params_a, _ = setup(self.fno, seed=3)
        params_b, _ = setup(self.fno, seed=3)
        params_c, _ = setup(self.fno, seed=4)

        for name in params_a:
            with self.subTest(parameter=name):
                self.assertTrue(torch.equal(params_a[name], params_b[name]))
        self.assertFalse(torch.equal(params_a['lifting.weight'], params_c['lifting.weight']))

    def test_model_untouched(self):
        before = {k: v.clone() for k, v in self.fno.state_dict().items()}
        setup(self.fno, seed=1)
        for name, value in self.fno.state_dict().items():
            self.assertTrue(torch.equal(value, before[name]))

    def test_global_rng_untouched(self):
        torch.manual_seed(0)
        expected = torch.rand(3)

        torch.manual_seed(0)
        setup(self.fno, seed=7)
        self.assertTrue(torch.equal(torch.rand(3), expected))

    def test_params_are_independent_copies(self):
        params, _ = setup(self.fno, seed=0)
        with torch.no_grad():
            params['lifting.weight'].zero_()
        self.assertFalse(torch.all(self.fno.lifting.weight == 0))

    def test_parameter_count(self):
        params, _ = setup(self.fno, seed=0)
        self.assertEqual(parameter_count(params), self.fno.get_parameter_count())


class TestApply(unittest.TestCase):
    """Test suite for apply"""

    def test_matches_module_forward(self):
        fno = FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(4,))
        params, state = setup(fno, seed=0)
        x = torch.rand(3, 2, 32)

        with torch.no_grad():
            out, _ = apply(fno, x, params, state)
            fno.load_state_dict({**params, **state})
            expected = fno(x)
        self.assertTrue(torch.allclose(out, expected))

    def test_fno_shape_through_apply(self):
        fno = FourierNeuralOperator(chs=(2, 64, 64, 128, 1), modes=(16,))
        params, state = setup(fno, seed=0)
        for batch in (1, 5, 8):
            with self.subTest(batch=batch):
                with torch.no_grad():
                    out, _ = apply(fno, torch.rand(batch, 2, 1024), params, state)
                self.assertEqual(tuple(out.shape), (batch, 1, 1024))

    def test_deterministic(self):
        """Identical parameters, state and input give bit-identical output"""
        models = [
            (SpectralConv(2, 3, (5,)), (torch.rand(4, 2, 32),)),
            (FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(4,)), (torch.rand(4, 2, 32),)),
            (DeepONet(branch=(64, 16), trunk=(1, 16)), (torch.rand(4, 64), torch.rand(4, 9, 1))),
        ]
        for model, inputs in models:
            with self.subTest(model=model.__class__.__name__):
                params, state = setup(model, seed=0)
                with torch.no_grad():
                    first, _ = apply(model, inputs, params, state)
                    second, _ = apply(model, inputs, params, state)
                self.assertTrue(torch.equal(first, second))

    def test_deeponet_tuple_inputs(self):
        deeponet = DeepONet(branch=(64, 32, 16), trunk=(1, 8, 16))
        params, state = setup(deeponet, seed=0)
        out, new_state = apply(deeponet, (torch.rand(5, 64), torch.rand(5, 10, 1)), params, state)

        self.assertEqual(tuple(out.shape), (5, 10))
        self.assertEqual(new_state, {})

    def test_state_is_threaded_not_mutated(self):
        """Batch statistics update in the returned state only"""
        deeponet = ModelRegistry.create('deeponet', DeepONetConfig(
            branch=(64, 32, 16), trunk=(1, 8, 16), batch_norm=True))
        deeponet.train()
        params, state = setup(deeponet, seed=0)
        counters = [name for name in state if name.endswith('num_batches_tracked')]
        self.assertTrue(counters)

        u, y = torch.rand(5, 64), torch.rand(5, 10, 1)
        with torch.no_grad():
            _, state_1 = apply(deeponet, (u, y), params, state)
            _, state_2 = apply(deeponet, (u, y), params, state_1)

        for name in counters:
            with self.subTest(buffer=name):
                self.assertEqual(state[name].item(), 0)
                self.assertEqual(state_1[name].item(), 1)
                self.assertEqual(state_2[name].item(), 2)

        running = 'branch.network.1.running_mean'
        self.assertTrue(torch.all(state[running] == 0))
        self.assertFalse(torch.equal(state_1[running], state[running]))

    def test_gradients_through_params(self):
        fno = FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(4,))
        params, state = setup(fno, seed=0)

        out, _ = apply(fno, torch.rand(2, 2, 32), params, state)
        grads = torch.autograd.grad(out.pow(2).sum(), list(params.values()))

        self.assertEqual(len(grads), len(params))
        for grad in grads:
            self.assertIsNotNone(grad)

    def test_missing_state_leaves_module_buffers(self):
        """Without a state tree the module's buffers are copied, never updated"""
        model = nn.Sequential(nn.Linear(3, 4), nn.BatchNorm1d(4))
        model.train()
        params, _ = setup(model, seed=0)
        before = {name: b.clone() for name, b in model.named_buffers()}

        with torch.no_grad():
            _, new_state = apply(model, torch.rand(6, 3), params)

        for name, value in model.named_buffers():
            with self.subTest(buffer=name):
                self.assertTrue(torch.equal(value, before[name]))
        self.assertEqual(set(new_state), set(before))
        self.assertEqual(new_state['1.num_batches_tracked'].item(), 1)
        self.assertFalse(torch.equal(new_state['1.running_mean'], before['1.running_mean']))

    def test_plain_torch_modules(self):
        model = nn.Sequential(nn.Linear(3, 4), nn.BatchNorm1d(4))
        params, state = setup(model, seed=0)
        out, new_state = apply(model, torch.rand(6, 3), params, state)

        self.assertEqual(tuple(out.shape), (6, 4))
        self.assertEqual(set(new_state), set(state))


if __name__ == '__main__':
    unittest.main()
