"""
Unit tests for FNO (Fourier Neural Operator) model variants

Each test verifies:
1. Model initialization and the channel-width guard
2. Forward pass shapes for 1D and 2D data in both layouts
3. Equivalence of the channel-first and channel-last layouts
4. Stage structure (lifting, mapping, project)
"""

import unittest

import torch
import torch.nn as nn

from neural_operators.errors import ConfigurationError, ShapeMismatchError
from neural_operators.models.fno import FourierNeuralOperator
from neural_operators.models.spectral_layers import SpectralKernel


class TestFNOVariants(unittest.TestCase):
    """Test suite for FourierNeuralOperator"""

    def test_fno_initialization(self):
        fno = FourierNeuralOperator(chs=(2, 64, 64, 128, 1), modes=(16,))
        self.assertIsInstance(fno, nn.Module)
        self.assertEqual(len(fno.mapping), 1)
        self.assertGreater(fno.get_parameter_count(), 0)

    def test_default_channels(self):
        """Default widths give four spectral kernels"""
        fno = FourierNeuralOperator()
        self.assertEqual(fno.chs, (2, 64, 64, 64, 64, 64, 128, 1))
        self.assertEqual(len(fno.mapping), 4)
        for kernel in fno.mapping:
            self.assertIsInstance(kernel, SpectralKernel)

    def test_fno_forward_pass_1d(self):
        """[B, 2, 1024] -> [B, 1, 1024]"""
        fno = FourierNeuralOperator(chs=(2, 64, 64, 128, 1), modes=(16,))

        for batch in (1, 5, 8):
            with self.subTest(batch=batch):
                with torch.no_grad():
                    output = fno(torch.rand(batch, 2, 1024))
                self.assertEqual(tuple(output.shape), (batch, 1, 1024))
                self.assertTrue(torch.isfinite(output).all())

    def test_fno_forward_pass_2d(self):
        fno = FourierNeuralOperator(chs=(3, 16, 16, 16, 32, 2), modes=(4, 4))
        with torch.no_grad():
            output = fno(torch.rand(2, 3, 12, 10))
        self.assertEqual(tuple(output.shape), (2, 2, 12, 10))

    def test_fno_forward_pass_permuted(self):
        fno = FourierNeuralOperator(chs=(3, 16, 16, 32, 1), modes=(4, 4), permuted=True)
        self.assertIsInstance(fno.lifting, nn.Linear)

        with torch.no_grad():
            output = fno(torch.rand(2, 12, 10, 3))
        self.assertEqual(tuple(output.shape), (2, 12, 10, 1))

    def test_channel_first_uses_pointwise_convolutions(self):
        fno = FourierNeuralOperator(chs=(3, 16, 16, 32, 1), modes=(4, 4))
        self.assertIsInstance(fno.lifting, nn.Conv2d)
        self.assertEqual(fno.lifting.kernel_size, (1, 1))
        self.assertIsInstance(fno.project[0], nn.Conv2d)
        self.assertIsInstance(fno.project[2], nn.Conv2d)

    def test_layouts_are_equivalent(self):
        """Same weights give the same map in channel-first and channel-last layout"""
        channel_first = FourierNeuralOperator(chs=(2, 8, 8, 8, 16, 1), modes=(6,))
        channel_last = FourierNeuralOperator(chs=(2, 8, 8, 8, 16, 1), modes=(6,), permuted=True)

        source = channel_first.state_dict()
        target = channel_last.state_dict()
        self.assertEqual(set(source), set(target))
        channel_last.load_state_dict({k: source[k].reshape(v.shape) for k, v in target.items()})

        x = torch.rand(3, 2, 40)
        with torch.no_grad():
            expected = channel_first(x)
            output = channel_last(torch.movedim(x, 1, -1))
        self.assertTrue(torch.allclose(torch.movedim(output, -1, 1), expected, atol=1e-5))

    def test_projection_structure(self):
        """Hidden projection has an activation, the final map has none"""
        fno = FourierNeuralOperator(activation="relu", chs=(2, 8, 8, 16, 1), modes=(4,))
        self.assertEqual(len(fno.project), 3)
        self.assertIsInstance(fno.project[1], nn.ReLU)
        self.assertEqual(fno.project[2].out_channels, 1)

    def test_channel_widths_guard(self):
        """Fewer than five widths is a configuration error, five is enough"""
        for chs in ((2, 64, 1), (2, 64, 64, 1)):
            with self.subTest(chs=chs):
                with self.assertRaises(ConfigurationError):
                    FourierNeuralOperator(chs=chs, modes=(16,))

        fno = FourierNeuralOperator(chs=(2, 64, 64, 128, 1), modes=(16,))
        self.assertEqual(len(fno.chs), 5)

    def test_kernel_kwargs_forwarded(self):
        fno = FourierNeuralOperator(chs=(2, 8, 8, 8, 16, 1), modes=(4,), spatial_path="identity")
        for kernel in fno.mapping:
            self.assertIsInstance(kernel.spatial, nn.Identity)

    def test_input_channel_mismatch(self):
        fno = FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(4,))
        with self.assertRaises(ShapeMismatchError):
            fno(torch.rand(2, 3, 32))
        with self.assertRaises(ShapeMismatchError):
            fno(torch.rand(2, 2, 32, 32))

    def test_too_many_modes_for_resolution(self):
        fno = FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(16,))
        with self.assertRaises(ConfigurationError):
            fno(torch.rand(2, 2, 16))

    def test_resolution_independence(self):
        """One set of weights evaluates on several grid resolutions"""
        fno = FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(8,))
        for n in (32, 64, 129):
            with self.subTest(n=n):
                with torch.no_grad():
                    self.assertEqual(tuple(fno(torch.rand(2, 2, n)).shape), (2, 1, n))

    def test_model_info(self):
        fno = FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(4,))
        info = fno.get_model_info()
        self.assertEqual(info['model_class'], 'FourierNeuralOperator')
        self.assertEqual(info['num_kernels'], 1)
        self.assertEqual(info['parameter_count'], fno.get_parameter_count())

    def test_training_step(self):
        """Gradients reach every parameter"""
        fno = FourierNeuralOperator(chs=(2, 8, 8, 16, 1), modes=(4,))
        optimizer = torch.optim.Adam(fno.parameters(), lr=1e-3)

        loss = fno(torch.rand(2, 2, 32)).pow(2).mean()
        optimizer.zero_grad()
        loss.backward()
        optimizer.step()

        for name, p in fno.named_parameters():
            with self.subTest(parameter=name):
                self.assertIsNotNone(p.grad)


if __name__ == '__main__':
    unittest.main()
