"""Tests for the grid evolution driver."""

import numpy as np
import pytest

from evolver_config import ConfigurationError, EvolverConfig
from ga_engine import GAEvolver, pixel_rng
from population import PixelPopulation
from utils import create_sample_image


def small_config(**overrides):
    params = dict(img_size = 8, generations = 12, seed = 1234, verbose = False)
    params.update(overrides)
    return EvolverConfig(**params)


class TestTargetValidation:
    """Tests for the target raster checks."""

    def test_wrong_size(self):
        """A raster with other dimensions is rejected before evolving."""
        with pytest.raises(ConfigurationError):
            GAEvolver(small_config(), create_sample_image(9))

    def test_wrong_channels(self):
        """Grayscale rasters are rejected."""
        with pytest.raises(ConfigurationError):
            GAEvolver(small_config(), np.zeros((8, 8), dtype = np.uint8))

    def test_out_of_range_values(self):
        """Channel values above 255 are rejected."""
        target = np.full((8, 8, 3), 300, dtype = np.int32)
        with pytest.raises(ConfigurationError):
            GAEvolver(small_config(), target)

    def test_float_raster(self):
        """Float rasters are not 8 bit images."""
        with pytest.raises(ConfigurationError):
            GAEvolver(small_config(), np.zeros((8, 8, 3), dtype = np.float64))


class TestEvolution:
    """Tests for a full run on a small grid."""

    def test_outputs(self):
        """The run returns the last frame and one frame per generation."""
        config = small_config()
        evolver = GAEvolver(config, create_sample_image(8))
        final_raster, frames = evolver.evolution()

        assert len(frames) == config.generations
        assert final_raster.shape == (8, 8, 3)
        assert final_raster.dtype == np.uint8
        np.testing.assert_array_equal(final_raster, frames[-1])
        assert all(frame.shape == (8, 8, 3) for frame in frames)

    def test_frame_matches_best_individuals(self):
        """Each frame pixel is the best individual of that pixel's population."""
        evolver = GAEvolver(small_config(), create_sample_image(8))
        final_raster, _ = evolver.evolution()
        for y in range(8):
            for x in range(8):
                np.testing.assert_array_equal(final_raster[y, x], evolver.population_at(x, y).best_color())

    def test_frame_sampling(self):
        """frame_period keeps every Nth generation plus the last one."""
        evolver = GAEvolver(small_config(frame_period = 5), create_sample_image(8))
        _, frames = evolver.evolution()
        assert evolver.recorder.generations == [0, 5, 10, 11]
        assert len(frames) == 4

    def test_average_fitness_never_drops(self):
        """Elitism makes the average best fitness over the grid non-decreasing."""
        evolver = GAEvolver(small_config(generations = 20), create_sample_image(8))
        evolver.evolution()
        assert np.all(np.diff(evolver.history["avg_fitness"]) >= 0)
        assert len(evolver.history["psnr"]) == 20

    def test_seeded_runs_are_reproducible(self):
        """The same master seed gives the same frames."""
        a = GAEvolver(small_config(), create_sample_image(8)).evolution()[0]
        b = GAEvolver(small_config(), create_sample_image(8)).evolution()[0]
        np.testing.assert_array_equal(a, b)

    def test_workers_do_not_change_result(self):
        """Advancing rows on a thread pool gives the same frames as the sequential run."""
        _, sequential = GAEvolver(small_config(), create_sample_image(8)).evolution()
        _, threaded = GAEvolver(small_config(workers = 3), create_sample_image(8)).evolution()
        assert len(sequential) == len(threaded)
        for a, b in zip(sequential, threaded):
            np.testing.assert_array_equal(a, b)

    def test_pixel_independence(self):
        """A pixel evolved alone with its own generator ends where the grid run left it."""
        config = small_config()
        target = create_sample_image(8)
        evolver = GAEvolver(config, target)
        final_raster, _ = evolver.evolution()

        x, y = 5, 2
        population = PixelPopulation(config, target[y, x], pixel_rng(config.seed, y * 8 + x))
        population.generate_initial_population()
        for _ in range(config.generations):
            population.generation_change()

        np.testing.assert_array_equal(population.best_color(), final_raster[y, x])
        np.testing.assert_array_equal(population.current_generation,
                                      evolver.population_at(x, y).current_generation)

    def test_verbose_report(self, capsys):
        """The progress report prints the generation summary."""
        evolver = GAEvolver(small_config(generations = 2, verbose = True), create_sample_image(8))
        evolver.evolution()
        out = capsys.readouterr().out
        assert "Generation: 2/2" in out
        assert "Perfect matches" in out
        assert "SSIM" in out
        assert "Evolution finished!" in out
