"""Tests for configuration validation."""

import dataclasses

import pytest

from evolver_config import ConfigurationError, EvolverConfig


class TestEvolverConfig:
    """Tests for EvolverConfig."""

    def test_defaults(self):
        """Defaults are the reference run parameters."""
        config = EvolverConfig()
        assert config.img_size == 100
        assert config.population_size == 6
        assert config.generations == 50
        assert config.mutation_rate == 0.05
        assert config.crossover_rate == 0.8
        assert config.gene_length == 8
        assert config.tournament_size == 3
        assert config.elite_size == 2

    def test_immutable(self):
        """Configurations cannot be changed after construction."""
        config = EvolverConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.population_size = 10

    def test_with_overrides(self):
        """Overrides return a new validated config."""
        config = EvolverConfig()
        small = config.with_overrides(img_size = 10, generations = 5)
        assert small.img_size == 10
        assert config.img_size == 100
        with pytest.raises(ConfigurationError):
            config.with_overrides(elite_size = 7)

    @pytest.mark.parametrize("overrides, message", [
        (dict(elite_size = 7), "elite_size"),
        (dict(tournament_size = 7), "tournament_size"),
        (dict(mutation_rate = 1.5), "mutation rate"),
        (dict(crossover_rate = -0.1), "crossover rate"),
        (dict(forced_flip_rate = 1.5), "forced flip rate"),
        (dict(gene_length = 7), "gene_length"),
        (dict(img_size = 0), "img_size"),
        (dict(generations = 0), "generations"),
        (dict(rgb_channels = 4), "rgb_channels"),
        (dict(fitness_label = "psnr"), "fitness label"),
        (dict(crossover_label = "cuts"), "crossover label"),
        (dict(workers = 0), "workers"),
        (dict(frame_period = 0), "frame_period"),
    ])
    def test_invalid(self, overrides, message):
        """Each violated invariant is named in the error."""
        with pytest.raises(ConfigurationError, match = message):
            EvolverConfig(**overrides)

    def test_boundaries_are_valid(self):
        """Rates of exactly 0 and 1 and elite_size equal to population_size are allowed."""
        EvolverConfig(mutation_rate = 0.0, crossover_rate = 1.0)
        EvolverConfig(elite_size = 6, tournament_size = 6)
        EvolverConfig(gene_length = 9)
