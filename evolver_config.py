import dataclasses

from dataclasses import dataclass
from typing import Optional

FITNESS_LABELS = ["l1", "rmse"]
CROSSOVER_LABELS = ["single_point", "uniform", "id"]

class ConfigurationError(Exception):
    pass

@dataclass(frozen = True)
class EvolverConfig:
    '''
    Immutable set of GA parameters shared by every pixel population of a run.
    Defaults reproduce the reference 100x100 run: 6 individuals per pixel, 50 generations.
    '''
    img_size : int = 100
    population_size : int = 6
    generations : int = 50
    mutation_rate : float = 0.05
    crossover_rate : float = 0.8
    # Chance that a child gets one extra flip of a random bit in a random channel
    forced_flip_rate : float = 0.0
    gene_length : int = 8
    rgb_channels : int = 3
    tournament_size : int = 3
    elite_size : int = 2

    fitness_label : str = "l1"
    crossover_label : str = "single_point"

    # Frame sampling and progress reporting, the last generation is always included
    frame_period : int = 1
    report_period : int = 25

    workers : int = 1
    seed : Optional[int] = None
    verbose : bool = True

    def __post_init__(self):
        self.validate()

    def validate(self):
        for name in ["img_size", "population_size", "generations", "gene_length",
                     "tournament_size", "frame_period", "report_period"]:
            if getattr(self, name) < 1:
                raise ConfigurationError("Invalid value for {}, must be positive.".format(name))

        if self.elite_size < 0 or self.elite_size > self.population_size:
            raise ConfigurationError("Invalid value for elite_size, must be in [0, population_size].")

        if self.tournament_size > self.population_size:
            raise ConfigurationError("Invalid value for tournament_size, must not exceed population_size.")

        if self.mutation_rate < 0 or self.mutation_rate > 1:
            raise ConfigurationError("Invalid value for mutation rate given, must be in [0,1].")

        if self.crossover_rate < 0 or self.crossover_rate > 1:
            raise ConfigurationError("Invalid value for crossover rate given, must be in [0,1].")

        if self.forced_flip_rate < 0 or self.forced_flip_rate > 1:
            raise ConfigurationError("Invalid value for forced flip rate given, must be in [0,1].")

        if 2 ** self.gene_length - 1 < 255:
            raise ConfigurationError("Invalid value for gene_length, {:d} bits cannot encode channel values up to 255."
                                     .format(self.gene_length))

        if self.rgb_channels != 3:
            raise ConfigurationError("Invalid value for rgb_channels, only RGB targets are supported.")

        if self.fitness_label not in FITNESS_LABELS:
            raise ConfigurationError("Invalid fitness label passed.")

        if self.crossover_label not in CROSSOVER_LABELS:
            raise ConfigurationError("Invalid crossover label passed.")

        if self.workers < 1:
            raise ConfigurationError("Invalid value for workers, at least one worker is required.")

    def with_overrides(self, **kwargs) -> "EvolverConfig":
        return dataclasses.replace(self, **kwargs)
