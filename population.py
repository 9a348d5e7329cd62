import numpy as np

from chromosome import CROSSOVERS, decode, mutate, random_genes
from evolver_config import EvolverConfig

MAX_L1_DISTANCE = 3 * 255

def fitness_l1(colors : np.ndarray, target : np.ndarray) -> np.ndarray:
    '''
    765 minus the summed absolute channel difference, 765 for a perfect match and 0 for the
    furthest possible color. Works on any (..., 3) array of colors.
    '''
    diff = np.abs(colors.astype(np.int64) - np.asarray(target, dtype = np.int64)).sum(axis = -1)
    return (MAX_L1_DISTANCE - diff).astype(np.float64)

def fitness_rmse(colors : np.ndarray, target : np.ndarray) -> np.ndarray:
    diff = colors.astype(np.float64) - np.asarray(target, dtype = np.float64)
    rmse = np.sqrt((diff ** 2).mean(axis = -1))
    fitness = np.exp(-rmse / 50)
    # Exact matches are rewarded on top of the smooth decay
    return np.where(rmse < 1, fitness * 2, fitness)

FITNESS_FUNCTIONS = {
    "l1": fitness_l1,
    "rmse": fitness_rmse
}

class PixelPopulation:
    def __init__(self, config : EvolverConfig, target_pixel, rand : np.random.Generator):
        self.config = config
        self.population_size = config.population_size
        self.target_pixel = np.asarray(target_pixel, dtype = np.int64)
        self.rand = rand
        self.fitness = FITNESS_FUNCTIONS[config.fitness_label]
        self.crossover = CROSSOVERS[config.crossover_label]

        self.current_generation = None
        self.f_values = np.empty((self.population_size), dtype = np.float64)

    def generate_initial_population(self):
        self.current_generation = random_genes(self.rand, (self.population_size,
                                                           self.config.rgb_channels,
                                                           self.config.gene_length))
        self.evaluate()

    def colors(self, generation : np.ndarray = None) -> np.ndarray:
        if generation is None:
            generation = self.current_generation
        return np.minimum(decode(generation), 255)

    def evaluate(self):
        self.f_values = self.fitness(self.colors(), self.target_pixel)

    def best_index(self) -> int:
        # argmax returns the first maximum, lower population index wins ties
        return int(np.argmax(self.f_values))

    def best_color(self) -> np.ndarray:
        return self.colors()[self.best_index()]

    def best_fitness(self) -> float:
        return float(self.f_values[self.best_index()])

    def fitness_stats(self):
        return float(self.f_values.mean()), float(self.f_values.max()), float(self.f_values.min())

    def tournament_selection(self) -> np.ndarray:
        contestants = self.rand.choice(self.population_size, size = self.config.tournament_size, replace = False)
        winner = contestants[np.argmax(self.f_values[contestants])]
        return self.current_generation[winner]

    def mate(self, x : np.ndarray, y : np.ndarray):
        c1 = np.empty(x.shape, dtype = np.uint8)
        c2 = np.empty(x.shape, dtype = np.uint8)

        # Channels cross over and mutate independently of each other
        for channel in range(self.config.rgb_channels):
            c1[channel], c2[channel] = self.crossover(x[channel], y[channel], self.config.crossover_rate, self.rand)
            c1[channel] = mutate(c1[channel], self.config.mutation_rate, self.rand)
            c2[channel] = mutate(c2[channel], self.config.mutation_rate, self.rand)

        if self.config.forced_flip_rate > 0:
            for child in (c1, c2):
                self.forced_flip(child)

        return c1, c2

    def forced_flip(self, child : np.ndarray):
        if self.rand.uniform() < self.config.forced_flip_rate:
            channel = self.rand.integers(self.config.rgb_channels)
            bit = self.rand.integers(self.config.gene_length)
            child[channel, bit] ^= 1

    def generation_change(self):
        elite_size = self.config.elite_size
        new_generation = np.empty(self.current_generation.shape, dtype = np.uint8)

        # Survival of the fittest, stable sort keeps lower indices first on ties
        indices = np.argsort(-self.f_values, kind = "stable")
        new_generation[:elite_size] = self.current_generation[indices[:elite_size]]

        # Selection and mating
        size = elite_size
        while size < self.population_size:
            c1, c2 = self.mate(self.tournament_selection(), self.tournament_selection())

            new_generation[size] = c1
            size += 1
            if size >= self.population_size:
                break

            new_generation[size] = c2
            size += 1

        self.current_generation = new_generation
        self.evaluate()
