import cv2
import numpy as np
import time

from concurrent.futures import ThreadPoolExecutor
from skimage.metrics import structural_similarity as ssim
from evolver_config import ConfigurationError, EvolverConfig
from frame_recorder import FrameRecorder
from population import PixelPopulation

def pixel_rng(entropy, index : int) -> np.random.Generator:
    '''
    Generator of the pixel with the given flat index. Every pixel gets its own stream spawned
    from the master entropy, so results do not depend on the order pixels are visited in.
    '''
    return np.random.default_rng(np.random.SeedSequence(entropy, spawn_key = (index,)))

class GAEvolver:
    def __init__(self, config : EvolverConfig, target : np.ndarray):
        self.config = config
        self.target = GAEvolver.validate_target(target, config.img_size)
        self.height, self.width = self.target.shape[:2]

        self.seed_sequence = np.random.SeedSequence(config.seed)
        self.entropy = self.seed_sequence.entropy

        # Flat arena of populations, pixel (x, y) lives at index y * width + x
        self.populations = [
            PixelPopulation(config, self.target[y, x], pixel_rng(self.entropy, y * self.width + x))
            for y in range(self.height) for x in range(self.width)
        ]

        self.recorder = FrameRecorder(config.frame_period, config.generations)
        self.history = {
            "avg_fitness": [],
            "best_fitness": [],
            "perfect_matches": [],
            "psnr": []
        }

    @staticmethod
    def validate_target(target : np.ndarray, img_size : int) -> np.ndarray:
        target = np.asarray(target)
        if target.shape != (img_size, img_size, 3):
            raise ConfigurationError("Invalid target raster shape {}, expected {}."
                                     .format(target.shape, (img_size, img_size, 3)))

        if not np.issubdtype(target.dtype, np.integer) or target.min() < 0 or target.max() > 255:
            raise ConfigurationError("Invalid target raster, channels must be 8 bit integers.")

        return target.astype(np.uint8)

    def population_at(self, x : int, y : int) -> PixelPopulation:
        return self.populations[y * self.width + x]

    def generate_initial_population(self):
        for population in self.populations:
            population.generate_initial_population()

    def advance_rows(self, rows : range):
        for y in rows:
            for population in self.populations[y * self.width:(y + 1) * self.width]:
                population.generation_change()

    def generation_change(self, executor : ThreadPoolExecutor = None):
        if executor is None:
            self.advance_rows(range(self.height))
            return

        # Each worker owns whole rows, the map finishing is the generation barrier
        chunk = -(-self.height // self.config.workers)
        chunks = [range(i, min(i + chunk, self.height)) for i in range(0, self.height, chunk)]
        list(executor.map(self.advance_rows, chunks))

    def materialize_frame(self) -> np.ndarray:
        colors = np.array([population.best_color() for population in self.populations], dtype = np.uint8)
        return colors.reshape(self.height, self.width, 3)

    def best_fitness_grid(self) -> np.ndarray:
        values = np.array([population.best_fitness() for population in self.populations])
        return values.reshape(self.height, self.width)

    def update_history(self, frame : np.ndarray):
        best = self.best_fitness_grid()
        self.history["avg_fitness"].append(float(best.mean()))
        self.history["best_fitness"].append(float(best.max()))
        self.history["perfect_matches"].append(int(np.all(frame == self.target, axis = 2).sum()))
        self.history["psnr"].append(float(cv2.PSNR(self.target, frame)))

    def report(self, frame : np.ndarray):
        pixels = self.width * self.height
        perfect_matches = self.history["perfect_matches"][-1]
        print("Average fitness: {:.4f}, Perfect matches: {:.2f}% ({:d}/{:d})".format(
            self.history["avg_fitness"][-1], 100 * perfect_matches / pixels, perfect_matches, pixels))

        avg_f, max_f, min_f = self.population_at(self.width // 2, self.height // 2).fitness_stats()
        print("Sample pixel fitness - Avg: {:.4f}, Max: {:.4f}, Min: {:.4f}".format(avg_f, max_f, min_f))

        # SSIM needs at least a 7x7 window
        if min(self.width, self.height) >= 7:
            print("PSNR: {:.2f}, SSIM: {:.4f}".format(self.history["psnr"][-1],
                                                     ssim(self.target, frame, channel_axis = 2)))
        else:
            print("PSNR: {:.2f}".format(self.history["psnr"][-1]))

    def run_generations(self, executor : ThreadPoolExecutor = None):
        for i in range(self.config.generations):
            s = time.time()
            self.generation_change(executor)
            frame = self.materialize_frame()
            e = time.time()

            if self.recorder.should_record(i):
                self.recorder.record(frame, i)
            self.update_history(frame)

            if self.config.verbose:
                print("Generation: {:d}/{:d}".format(i + 1, self.config.generations))
                if i % self.config.report_period == 0 or i == self.config.generations - 1:
                    self.report(frame)
                print("Time taken: {:.2f}\n".format(e - s))

    def evolution(self):
        self.generate_initial_population()
        if self.config.verbose:
            print("Finished generating initial population.\n")

        if self.config.workers > 1:
            with ThreadPoolExecutor(max_workers = self.config.workers) as executor:
                self.run_generations(executor)
        else:
            self.run_generations()

        if self.config.verbose:
            print("Evolution finished!\n")

        frames = self.recorder.finalize()
        return frames[-1], frames
