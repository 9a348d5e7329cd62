import argparse
import os

from evolver_config import ConfigurationError, EvolverConfig
from ga_engine import GAEvolver
from utils import create_sample_image, load_target, plot_fitness_history, save_animation, save_raster

def evolve_image(target_path : str, output_dir : str, config : EvolverConfig):
    if os.path.exists(target_path):
        target = load_target(target_path, config.img_size)
        print("Target image loaded successfully.")
    else:
        print("Could not load {}, using generated sample image.".format(target_path))
        target = create_sample_image(config.img_size)

    evolver = GAEvolver(config, target)
    final_raster, frames = evolver.evolution()

    os.makedirs(output_dir, exist_ok = True)
    save_raster(os.path.join(output_dir, "result.png"), final_raster)
    save_animation(os.path.join(output_dir, "result.gif"), frames)
    save_raster(os.path.join(output_dir, "target_sample.png"), evolver.target)
    plot_fitness_history(evolver.history, os.path.join(output_dir, "fitness_history.png"))
    print("Results saved to {}.".format(output_dir))
    return evolver

def main(argv = None):
    parser = argparse.ArgumentParser(description = "Evolve an image with one genetic algorithm per pixel.")
    parser.add_argument("--target", default = "target.png", help = "target image, a gradient is used if missing")
    parser.add_argument("--output", default = ".", help = "directory for result.png and result.gif")
    parser.add_argument("--seed", type = int, default = None)
    parser.add_argument("--generations", type = int, default = 50)
    parser.add_argument("--workers", type = int, default = 1)
    args = parser.parse_args(argv)

    try:
        config = EvolverConfig(seed = args.seed, generations = args.generations, workers = args.workers)
        evolve_image(args.target, args.output, config)
    except ConfigurationError as e:
        print("Configuration error: {}".format(e))
        return 2
    except FileNotFoundError as e:
        print("Target error: {}".format(e))
        return 1
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
