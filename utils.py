import numpy as np
import cv2
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from PIL import Image
from frame_recorder import FrameRecorder

def load_target(path : str, size : int) -> np.ndarray:
    '''
    Reads the image at the given path and returns it as a size x size RGB raster.
    '''
    image = cv2.imread(path)
    if image is None:
        raise FileNotFoundError("Could not read target image {}.".format(path))

    image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return cv2.resize(image, (size, size), interpolation = cv2.INTER_CUBIC)

def create_sample_image(size : int) -> np.ndarray:
    '''
    Gradient target used when no image is supplied: red grows along x, green along y
    and blue along the diagonal.
    '''
    ys, xs = np.mgrid[0:size, 0:size]
    image = np.empty((size, size, 3), dtype = np.uint8)
    image[:, :, 0] = xs * 255 // size
    image[:, :, 1] = ys * 255 // size
    image[:, :, 2] = (xs + ys) * 255 // (2 * size)
    return image

def save_raster(path : str, raster : np.ndarray):
    if not cv2.imwrite(path, cv2.cvtColor(np.ascontiguousarray(raster), cv2.COLOR_RGB2BGR)):
        raise OSError("Could not write raster to {}.".format(path))

def websafe_palette() -> np.ndarray:
    # 6 levels per channel, index = r * 36 + g * 6 + b
    levels = np.arange(6, dtype = np.uint8) * 51
    r, g, b = np.meshgrid(levels, levels, levels, indexing = "ij")
    return np.stack([r.ravel(), g.ravel(), b.ravel()], axis = 1)

def quantize_websafe(frame : np.ndarray) -> np.ndarray:
    steps = np.minimum(np.rint(frame.astype(np.float64) / 51), 5).astype(np.uint8)
    return steps[:, :, 0] * 36 + steps[:, :, 1] * 6 + steps[:, :, 2]

def save_animation(path : str, frames, max_frames : int = 50, delay : int = 200):
    '''
    Writes the frames as a looping GIF, delay is in milliseconds per frame. Longer histories
    are down-sampled with the frame recorder policy so at most about max_frames are kept.
    Pillow stores identical consecutive frames once with their durations summed, so a converged
    run has fewer GIF frames than recorded ones while its playback time is unchanged.
    '''
    if len(frames) == 0:
        raise ValueError("No frames passed to create the animation.")

    recorder = FrameRecorder()
    for frame in frames:
        recorder.record(frame)

    palette = websafe_palette().ravel().tolist()
    images = []
    for frame in recorder.sample(max_frames):
        indices = quantize_websafe(frame)
        image = Image.frombytes("P", (indices.shape[1], indices.shape[0]), indices.tobytes())
        image.putpalette(palette)
        images.append(image)

    images[0].save(path, save_all = True, append_images = images[1:], duration = delay, loop = 0)
    return path

def plot_fitness_history(history : dict, path : str):
    generations = np.arange(1, len(history["avg_fitness"]) + 1)
    fig, ax = plt.subplots(figsize = (8, 5))
    ax.plot(generations, history["avg_fitness"], label = "average best fitness")
    ax.plot(generations, history["best_fitness"], label = "best fitness")
    ax.set_xlabel("Generation")
    ax.set_ylabel("Fitness")
    ax.legend()
    fig.savefig(path)
    plt.close(fig)
