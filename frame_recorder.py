import numpy as np

from typing import List, Optional, Tuple

class FrameRecorder:
    '''
    Keeps the evolution history as an ordered list of read-only rasters.

    Sampling policy: a generation is recorded when it is a multiple of frame_period,
    the last generation (when known) is always recorded so the history ends on the final raster.
    '''

    def __init__(self, frame_period : int = 1, generations : Optional[int] = None):
        if frame_period < 1:
            raise ValueError("Frame period must be positive.")
        self.frame_period = frame_period
        self.last_generation = None if generations is None else generations - 1
        self.frames : List[np.ndarray] = []
        self.generations : List[int] = []
        self.finalized = False

    def should_record(self, generation : int) -> bool:
        return generation % self.frame_period == 0 or generation == self.last_generation

    def record(self, frame : np.ndarray, generation : Optional[int] = None):
        if self.finalized:
            raise RuntimeError("Cannot record frames after the recorder was finalized.")

        snapshot = np.array(frame, dtype = np.uint8, copy = True)
        snapshot.setflags(write = False)
        self.frames.append(snapshot)
        self.generations.append(len(self.generations) if generation is None else generation)

    def finalize(self) -> Tuple[np.ndarray, ...]:
        self.finalized = True
        return tuple(self.frames)

    def sample(self, max_frames : int) -> Tuple[np.ndarray, ...]:
        '''
        Deterministic down-sampling for the animation: every (len // max_frames)-th frame
        once there are more than max_frames of them.
        '''
        step = len(self.frames) // max_frames if len(self.frames) > max_frames else 1
        return tuple(self.frames[::step])

    def __len__(self):
        return len(self.frames)
