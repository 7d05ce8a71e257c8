"""Single-channel 8-bit image produced from DC terms."""

from dataclasses import dataclass
import numpy as np


@dataclass
class IntensityImage:
    """Owns a height x width uint8 buffer, independent of any decode session."""

    data: np.ndarray

    def __post_init__(self):
        data = np.asarray(self.data)
        if data.ndim != 2:
            raise ValueError(f"Intensity image must be 2D, got shape {data.shape}")
        # Always own the buffer so it survives the session that produced it
        self.data = np.array(data, dtype=np.uint8, copy=True)

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def shape(self) -> tuple:
        return self.data.shape

    def __getitem__(self, key):
        return self.data[key]
