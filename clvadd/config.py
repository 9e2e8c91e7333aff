"""Run settings."""

import os
from dataclasses import dataclass, field
from typing import Optional

from clvadd.verify import TOL

LENGTH = 1024

# Device class used when neither --device nor the environment picks one.
DEVICE_ENV = "CLVADD_DEVICE"
DEFAULT_DEVICE = "default"


def default_device_type():
    return os.environ.get(DEVICE_ENV, DEFAULT_DEVICE)


@dataclass
class VaddConfig:
    length: int = LENGTH
    tolerance: float = TOL
    device_type: str = field(default_factory=default_device_type)
    seed: Optional[int] = None
    build_options: tuple = ()

    def __post_init__(self):
        if self.length < 1:
            raise ValueError(f"length must be at least 1, got {self.length}")
        if self.tolerance <= 0:
            raise ValueError(
                f"tolerance must be positive, got {self.tolerance}")
