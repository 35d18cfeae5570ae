"""Interactive QR code tools: a live camera detector and a key-driven generator."""
from __future__ import annotations

from .config import CameraConfig, DetectorConfig, GeneratorConfig
from .coordinator import ExitCoordinator
from .keys import is_exit_key
from .signals import ExitFlag
from .state import ErrorCorrection, GeneratorState
from .stats import FpsStats
from .terminal import RawTerminal

__all__ = [
    "CameraConfig",
    "DetectorConfig",
    "GeneratorConfig",
    "ErrorCorrection",
    "GeneratorState",
    "ExitCoordinator",
    "ExitFlag",
    "FpsStats",
    "RawTerminal",
    "is_exit_key",
]

__version__ = "1.0"
