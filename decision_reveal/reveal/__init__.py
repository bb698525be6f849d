"""Time-driven reveal of tree construction and decision paths."""

from ._scheduler import Listener, RevealScheduler, RevealState, Sleep
from ._construction import ConstructionReveal
from ._path import PathReveal
from ._progress import BuildProgress, ProgressPhase, replay_reconstruction
from ._progress import construction_message, reconstruction_message

__all__ = [
    "Listener",
    "RevealScheduler",
    "RevealState",
    "Sleep",
    "ConstructionReveal",
    "PathReveal",
    "BuildProgress",
    "ProgressPhase",
    "replay_reconstruction",
    "construction_message",
    "reconstruction_message",
]
