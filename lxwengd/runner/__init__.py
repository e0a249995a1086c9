"""Runners and their control messages."""

from .messages import ControlMessage, Jump, Next, Pause, Play, Prev, Reload, Replace, Stop, Toggle
from .runner import Runner, RunnerHost

__all__ = [
    "ControlMessage",
    "Jump",
    "Next",
    "Pause",
    "Play",
    "Prev",
    "Reload",
    "Replace",
    "Runner",
    "RunnerHost",
    "Stop",
    "Toggle",
]
