from __future__ import annotations


class SimulationError(RuntimeError):
    """A run failed as a whole; the message is meant for the end user."""
