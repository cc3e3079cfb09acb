from __future__ import annotations


class SimulationError(Exception):
    """Base class for everything the assembly line raises on purpose."""


class SelectionExhausted(SimulationError, RuntimeError):
    """A weighted draw walked the whole table without selecting anything.

    Either the random source produced a value outside [0, 1] or the table does
    not sum to 1.0. Fatal: the run is aborted.
    """


class InvalidConfiguration(SimulationError, ValueError):
    """Setup data that can never produce a valid run (raised before step 0)."""
