"""Assembly line (belt + workers) step-based simulator.

Public entrypoints:
- AssemblyLine (from assembly_line.sim)
- WeightedScheduler / RoundRobinScheduler (from assembly_line.scheduler)
"""
from .sim import AssemblyLine
from .scheduler import WeightedScheduler, RoundRobinScheduler
from .errors import InvalidConfiguration, SelectionExhausted
