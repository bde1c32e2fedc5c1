"""Simulation package shim.

This module exposes the Simulation class at `cachesim.simulation` so callers
can write `from cachesim.simulation import Simulation`.
"""
from .simulation import SCENARIOS, Simulation, SimulationConfig

__all__ = ["Simulation", "SimulationConfig", "SCENARIOS"]
