"""Simulation of EQUI and RCGREEDY scheduling of parallelizable jobs on a shared server pool."""

__version__ = "0.1.0"