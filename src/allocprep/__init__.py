"""
allocprep: allocation data preparation.

Normalizes client, worker and task spreadsheets into canonical records and
validates the three tables against each other before they are handed to
an allocator.
"""

from importlib.metadata import version

__version__ = version("allocprep")

__all__ = ["__version__"]
