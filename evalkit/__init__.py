"""
evalkit: classification evaluation metrics.

Scores predictions into immutable snapshots, tracks their evolution across
training epochs, validates them against quality gates and compares runs.
"""

__version__ = "1.0.0"
