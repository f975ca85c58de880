"""
TipTrack - Source Package

A personal earnings tracker for tipped-wage service workers:
shift logging, paycheck previews, weekly summaries and tip-out splits.

DESIGN PRINCIPLES:
1. The calculation engine is pure - same inputs, same outputs
2. Division by zero yields 0, never an error
3. Out-of-range inputs are computed through and surfaced as warnings
4. Every store mutation is logged
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "TipTrack Team"
