"""
Core Components.

Structure:
    models/: Pure data structures (no I/O)
"""

from . import models
