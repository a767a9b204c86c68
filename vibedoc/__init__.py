"""
vibedoc - generation job tracking and podcast script editing core
"""

__version__ = "0.1.0"
