"""
Local mirror of remotely published package registries.
"""

__version__ = "0.1.0"
