"""
workdedup package initializer.

Finds working-directory files that already exist elsewhere under a root tree
and copies only the unique ones into an output directory.
"""

__version__ = "0.1.0"
