"""
msr-cli: a concurrent bulk downloader for the Monster Siren Records catalog.
"""

__version__ = "1.0.0"
