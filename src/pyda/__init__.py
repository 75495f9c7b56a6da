"""
pyda - pluggable data availability layer client for rollup nodes.
"""

__version__ = "0.1.0"
