"""
recordnorm - normalization, validation and topic linking for heterogeneous records.
"""

__version__ = "0.1.0"
