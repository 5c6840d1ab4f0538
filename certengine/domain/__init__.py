"""Domain layer for certengine.

Pure models, errors and domain services. Nothing in this package performs I/O.
"""
