"""Distance-matrix synthesis and hierarchical-clustering validation."""

__version__ = '0.1.0'
