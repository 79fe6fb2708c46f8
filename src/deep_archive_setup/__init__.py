"""Environment bootstrap for the Deep Archive media pipeline."""

__version__ = "0.1.0"
