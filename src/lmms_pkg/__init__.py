"""LMMS project packager: bundle a project and its samples into one file."""

__version__ = "0.3.0"
