"""Notewise - prompt orchestration for a study-companion backend."""

__version__ = "0.1.0"
