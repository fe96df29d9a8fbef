"""Kernel types – naming helpers shared by field labels and file names."""
from stream_export.kernel.types.inflector import camelize, humanize, underscore, variable

__all__ = ["camelize", "humanize", "underscore", "variable"]
