"""Calli booking front-end core: records, calendar keys, selection state and write flows."""

__version__ = "0.1.0"
