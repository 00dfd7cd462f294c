"""
Error kinds raised inside the analysis.

Only ConfigError is allowed to escape to the CLI; ConfigParseError and
PatternError are caught where a single alias source or loader call is
processed, so one bad input never aborts the run.
"""
from __future__ import annotations


class VuePruneError(Exception):
    """Base class for all vueprune errors."""


class ConfigError(VuePruneError):
    """Project configuration file is unreadable or invalid."""


class ConfigParseError(VuePruneError):
    """One alias source (tsconfig/jsconfig/vite config...) could not be parsed."""


class PatternError(VuePruneError):
    """A glob or regex literal inside a loader call is malformed."""
