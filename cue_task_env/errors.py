"""Exception types raised by the cue task environment.

Exception Hierarchy:
    CueTaskError (base)
    └── ConfigurationError - invalid or inconsistent configuration values

Runtime invariant violations (two response windows open at once, a cue firing
after the episode finished) are programming errors and surface as plain
``AssertionError``; they are deliberately not part of this hierarchy.
"""

from __future__ import annotations


class CueTaskError(Exception):
    """Base exception for all errors raised by this package."""


class ConfigurationError(CueTaskError, ValueError):
    """Invalid configuration parameters.

    Raised at construction time when configuration values are out of range or
    incompatible with each other. Subclasses ``ValueError`` so callers that
    validate generically keep working.
    """
