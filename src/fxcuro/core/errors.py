#!/usr/bin/env python3
"""
FXCURO ERRORS
-------------
Loading-time failures. Pipeline runs never raise; they degrade to a
Fallback result instead.

Author: FxCuro Team
Date: 2026-01-16
"""


class FxCuroError(Exception):
    """Base class for every error that may escape the package."""


class CatalogError(FxCuroError):
    """The module catalog or template resource is missing or malformed."""


class ConfigError(FxCuroError):
    """A configuration file could not be read or holds unknown keys."""
