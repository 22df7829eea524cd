"""Exception taxonomy for workflowkit.

Only configuration and output validation errors are meant to escape an
invocation. Environment, network and cache failures degrade instead.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for errors raised by workflowkit."""


class ConfigurationError(WorkflowError, ValueError):
    """Invalid options supplied by the workflow author."""


class OutputValidationError(ConfigurationError):
    """Output buffer state that the launcher would reject."""
