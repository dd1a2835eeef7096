from __future__ import annotations

"""Domain-specific exceptions for the pipeline and orchestration layers.

The CLI catches ``ConfigurationError`` and turns it into a non-zero exit code.
Per-job I/O errors are plain ``OSError`` subclasses and are handled by the
orchestrator's job wrapper.
"""


class ConfigurationError(Exception):
    """Invocation cannot run as requested; raised before any job starts."""


class InputNotFoundError(ConfigurationError):
    """Input file or directory does not exist."""


class MissingExtensionError(ConfigurationError):
    """Directory input without an output file extension."""


class OutputTypeMismatchError(ConfigurationError):
    """Directory input but the output path exists and is not a directory."""


class InvalidFunctionNameError(ConfigurationError):
    """Function name is not a valid identifier in the preload script language."""
