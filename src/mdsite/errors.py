"""Error taxonomy for the documentation pipeline"""

from pathlib import Path


class MdsiteError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(MdsiteError):
    """Fatal configuration problem (bad root, invalid config file). Aborts the run."""

    def __init__(self, msg: str, path: Path | str | None = None):
        super().__init__(f"{msg}: {path}" if path is not None else msg)
        self.path = path


class LoadError(MdsiteError):
    """A single source file could not be loaded; it is excluded from the corpus."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to load {path}: {cause}")
        self.path = path
        self.cause = cause


class RenderError(MdsiteError):
    """A single document could not be rendered normally; output falls back to literal text."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to render {path}: {cause}")
        self.path = path
        self.cause = cause
