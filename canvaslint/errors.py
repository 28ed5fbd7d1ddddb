"""Exception types raised by canvaslint."""


class CanvaslintError(Exception):
    """Base class for canvaslint errors."""


class DocumentError(CanvaslintError, ValueError):
    """A canvas document could not be decoded."""


class ConfigError(CanvaslintError, ValueError):
    """A lint configuration is malformed."""
