"""Exceptions raised to the CLI boundary."""


class MetaDBError(Exception):
    """Base class for fatal generator errors."""


class SchemaReadError(MetaDBError):
    """The input schema file could not be read."""


class ConfigError(MetaDBError):
    """The configuration file exists but could not be loaded."""
