"""Exceptions raised while building a schema or rendering options."""


class SchemaError(ValueError):
    """Raised when a schema or one of its rules is misconfigured."""


class OptionError(Exception):
    """Base class for errors about a single option's value."""

    def __init__(self, key, message: str):
        super().__init__(message)
        self.key = key


class OptionRequired(OptionError):
    def __init__(self, key):
        super().__init__(key, f"option required: '{key}'")


class OptionUnknown(OptionError):
    def __init__(self, key):
        super().__init__(key, f"option unknown: '{key}'")


class OptionInvalid(OptionError):
    def __init__(self, key, reason: str):
        super().__init__(key, f"option invalid: '{key}'; {reason}")
        self.reason = reason
