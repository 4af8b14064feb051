"""Build validated argv lists and shell-quoted strings from option mappings."""

from .errors import (
    OptionError,
    OptionInvalid,
    OptionRequired,
    OptionUnknown,
    SchemaError,
)
from .loader import load_schema, parse_schema
from .option import BoundOption, OptionSpec, Quoting, quote
from .paths import Dir, DirRules, File, FileRules, PathRules
from .schema import Form, Schema, options
from .validators import Boolean, RuleKind, Validator, classify, validator_for

__version__ = "0.1.0"

__all__ = [
    "Boolean",
    "BoundOption",
    "Dir",
    "DirRules",
    "File",
    "FileRules",
    "Form",
    "OptionError",
    "OptionInvalid",
    "OptionRequired",
    "OptionSpec",
    "OptionUnknown",
    "PathRules",
    "Quoting",
    "RuleKind",
    "Schema",
    "SchemaError",
    "Validator",
    "classify",
    "load_schema",
    "options",
    "parse_schema",
    "quote",
    "validator_for",
]
