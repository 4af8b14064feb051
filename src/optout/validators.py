"""
Validators for bound option values.

A validator is any object with a ``validate(option)`` method that raises an
``OptionError`` when the option's value is unacceptable and returns nothing
otherwise. ``validator_for()`` turns a declared rule into a validator:

    re.compile(...)          -> PatternValidator
    [a, b, c] / (a, b) / {a} -> ChoiceValidator
    Boolean                  -> BooleanValidator
    File / Dir               -> FileRules / DirRules
    any other class          -> TypeValidator
    object with validate()   -> returned unchanged
"""

import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .errors import OptionInvalid, OptionRequired, SchemaError
from .paths import Dir, DirRules, File, FileRules

LOG = logging.getLogger("optout.validators")


@runtime_checkable
class Validator(Protocol):
    def validate(self, option) -> None: ...


class Boolean:
    """Marker rule for options that only accept True, False or None."""


class RuleKind(enum.Enum):
    PATTERN = "pattern"
    CHOICE = "choice"
    TYPE = "type"
    BOOLEAN = "boolean"
    FILE = "file"
    DIR = "dir"
    CUSTOM = "custom"
    UNKNOWN = "unknown"


def classify(rule: Any) -> RuleKind:
    """Tag a declared rule with the kind of validator that handles it."""
    if isinstance(rule, type):
        if issubclass(rule, Boolean):
            return RuleKind.BOOLEAN
        if issubclass(rule, Dir):
            return RuleKind.DIR
        if issubclass(rule, File):
            return RuleKind.FILE
        return RuleKind.TYPE
    if callable(getattr(rule, "validate", None)):
        return RuleKind.CUSTOM
    if isinstance(rule, re.Pattern):
        return RuleKind.PATTERN
    if isinstance(rule, (list, tuple, set, frozenset)):
        return RuleKind.CHOICE
    return RuleKind.UNKNOWN


def validator_for(rule: Any) -> Validator:
    kind = classify(rule)
    LOG.debug("Rule %r classified as %s", rule, kind.value)
    match kind:
        case RuleKind.CUSTOM:
            return rule
        case RuleKind.PATTERN:
            return PatternValidator(rule)
        case RuleKind.CHOICE:
            return ChoiceValidator(rule)
        case RuleKind.BOOLEAN:
            return BooleanValidator()
        case RuleKind.FILE:
            return FileRules()
        case RuleKind.DIR:
            return DirRules()
        case RuleKind.TYPE:
            return TypeValidator(rule)
    raise SchemaError(f"don't know how to validate with {rule!r}")


@dataclass(frozen=True)
class RequiredValidator:
    required: bool = False

    def validate(self, option) -> None:
        if option.is_empty and self.required:
            raise OptionRequired(option.key)


@dataclass(frozen=True)
class MultipleValidator:
    multiple: Any = False

    def validate(self, option) -> None:
        if option.is_empty or self.multiple is not False:
            return
        if len(option.values) > 1:
            raise OptionInvalid(option.key, "multiple values are not allowed")


@dataclass(frozen=True)
class ChoiceValidator:
    choices: Any

    def validate(self, option) -> None:
        for value in option.values:
            if value not in self.choices:
                allowed = ", ".join(str(c) for c in self.choices)
                raise OptionInvalid(
                    option.key, f"value '{value}' must be one of ({allowed})"
                )


@dataclass(frozen=True)
class PatternValidator:
    pattern: re.Pattern

    def validate(self, option) -> None:
        if option.is_empty:
            return
        if self.pattern.search(option.text) is None:
            raise OptionInvalid(
                option.key,
                f"value '{option.text}' does not match pattern {self.pattern.pattern}",
            )


@dataclass(frozen=True)
class TypeValidator:
    type: type

    def validate(self, option) -> None:
        if option.is_empty:
            return
        if not isinstance(option.value, self.type):
            raise OptionInvalid(
                option.key,
                f"value '{option.value}' must be type {self.type.__name__}",
            )


@dataclass(frozen=True)
class BooleanValidator:
    def validate(self, option) -> None:
        if not (
            option.value is True or option.value is False or option.value is None
        ):
            raise OptionInvalid(option.key, "does not accept an argument")
