"""
Option declarations and their per-render bound values.

An OptionSpec is declared once on a Schema. Every render binds each spec to
the caller's value, producing a throwaway BoundOption that validates itself
and renders to either argv tokens or a shell-quoted fragment.
"""

import enum
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .validators import MultipleValidator, RequiredValidator, validator_for

LOG = logging.getLogger("optout.option")

DEFAULT_JOIN = ","
DEFAULT_SEPARATOR = " "


class Quoting(str, enum.Enum):
    """Quoting style used for the shell form."""

    POSIX = "posix"
    WINDOWS = "windows"

    @classmethod
    def native(cls) -> "Quoting":
        return cls.WINDOWS if os.name == "nt" else cls.POSIX


def quote(value: str, quoting: Quoting = Quoting.POSIX) -> str:
    """Quote a single value for the given shell style.

    POSIX values are wrapped in single quotes, each embedded single quote
    becoming ``'\\''``. The Windows style only wraps the value in double
    quotes and does not escape anything.
    """
    if Quoting(quoting) is Quoting.WINDOWS:
        return f'"{value}"'
    return "'" + value.replace("'", "'\\''") + "'"


def key_name(key: Any) -> str:
    """Return the name an option key or input key is matched by."""
    if isinstance(key, enum.Enum):
        return key.value if isinstance(key.value, str) else key.name
    return str(key)


def _is_multi(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(
        value, (str, bytes, Mapping)
    )


def _materialize(value: Any) -> Any:
    # Generators and other one-shot iterables are read once, up front
    if _is_multi(value) and not isinstance(value, (list, tuple)):
        return list(value)
    return value


@dataclass(frozen=True)
class OptionSpec:
    key: str
    switch: Optional[str] = None
    separator: str = DEFAULT_SEPARATOR
    default: Any = None
    index: int = 0
    multiple: Union[bool, str] = False
    required: bool = False
    rule: Any = field(default=None, compare=False)

    @property
    def join_on(self) -> str:
        return self.multiple if isinstance(self.multiple, str) else DEFAULT_JOIN

    def bind(self, value: Any = None) -> "BoundOption":
        return BoundOption(self, value)


class BoundOption:
    """A spec paired with the value supplied for one render call."""

    def __init__(self, spec: OptionSpec, value: Any = None):
        self.spec = spec
        self.value = _materialize(value)
        if self.is_empty and spec.default is not None:
            LOG.debug("Option %s falls back to default %r", spec.key, spec.default)
            self.value = _materialize(spec.default)

        self._required = RequiredValidator(spec.required)
        self._checks = [MultipleValidator(spec.multiple)]
        if spec.rule is not None:
            self._checks.append(validator_for(spec.rule))

    @property
    def key(self) -> str:
        return self.spec.key

    @property
    def index(self) -> int:
        return self.spec.index

    @property
    def switch(self) -> Optional[str]:
        return self.spec.switch

    @property
    def values(self) -> list:
        """The value as a list of elements; scalars become a one-item list."""
        if _is_multi(self.value):
            return list(self.value)
        return [self.value]

    @property
    def text(self) -> str:
        """The value as it appears on the command line, before quoting."""
        if _is_multi(self.value):
            return self.spec.join_on.join(str(v) for v in self.value)
        if self.value is None:
            return ""
        return str(self.value).strip()

    @property
    def is_empty(self) -> bool:
        # Scalar text is stripped, so "   " is empty and fails a required check
        return self.value is None or self.value is False or self.text == ""

    def validate(self) -> None:
        self._required.validate(self)
        if self.is_empty:
            return
        for check in self._checks:
            check.validate(self)

    def _parts(self) -> List[str]:
        if self.is_empty:
            return []
        parts = [self.switch] if self.switch else []
        # A bare True means "flag present": the switch alone
        if self.value is not True:
            parts.append(self.text)
        return parts

    def _separate(self) -> bool:
        return self.spec.separator.isspace()

    def to_argv(self) -> List[str]:
        parts = self._parts()
        if len(parts) == 2 and not self._separate():
            return [self.spec.separator.join(parts)]
        return parts

    def to_shell(self, quoting: Quoting = Quoting.POSIX) -> str:
        parts = self._parts()
        if not parts:
            return ""
        if len(parts) == 1:
            return parts[0] if self.switch else quote(parts[0], quoting)
        switch, value = parts
        return f"{switch}{self.spec.separator}{quote(value, quoting)}"

    def __repr__(self) -> str:
        return f"BoundOption(key={self.key!r}, value={self.value!r})"
