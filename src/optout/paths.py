"""
Filesystem rules for path-valued options.

Rules are accumulated on a mutable builder; every method returns the same
object so calls can be chained:

    File.under("/srv/data").named(re.compile(r"\\.csv$")).permissions("r")

Evaluation order on validate() is fixed and only the first failure is
reported:
  1. under        parent directory equals a path, or matches a pattern
  2. named        basename equals a string, or matches a pattern
  3. permissions  every requested r/w/x bit is granted to the current user
  4. exists       path exists and is of the right kind (when requested)
  5. creatable    otherwise the path exists as the right kind, or its parent
                  directory exists and is writable
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Union

from .errors import OptionInvalid, SchemaError

LOG = logging.getLogger("optout.paths")

MODES = {"r": os.R_OK, "w": os.W_OK, "x": os.X_OK}

PathOrPattern = Union[str, os.PathLike, re.Pattern]


def _absolute(path) -> Path:
    return Path(os.path.abspath(Path(path).expanduser()))


class PathRules:
    """Chainable rule set shared by the file and directory variants."""

    kind = "path"

    def __init__(self):
        self._under: Optional[PathOrPattern] = None
        self._named: Optional[Union[str, re.Pattern]] = None
        self._permissions: Optional[str] = None
        self._exists = False

    def under(self, parent: PathOrPattern) -> "PathRules":
        self._under = parent
        return self

    def named(self, name: Union[str, re.Pattern]) -> "PathRules":
        self._named = name
        return self

    def permissions(self, mode: str) -> "PathRules":
        unknown = sorted(set(mode) - set(MODES))
        if not mode or unknown:
            raise SchemaError(
                f"permissions must be a combination of 'r', 'w' and 'x', got '{mode}'"
            )
        self._permissions = mode
        return self

    def exists(self, wanted: bool = True) -> "PathRules":
        self._exists = wanted
        return self

    def validate(self, option) -> None:
        if option.is_empty:
            return

        path = Path(str(option.value)).expanduser()
        error = None
        if not self._under_ok(path):
            error = f"{self.kind} must be under '{_describe(self._under)}'"
        elif not self._named_ok(path):
            error = f"{self.kind} name must match '{_describe(self._named)}'"
        elif not self._permissions_ok(path):
            error = f"{self.kind} must have user permission of {self._permissions}"
        elif not self._exists_ok(path):
            error = f"'{path}' does not exist"
        elif not self._creatable(path):
            error = f"can't create a {self.kind} at '{path}'"

        if error:
            LOG.debug("Path rule failed for %s: %s", option.key, error)
            raise OptionInvalid(option.key, error)

    def correct_type(self, path: Path) -> bool:
        return path.exists()

    def _under_ok(self, path: Path) -> bool:
        if self._under is None:
            return True
        parent = _absolute(path).parent
        if isinstance(self._under, re.Pattern):
            return self._under.search(str(parent)) is not None
        return parent == _absolute(self._under)

    def _named_ok(self, path: Path) -> bool:
        if self._named is None:
            return True
        if isinstance(self._named, re.Pattern):
            return self._named.search(path.name) is not None
        return path.name == self._named

    def _permissions_ok(self, path: Path) -> bool:
        # Nothing to check on a path that isn't there yet
        if self._permissions is None or not path.exists():
            return True
        return all(os.access(path, MODES[m]) for m in self._permissions)

    def _exists_ok(self, path: Path) -> bool:
        return not self._exists or (path.exists() and self.correct_type(path))

    def _creatable(self, path: Path) -> bool:
        if path.exists() and self.correct_type(path):
            return True
        parent = _absolute(path).parent
        return parent.is_dir() and os.access(parent, os.W_OK)

    def __repr__(self) -> str:
        rules = []
        if self._under is not None:
            rules.append(f"under={_describe(self._under)!r}")
        if self._named is not None:
            rules.append(f"named={_describe(self._named)!r}")
        if self._permissions is not None:
            rules.append(f"permissions={self._permissions!r}")
        if self._exists:
            rules.append("exists=True")
        return f"{type(self).__name__}({', '.join(rules)})"


class FileRules(PathRules):
    kind = "file"

    def correct_type(self, path: Path) -> bool:
        return path.is_file()


class DirRules(PathRules):
    kind = "dir"

    def correct_type(self, path: Path) -> bool:
        return path.is_dir()


def _describe(rule) -> str:
    if isinstance(rule, re.Pattern):
        return rule.pattern
    return str(rule)


class File:
    """Marker for file-valued options; its classmethods start a rule chain."""

    rules = FileRules

    @classmethod
    def under(cls, parent: PathOrPattern) -> PathRules:
        return cls.rules().under(parent)

    @classmethod
    def named(cls, name) -> PathRules:
        return cls.rules().named(name)

    @classmethod
    def permissions(cls, mode: str) -> PathRules:
        return cls.rules().permissions(mode)

    @classmethod
    def exists(cls, wanted: bool = True) -> PathRules:
        return cls.rules().exists(wanted)


class Dir(File):
    """Marker for directory-valued options."""

    rules = DirRules
