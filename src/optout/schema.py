"""
Schema registry: declare options once, render argument vectors many times.

    schema = options(lambda o: (
        o.on("all", "-a"),
        o.on("size", "-b", re.compile(r"^\\d+$"), required=True),
        o.on("file", File.under("/home/sshaw"), default="/home/sshaw/tmp"),
    ))

    schema.shell({"all": True, "size": 1024, "file": "/home/sshaw/some file"})
    # -a -b '1024' '/home/sshaw/some file'

Rendering binds every declared option to the caller's value, validates it
(the first failure aborts the call), drops empty options, orders the rest by
index and joins them into a flat argv list or a single shell string.
"""

import contextlib
import enum
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from .errors import OptionUnknown, SchemaError
from .option import (
    DEFAULT_SEPARATOR,
    BoundOption,
    OptionSpec,
    Quoting,
    key_name,
)

LOG = logging.getLogger("optout.schema")

SETTINGS = ("required", "multiple", "default", "arg_separator", "index")


class Form(str, enum.Enum):
    ARGV = "argv"
    SHELL = "shell"


class Schema:
    """An ordered registry of option specs."""

    def __init__(
        self,
        check_keys: bool = True,
        required: Optional[bool] = None,
        multiple: Union[bool, str, None] = None,
        arg_separator: Optional[str] = None,
        quoting: Union[Quoting, str] = Quoting.POSIX,
    ):
        self.check_keys = check_keys
        self.quoting = Quoting(quoting)
        self._defaults = {
            "required": required,
            "multiple": multiple,
            "arg_separator": arg_separator,
        }
        self._specs: Dict[str, OptionSpec] = {}
        self._forced_required: Optional[bool] = None

    def on(self, key: Any = None, *args: Any, **settings: Any) -> OptionSpec:
        """Declare an option.

        Args:
            key: Name the option is looked up by in rendered input.
            *args: An optional switch (any string) followed by an optional
                validation rule. A non-string first argument is the rule.
            **settings: required, multiple, default, arg_separator, index.

        Raises:
            SchemaError: If the key is missing or already declared, or a
                setting is not recognised or has the wrong type.
        """
        if key is None or key == "":
            raise SchemaError("option key required")
        name = key_name(key)
        if name in self._specs:
            raise SchemaError(f"option already defined: '{name}'")

        unknown = sorted(set(settings) - set(SETTINGS))
        if unknown:
            raise SchemaError(f"unknown setting for '{name}': {', '.join(unknown)}")

        args = list(args)
        switch = args.pop(0) if args and isinstance(args[0], str) else None
        if len(args) > 1:
            raise SchemaError(f"option '{name}' takes at most one validation rule")
        rule = args[0] if args else None

        spec = OptionSpec(
            key=name,
            switch=switch,
            separator=self._separator(name, switch, settings),
            default=settings.get("default"),
            index=self._index(name, settings),
            multiple=self._multiple(name, settings),
            required=self._required(name, switch, settings),
            rule=rule,
        )
        self._specs[name] = spec
        LOG.debug("Declared option %r", spec)
        return spec

    def _setting(self, settings: Dict[str, Any], name: str) -> Any:
        value = settings.get(name)
        return self._defaults.get(name) if value is None else value

    def _separator(
        self, name: str, switch: Optional[str], settings: Dict[str, Any]
    ) -> str:
        separator = self._setting(settings, "arg_separator")
        if separator is not None:
            if not isinstance(separator, str):
                raise SchemaError(f"'arg_separator' for '{name}' must be a string")
            return separator
        # "--prefix=" style switches glue their value on directly
        if switch and switch.endswith("="):
            return ""
        return DEFAULT_SEPARATOR

    def _required(
        self, name: str, switch: Optional[str], settings: Dict[str, Any]
    ) -> bool:
        required = self._setting(settings, "required")
        if required is not None and not isinstance(required, bool):
            raise SchemaError(f"'required' for '{name}' must be a bool")
        if self._forced_required is not None:
            return self._forced_required
        if required is None:
            return bool(switch and switch.endswith("="))
        return required

    def _multiple(self, name: str, settings: Dict[str, Any]) -> Union[bool, str]:
        multiple = self._setting(settings, "multiple")
        if multiple is None:
            return False
        if not isinstance(multiple, (bool, str)):
            raise SchemaError(f"'multiple' for '{name}' must be a bool or a string")
        return multiple

    def _index(self, name: str, settings: Dict[str, Any]) -> int:
        index = settings.get("index")
        if index is None:
            return len(self._specs)
        if isinstance(index, bool) or not isinstance(index, int):
            raise SchemaError(f"'index' for '{name}' must be an integer")
        return index

    @contextlib.contextmanager
    def required(self) -> Iterator["Schema"]:
        """Force every option declared inside the block to be required."""
        with self._forcing(True):
            yield self

    @contextlib.contextmanager
    def optional(self) -> Iterator["Schema"]:
        """Force every option declared inside the block to be optional."""
        with self._forcing(False):
            yield self

    @contextlib.contextmanager
    def _forcing(self, required: bool) -> Iterator[None]:
        previous = self._forced_required
        self._forced_required = required
        try:
            yield
        finally:
            self._forced_required = previous

    @property
    def keys(self) -> List[str]:
        return list(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, key: Any) -> bool:
        return key_name(key) in self._specs

    def __getitem__(self, key: Any) -> OptionSpec:
        return self._specs[key_name(key)]

    def bind(self, values: Mapping) -> List[BoundOption]:
        """Validate ``values`` and return the non-empty options in output order.

        Raises:
            TypeError: If ``values`` is not a mapping.
            OptionError: On the first option that fails validation, or the
                first undeclared key when ``check_keys`` is on.
        """
        if not isinstance(values, Mapping):
            raise TypeError(
                f"invalid input: expected a mapping, got {type(values).__name__}"
            )

        remaining = dict(values)
        bound = []
        for name, spec in self._specs.items():
            option = spec.bind(self._take(remaining, name))
            option.validate()
            bound.append(option)

        if self.check_keys and remaining:
            raise OptionUnknown(key_name(next(iter(remaining))))

        selected = [option for option in bound if not option.is_empty]
        # sorted() is stable, so equal indexes keep declaration order
        return sorted(selected, key=lambda option: option.index)

    @staticmethod
    def _take(remaining: Dict[Any, Any], name: str) -> Any:
        value = None
        for key in [k for k in remaining if key_name(k) == name]:
            candidate = remaining.pop(key)
            if value is None:
                value = candidate
        return value

    def render(
        self,
        values: Mapping,
        form: Union[Form, str] = Form.ARGV,
        quoting: Union[Quoting, str, None] = None,
    ) -> Union[List[str], str]:
        form = Form(form)
        bound = self.bind(values)
        LOG.debug(
            "Rendering %d of %d options as %s", len(bound), len(self), form.value
        )
        if form is Form.SHELL:
            style = self.quoting if quoting is None else Quoting(quoting)
            rendered = (option.to_shell(style) for option in bound)
            return " ".join(text for text in rendered if text)
        return [token for option in bound for token in option.to_argv()]

    def argv(self, values: Mapping) -> List[str]:
        """Render ``values`` as a list suitable for an exec-style call."""
        return self.render(values, Form.ARGV)

    def shell(self, values: Mapping, quoting: Union[Quoting, str, None] = None) -> str:
        """Render ``values`` as a quoted string suitable for a shell."""
        return self.render(values, Form.SHELL, quoting)

    def __repr__(self) -> str:
        return f"Schema(keys={self.keys!r}, check_keys={self.check_keys!r})"


def options(
    definition: Optional[Callable[[Schema], Any]] = None, **config: Any
) -> Schema:
    """Build a Schema from ``config`` and let ``definition`` declare its options."""
    schema = Schema(**config)
    if definition is not None:
        definition(schema)
    return schema
