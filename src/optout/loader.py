"""
Schema documents in YAML.

Document shape:
  check_keys: <bool>              # reject undeclared input keys, default true
  required: <bool>                # global default for every option
  multiple: <bool|string>         # global default for every option
  arg_separator: <string>         # global default for every option
  quoting: posix|windows          # shell quoting style, default posix
  options:
    - key: <string>               # required, unique
      switch: <string>            # e.g. "-a", "--prefix="
      required: <bool>
      multiple: <bool|string>
      default: <any>
      arg_separator: <string>
      index: <int>
      # At most one rule:
      pattern: <regex>
      choices: [<value>, ...]
      type: str|int|float|bool
      boolean: true
      file: {under: <path|{pattern: regex}>, named: <name|{pattern: regex}>,
             permissions: <rwx>, exists: <bool>}
      dir: { ... same as file ... }
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import SchemaError
from .paths import Dir, File, PathRules
from .schema import SETTINGS, Schema
from .validators import Boolean

LOG = logging.getLogger("optout.loader")

TYPES = {"str": str, "int": int, "float": float, "bool": bool}
RULE_FIELDS = ("pattern", "choices", "type", "boolean", "file", "dir")
GLOBAL_FIELDS = ("check_keys", "required", "multiple", "arg_separator", "quoting")


def _require_str(d: Dict[str, Any], key: str) -> str:
    if key not in d:
        raise SchemaError(f"Missing required field '{key}'")
    val = d[key]
    if isinstance(val, str) and val != "":
        return val
    raise SchemaError(f"Field '{key}' must be a non-empty string")


def _optional_bool(
    d: Dict[str, Any], key: str, default: Optional[bool] = False
) -> Optional[bool]:
    val = d.get(key, default)
    if isinstance(val, bool) or (val is None and default is None):
        return val
    raise SchemaError(f"Field '{key}' must be a boolean")


def _optional_str(d: Dict[str, Any], key: str) -> Optional[str]:
    val = d.get(key)
    if val is None or isinstance(val, str):
        return val
    raise SchemaError(f"Field '{key}' must be a string")


def _compile(pattern: Any, where: str) -> "re.Pattern":
    if not isinstance(pattern, str):
        raise SchemaError(f"{where}: pattern must be a string")
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise SchemaError(f"{where}: invalid pattern '{pattern}': {exc}") from exc


def _path_or_pattern(value: Any, where: str) -> Any:
    if isinstance(value, dict):
        if set(value) != {"pattern"}:
            raise SchemaError(f"{where}: expected a string or {{pattern: ...}}")
        return _compile(value["pattern"], where)
    if isinstance(value, str) and value != "":
        return value
    raise SchemaError(f"{where}: expected a string or {{pattern: ...}}")


def _parse_path_rules(marker: type, obj: Any, where: str) -> PathRules:
    if obj is None:
        obj = {}
    if not isinstance(obj, dict):
        raise SchemaError(f"{where} must be a mapping")
    extra = sorted(set(obj) - {"under", "named", "permissions", "exists"})
    if extra:
        raise SchemaError(f"{where}: unsupported fields {', '.join(extra)}")

    rules = marker.rules()
    if "under" in obj:
        rules.under(_path_or_pattern(obj["under"], f"{where}.under"))
    if "named" in obj:
        rules.named(_path_or_pattern(obj["named"], f"{where}.named"))
    if "permissions" in obj:
        rules.permissions(_require_str(obj, "permissions"))
    if "exists" in obj:
        rules.exists(_optional_bool(obj, "exists"))
    return rules


def _parse_rule(obj: Dict[str, Any], name: str) -> Any:
    present = [f for f in RULE_FIELDS if f in obj]
    if len(present) > 1:
        raise SchemaError(
            f"Option '{name}' can only have one rule, got {', '.join(present)}"
        )
    if not present:
        return None

    field = present[0]
    value = obj[field]
    where = f"Option '{name}' {field}"
    if field == "pattern":
        return _compile(value, where)
    if field == "choices":
        if not isinstance(value, list) or not value:
            raise SchemaError(f"{where} must be a non-empty list")
        return value
    if field == "type":
        if value not in TYPES:
            raise SchemaError(f"{where} must be one of {', '.join(TYPES)}")
        return TYPES[value]
    if field == "boolean":
        if value is not True:
            raise SchemaError(f"{where} must be true when given")
        return Boolean
    return _parse_path_rules(File if field == "file" else Dir, value, where)


def _parse_option(schema: Schema, obj: Any) -> None:
    if not isinstance(obj, dict):
        raise SchemaError("Each option must be a mapping")
    name = _require_str(obj, "key")

    extra = sorted(set(obj) - {"key", "switch", *SETTINGS, *RULE_FIELDS})
    if extra:
        raise SchemaError(f"Option '{name}': unsupported fields {', '.join(extra)}")

    args: List[Any] = []
    if "switch" in obj:
        args.append(_require_str(obj, "switch"))
    rule = _parse_rule(obj, name)
    if rule is not None:
        args.append(rule)

    settings = {k: obj[k] for k in SETTINGS if k in obj}
    if "required" in settings:
        settings["required"] = _optional_bool(obj, "required", None)
    if "arg_separator" in settings:
        settings["arg_separator"] = _optional_str(obj, "arg_separator")
    schema.on(name, *args, **settings)


def parse_schema(document: Dict[str, Any]) -> Schema:
    """Build a Schema from a YAML-loaded mapping."""
    if not isinstance(document, dict):
        raise SchemaError("Top-level schema must be a mapping")

    options = document.get("options")
    if options is None or not isinstance(options, list):
        raise SchemaError("Top-level 'options' must be a list")

    extra = sorted(set(document) - {"options", *GLOBAL_FIELDS})
    if extra:
        raise SchemaError(f"Unsupported top-level fields: {', '.join(extra)}")

    quoting = document.get("quoting", "posix")
    if quoting not in ("posix", "windows"):
        raise SchemaError("Field 'quoting' must be 'posix' or 'windows'")

    schema = Schema(
        check_keys=_optional_bool(document, "check_keys", True),
        required=_optional_bool(document, "required", None),
        multiple=document.get("multiple"),
        arg_separator=_optional_str(document, "arg_separator"),
        quoting=quoting,
    )
    for item in options:
        _parse_option(schema, item)
    LOG.debug("Parsed schema with %d options", len(schema))
    return schema


def _load_yaml(path: Path) -> Any:
    path = Path(path)
    try:
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        LOG.error("YAML error while reading %s: %s", path, e)
        raise SchemaError(f"Invalid YAML in {path}: {e}") from e
    except FileNotFoundError as e:
        LOG.error("File not found: %s", e)
        raise SchemaError(str(e)) from e
    except UnicodeDecodeError as e:
        LOG.error("Encoding error while reading %s: %s", path, e)
        raise SchemaError(f"Could not decode {path}: {e}") from e
    except PermissionError as e:
        LOG.error("Permission denied when reading %s: %s", path, e)
        raise SchemaError(f"Permission denied: {path}") from e
    except OSError as e:
        LOG.error("I/O error while reading %s: %s", path, e)
        raise SchemaError(f"Could not read {path}: {e}") from e


def load_schema(path: Path) -> Schema:
    """Load and parse a YAML schema document."""
    data = _load_yaml(path)
    if data is None:
        raise SchemaError("Schema file is empty")
    return parse_schema(data)


def load_values(path: Optional[Path]) -> Dict[str, Any]:
    """Load the input mapping to render; a missing path means no values."""
    if path is None:
        return {}
    data = _load_yaml(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SchemaError(f"Values file must contain a mapping: {path}")
    return data
