"""Loading template bindings from files and the command line."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable

import msgspec
import yaml

from extfmt.exceptions import BindingsLoadError

log = logging.getLogger(__name__)

JSON_SUFFIXES = {".json"}


def load_bindings(path: Path) -> Dict[str, Any]:
    """Load a mapping of bindings from a JSON or YAML file.

    `.json` files are decoded as JSON, everything else as YAML. An empty
    YAML document yields no bindings.
    """
    try:
        if path.suffix.lower() in JSON_SUFFIXES:
            data = msgspec.json.decode(path.read_bytes())
        else:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise BindingsLoadError(str(path), exc.strerror or str(exc)) from exc
    except (msgspec.DecodeError, yaml.YAMLError) as exc:
        raise BindingsLoadError(str(path), str(exc)) from exc

    if not isinstance(data, dict):
        raise BindingsLoadError(str(path), "top level must be a mapping")

    log.info(f"Loaded {len(data)} bindings from {path}")
    return data


def parse_defines(defines: Iterable[str]) -> Dict[str, str]:
    """Parse `name=value` pairs given with -D into string bindings."""
    result: Dict[str, str] = {}
    for item in defines:
        name, sep, value = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Expected name=value, got '{item}'")
        result[name] = value
    return result
