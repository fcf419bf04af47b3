"""
ai-sync configuration management (YAML).

Precedence (in increasing order):
  1) Bundled defaults (``ai_sync/data/config/defaults.yaml``)
  2) Project config (``<repo_root>/.ai/config.yaml``)
  3) Environment overrides (``AI_SYNC_*``)

Environment overrides:
- Path separator: double underscore ``__`` (e.g.,
  ``AI_SYNC_composition__max_include_depth=3``).
- Type coercion: bool/int/float/JSON-like strings are coerced.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import jsonschema
import yaml

from .exceptions import ConfigError
from .targets import normalize_targets

logger = logging.getLogger(__name__)

ENV_PREFIX = "AI_SYNC_"
PROJECT_CONFIG_DIR = ".ai"
PROJECT_CONFIG_FILE = "config.yaml"


def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk up from ``start`` to the first directory holding ``.ai/`` or ``.git/``.

    Falls back to ``start`` (or the current directory) when neither is found.
    """
    origin = Path(start or Path.cwd()).resolve()
    for candidate in [origin, *origin.parents]:
        if (candidate / PROJECT_CONFIG_DIR).is_dir() or (candidate / ".git").exists():
            return candidate
    return origin


class ConfigManager:
    """Load, merge, and validate ai-sync configuration.

    Typical usage:

    ```python
    mgr = ConfigManager(repo_root)
    cfg = mgr.load_config(validate=True)
    depth = cfg["composition"]["max_include_depth"]
    ```

    Attributes:
        repo_root: Repository root used to resolve the project config file.
        project_config_path: ``<repo_root>/.ai/config.yaml``.
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else find_repo_root()
        self.project_config_path = self.repo_root / PROJECT_CONFIG_DIR / PROJECT_CONFIG_FILE

    # ---------- Merge helpers ----------
    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge ``override`` into ``base`` returning a copy.

        Dicts are merged recursively. Lists support simple strategies:
        - If override list begins with ``"+"``, append the remaining items.
        - If override list begins with ``"="``, replace with the remaining items.
        - Otherwise, replace the entire list with the override list.
        """
        result: Dict[str, Any] = dict(base)
        for key, value in (override or {}).items():
            if key in result:
                if isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = self.deep_merge(result[key], value)
                elif isinstance(result[key], list) and isinstance(value, list):
                    result[key] = self._merge_arrays(result[key], value)
                else:
                    result[key] = value
            else:
                result[key] = value
        return result

    def _merge_arrays(self, base: List[Any], override: List[Any]) -> List[Any]:
        if not override:
            return base
        first = override[0]
        if first == "+":
            return [*base, *override[1:]]
        if first == "=":
            return list(override[1:])
        return list(override)

    # ---------- IO helpers ----------
    def load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load a YAML mapping; an absent file yields ``{}``.

        Raises:
            ConfigError: If the file holds invalid YAML or is not a mapping.
        """
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}", context={"path": str(path)}) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a YAML mapping", context={"path": str(path)})
        return data

    # ---------- Environment overrides ----------
    def _coerce_type(self, value: str) -> Any:
        s = value.strip()
        low = s.lower()
        if low in {"true", "false"}:
            return low == "true"
        if re.fullmatch(r"[-+]?\d+", s):
            return int(s)
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return s
        return s

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            path = [seg for seg in raw.split("__")]
            if not raw or any(seg == "" for seg in path):
                raise ConfigError(
                    f"Malformed {ENV_PREFIX}* key: {key!r}. Use double underscores between parts.",
                    context={"key": key},
                )
            yield path, self._coerce_type(os.environ[key])

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        """Apply ``AI_SYNC_*`` overrides in-place to ``cfg``."""
        for path, value in self._iter_env_overrides():
            current = cfg
            for seg in path[:-1]:
                nxt = current.get(seg)
                if not isinstance(nxt, dict):
                    nxt = {}
                    current[seg] = nxt
                current = nxt
            current[path[-1]] = value
            logger.debug("Config override from environment: %s", ".".join(path))

    # ---------- Validation ----------
    def validate_schema(self, config: Dict[str, Any]) -> None:
        """Validate configuration against the bundled JSON schema.

        Raises:
            ConfigError: If validation fails.
        """
        from ai_sync.data import read_json

        schema = read_json("config", "schemas/config.schema.json")
        try:
            jsonschema.validate(instance=config, schema=schema)
        except jsonschema.ValidationError as e:
            location = ".".join(str(p) for p in e.absolute_path) or "<root>"
            raise ConfigError(
                f"Invalid configuration at {location}: {e.message}",
                context={"path": location},
            ) from e

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load configuration with correct precedence and optional validation.

        Precedence (lowest → highest): defaults → project → env.
        """
        from ai_sync.data import read_yaml

        cfg: Dict[str, Any] = copy.deepcopy(read_yaml("config", "defaults.yaml"))
        cfg = self.deep_merge(cfg, self.load_yaml(self.project_config_path))
        self.apply_env_overrides(cfg)

        if validate:
            self.validate_schema(cfg)
        try:
            cfg["targets"] = normalize_targets(cfg.get("targets"))
        except ValueError as e:
            raise ConfigError(str(e), context={"path": "targets"}) from e
        return cfg


__all__ = ["ConfigManager", "find_repo_root", "ENV_PREFIX"]
