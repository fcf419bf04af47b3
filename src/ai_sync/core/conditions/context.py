"""Project context for condition evaluation.

A :class:`ProjectContext` is the run-scoped view of one project: it answers
dependency, path, ``pkg:`` and ``var:`` lookups and memoizes every manifest it
parses so the same question gets the same answer for the whole run.

Build one per validation/generation run with :func:`build_project_context` and
pass it explicitly to the evaluator. There is no global instance and no
invalidation: when manifests may have changed, build a new context.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..utils.fs import dir_exists, file_exists
from .errors import UnknownNamespaceError
from .manifests import Dependencies, load_dependencies, load_package_json, normalize_dependency_name
from .models import PACKAGE_ECOSYSTEMS, Identifier

logger = logging.getLogger(__name__)

MISSING: Any = object()


def stringify_value(value: Any) -> str:
    """Render a manifest or variable value for ``==`` / ``!=`` comparison.

    Booleans become ``true`` / ``false``, integral floats lose their ``.0``,
    ``None`` becomes ``null`` and containers are rendered as compact JSON.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    return str(value)


def resolve_dotted(data: Mapping[str, Any], path: str) -> Any:
    """Look up ``a.b.c`` inside nested mappings; returns MISSING when absent.

    A key containing dots that exists verbatim at the current level wins over
    descending (``pkg:lint-staged`` and ``pkg:exports./`` both work).
    """
    if path in data:
        return data[path]
    current: Any = data
    for part in path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return MISSING
    return current


class ProjectContext:
    """Memoized view of a project's manifests and filesystem.

    Attributes:
        project_root: Directory all lookups are rooted at
        variables: Named values consulted by ``var:`` terms
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        variables: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.project_root = Path(os.path.abspath(project_root))
        self.variables: Dict[str, Any] = dict(variables or {})
        self._dependencies: Dict[str, Dependencies] = {}
        self._paths: Dict[Tuple[str, str], bool] = {}
        self._package_json: Optional[Dict[str, Any]] = None

    # ---------- Dependencies ----------
    async def dependencies(self, ecosystem: str) -> Dependencies:
        """Return the parsed dependencies of ``ecosystem`` (loaded at most once).

        Raises:
            ManifestError: If a present manifest cannot be read or parsed.
        """
        cached = self._dependencies.get(ecosystem)
        if cached is not None:
            return cached
        deps = await asyncio.to_thread(load_dependencies, ecosystem, self.project_root)
        # Concurrent first lookups may both load; keep whichever landed first.
        return self._dependencies.setdefault(ecosystem, deps)

    async def has_dependency(self, ecosystem: str, name: str) -> bool:
        deps = await self.dependencies(ecosystem)
        return normalize_dependency_name(ecosystem, name) in deps

    # ---------- Filesystem ----------
    async def path_exists(self, kind: str, relative_path: str) -> bool:
        """Check ``relative_path`` under the project root as a ``file`` or ``dir``."""
        key = (kind, relative_path)
        if key in self._paths:
            return self._paths[key]
        # Names are always rooted at the project, even when written absolute.
        target = Path(os.path.join(self.project_root, relative_path.lstrip("/\\")))
        if kind == "dir":
            exists = await dir_exists(target)
        else:
            exists = await file_exists(target)
        self._paths[key] = exists
        return exists

    # ---------- Values ----------
    async def package_json(self) -> Dict[str, Any]:
        if self._package_json is None:
            data = await asyncio.to_thread(load_package_json, self.project_root)
            if self._package_json is None:
                self._package_json = data
        return self._package_json

    async def package_field(self, path: str) -> Any:
        """Resolve a dotted field of package.json; MISSING when absent."""
        return resolve_dotted(await self.package_json(), path)

    def variable(self, name: str) -> Any:
        """Resolve a project variable (dotted paths descend into mappings)."""
        return resolve_dotted(self.variables, name)

    # ---------- Dispatch ----------
    async def lookup(self, identifier: Identifier) -> Tuple[bool, Any]:
        """Answer ``identifier`` as ``(exists, value)``.

        ``value`` is MISSING for namespaces that carry no value.

        Raises:
            ManifestError: On unreadable or malformed manifests.
        """
        namespace, name = identifier.namespace, identifier.name
        if namespace in PACKAGE_ECOSYSTEMS:
            return await self.has_dependency(namespace, name), MISSING
        if namespace in ("file", "dir"):
            return await self.path_exists(namespace, name), MISSING
        if namespace == "pkg":
            value = await self.package_field(name)
            return value is not MISSING, value
        if namespace == "var":
            value = self.variable(name)
            return value is not MISSING, value
        raise UnknownNamespaceError(f"No lookup for namespace '{namespace}'", expression=str(identifier))


def build_project_context(
    base_dir: Union[str, Path],
    variables: Optional[Mapping[str, Any]] = None,
) -> ProjectContext:
    """Create a fresh, empty context rooted at ``base_dir``.

    Nothing is read until the first lookup.
    """
    context = ProjectContext(base_dir, variables)
    logger.debug("Built project context for %s", context.project_root)
    return context


__all__ = [
    "MISSING",
    "ProjectContext",
    "build_project_context",
    "resolve_dotted",
    "stringify_value",
]
