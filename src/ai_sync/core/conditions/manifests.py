"""Dependency manifest readers, one per package ecosystem.

Each reader takes the project root and returns a mapping of dependency name
to version (or ``True`` when the manifest carries no version). Names are keyed
through :func:`normalize_dependency_name` so lookups follow each ecosystem's
own identifier rules.

A missing manifest yields an empty mapping. A manifest that exists but cannot
be read or parsed raises :class:`ManifestError`.
"""
from __future__ import annotations

import json
import logging
import re
import tomllib
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from .errors import ManifestError

logger = logging.getLogger(__name__)

Dependencies = Dict[str, Any]

_PEP503_RE = re.compile(r"[-_.]+")
_REQUIREMENT_NAME_RE = re.compile(r"^([A-Za-z0-9][A-Za-z0-9._-]*)")


def normalize_dependency_name(ecosystem: str, name: str) -> str:
    """Normalise ``name`` the way ``ecosystem`` compares package identifiers.

    - pip: PEP 503 (case-insensitive, runs of ``-``, ``_``, ``.`` folded)
    - composer, nuget: case-insensitive
    - everything else: exact
    """
    name = name.strip()
    if ecosystem == "pip":
        return _PEP503_RE.sub("-", name).lower()
    if ecosystem in ("composer", "nuget"):
        return name.lower()
    return name


def _read_optional(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read {path.name}: {e}", path=str(path)) from e


def _load_json_manifest(path: Path) -> Optional[Dict[str, Any]]:
    text = _read_optional(path)
    if text is None:
        return None
    try:
        data = json.loads(text) if text.strip() else {}
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path.name}: {e}", path=str(path)) from e
    if not isinstance(data, dict):
        raise ManifestError(f"{path.name} must contain a JSON object", path=str(path))
    return data


def _load_toml_manifest(path: Path) -> Optional[Dict[str, Any]]:
    text = _read_optional(path)
    if text is None:
        return None
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid TOML in {path.name}: {e}", path=str(path)) from e


def _merge_tables(ecosystem: str, deps: Dependencies, *tables: Any) -> None:
    for table in tables:
        if not isinstance(table, Mapping):
            continue
        for name, spec in table.items():
            version = spec if isinstance(spec, str) else True
            deps[normalize_dependency_name(ecosystem, str(name))] = version


def _add_requirement(deps: Dependencies, requirement: str) -> None:
    match = _REQUIREMENT_NAME_RE.match(requirement.strip())
    if match:
        deps[normalize_dependency_name("pip", match.group(1))] = True


# ---------- Ecosystem readers ----------


def load_npm_dependencies(project_root: Path) -> Dependencies:
    data = _load_json_manifest(project_root / "package.json")
    deps: Dependencies = {}
    if data is None:
        return deps
    _merge_tables(
        "npm",
        deps,
        data.get("dependencies"),
        data.get("devDependencies"),
        data.get("peerDependencies"),
        data.get("optionalDependencies"),
    )
    return deps


def load_pip_dependencies(project_root: Path) -> Dependencies:
    """Collect Python dependencies from requirements.txt, pyproject.toml and Pipfile."""
    deps: Dependencies = {}

    requirements = _read_optional(project_root / "requirements.txt")
    if requirements is not None:
        for raw_line in requirements.splitlines():
            line = raw_line.split("#", 1)[0].strip()
            # Option lines (-r other.txt, -e ., --index-url ...) name no package.
            if not line or line.startswith("-"):
                continue
            _add_requirement(deps, line)

    pyproject = _load_toml_manifest(project_root / "pyproject.toml")
    if pyproject is not None:
        project = pyproject.get("project") or {}
        for requirement in project.get("dependencies") or []:
            _add_requirement(deps, str(requirement))
        for group in (project.get("optional-dependencies") or {}).values():
            for requirement in group or []:
                _add_requirement(deps, str(requirement))

        poetry = (pyproject.get("tool") or {}).get("poetry") or {}
        _merge_tables("pip", deps, poetry.get("dependencies"), poetry.get("dev-dependencies"))
        for group in (poetry.get("group") or {}).values():
            if isinstance(group, Mapping):
                _merge_tables("pip", deps, group.get("dependencies"))
        deps.pop("python", None)

    pipfile = _load_toml_manifest(project_root / "Pipfile")
    if pipfile is not None:
        _merge_tables("pip", deps, pipfile.get("packages"), pipfile.get("dev-packages"))

    return deps


def load_go_dependencies(project_root: Path) -> Dependencies:
    text = _read_optional(project_root / "go.mod")
    deps: Dependencies = {}
    if text is None:
        return deps

    in_require_block = False
    for raw_line in text.splitlines():
        line = raw_line.split("//", 1)[0].strip()
        if not line:
            continue
        if line.startswith("require ("):
            in_require_block = True
            continue
        if in_require_block and line.startswith(")"):
            in_require_block = False
            continue

        if line.startswith("require "):
            parts = line[len("require ") :].split()
        elif in_require_block:
            parts = line.split()
        else:
            continue
        if len(parts) >= 2:
            deps[parts[0]] = parts[1]
    return deps


def load_cargo_dependencies(project_root: Path) -> Dependencies:
    data = _load_toml_manifest(project_root / "Cargo.toml")
    deps: Dependencies = {}
    if data is None:
        return deps
    _merge_tables(
        "cargo",
        deps,
        data.get("dependencies"),
        data.get("dev-dependencies"),
        data.get("build-dependencies"),
        (data.get("workspace") or {}).get("dependencies"),
    )
    for target in (data.get("target") or {}).values():
        if isinstance(target, Mapping):
            _merge_tables("cargo", deps, target.get("dependencies"), target.get("dev-dependencies"))
    return deps


def load_composer_dependencies(project_root: Path) -> Dependencies:
    data = _load_json_manifest(project_root / "composer.json")
    deps: Dependencies = {}
    if data is None:
        return deps
    _merge_tables("composer", deps, data.get("require"), data.get("require-dev"))
    return deps


_GEM_RE = re.compile(r"""^\s*gem\s+["']([A-Za-z0-9_.-]+)["']""", re.MULTILINE)


def load_gem_dependencies(project_root: Path) -> Dependencies:
    text = _read_optional(project_root / "Gemfile")
    if text is None:
        return {}
    return {name: True for name in _GEM_RE.findall(text)}


def load_pub_dependencies(project_root: Path) -> Dependencies:
    path = project_root / "pubspec.yaml"
    text = _read_optional(path)
    deps: Dependencies = {}
    if text is None:
        return deps
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path.name}: {e}", path=str(path)) from e
    if not isinstance(data, dict):
        raise ManifestError(f"{path.name} must contain a YAML mapping", path=str(path))
    _merge_tables("pub", deps, data.get("dependencies"), data.get("dev_dependencies"))
    return deps


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def load_maven_dependencies(project_root: Path) -> Dependencies:
    path = project_root / "pom.xml"
    text = _read_optional(path)
    deps: Dependencies = {}
    if text is None:
        return deps
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ManifestError(f"Invalid XML in {path.name}: {e}", path=str(path)) from e

    for element in root.iter():
        if _local_name(element.tag) not in ("dependency", "plugin"):
            continue
        fields = {_local_name(child.tag): (child.text or "").strip() for child in element}
        artifact = fields.get("artifactId")
        if not artifact:
            continue
        version = fields.get("version") or True
        deps[artifact] = version
        if fields.get("groupId"):
            deps[f"{fields['groupId']}:{artifact}"] = version
    return deps


_GRADLE_COORDINATE_RE = re.compile(r"""['"]([A-Za-z0-9_.-]+):([A-Za-z0-9_.-]+)(?::([^'"]+))?['"]""")


def load_gradle_dependencies(project_root: Path) -> Dependencies:
    deps: Dependencies = {}
    for filename in ("build.gradle", "build.gradle.kts"):
        text = _read_optional(project_root / filename)
        if text is None:
            continue
        for group, artifact, version in _GRADLE_COORDINATE_RE.findall(text):
            deps[artifact] = version or True
            deps[f"{group}:{artifact}"] = version or True
    return deps


_NUGET_INCLUDE_RE = re.compile(r"""<PackageReference\b[^>]*\bInclude=["']([^"']+)["']""", re.IGNORECASE)
_NUGET_ID_RE = re.compile(r"""<package\b[^>]*\bid=["']([^"']+)["']""", re.IGNORECASE)


def load_nuget_dependencies(project_root: Path) -> Dependencies:
    deps: Dependencies = {}
    candidates = sorted(project_root.glob("*.csproj")) + [project_root / "packages.config"]
    for path in candidates:
        text = _read_optional(path)
        if text is None:
            continue
        for name in _NUGET_INCLUDE_RE.findall(text) + _NUGET_ID_RE.findall(text):
            deps[normalize_dependency_name("nuget", name)] = True
    return deps


MANIFEST_READERS: Dict[str, Callable[[Path], Dependencies]] = {
    "npm": load_npm_dependencies,
    "pip": load_pip_dependencies,
    "go": load_go_dependencies,
    "cargo": load_cargo_dependencies,
    "composer": load_composer_dependencies,
    "gem": load_gem_dependencies,
    "pub": load_pub_dependencies,
    "maven": load_maven_dependencies,
    "gradle": load_gradle_dependencies,
    "nuget": load_nuget_dependencies,
}


def load_dependencies(ecosystem: str, project_root: Path) -> Dependencies:
    """Dispatch to the reader for ``ecosystem``.

    Raises:
        KeyError: If ``ecosystem`` has no reader.
        ManifestError: If a present manifest is unreadable or malformed.
    """
    reader = MANIFEST_READERS[ecosystem]
    deps = reader(Path(project_root))
    logger.debug("Loaded %d %s dependencies from %s", len(deps), ecosystem, project_root)
    return deps


def load_package_json(project_root: Path) -> Dict[str, Any]:
    """Return the parsed package.json, or an empty dict when absent."""
    return _load_json_manifest(Path(project_root) / "package.json") or {}


__all__ = [
    "Dependencies",
    "MANIFEST_READERS",
    "normalize_dependency_name",
    "load_dependencies",
    "load_package_json",
    "load_npm_dependencies",
    "load_pip_dependencies",
    "load_go_dependencies",
    "load_cargo_dependencies",
    "load_composer_dependencies",
    "load_gem_dependencies",
    "load_pub_dependencies",
    "load_maven_dependencies",
    "load_gradle_dependencies",
    "load_nuget_dependencies",
]
