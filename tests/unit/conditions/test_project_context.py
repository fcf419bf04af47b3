"""Tests for the run-scoped ProjectContext."""
from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from ai_sync.core.conditions.context import (
    MISSING,
    ProjectContext,
    build_project_context,
    resolve_dotted,
    stringify_value,
)
from ai_sync.core.conditions.errors import UnknownNamespaceError
from ai_sync.core.conditions.models import Identifier
from helpers import write_json, write_text


class TestStringifyValue:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, "true"),
            (False, "false"),
            (None, "null"),
            (3.0, "3"),
            (2.5, "2.5"),
            (18, "18"),
            ("module", "module"),
            ({"b": 1, "a": [1, 2]}, '{"a":[1,2],"b":1}'),
        ],
    )
    def test_stringify(self, value: object, expected: str) -> None:
        assert stringify_value(value) == expected


class TestResolveDotted:
    def test_nested_lookup(self) -> None:
        assert resolve_dotted({"a": {"b": {"c": 1}}}, "a.b.c") == 1

    def test_list_index(self) -> None:
        assert resolve_dotted({"files": ["dist", "src"]}, "files.1") == "src"

    def test_exact_key_with_dots_wins(self) -> None:
        assert resolve_dotted({"exports.": "x", "exports": {"": "y"}}, "exports.") == "x"

    def test_missing(self) -> None:
        assert resolve_dotted({"a": {}}, "a.b") is MISSING
        assert resolve_dotted({"a": [1]}, "a.5") is MISSING


class TestProjectContext:
    def test_build_is_lazy(self, tmp_path: Path) -> None:
        ctx = build_project_context(tmp_path)
        assert isinstance(ctx, ProjectContext)
        assert ctx.project_root == tmp_path
        assert ctx._dependencies == {}

    def test_dependency_lookup(self, tmp_path: Path) -> None:
        write_json(tmp_path / "package.json", {"dependencies": {"react": "18.2.0"}})
        ctx = build_project_context(tmp_path)
        assert asyncio.run(ctx.has_dependency("npm", "react")) is True
        assert asyncio.run(ctx.has_dependency("npm", "vue")) is False

    def test_dependencies_are_memoized_for_the_run(self, tmp_path: Path) -> None:
        write_json(tmp_path / "package.json", {"dependencies": {"react": "18.2.0"}})
        ctx = build_project_context(tmp_path)
        assert asyncio.run(ctx.has_dependency("npm", "react")) is True

        # Manifest changes after the first read are not observed by this context.
        write_json(tmp_path / "package.json", {"dependencies": {}})
        assert asyncio.run(ctx.has_dependency("npm", "react")) is True
        assert asyncio.run(build_project_context(tmp_path).has_dependency("npm", "react")) is False

    def test_concurrent_first_lookups_agree(self, tmp_path: Path) -> None:
        write_json(tmp_path / "package.json", {"dependencies": {"react": "18.2.0"}})
        ctx = build_project_context(tmp_path)

        async def run() -> list:
            return await asyncio.gather(*(ctx.dependencies("npm") for _ in range(5)))

        results = asyncio.run(run())
        assert all(r is results[0] for r in results)

    def test_pip_lookup_normalizes_names(self, tmp_path: Path) -> None:
        write_text(tmp_path / "requirements.txt", "Flask_SQLAlchemy==3.1\n")
        ctx = build_project_context(tmp_path)
        assert asyncio.run(ctx.has_dependency("pip", "flask-sqlalchemy")) is True

    def test_file_and_dir_checks(self, tmp_path: Path) -> None:
        write_text(tmp_path / "src" / "index.ts", "")
        ctx = build_project_context(tmp_path)
        assert asyncio.run(ctx.lookup(Identifier("file", "src/index.ts"))) == (True, MISSING)
        assert asyncio.run(ctx.lookup(Identifier("dir", "src")))[0] is True
        assert asyncio.run(ctx.lookup(Identifier("file", "src")))[0] is False
        assert asyncio.run(ctx.lookup(Identifier("dir", "src/index.ts")))[0] is False

    def test_absolute_names_stay_under_the_root(self, tmp_path: Path) -> None:
        write_text(tmp_path / "outside.txt", "")
        write_text(tmp_path / "proj" / "src" / "index.ts", "")
        ctx = build_project_context(tmp_path / "proj")
        assert asyncio.run(ctx.lookup(Identifier("file", str(tmp_path / "outside.txt"))))[0] is False
        assert asyncio.run(ctx.lookup(Identifier("file", "/src/index.ts")))[0] is True

    def test_pkg_lookup(self, tmp_path: Path) -> None:
        write_json(tmp_path / "package.json", {"type": "module", "engines": {"node": ">=20"}})
        ctx = build_project_context(tmp_path)
        assert asyncio.run(ctx.lookup(Identifier("pkg", "type"))) == (True, "module")
        assert asyncio.run(ctx.lookup(Identifier("pkg", "engines.node"))) == (True, ">=20")
        assert asyncio.run(ctx.lookup(Identifier("pkg", "private"))) == (False, MISSING)

    def test_var_lookup(self, tmp_path: Path) -> None:
        ctx = build_project_context(tmp_path, {"env": "production", "features": {"auth": True}})
        assert asyncio.run(ctx.lookup(Identifier("var", "env"))) == (True, "production")
        assert asyncio.run(ctx.lookup(Identifier("var", "features.auth"))) == (True, True)
        assert asyncio.run(ctx.lookup(Identifier("var", "missing")))[0] is False

    def test_unknown_namespace(self, tmp_path: Path) -> None:
        ctx = build_project_context(tmp_path)
        with pytest.raises(UnknownNamespaceError):
            asyncio.run(ctx.lookup(Identifier("bower", "jquery")))
