"""Tests for per-ecosystem dependency manifest readers."""
from __future__ import annotations

from pathlib import Path

import pytest

from ai_sync.core.conditions.errors import ManifestError
from ai_sync.core.conditions.manifests import (
    MANIFEST_READERS,
    load_dependencies,
    load_package_json,
    normalize_dependency_name,
)
from ai_sync.core.conditions.models import PACKAGE_ECOSYSTEMS
from helpers import write_json, write_text


class TestNormalizeDependencyName:
    def test_pip_follows_pep503(self) -> None:
        assert normalize_dependency_name("pip", "Django_REST.framework") == "django-rest-framework"

    def test_composer_is_case_insensitive(self) -> None:
        assert normalize_dependency_name("composer", "Laravel/Framework") == "laravel/framework"

    def test_npm_is_exact(self) -> None:
        assert normalize_dependency_name("npm", "React") == "React"


class TestReaders:
    def test_every_package_ecosystem_has_a_reader(self) -> None:
        assert set(MANIFEST_READERS) == set(PACKAGE_ECOSYSTEMS)

    @pytest.mark.parametrize("ecosystem", PACKAGE_ECOSYSTEMS)
    def test_missing_manifest_means_no_dependencies(self, tmp_path: Path, ecosystem: str) -> None:
        assert load_dependencies(ecosystem, tmp_path) == {}

    def test_npm_reads_all_dependency_tables(self, tmp_path: Path) -> None:
        write_json(
            tmp_path / "package.json",
            {
                "dependencies": {"react": "^18.2.0"},
                "devDependencies": {"typescript": "^5.0.0"},
                "peerDependencies": {"react-dom": "*"},
                "optionalDependencies": {"fsevents": "2.x"},
            },
        )
        deps = load_dependencies("npm", tmp_path)
        assert deps["react"] == "^18.2.0"
        assert set(deps) == {"react", "typescript", "react-dom", "fsevents"}

    def test_npm_invalid_json_raises(self, tmp_path: Path) -> None:
        write_text(tmp_path / "package.json", "{not json")
        with pytest.raises(ManifestError) as exc:
            load_dependencies("npm", tmp_path)
        assert exc.value.code == "MANIFEST_ERROR"
        assert exc.value.path.endswith("package.json")

    def test_pip_merges_requirements_pyproject_and_pipfile(self, tmp_path: Path) -> None:
        write_text(
            tmp_path / "requirements.txt",
            "# pinned\nDjango==4.2  # web\n-r dev.txt\nrequests[socks]>=2\n\n",
        )
        write_text(
            tmp_path / "pyproject.toml",
            '[project]\ndependencies = ["pydantic>=2"]\n'
            '[project.optional-dependencies]\ntest = ["pytest"]\n'
            '[tool.poetry.dependencies]\npython = "^3.11"\nFastAPI = "*"\n',
        )
        write_text(tmp_path / "Pipfile", '[packages]\nflask = "*"\n[dev-packages]\nblack = "*"\n')

        deps = load_dependencies("pip", tmp_path)
        assert {"django", "requests", "pydantic", "pytest", "fastapi", "flask", "black"} <= set(deps)
        assert "python" not in deps

    def test_go_reads_single_and_block_requires(self, tmp_path: Path) -> None:
        write_text(
            tmp_path / "go.mod",
            "module example.com/app\n\n"
            "require github.com/pkg/errors v0.9.1\n\n"
            "require (\n"
            "\tgithub.com/gin-gonic/gin v1.9.1\n"
            "\tgolang.org/x/sync v0.5.0 // indirect\n"
            ")\n",
        )
        deps = load_dependencies("go", tmp_path)
        assert deps == {
            "github.com/pkg/errors": "v0.9.1",
            "github.com/gin-gonic/gin": "v1.9.1",
            "golang.org/x/sync": "v0.5.0",
        }

    def test_cargo_reads_tables(self, tmp_path: Path) -> None:
        write_text(
            tmp_path / "Cargo.toml",
            '[package]\nname = "app"\n\n'
            '[dependencies]\nserde = { version = "1", features = ["derive"] }\ntokio = "1.35"\n\n'
            '[dev-dependencies]\nproptest = "1"\n\n'
            "[target.'cfg(unix)'.dependencies]\nnix = \"0.27\"\n",
        )
        deps = load_dependencies("cargo", tmp_path)
        assert deps["tokio"] == "1.35"
        assert deps["serde"] is True
        assert {"proptest", "nix"} <= set(deps)

    def test_cargo_invalid_toml_raises(self, tmp_path: Path) -> None:
        write_text(tmp_path / "Cargo.toml", "[dependencies\n")
        with pytest.raises(ManifestError):
            load_dependencies("cargo", tmp_path)

    def test_composer(self, tmp_path: Path) -> None:
        write_json(tmp_path / "composer.json", {"require": {"Laravel/Framework": "^10"}})
        assert "laravel/framework" in load_dependencies("composer", tmp_path)

    def test_gemfile(self, tmp_path: Path) -> None:
        write_text(tmp_path / "Gemfile", "source 'https://rubygems.org'\ngem 'rails', '~> 7.1'\n  gem \"rspec\"\n")
        assert set(load_dependencies("gem", tmp_path)) == {"rails", "rspec"}

    def test_pubspec(self, tmp_path: Path) -> None:
        write_text(
            tmp_path / "pubspec.yaml",
            "name: app\ndependencies:\n  flutter:\n    sdk: flutter\n  http: ^1.1.0\n"
            "dev_dependencies:\n  test: any\n",
        )
        assert {"flutter", "http", "test"} <= set(load_dependencies("pub", tmp_path))

    def test_maven_indexes_artifact_and_coordinate(self, tmp_path: Path) -> None:
        write_text(
            tmp_path / "pom.xml",
            '<project xmlns="http://maven.apache.org/POM/4.0.0"><dependencies>'
            "<dependency><groupId>org.junit</groupId><artifactId>junit-jupiter</artifactId>"
            "<version>5.10.0</version></dependency>"
            "</dependencies></project>",
        )
        deps = load_dependencies("maven", tmp_path)
        assert deps["junit-jupiter"] == "5.10.0"
        assert deps["org.junit:junit-jupiter"] == "5.10.0"

    def test_gradle(self, tmp_path: Path) -> None:
        write_text(
            tmp_path / "build.gradle.kts",
            'dependencies {\n    implementation("com.squareup.okhttp3:okhttp:4.12.0")\n}\n',
        )
        deps = load_dependencies("gradle", tmp_path)
        assert deps["okhttp"] == "4.12.0"
        assert "com.squareup.okhttp3:okhttp" in deps

    def test_nuget(self, tmp_path: Path) -> None:
        write_text(
            tmp_path / "App.csproj",
            '<Project><ItemGroup><PackageReference Include="Newtonsoft.Json" Version="13.0.3" />'
            "</ItemGroup></Project>",
        )
        assert "newtonsoft.json" in load_dependencies("nuget", tmp_path)


class TestLoadPackageJson:
    def test_absent_is_empty(self, tmp_path: Path) -> None:
        assert load_package_json(tmp_path) == {}

    def test_returns_parsed_document(self, tmp_path: Path) -> None:
        write_json(tmp_path / "package.json", {"name": "app", "type": "module"})
        assert load_package_json(tmp_path)["type"] == "module"
