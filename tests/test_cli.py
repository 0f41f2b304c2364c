"""Smoke tests for the CLI.

These tests verify CLI commands against a temporary on-disk store.
"""

import json

import pytest
from typer.testing import CliRunner

from press_cache import __version__
from press_cache.artifacts.cache_key import derive_key
from press_cache.cli import app
from press_cache.types import component_info

runner = CliRunner()


@pytest.fixture
def disk_env(tmp_path, monkeypatch):
    """Point the CLI at a temporary on-disk store."""
    compressed_dir = tmp_path / "compressed"
    monkeypatch.setenv("PRESS_STORAGE", "disk")
    monkeypatch.setenv("PRESS_COMPRESSED_DIR", str(compressed_dir))
    return compressed_dir


@pytest.fixture
def sources(tmp_path):
    """A JavaScript and a CSS source file."""
    js = tmp_path / "app.js"
    css = tmp_path / "site.css"
    js.write_text("var a = 1;\n")
    css.write_text("a { color: red; }\n")
    return js, css


class TestCLIHelp:
    """Test CLI help and version commands."""

    def test_help_returns_zero(self) -> None:
        """CLI --help should return exit code 0."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Press Cache" in result.stdout

    def test_version_flag(self) -> None:
        """CLI --version should print version and exit 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_no_args_shows_help(self) -> None:
        """CLI with no args should show help."""
        result = runner.invoke(app, [])
        assert "Usage:" in result.stdout


class TestCLIConfig:
    """Test CLI config command."""

    def test_config_command(self) -> None:
        """CLI config should show all sections."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Storage:" in result.stdout
        assert "Build coordination (ms):" in result.stdout
        assert "Max build time" in result.stdout
        assert "Poll interval" in result.stdout

    def test_config_json(self, disk_env) -> None:
        """CLI config --json should output the settings as JSON."""
        result = runner.invoke(app, ["config", "--json"])
        assert result.exit_code == 0
        assert '"storage": "disk"' in result.stdout
        assert "max_build_time_ms" in result.stdout


class TestCLIKey:
    """Test CLI key command."""

    def test_prints_key(self, sources) -> None:
        """key should print the derived artifact key."""
        js, _ = sources
        result = runner.invoke(app, ["key", str(js), "--kind", "js"])
        assert result.exit_code == 0
        assert result.stdout.strip() == derive_key([component_info(js)], "js")

    def test_missing_file(self, tmp_path) -> None:
        """key should fail for missing files."""
        result = runner.invoke(app, ["key", str(tmp_path / "missing.js")])
        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestCLICompile:
    """Test CLI compile command."""

    def test_compile_then_cache_hit(self, disk_env, sources) -> None:
        """A second compile of the same files should be a cache hit."""
        js, _ = sources

        first = runner.invoke(app, ["compile", str(js), "--kind", "js"])
        second = runner.invoke(app, ["compile", str(js), "--kind", "js"])

        assert first.exit_code == 0
        assert "built" in first.stdout
        assert second.exit_code == 0
        assert "cache hit" in second.stdout

        key = derive_key([component_info(js)], "js")
        assert (disk_env / key).read_text() == "var a = 1;\n"

    def test_compile_json(self, disk_env, sources) -> None:
        """compile --json should report key and cache status."""
        js, _ = sources
        result = runner.invoke(app, ["compile", str(js), "-k", "js", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["key"] == derive_key([component_info(js)], "js")
        assert data["cache_hit"] is False
        assert data["length"] == len("var a = 1;\n")

    def test_compile_output(self, disk_env, sources, tmp_path) -> None:
        """compile --output should write the stored bytes."""
        _, css = sources
        output = tmp_path / "dist" / "site.min.css"
        result = runner.invoke(
            app, ["compile", str(css), "--kind", "css", "--output", str(output)]
        )
        assert result.exit_code == 0
        assert output.read_text() == "a { color: red; }\n"


class TestCLIClearCache:
    """Test CLI clear-cache command."""

    def test_clear_by_kind(self, disk_env, sources) -> None:
        """clear-cache js should remove only js artifacts."""
        js, css = sources
        runner.invoke(app, ["compile", str(js), "--kind", "js"])
        runner.invoke(app, ["compile", str(css), "--kind", "css"])

        result = runner.invoke(app, ["clear-cache", "js"])

        assert result.exit_code == 0
        assert "Removed 1 js artifact(s)" in result.stdout
        assert [p.suffix for p in disk_env.iterdir()] == [".css"]

    def test_clear_all(self, disk_env, sources) -> None:
        """clear-cache without a kind should remove everything."""
        js, css = sources
        runner.invoke(app, ["compile", str(js), "--kind", "js"])
        runner.invoke(app, ["compile", str(css), "--kind", "css"])

        result = runner.invoke(app, ["clear-cache"])

        assert result.exit_code == 0
        assert "Removed 2" in result.stdout


class TestCLIInProcessHint:
    """Test the hint printed when artifacts only live for one process."""

    @pytest.fixture
    def memory_env(self, monkeypatch):
        monkeypatch.setenv("PRESS_STORAGE", "memory")
        monkeypatch.delenv("PRESS_SHARED_CACHE_DIR", raising=False)

    def test_compile_warns_for_in_process_memory(self, memory_env, sources) -> None:
        """compile with private memory storage should explain the cache is lost."""
        js, _ = sources
        result = runner.invoke(app, ["compile", str(js), "--kind", "js"])
        assert result.exit_code == 0
        assert "PRESS_SHARED_CACHE_DIR" in result.stdout

    def test_clear_warns_for_in_process_memory(self, memory_env) -> None:
        """clear-cache with private memory storage should explain the zero count."""
        result = runner.invoke(app, ["clear-cache"])
        assert result.exit_code == 0
        assert "Removed 0" in result.stdout
        assert "PRESS_SHARED_CACHE_DIR" in result.stdout

    def test_no_warning_with_shared_cache(self, monkeypatch, tmp_path, sources) -> None:
        """A shared cache directory persists, so no hint is printed."""
        monkeypatch.setenv("PRESS_STORAGE", "memory")
        monkeypatch.setenv("PRESS_SHARED_CACHE_DIR", str(tmp_path / "shared"))
        js, _ = sources

        first = runner.invoke(app, ["compile", str(js), "--kind", "js"])
        second = runner.invoke(app, ["compile", str(js), "--kind", "js"])

        assert first.exit_code == 0
        assert "PRESS_SHARED_CACHE_DIR" not in first.stdout
        assert "cache hit" in second.stdout

    def test_no_warning_for_disk(self, disk_env, sources) -> None:
        """Disk storage persists between runs, so no hint is printed."""
        js, _ = sources
        result = runner.invoke(app, ["compile", str(js), "--kind", "js"])
        assert "PRESS_SHARED_CACHE_DIR" not in result.stdout

    def test_json_output_has_no_warning(self, memory_env, sources) -> None:
        """compile --json should stay machine-readable."""
        js, _ = sources
        result = runner.invoke(app, ["compile", str(js), "-k", "js", "--json"])
        assert json.loads(result.stdout)["cache_hit"] is False
