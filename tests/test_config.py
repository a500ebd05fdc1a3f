"""
Tests for blobpub configuration loading.

Tests verify:
- Config files are found by walking up from the start directory
- pyproject.toml is used only when it has a [tool.blobpub] table
- Environment variables override the config file
- Broken or invalid files raise ConfigFileError
"""

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from blobpub.config import config_get, load_config
from blobpub.core.container import get_container
from blobpub.core.exceptions import ConfigFileError
from blobpub.core.interfaces.logger import ILogger
from blobpub.core.models import DEFAULT_FOLDER, BlobpubConfig
from blobpub.core.settings import find_config_file, load_settings

SAMPLE_CONFIG = """
project_name = "testupload"
dist = "build/dist"

[[blobs]]
bucket = "releases"
region = "us-east-1"
ids = "foo, bar"

[[blobs]]
provider = "gs"
bucket = "{{ .Env.GCS_BUCKET }}"
folder = "{{ .ProjectName }}/nightly"
acl = "publicRead"

[publish]
parallelism = 2
timeout = 120

[logging]
level = "info"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep BLOBPUB_* variables from the outer environment out of the tests."""
    for name in list(os.environ):
        if name.startswith("BLOBPUB_"):
            monkeypatch.delenv(name)


class TestFindConfigFile:
    """Tests for find_config_file."""

    def test_finds_in_start_dir(self, tmp_path: Path) -> None:
        config = tmp_path / ".blobpub.toml"
        config.write_text(SAMPLE_CONFIG)
        assert find_config_file(str(tmp_path)) == config

    def test_walks_up(self, tmp_path: Path) -> None:
        config = tmp_path / "blobpub.toml"
        config.write_text(SAMPLE_CONFIG)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(str(nested)) == config

    def test_dotfile_preferred(self, tmp_path: Path) -> None:
        (tmp_path / "blobpub.toml").write_text("")
        (tmp_path / ".blobpub.toml").write_text("")
        assert find_config_file(str(tmp_path)) == tmp_path / ".blobpub.toml"

    def test_pyproject_with_section(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool.blobpub]\nproject_name = "fromproject"\n')
        assert find_config_file(str(tmp_path)) == pyproject

    def test_pyproject_without_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        found = find_config_file(str(tmp_path))
        assert found != tmp_path / "pyproject.toml"

    def test_unparsable_pyproject_skipped(self, tmp_path: Path) -> None:
        config = tmp_path / ".blobpub.toml"
        config.write_text("")
        nested = tmp_path / "inner"
        nested.mkdir()
        (nested / "pyproject.toml").write_text("not = [valid")
        assert find_config_file(str(nested)) == config


class TestLoadConfig:
    """Tests for load_config and load_settings."""

    def test_loads_sample(self, tmp_path: Path) -> None:
        (tmp_path / ".blobpub.toml").write_text(SAMPLE_CONFIG)

        config = load_config(start_dir=str(tmp_path))

        assert isinstance(config, BlobpubConfig)
        assert config.project_name == "testupload"
        assert config.dist == "build/dist"
        first, second = config.blobs
        assert (first.provider, first.bucket, first.ids) == ("s3", "releases", ["foo", "bar"])
        assert first.folder == DEFAULT_FOLDER
        assert second.provider == "gs"
        assert second.bucket == "{{ .Env.GCS_BUCKET }}"
        assert config.publish.parallelism == 2
        assert config.publish.target_parallelism == 2
        assert config.publish.timeout == 120.0
        assert config.logging.level == "info"

    def test_pyproject_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "x"\n\n[tool.blobpub]\nproject_name = "fromproject"\n'
            '\n[[tool.blobpub.blobs]]\nbucket = "b"\n'
        )
        config = load_config(start_dir=str(tmp_path))
        assert config.project_name == "fromproject"
        assert [b.bucket for b in config.blobs] == ["b"]

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('project_name = "custom"\n')
        settings = load_settings(config_path=path)
        assert settings.project_name == "custom"
        assert settings.config_file == str(path)

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch) -> None:
        (tmp_path / ".blobpub.toml").write_text(SAMPLE_CONFIG)
        monkeypatch.setenv("BLOBPUB_PUBLISH__PARALLELISM", "8")
        monkeypatch.setenv("BLOBPUB_PROJECT_NAME", "fromenv")

        config = load_config(start_dir=str(tmp_path))

        assert config.publish.parallelism == 8
        assert config.publish.timeout == 120.0
        assert config.project_name == "fromenv"

    def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / ".blobpub.toml").write_text(SAMPLE_CONFIG)
        config = load_config(start_dir=str(tmp_path), dist="elsewhere")
        assert config.dist == "elsewhere"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / ".blobpub.toml"
        path.write_text("[publish\nparallelism = ")
        with pytest.raises(ConfigFileError) as exc_info:
            load_config(start_dir=str(tmp_path))
        assert exc_info.value.context["file_path"] == str(path)

    def test_load_failure_is_logged(self, tmp_path: Path) -> None:
        logger = MagicMock(spec=ILogger)
        get_container().register_singleton(ILogger, implementation=logger)
        (tmp_path / ".blobpub.toml").write_text("[publish\n")
        with pytest.raises(ConfigFileError):
            load_config(start_dir=str(tmp_path))
        logger.error.assert_called_once()

    def test_invalid_values(self, tmp_path: Path) -> None:
        (tmp_path / ".blobpub.toml").write_text("[publish]\nparallelism = 0\n")
        with pytest.raises(ConfigFileError, match="Invalid configuration"):
            load_config(start_dir=str(tmp_path))

    def test_blob_without_bucket(self, tmp_path: Path) -> None:
        (tmp_path / ".blobpub.toml").write_text('[[blobs]]\nprovider = "s3"\n')
        with pytest.raises(ConfigFileError):
            load_config(start_dir=str(tmp_path))

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".blobpub.toml").write_text(
            '[[blobs]]\nbucket = "b"\nsomething = 1\n\n[unrelated]\nkey = "v"\n'
        )
        assert load_config(start_dir=str(tmp_path)).blobs[0].bucket == "b"


class TestConfigGet:
    """Tests for dotted key access."""

    def test_config_get(self, tmp_path: Path) -> None:
        (tmp_path / ".blobpub.toml").write_text(SAMPLE_CONFIG)
        assert config_get("publish.parallelism", start_dir=str(tmp_path)) == 2
        assert config_get("logging.level", start_dir=str(tmp_path)) == "info"
        assert config_get("publish.nope", start_dir=str(tmp_path)) is None
