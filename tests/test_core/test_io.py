"""
Test Suite for Configuration Serialization Utilities.

Covers YAML save/load and parsing of flat properties files.
"""

# Standard Imports
from pathlib import Path

# Third-Party Imports
import pytest

# Internal Imports
from evalkit.core import Config, load_config_from_yaml, load_properties, save_config_as_yaml


# YAML
@pytest.mark.unit
def test_yaml_roundtrip_of_config(tmp_path):
    """A saved manifest loads back into an equal Config."""
    cfg = Config.from_properties({"metrics.model.name": "resnet", "test.min.f1": "0.7"})
    path = save_config_as_yaml(cfg, tmp_path / "nested" / "config.yaml")

    assert path.exists()
    assert Config.from_yaml(path) == cfg


@pytest.mark.unit
def test_save_yaml_converts_paths_and_tuples(tmp_path):
    """Paths become strings and tuples become lists."""
    path = save_config_as_yaml({"dir": Path("/tmp/x"), "shape": (1, 2)}, tmp_path / "raw.yaml")

    assert load_config_from_yaml(path) == {"dir": "/tmp/x", "shape": [1, 2]}


@pytest.mark.unit
def test_load_empty_yaml_returns_empty_dict(tmp_path):
    """An empty YAML file yields an empty mapping."""
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config_from_yaml(path) == {}


@pytest.mark.unit
def test_load_yaml_missing_file(tmp_path):
    """Loading a non-existent YAML file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_config_from_yaml(tmp_path / "missing.yaml")


# PROPERTIES
@pytest.mark.unit
def test_load_properties_parses_separators_and_comments(tmp_path):
    """Both '=' and ':' separate keys; '#' and '!' lines are comments."""
    path = tmp_path / "application.properties"
    path.write_text(
        "# quality gate\n"
        "test.min.accuracy=0.85\n"
        "! legacy comment\n"
        "\n"
        "metrics.model.name : vgg16\n"
        "dashboard.tracking.uri=http://localhost:5000\n"
    )

    props = load_properties(path)

    assert props == {
        "test.min.accuracy": "0.85",
        "metrics.model.name": "vgg16",
        "dashboard.tracking.uri": "http://localhost:5000",
    }


@pytest.mark.unit
def test_load_properties_missing_file(tmp_path):
    """Loading a non-existent properties file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_properties(tmp_path / "missing.properties")
