from __future__ import annotations

from pathlib import Path

import pytest

from reflow.config import ReflowConfig, load_config


def test_defaults_without_a_file():
    config = load_config()
    assert config.title_font_size_threshold == 20
    assert config.min_font_size == 16
    assert config.output_suffix == ".html"
    assert config.port == 3000


def test_yaml_overrides(tmp_path: Path):
    path = tmp_path / "reflow.yaml"
    path.write_text(
        "title_font_size_threshold: 28\n"
        "document_extensions: ['.PDF', '.json']\n"
        "workers: 2\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.title_font_size_threshold == 28
    assert config.document_extensions == (".pdf", ".json")
    assert config.workers == 2
    assert config.min_font_size == 16


def test_empty_yaml_gives_defaults(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ReflowConfig()


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "- a\n- b\n",
        "unknown_key: 1\n",
        "ordered_list_pattern: '(['\n",
        "workers: 0\n",
        "key: [unclosed\n",
    ],
)
def test_invalid_configuration(tmp_path: Path, content: str):
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_overrides_skip_none():
    config = ReflowConfig().with_overrides(output_dir="out", workers=None, port=8080)
    assert config.output_dir == "out"
    assert config.workers == 4
    assert config.port == 8080
