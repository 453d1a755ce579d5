"""Tests for YAML prompt loading."""

import pytest

from gitgud.prompts_loader import load_prompt


def test_default_version_loads():
    prompt = load_prompt()
    assert prompt["version"] == "v1_roast"
    assert "valid JSON" in prompt["system"]
    assert set(prompt["tones"]) == {"mild", "medium", "spicy"}
    assert prompt["temperatures"]["spicy"] == 0.9


def test_unknown_version_raises():
    with pytest.raises(KeyError, match="not found"):
        load_prompt("v999")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_prompt(prompts_dir=tmp_path)


def test_incomplete_version_raises(tmp_path):
    (tmp_path / "prompt_versions.yml").write_text(
        "default: v1\nversions:\n  v1:\n    system: hi\n", encoding="utf-8"
    )
    with pytest.raises(KeyError, match="missing"):
        load_prompt(prompts_dir=tmp_path)
