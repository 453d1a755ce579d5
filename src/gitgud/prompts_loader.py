"""Load and manage prompts from YAML files."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gitgud.core.logging import get_logger

logger = get_logger(__name__)

PROMPTS_DIR = Path(__file__).parent / "prompts"
REQUIRED_KEYS = ("system", "user_prompt", "tones", "temperatures")


def load_prompt(
    version_key: Optional[str] = None, prompts_dir: Path = PROMPTS_DIR
) -> Dict[str, Any]:
    """Load a specific prompt version from prompt_versions.yaml.

    With no ``version_key`` the file's ``default`` version is used.
    """
    prompt_path = None
    for filename in ("prompt_versions.yaml", "prompt_versions.yml"):
        candidate = prompts_dir / filename
        if candidate.exists():
            prompt_path = candidate
            break

    if prompt_path is None:
        raise FileNotFoundError(f"Could not find prompt file in {prompts_dir}")

    with open(prompt_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    versions = data.get("versions", {})
    version_key = version_key or data.get("default")
    version_data = versions.get(version_key)
    if not version_data:
        raise KeyError(
            f"Version '{version_key}' not found in {prompt_path.name}. "
            f"Available: {list(versions)}"
        )

    missing = [key for key in REQUIRED_KEYS if key not in version_data]
    if missing:
        raise KeyError(f"Prompt version '{version_key}' is missing {missing}")

    logger.info("Loaded prompt version", extra={"prompt_version": version_key})
    return {
        "version": version_key,
        "system": version_data["system"],
        "user_template": version_data["user_prompt"],
        "tones": version_data["tones"],
        "temperatures": version_data["temperatures"],
    }
