"""Roast generation through the OpenAI chat completions API."""

import json
from typing import Any, Dict, Optional

import pydantic
from openai import AsyncOpenAI, OpenAIError, RateLimitError

from gitgud.core.errors import GenerationError
from gitgud.core.logging import get_logger
from gitgud.core.schemas import Intensity, RoastResult, Signals
from gitgud.prompts_loader import load_prompt

logger = get_logger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
README_PROMPT_CHARS = 300


def build_prompt(signals: Signals, intensity: Intensity, prompt: Dict[str, Any]) -> str:
    """Fill the user template with profile and repository signals."""
    intensity = Intensity(intensity)
    profile = signals.profile

    extras = []
    if profile.bio:
        extras.append(f"- Bio: {profile.bio}")
    if profile.location:
        extras.append(f"- Location: {profile.location}")
    if profile.company:
        extras.append(f"- Company: {profile.company}")

    repo_lines = []
    for repo in signals.top_repos:
        line = (
            f"- {repo.name} ({repo.language or 'No language'}, {repo.stars} stars, "
            f"{repo.forks} forks, updated {repo.updated_at})"
        )
        if repo.description:
            line += f" - {repo.description}"
        if repo.readme_snippet:
            line += f"\n  README snippet: {repo.readme_snippet[:README_PROMPT_CHARS]}..."
        repo_lines.append(line)

    return prompt["user_template"].format(
        tone=prompt["tones"][intensity.value],
        public_repos=profile.public_repos,
        followers=profile.followers,
        created_at=profile.created_at,
        profile_extras="\n".join(extras),
        repo_list="\n".join(repo_lines) or "(no public repositories)",
    )


class RoastGenerator:
    """Turns GitHub signals into a structured roast."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        client: Optional[Any] = None,
        prompt_version: Optional[str] = None,
    ):
        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.prompt = load_prompt(prompt_version)

    async def generate_roast(self, signals: Signals, intensity: Intensity) -> RoastResult:
        intensity = Intensity(intensity)
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.prompt["system"]},
                    {
                        "role": "user",
                        "content": build_prompt(signals, intensity, self.prompt),
                    },
                ],
                response_format={"type": "json_object"},
                temperature=self.prompt["temperatures"][intensity.value],
            )
        except RateLimitError as e:
            raise GenerationError("OpenAI rate limit exceeded") from e
        except OpenAIError as e:
            raise GenerationError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError("Empty response from OpenAI")

        try:
            return RoastResult.model_validate(json.loads(content))
        except json.JSONDecodeError as e:
            raise GenerationError(f"OpenAI returned invalid JSON: {e.msg}") from e
        except pydantic.ValidationError as e:
            logger.warning(
                "OpenAI output failed validation",
                extra={"errors": e.error_count(), "model": self.model},
            )
            raise GenerationError("Invalid response structure from OpenAI") from e
