"""
Pydantic models for API boundaries and structured outputs.
Why: contract-first design; enforce shape on both requests and upstream output.
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

GITHUB_USERNAME_PATTERN = r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$"


class Intensity(str, Enum):
    MILD = "mild"
    MEDIUM = "medium"
    SPICY = "spicy"


class RoastRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(
        ..., min_length=1, max_length=39, pattern=GITHUB_USERNAME_PATTERN
    )
    intensity: Intensity
    include_readme: bool = Field(default=False, alias="includeReadme")
    max_repos: int = Field(default=5, ge=1, le=20, alias="maxRepos")


class ProfileSignals(BaseModel):
    public_repos: int
    followers: int
    created_at: str
    bio: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None


class RepoSignals(BaseModel):
    name: str
    language: Optional[str] = None
    stars: int
    forks: int
    updated_at: str
    description: Optional[str] = None
    readme_snippet: Optional[str] = None


class Signals(BaseModel):
    profile: ProfileSignals
    top_repos: List[RepoSignals] = []


class PersonalityProfile(BaseModel):
    archetype: str = Field(..., min_length=1)
    strengths: List[str]
    blind_spots: List[str]


class RoastResult(BaseModel):
    roast: str = Field(..., min_length=1)
    advice: List[str]
    profile: PersonalityProfile


class RoastResponse(BaseModel):
    request_id: str
    username: str
    signals: Signals
    result: RoastResult


class TTSRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    text: str = Field(..., min_length=1, max_length=2000)
    voice_id: str = Field(..., min_length=1, alias="voiceId")
    model_id: str = Field(default="eleven_multilingual_v2", alias="modelId")


ErrorCode = Literal[
    "BAD_REQUEST", "GITHUB_ERROR", "OPENAI_ERROR", "RATE_LIMIT", "INTERNAL_ERROR"
]


class ErrorBody(BaseModel):
    code: ErrorCode
    message: str


class ErrorResponse(BaseModel):
    error: ErrorBody
