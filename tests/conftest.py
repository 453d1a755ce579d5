"""Shared fixtures: controllable clock and sample upstream payloads."""

import pytest

from gitgud.core.schemas import (
    PersonalityProfile,
    ProfileSignals,
    RepoSignals,
    RoastResult,
    Signals,
)


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def signals():
    return Signals(
        profile=ProfileSignals(
            public_repos=12, followers=40, created_at="2015-03-01T00:00:00Z"
        ),
        top_repos=[
            RepoSignals(
                name="dotfiles",
                language="Shell",
                stars=3,
                forks=0,
                updated_at="2024-01-02T00:00:00Z",
            )
        ],
    )


@pytest.fixture
def roast_result():
    return RoastResult(
        roast="Twelve repos and one of them is dotfiles.",
        advice=["Write a README", "Add tests", "Ship something"],
        profile=PersonalityProfile(
            archetype="The Tinkerer",
            strengths=["curiosity"],
            blind_spots=["documentation"],
        ),
    )
