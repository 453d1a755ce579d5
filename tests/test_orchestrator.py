"""Tests for the roast orchestrator and its cache interplay."""

import asyncio
import uuid
from unittest.mock import AsyncMock

import pytest

from gitgud.core.cache import GenerationCache, SignalCache
from gitgud.core.errors import GenerationError, SignalSourceError
from gitgud.core.metrics import Metrics
from gitgud.core.schemas import ProfileSignals, RoastRequest, Signals
from gitgud.orchestrator import RoastOrchestrator


@pytest.fixture
def fetch(signals):
    return AsyncMock(return_value=signals)


@pytest.fixture
def generate(roast_result):
    return AsyncMock(return_value=roast_result)


@pytest.fixture
def metrics():
    return Metrics()


@pytest.fixture
def orchestrator(fetch, generate, clock, metrics):
    return RoastOrchestrator(
        fetch_signals=fetch,
        generate=generate,
        signal_cache=SignalCache(clock=clock),
        generation_cache=GenerationCache(clock=clock),
        metrics=metrics,
    )


def _request(**overrides):
    payload = {"username": "alice", "intensity": "mild", **overrides}
    return RoastRequest.model_validate(payload)


@pytest.mark.asyncio
async def test_handle_roast_composes_response(orchestrator, fetch, generate, signals, roast_result):
    response = await orchestrator.handle_roast(_request())

    assert uuid.UUID(response.request_id).version == 4
    assert response.username == "alice"
    assert response.signals == signals
    assert response.result == roast_result
    fetch.assert_awaited_once_with("alice", 5, False)
    generate.assert_awaited_once()


@pytest.mark.asyncio
async def test_second_identical_call_hits_both_caches(orchestrator, fetch, generate, metrics):
    first = await orchestrator.handle_roast(_request())
    second = await orchestrator.handle_roast(_request())

    assert fetch.await_count == 1
    assert generate.await_count == 1
    assert second.signals == first.signals
    assert second.result == first.result
    assert second.request_id != first.request_id
    assert metrics.cache_hits == {"signals": 1, "generation": 1}
    assert metrics.cache_misses == {"signals": 1, "generation": 1}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"username": "bob"}, {"maxRepos": 6}, {"includeReadme": True}],
)
async def test_any_signal_key_component_forces_fetch(orchestrator, fetch, overrides):
    await orchestrator.handle_roast(_request())
    await orchestrator.handle_roast(_request(**overrides))
    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_generation_reused_even_if_signals_change(orchestrator, fetch, generate, roast_result):
    await orchestrator.handle_roast(_request(maxRepos=3))
    fetch.return_value = Signals(
        profile=ProfileSignals(public_repos=99, followers=1, created_at="2020-01-01T00:00:00Z")
    )

    response = await orchestrator.handle_roast(_request(maxRepos=4))

    assert fetch.await_count == 2
    assert generate.await_count == 1
    assert response.signals.profile.public_repos == 99
    assert response.result == roast_result


@pytest.mark.asyncio
async def test_intensity_is_part_of_generation_key(orchestrator, generate):
    await orchestrator.handle_roast(_request(intensity="mild"))
    await orchestrator.handle_roast(_request(intensity="spicy"))
    assert generate.await_count == 2


@pytest.mark.asyncio
async def test_generation_cache_expires(orchestrator, generate, clock):
    await orchestrator.handle_roast(_request())
    clock.advance(601)
    await orchestrator.handle_roast(_request())
    assert generate.await_count == 2


@pytest.mark.asyncio
async def test_signal_failure_is_surfaced_and_not_cached(orchestrator, fetch, generate, signals):
    fetch.side_effect = SignalSourceError("GitHub user not found")

    with pytest.raises(SignalSourceError, match="not found"):
        await orchestrator.handle_roast(_request())
    generate.assert_not_awaited()

    fetch.side_effect = None
    fetch.return_value = signals
    await orchestrator.handle_roast(_request())
    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_repeated_failures_reach_upstream_each_time(orchestrator, fetch):
    fetch.side_effect = SignalSourceError("GitHub rate limit exceeded")
    for _ in range(3):
        with pytest.raises(SignalSourceError):
            await orchestrator.handle_roast(_request())
    assert fetch.await_count == 3


@pytest.mark.asyncio
async def test_untagged_fetch_failure_is_wrapped(orchestrator, fetch):
    fetch.side_effect = ConnectionError("reset by peer")
    with pytest.raises(SignalSourceError, match="reset by peer") as excinfo:
        await orchestrator.handle_roast(_request())
    assert excinfo.value.kind == "signal_source_error"


@pytest.mark.asyncio
async def test_generation_failure_keeps_signals_cached(orchestrator, fetch, generate, roast_result):
    generate.side_effect = GenerationError("OpenAI returned invalid JSON")

    with pytest.raises(GenerationError):
        await orchestrator.handle_roast(_request())

    generate.side_effect = None
    generate.return_value = roast_result
    response = await orchestrator.handle_roast(_request())

    assert fetch.await_count == 1
    assert generate.await_count == 2
    assert response.result == roast_result


@pytest.mark.asyncio
async def test_untagged_generation_failure_is_wrapped(orchestrator, generate):
    generate.side_effect = ValueError("bad payload")
    with pytest.raises(GenerationError, match="bad payload") as excinfo:
        await orchestrator.handle_roast(_request())
    assert excinfo.value.kind == "generation_error"


@pytest.mark.asyncio
async def test_concurrent_misses_are_not_deduplicated(fetch, generate, clock, signals):
    """Simultaneous misses for one subject may each call upstream."""
    gate = asyncio.Event()

    async def slow_fetch(*args):
        await gate.wait()
        return signals

    fetch.side_effect = slow_fetch
    orchestrator = RoastOrchestrator(
        fetch, generate, SignalCache(clock=clock), GenerationCache(clock=clock), Metrics()
    )

    tasks = [asyncio.create_task(orchestrator.handle_roast(_request())) for _ in range(2)]
    for _ in range(3):
        await asyncio.sleep(0)
    gate.set()
    responses = await asyncio.gather(*tasks)

    assert fetch.await_count == 2
    assert responses[0].signals == responses[1].signals


@pytest.mark.asyncio
async def test_cancelled_fetch_leaves_cache_empty(fetch, generate, clock, signals):
    async def hang(*args):
        await asyncio.sleep(3600)

    fetch.side_effect = hang
    signal_cache = SignalCache(clock=clock)
    orchestrator = RoastOrchestrator(
        fetch, generate, signal_cache, GenerationCache(clock=clock), Metrics()
    )

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(orchestrator.handle_roast(_request()), timeout=0.05)

    assert len(signal_cache) == 0
