import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from fakes import FakeClock, ScriptedClient, make_spec
from models.errors import NoProviderAvailableError
from models.source import SourceType
from orchestrator.provider_router import DEFAULT_SYSTEM_PROMPT, AIProviderRouter
from orchestrator.provider_state import ProviderState


def _router(clients, clock, cooldown=300):
    providers = [(make_spec(f"p{i}", i), client) for i, client in enumerate(clients, start=1)]
    return AIProviderRouter(providers, cooldown_seconds=cooldown, clock=clock)


def test_first_provider_success_short_circuits():
    clock = FakeClock()
    p1, p2 = ScriptedClient("answer one"), ScriptedClient("answer two")
    router = _router([p1, p2], clock)

    answer = router.route("What was Operation Paperclip?")

    assert answer.content == "answer one"
    assert answer.provider_id == "p1"
    assert answer.model_used == "P1"
    assert len(p1.calls) == 1
    assert p2.calls == []
    assert p1.calls[0] == (DEFAULT_SYSTEM_PROMPT, "What was Operation Paperclip?")


def test_fallback_to_next_priority_and_cooldown_exclusion():
    clock = FakeClock()
    p1 = ScriptedClient("!provider_error", "p1 recovered")
    p2 = ScriptedClient("from p2")
    p3 = ScriptedClient("from p3")
    router = _router([p1, p2, p3], clock)

    first = router.route("q")
    assert first.provider_id == "p2"
    assert [a.provider_id for a in first.attempts] == ["p1", "p2"]
    assert first.attempts[0].ok is False
    assert first.attempts[0].error_code == "provider_error"

    # inside the cool-down window p1 is not even tried
    clock.advance(299)
    second = router.route("q")
    assert second.provider_id == "p2"
    assert len(p1.calls) == 1

    # once it expires p1 is first again
    clock.advance(2)
    third = router.route("q")
    assert third.provider_id == "p1"
    assert third.content == "p1 recovered"


def test_raised_exception_counts_as_failure():
    clock = FakeClock()
    router = _router([ScriptedClient(RuntimeError("boom")), ScriptedClient("fine")], clock)

    answer = router.route("q")

    assert answer.provider_id == "p2"
    assert answer.attempts[0].error_code == "unknown"
    assert router.state.is_available("p1") is False


def test_exhaustion_raises_with_attempts():
    clock = FakeClock()
    router = _router([ScriptedClient("!timeout"), ScriptedClient("!rate_limit")], clock)

    with pytest.raises(NoProviderAvailableError) as excinfo:
        router.route("q")

    attempts = excinfo.value.attempts
    assert [(a.provider_id, a.error_code) for a in attempts] == [("p1", "timeout"), ("p2", "rate_limit")]
    assert "p1 (timeout)" in str(excinfo.value)

    # everything is cooling down now: no candidates, no attempts
    with pytest.raises(NoProviderAvailableError) as again:
        router.route("q")
    assert again.value.attempts == []


def test_empty_router_raises():
    with pytest.raises(NoProviderAvailableError):
        AIProviderRouter([]).route("q")


def test_answer_sources_are_extracted_from_content():
    clock = FakeClock()
    text = "See [1] https://www.cia.gov/readingroom/docs/x.pdf and [2] https://example.com/y."
    router = _router([ScriptedClient(text)], clock)

    answer = router.route("q")

    assert [s.id for s in answer.sources] == ["ai-1", "ai-2"]
    assert [s.type for s in answer.sources] == [SourceType.CIA, SourceType.WEB]
    assert answer.sources[1].url == "https://example.com/y"


def test_priority_not_registration_order_decides():
    clock = FakeClock()
    low = ScriptedClient("low")
    high = ScriptedClient("high")
    router = AIProviderRouter(
        [(make_spec("late", 5), low), (make_spec("early", 1), high)], clock=clock
    )

    assert router.route("q").provider_id == "early"
    assert [s.provider_id for s in router.provider_status()] == ["early", "late"]


def test_provider_state_snapshot_and_reset():
    clock = FakeClock(start=0)
    state = ProviderState([("a", 1), ("b", 2)], cooldown_seconds=60, clock=clock)

    until = state.mark_unavailable("a")
    assert until == 60
    assert state.candidates() == ["b"]
    snapshot = {s.provider_id: s for s in state.snapshot()}
    assert snapshot["a"].available is False
    assert snapshot["a"].unavailable_until == 60

    state.reset("a")
    assert state.candidates() == ["a", "b"]


def test_provider_state_rejects_duplicates_and_unknown_ids():
    with pytest.raises(ValueError):
        ProviderState([("a", 1), ("a", 2)])

    state = ProviderState([("a", 1)])
    with pytest.raises(KeyError):
        state.mark_unavailable("missing")


def test_provider_state_survives_concurrent_marks_and_reads():
    clock = FakeClock()
    ids = [f"p{i}" for i in range(1, 6)]
    state = ProviderState([(pid, i) for i, pid in enumerate(ids, start=1)], cooldown_seconds=300, clock=clock)

    def work(n):
        if n % 3 == 0:
            return state.mark_unavailable(ids[n % len(ids)])
        return state.candidates()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(work, range(600)))

    # every candidates() read is a priority-ordered subset of the registry
    for result in results:
        if isinstance(result, list):
            assert result == sorted(result, key=ids.index)
            assert set(result) <= set(ids)
        else:
            assert result == 1_300.0

    assert state.candidates() == []
    assert all(s.unavailable_until == 1_300.0 for s in state.snapshot())

    clock.advance(300)
    assert state.candidates() == ids


def test_concurrent_routes_share_one_cooldown():
    clock = FakeClock()
    failing, healthy = ScriptedClient("!timeout"), ScriptedClient("fallback answer")
    router = _router([failing, healthy], clock)

    with ThreadPoolExecutor(max_workers=8) as pool:
        answers = list(pool.map(lambda _: router.route("q"), range(40)))

    assert {a.provider_id for a in answers} == {"p2"}
    assert 1 <= len(failing.calls) <= 40
    assert router.state.candidates() == ["p2"]

    calls_before = len(failing.calls)
    router.route("q")
    assert len(failing.calls) == calls_before


def test_failed_and_successful_responses_are_logged_in_normalized_form(caplog):
    router = _router([ScriptedClient("!rate_limit"), ScriptedClient("answer")], FakeClock())

    with caplog.at_level(logging.INFO, logger="orchestrator.provider_router"):
        router.route("q")

    logged = [r.extra_fields["response"] for r in caplog.records if "response" in getattr(r, "extra_fields", {})]
    assert [r["error"]["code"] if r["error"] else None for r in logged] == ["rate_limit", None]
    assert logged[1]["text"] == "answer"
    assert logged[1]["token_usage"]["total_tokens"] == 0
