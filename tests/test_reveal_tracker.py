import asyncio

from statguess.services.reveal_tracker import RevealTracker


def test_first_track_only_primes():
    tracker = RevealTracker(duration=0.05)
    assert tracker.track({"a", "b"}) == set()
    assert tracker.highlighted == frozenset()
    assert not tracker.has_pending_clear


def test_unchanged_selection_reveals_nothing():
    tracker = RevealTracker(duration=0.05)
    tracker.prime({"a"})
    assert tracker.track({"a"}) == set()
    # désélection : pas de reveal non plus
    assert tracker.track(set()) == set()
    assert not tracker.has_pending_clear


def test_highlight_clears_after_duration():
    async def scenario():
        tracker = RevealTracker(duration=0.05)
        tracker.prime({"a"})
        assert tracker.track({"a", "b"}) == {"b"}
        assert tracker.highlighted == frozenset({"b"})
        assert tracker.has_pending_clear
        await asyncio.sleep(0.2)
        assert tracker.highlighted == frozenset()
        assert not tracker.has_pending_clear

    asyncio.run(scenario())


def test_new_reveal_restarts_timer():
    async def scenario():
        tracker = RevealTracker(duration=0.3)
        tracker.prime(set())
        tracker.track({"b"})
        first_task = tracker._clear_task
        await asyncio.sleep(0.2)

        assert tracker.track({"b", "c"}) == {"c"}
        assert tracker.highlighted == frozenset({"c"})
        await asyncio.sleep(0.01)
        assert first_task.done()

        # le premier timer aurait expiré ici ; le second court toujours
        await asyncio.sleep(0.2)
        assert tracker.highlighted == frozenset({"c"})

        await asyncio.sleep(0.3)
        assert tracker.highlighted == frozenset()

    asyncio.run(scenario())


def test_aclose_cancels_pending_clear():
    async def scenario():
        tracker = RevealTracker(duration=10)
        tracker.prime(set())
        tracker.track({"x"})
        assert tracker.has_pending_clear
        await tracker.aclose()
        assert not tracker.has_pending_clear
        assert tracker.highlighted == frozenset()

    asyncio.run(scenario())
