import asyncio

from engine import FocusDashboardEngine, create_engine
from session.session_controller import SessionStatus

from conftest import FakeClock, FakeWebcam, LastChoice, run


def make_engine(feed, **kwargs):
    webcam = FakeWebcam(feed=feed)
    engine = FocusDashboardEngine(
        webcam=webcam,
        feed=feed,
        interval=0.01,
        rng=LastChoice(),
        clock=FakeClock(),
        transcript_provider=lambda: "we talked about focus",
        **kwargs
    )
    return engine, webcam


def test_initial_state(feed):
    engine, _ = make_engine(feed)
    state = engine.get_current_state()

    assert state["status"] == "awaiting_consent"
    assert state["attentiveness"] is None
    assert state["summary"] is None
    assert not state["camera"]["enabled"]


def test_full_session_flow(feed):
    engine, webcam = make_engine(feed)
    notices = []
    engine.set_on_notice_callback(notices.append)

    async def scenario():
        assert await engine.request_consent()
        assert await engine.start_session()
        feed.update(attention_score=0.9, posture=0.9, time_distracted=1)
        await asyncio.sleep(0.05)
        live = engine.get_current_state()
        engine.controller.clock.advance(30)
        summary = await engine.end_session()
        return live, summary

    live, summary = run(scenario())

    assert live["status"] == "recording"
    assert live["attentiveness"]["state"] == "attentive"
    assert live["attentiveness"]["description"] == "Strong engagement detected"
    assert live["focus_meter"]["percentage"] == 90
    assert live["analytics"]["total_readings"] >= 1

    assert summary["session_summary"]["duration_seconds"] == 30
    assert summary["focus_metrics"]["average_focus"] == 0.9
    assert summary["transcript"]["word_count"] == 4

    done = engine.get_current_state()
    assert done["status"] == "complete"
    assert done["attentiveness"] is None
    assert done["summary"] is summary
    assert webcam.release_calls == 1
    assert [n.title for n in notices] == ["Ready to start", "Session started", "Session complete"]


def test_session_start_resets_feed_and_analytics(feed):
    engine, _ = make_engine(feed)
    run(engine.request_consent())
    feed.update(attention_score=0.4, time_distracted=9)
    engine.classifier.tick()
    assert engine.session_analytics.get_summary()["total_readings"] == 1

    run(engine.start_session())

    assert feed.get_telemetry().time_distracted == 0
    assert engine.session_analytics.get_summary()["total_readings"] == 0


def test_reset_after_complete(feed):
    engine, webcam = make_engine(feed)

    async def scenario():
        await engine.request_consent()
        await engine.start_session()
        await engine.end_session()

    run(scenario())
    assert engine.reset_session()

    state = engine.get_current_state()
    assert state["status"] == "ready"
    assert state["summary"] is None
    assert state["analytics"]["total_readings"] == 0
    assert webcam.acquire_calls == 1


def test_declined_consent_leaves_engine_usable(feed):
    engine, _ = make_engine(feed)

    assert engine.decline_consent()

    assert engine.controller.status == SessionStatus.CONSENT_DECLINED
    assert engine.get_current_state()["camera"]["enabled"] is False


def test_custom_summary_generator(feed):
    engine, _ = make_engine(feed, summary_generator=lambda *args: {"args": args})

    async def scenario():
        await engine.request_consent()
        await engine.start_session()
        feed.update(attention_score=0.6, time_distracted=2)
        return await engine.end_session()

    assert run(scenario()) == {"args": (0, 0.6, 2, "we talked about focus")}


def test_context_manager_tears_down(feed):
    engine, webcam = make_engine(feed)

    async def scenario():
        async with engine:
            await engine.request_consent()
            await engine.start_session()
            await asyncio.sleep(0.02)

    run(scenario())

    assert webcam.release_calls == 1
    assert not engine.classifier.is_running


def test_create_engine_uses_given_webcam(feed):
    webcam = FakeWebcam(feed=feed)
    engine = create_engine(webcam=webcam, feed=feed)
    assert engine.webcam is webcam
    assert engine.feed is feed


def test_reoffer_consent_after_decline(feed):
    engine, webcam = make_engine(feed)
    engine.decline_consent()

    assert engine.reoffer_consent()
    assert engine.get_current_state()["status"] == "awaiting_consent"
    assert run(engine.request_consent())
    assert webcam.acquire_calls == 1
    assert not engine.reoffer_consent()


def test_second_session_after_reset_produces_readings(feed):
    engine, webcam = make_engine(feed)

    async def scenario():
        await engine.request_consent()
        await engine.start_session()
        await engine.end_session()
        engine.reset_session()

        await engine.start_session()
        feed.update(attention_score=0.9, posture=0.9)
        await asyncio.sleep(0.05)
        return engine.get_current_state()

    live = run(scenario())

    assert live["status"] == "recording"
    assert live["camera"]["ready"]
    assert live["attentiveness"]["state"] == "attentive"
    assert live["analytics"]["total_readings"] >= 1
    assert webcam.acquire_calls == 2
