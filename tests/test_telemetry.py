from telemetry import CameraState, FocusTelemetry


def test_defaults(feed):
    assert feed.get_telemetry() == FocusTelemetry(0.0, 0.0, 0)
    assert feed.get_camera_state() == CameraState(ready=False, facing_camera=False)
    assert not feed.get_camera_state().live


def test_update_keeps_omitted_values(feed):
    feed.update(attention_score=0.7, posture=0.4, time_distracted=2)
    snapshot = feed.update(posture=0.6)

    assert snapshot == FocusTelemetry(0.7, 0.6, 2)


def test_scores_are_clamped(feed):
    snapshot = feed.update(attention_score=1.4, posture=-0.2)

    assert snapshot.attention_score == 1.0
    assert snapshot.posture == 0.0


def test_time_distracted_never_decreases(feed):
    feed.update(time_distracted=7)
    assert feed.update(time_distracted=3).time_distracted == 7
    assert feed.update(time_distracted=9).time_distracted == 9


def test_reset_clears_telemetry_but_keeps_camera(feed):
    feed.set_camera_state(ready=True, facing_camera=True)
    feed.update(attention_score=0.5, time_distracted=8)

    feed.reset()

    assert feed.get_telemetry() == FocusTelemetry()
    assert feed.get_camera_state().live
    assert feed.update(time_distracted=1).time_distracted == 1


def test_snapshot_is_not_affected_by_later_updates(feed):
    snapshot = feed.update(attention_score=0.3)
    feed.update(attention_score=0.9)

    assert snapshot.attention_score == 0.3


def test_camera_listeners_fire_on_change_only(feed):
    seen = []
    feed.add_camera_listener(seen.append)

    feed.set_camera_state(ready=True)
    feed.set_camera_state(ready=True)
    feed.set_camera_state(facing_camera=True)

    assert seen == [
        CameraState(ready=True, facing_camera=False),
        CameraState(ready=True, facing_camera=True),
    ]


def test_failing_listener_does_not_block_others(feed):
    seen = []

    def broken(state):
        raise RuntimeError("boom")

    feed.add_camera_listener(broken)
    feed.add_camera_listener(seen.append)
    feed.set_camera_state(ready=True)

    assert len(seen) == 1


def test_removed_listener_is_not_called(feed):
    seen = []
    feed.add_camera_listener(seen.append)
    feed.remove_camera_listener(seen.append)
    feed.remove_camera_listener(seen.append)

    feed.set_camera_state(ready=True)

    assert seen == []
