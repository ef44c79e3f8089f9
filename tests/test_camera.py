import numpy as np
import pytest

import camera
from camera import CameraCapture

from conftest import run


class FakeVideoCapture:
    opened = True
    frames_ok = True
    instances = []

    def __init__(self, index):
        self.index = index
        self.release_calls = 0
        self.props = {}
        FakeVideoCapture.instances.append(self)

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        return self.props.get(prop, 0)

    def read(self):
        if not self.frames_ok:
            return False, None
        return True, np.arange(12, dtype=np.uint8).reshape(2, 2, 3)

    def release(self):
        self.release_calls += 1


@pytest.fixture
def fake_cv2(monkeypatch):
    FakeVideoCapture.opened = True
    FakeVideoCapture.frames_ok = True
    FakeVideoCapture.instances = []
    monkeypatch.setattr(camera.cv2, "VideoCapture", FakeVideoCapture)
    return FakeVideoCapture


def test_acquire_marks_camera_ready(fake_cv2, feed):
    webcam = CameraCapture(feed=feed, camera_index=3)

    assert run(webcam.acquire()) is True

    assert feed.get_camera_state().ready
    assert fake_cv2.instances[0].index == 3
    assert webcam.frame_count == 1


def test_acquire_fails_when_device_cannot_open(fake_cv2, feed):
    fake_cv2.opened = False
    webcam = CameraCapture(feed=feed)

    assert run(webcam.acquire()) is False

    assert not feed.get_camera_state().ready
    assert fake_cv2.instances[0].release_calls == 1


def test_playback_failure_grants_access_but_not_ready(fake_cv2, feed):
    fake_cv2.frames_ok = False
    webcam = CameraCapture(feed=feed)

    assert run(webcam.acquire()) is True
    assert not feed.get_camera_state().ready


def test_release_is_idempotent(fake_cv2, feed):
    webcam = CameraCapture(feed=feed)
    run(webcam.acquire())

    webcam.release()
    webcam.release()

    assert fake_cv2.instances[0].release_calls == 1
    assert webcam.cap is None
    assert not feed.get_camera_state().ready


def test_release_before_acquire_is_safe(feed):
    webcam = CameraCapture(feed=feed)
    webcam.release()
    assert not webcam.is_running


def test_read_frame_mirrors_image(fake_cv2):
    webcam = CameraCapture()

    async def scenario():
        await webcam.acquire()
        return await webcam.read_frame()

    ret, frame = run(scenario())

    expected = np.arange(12, dtype=np.uint8).reshape(2, 2, 3)[:, ::-1]
    assert ret
    assert np.array_equal(frame, expected)


def test_read_frame_without_camera():
    webcam = CameraCapture()
    assert run(webcam.read_frame()) == (False, None)

