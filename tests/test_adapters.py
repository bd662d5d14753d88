"""
Tests for Signal Adapters, the Signal Hub and frame quality helpers

Model libraries are never loaded here; adapters get mocked models.
"""
from unittest.mock import MagicMock, Mock, patch

import numpy as np
import pytest

from examwatch.monitor.adapters import FaceAdapter, ObjectAdapter, PoseAdapter, SignalHub
from examwatch.monitor.adapters.capture import CaptureSource, parse_source
from examwatch.monitor.errors import FrameNotReady, PerceptionUnavailable
from examwatch.monitor.types import Frame
from examwatch.monitor.utils import classify_lighting, measure_brightness

from factories import FakeAdapter, FakeFrameSource, face_at, pose_at


def blank_frame(value: int = 120) -> Frame:
    return Frame(image=np.full((48, 64, 3), value, dtype=np.uint8), width=64, height=48, timestamp=1.0)


class TestSignalAdapter:

    @pytest.mark.asyncio
    async def test_detect_before_initialize_raises(self):
        adapter = FakeAdapter("pose", [pose_at(0.5, 0.5)])

        with pytest.raises(PerceptionUnavailable) as exc_info:
            await adapter.detect(blank_frame(), 1.0)

        assert exc_info.value.model == "pose"

    @pytest.mark.asyncio
    async def test_detect_after_initialize(self):
        adapter = FakeAdapter("pose", [pose_at(0.5, 0.5)])
        await adapter.initialize()

        result = await adapter.detect(blank_frame(), 1.0)

        assert adapter.ready
        assert len(result) == 1

    @pytest.mark.asyncio
    async def test_empty_detection_is_not_an_error(self):
        adapter = FakeAdapter("face", [])
        await adapter.initialize()

        assert await adapter.detect(blank_frame(), 1.0) == []

    @pytest.mark.asyncio
    async def test_failed_load_stays_unready(self):
        adapter = FakeAdapter("objects", load_error=FileNotFoundError("weights"))

        with pytest.raises(FileNotFoundError):
            await adapter.initialize()

        assert adapter.ready is False


class TestSignalHub:

    @pytest.mark.asyncio
    async def test_observe_combines_streams(self, make_hub):
        hub = make_hub(poses=[pose_at(0.5, 0.5)], faces=[face_at(0.5, 0.5)], objects=[])
        await hub.initialize()

        obs = await hub.observe(blank_frame(), 2.5)

        assert len(obs.poses) == 1
        assert len(obs.faces) == 1
        assert obs.objects == []
        assert obs.missing == ()
        assert obs.timestamp == 2.5
        assert obs.frame_width == 64
        assert obs.brightness is None

    @pytest.mark.asyncio
    async def test_measure_light(self, make_hub):
        hub = make_hub()
        await hub.initialize()

        obs = await hub.observe(blank_frame(90), 1.0, measure_light=True)

        assert obs.brightness == pytest.approx(90.0)

    @pytest.mark.asyncio
    async def test_skipped_streams_are_not_run(self, make_hub):
        hub = make_hub(poses=[pose_at(0.5, 0.5)], faces=[face_at(0.5, 0.5)])
        await hub.initialize()

        obs = await hub.observe(blank_frame(), 1.0, include_faces=False, include_objects=False)

        assert hub.face.calls == 0
        assert hub.objects.calls == 0
        assert obs.faces == []
        assert obs.missing == ()

    @pytest.mark.asyncio
    async def test_unavailable_stream_degrades_to_empty(self, make_hub):
        hub = make_hub(poses=[pose_at(0.5, 0.5)], failing=("objects",))

        status = await hub.initialize()
        obs = await hub.observe(blank_frame(), 1.0)

        assert status == {"pose": True, "face": True, "objects": False}
        assert obs.objects == []
        assert obs.missing == ("objects",)
        assert len(obs.poses) == 1

    @pytest.mark.asyncio
    async def test_detection_error_degrades_to_empty(self):
        hub = SignalHub(
            pose=FakeAdapter("pose", [pose_at(0.5, 0.5)]),
            face=FakeAdapter("face", detect_error=RuntimeError("boom")),
            objects=FakeAdapter("objects")
        )
        await hub.initialize()

        obs = await hub.observe(blank_frame(), 1.0)

        assert obs.faces == []
        assert obs.missing == ("face",)

    def test_close_closes_all_adapters(self, make_hub):
        hub = make_hub()
        hub.close()
        assert all(adapter.closed for adapter in hub.adapters.values())


class TestPoseAdapter:

    def test_timestamps_strictly_increase(self):
        adapter = PoseAdapter(model_path="unused.task")

        assert adapter._next_timestamp_ms(1.0) == 1000
        assert adapter._next_timestamp_ms(1.0) == 1001
        assert adapter._next_timestamp_ms(0.5) == 1002
        assert adapter._next_timestamp_ms(2.0) == 2000

    def test_detect_normalized_landmarks(self):
        adapter = PoseAdapter()
        landmarks = [Mock(x=0.5, y=0.4), Mock(x=0.52, y=0.38)]
        adapter._landmarker = MagicMock()
        adapter._landmarker.detect_for_video.return_value = Mock(pose_landmarks=[landmarks, []])

        fake_mp = MagicMock()
        with patch.dict("sys.modules", {"mediapipe": fake_mp}):
            poses = adapter._detect(blank_frame(), 1.0)

        assert len(poses) == 1
        assert poses[0].nose.x == 0.5
        assert poses[0].nose.y == 0.4


class TestFaceAdapter:

    def _rect(self):
        rect = Mock()
        rect.left.return_value = 16
        rect.top.return_value = 12
        rect.width.return_value = 32
        rect.height.return_value = 24
        return rect

    def _adapter(self, encoder):
        shape = Mock()
        shape.parts.return_value = [Mock(x=32, y=24), Mock(x=16, y=12)]
        predictor = Mock(return_value=shape)
        detector = Mock(return_value=[self._rect()])

        adapter = FaceAdapter()
        with patch("examwatch.monitor.adapters.face_adapter.get_dlib_detector", return_value=detector), \
             patch("examwatch.monitor.adapters.face_adapter.get_dlib_predictor", return_value=predictor), \
             patch("examwatch.monitor.adapters.face_adapter.get_dlib_face_encoder", return_value=encoder):
            adapter._load()
        return adapter

    def test_boxes_and_landmarks_are_normalized(self):
        encoder = Mock()
        encoder.compute_face_descriptor.return_value = [0.1] * 128
        adapter = self._adapter(encoder)

        faces = adapter._detect(blank_frame(), 1.0)

        assert len(faces) == 1
        face = faces[0]
        assert face.box.x == 0.25
        assert face.box.y == 0.25
        assert face.box.width == 0.5
        assert face.box.height == 0.5
        assert face.box.center_offset() == 0.0
        assert (face.landmarks[0].x, face.landmarks[0].y) == (0.5, 0.5)
        assert face.descriptor.shape == (128,)

    def test_descriptor_failure_keeps_face(self):
        encoder = Mock()
        encoder.compute_face_descriptor.side_effect = RuntimeError("bad chip")
        adapter = self._adapter(encoder)

        faces = adapter._detect(blank_frame(), 1.0)

        assert len(faces) == 1
        assert faces[0].descriptor is None


class TestObjectAdapter:

    @pytest.mark.asyncio
    async def test_reports_objects_stream_name(self):
        adapter = ObjectAdapter()

        with pytest.raises(PerceptionUnavailable) as exc_info:
            await adapter.detect(blank_frame(), 1.0)

        assert adapter.name == "objects"
        assert exc_info.value.model == "objects"

    def test_detections_are_lowercased(self):
        box = Mock()
        box.cls = np.array([67])
        box.conf = np.array([0.87])
        box.xyxyn = np.array([[0.1, 0.2, 0.3, 0.5]])

        model = MagicMock()
        model.names = {67: "Cell Phone"}
        model.predict.return_value = [Mock(boxes=[box]), Mock(boxes=None)]

        adapter = ObjectAdapter(confidence=0.4)
        with patch("examwatch.monitor.adapters.object_adapter.get_yolo_model", return_value=model):
            adapter._load()

        detections = adapter._detect(blank_frame(), 1.0)

        model.predict.assert_called_once()
        assert model.predict.call_args.kwargs["conf"] == 0.4
        assert len(detections) == 1
        assert detections[0].label == "cell phone"
        assert detections[0].confidence == pytest.approx(0.87)
        assert detections[0].box.width == pytest.approx(0.2)


class TestCaptureSource:

    def test_parse_source(self):
        assert parse_source("0") == 0
        assert parse_source("rtsp://camera/stream") == "rtsp://camera/stream"

    def test_closed_device_raises_frame_not_ready(self):
        capture = MagicMock()
        capture.isOpened.return_value = False

        with patch("examwatch.monitor.adapters.capture.cv2.VideoCapture", return_value=capture):
            source = CaptureSource("1")
            with pytest.raises(FrameNotReady):
                source.read()

    def test_empty_read_raises_frame_not_ready(self):
        capture = MagicMock()
        capture.isOpened.return_value = True
        capture.read.return_value = (False, None)

        with patch("examwatch.monitor.adapters.capture.cv2.VideoCapture", return_value=capture):
            source = CaptureSource(0)
            with pytest.raises(FrameNotReady):
                source.read()

    def test_read_returns_frame(self):
        capture = MagicMock()
        capture.isOpened.return_value = True
        capture.read.return_value = (True, np.zeros((48, 64, 3), dtype=np.uint8))

        with patch("examwatch.monitor.adapters.capture.cv2.VideoCapture", return_value=capture):
            source = CaptureSource(0)
            frame = source.read()
            source.release()

        assert (frame.width, frame.height) == (64, 48)
        capture.release.assert_called_once()

    def test_fake_source_not_ready(self):
        with pytest.raises(FrameNotReady):
            FakeFrameSource(available=False).read()


class TestFrameQuality:

    def test_uniform_frame(self):
        assert measure_brightness(np.full((10, 10, 3), 120, dtype=np.uint8)) == pytest.approx(120.0)

    def test_channel_average(self):
        frame = np.zeros((4, 4, 3), dtype=np.uint8)
        frame[..., 2] = 255
        assert measure_brightness(frame) == pytest.approx(85.0)

    def test_empty_frame_falls_back_to_neutral(self):
        assert measure_brightness(np.zeros((0, 0, 3), dtype=np.uint8)) == 100.0
        assert measure_brightness(None) == 100.0

    @pytest.mark.parametrize("brightness,expected", [
        (49.9, "too_dark"),
        (50.0, "ok"),
        (200.0, "ok"),
        (200.1, "too_bright"),
    ])
    def test_classify_lighting(self, brightness, expected):
        assert classify_lighting(brightness) == expected
