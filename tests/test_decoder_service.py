"""Tests for services.decoder_service (needs OpenCV, numpy and the zbar library)."""

import base64
import threading
from io import BytesIO

import pytest

cv2 = pytest.importorskip('cv2')
np = pytest.importorskip('numpy')
pytest.importorskip('pyzbar.pyzbar')
qrcode = pytest.importorskip('qrcode')

from services.capture_session import NO_CODE_DETECTED  # noqa: E402
from services.decoder_service import QRDecoder, crop_square, decode_image  # noqa: E402
from services.errors import (  # noqa: E402
    DeviceBusyError,
    DeviceUnavailableError,
    PermissionDeniedError,
    UnsatisfiableConstraintsError,
)

PAYLOAD = 'FN:Jane Doe\nEMAIL:jane@acme.com'


def qr_png(text=PAYLOAD):
    buffer = BytesIO()
    qrcode.make(text).save(buffer, format='PNG')
    return buffer.getvalue()


def qr_frame(text=PAYLOAD):
    image = qrcode.make(text).get_image().convert('RGB')
    return cv2.cvtColor(np.array(image), cv2.COLOR_RGB2BGR)


class FakeCapture:
    def __init__(self, opened=True, frames=None, width=640, height=480):
        self.opened = opened
        self.frames = list(frames or [])
        self.width = width
        self.height = height
        self.released = False

    def isOpened(self):
        return self.opened

    def release(self):
        self.released = True

    def set(self, prop, value):
        return True

    def get(self, prop):
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            return self.width
        if prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return self.height
        return 0

    def read(self):
        if self.frames:
            return True, self.frames.pop(0)
        return False, None


class TestDecodeImage:
    def test_png_bytes(self):
        assert decode_image(qr_png()) == [PAYLOAD]

    def test_data_url(self):
        encoded = base64.b64encode(qr_png()).decode('ascii')
        assert decode_image('data:image/png;base64,' + encoded) == [PAYLOAD]

    def test_blank_image(self):
        from PIL import Image
        buffer = BytesIO()
        Image.new('RGB', (100, 100), 'white').save(buffer, format='PNG')
        assert decode_image(buffer.getvalue()) == []


class TestCropSquare:
    def test_centered(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        assert crop_square(frame, 250).shape == (250, 250, 3)

    def test_too_small(self):
        frame = np.zeros((100, 100, 3), dtype=np.uint8)
        with pytest.raises(UnsatisfiableConstraintsError):
            crop_square(frame, 250)


class TestQRDecoder:
    def test_list_video_devices(self):
        captures = {0: FakeCapture(), 1: FakeCapture(opened=False), 2: FakeCapture()}
        decoder = QRDecoder(max_devices=3, video_capture=lambda index: captures[index])
        assert decoder.list_video_devices() == [0, 2]
        assert all(capture.released for capture in captures.values())

    def test_no_devices(self):
        decoder = QRDecoder(video_capture=lambda index: FakeCapture(opened=False))
        with pytest.raises(DeviceUnavailableError):
            decoder.start('environment', 250, 10, print, print, devices=[])

    def test_busy(self):
        decoder = QRDecoder(video_capture=lambda index: FakeCapture(opened=False))
        with pytest.raises(DeviceBusyError):
            decoder.start('environment', 250, 10, print, print, devices=[0])

    def test_permission_denied(self):
        def denied(index):
            raise PermissionError('denied')

        decoder = QRDecoder(video_capture=denied)
        with pytest.raises(PermissionDeniedError):
            decoder.start('environment', 250, 10, print, print, devices=[0])

    def test_constraints(self):
        decoder = QRDecoder(video_capture=lambda index: FakeCapture(width=160, height=120))
        with pytest.raises(UnsatisfiableConstraintsError):
            decoder.start('environment', 250, 10, print, print, devices=[0])

    def test_environment_prefers_last_device(self):
        opened = []

        def factory(index):
            opened.append(index)
            return FakeCapture()

        decoder = QRDecoder(video_capture=factory)
        handle = decoder.start('environment', 250, 10, lambda text: None, lambda reason: None, devices=[0, 3])
        handle.stop()
        assert opened == [3]

    def test_reader_reports_failures_then_decode(self):
        frame = qr_frame()
        blank = np.full(frame.shape, 255, dtype=np.uint8)
        capture = FakeCapture(frames=[blank, frame], width=frame.shape[1], height=frame.shape[0])
        decoder = QRDecoder(video_capture=lambda index: capture)

        decoded = []
        failures = []
        done = threading.Event()

        def on_decoded(text):
            decoded.append(text)
            done.set()

        handle = decoder.start('user', frame.shape[0], 30, on_decoded, failures.append, devices=[0])
        assert done.wait(timeout=5)
        handle.stop()

        assert decoded[0] == PAYLOAD
        assert failures[0] == NO_CODE_DETECTED
        assert capture.released

    def test_reader_reports_undersized_frames_as_error(self):
        small = np.zeros((100, 100, 3), dtype=np.uint8)
        capture = FakeCapture(frames=[small], width=0, height=0)
        decoder = QRDecoder(video_capture=lambda index: capture)

        errors = []
        done = threading.Event()

        def on_error(error):
            errors.append(error)
            done.set()

        decoder.start('environment', 250, 10, lambda text: None, lambda reason: None,
                      devices=[0], on_error=on_error)
        assert done.wait(timeout=5)

        assert isinstance(errors[0], UnsatisfiableConstraintsError)
        assert len(errors) == 1
