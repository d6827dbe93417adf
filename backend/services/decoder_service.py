"""
QR decoder service backed by OpenCV capture and pyzbar
"""
import base64
import logging
import threading
from io import BytesIO
from typing import Callable, List, Optional

import cv2
from PIL import Image
from pyzbar import pyzbar
from pyzbar.pyzbar import ZBarSymbol

from services.capture_session import NO_CODE_DETECTED
from services.errors import (
    CaptureError,
    DeviceBusyError,
    DeviceUnavailableError,
    PermissionDeniedError,
    ReaderStoppedError,
    UnsatisfiableConstraintsError,
)

logger = logging.getLogger(__name__)


def decode_frame(image: Image.Image) -> List[str]:
    """Return the text of every QR symbol found in a Pillow image"""
    results = pyzbar.decode(image, symbols=[ZBarSymbol.QRCODE])
    return [result.data.decode('utf-8', errors='replace') for result in results]


def decode_image(image_data) -> List[str]:
    """
    Decode QR text from an uploaded image

    Args:
        image_data: Base64 encoded image string (optionally a data URL) or image bytes

    Returns:
        list: Decoded payloads, empty when no code is readable
    """
    if isinstance(image_data, str):
        if image_data.startswith('data:image'):
            # Remove data URL prefix
            image_data = image_data.split(',', 1)[1]
        image_bytes = base64.b64decode(image_data)
    else:
        image_bytes = image_data

    with Image.open(BytesIO(image_bytes)) as image:
        return decode_frame(image.convert('RGB'))


def crop_square(frame, size: int):
    """Crop a centered size x size detection region from a BGR frame"""
    height, width = frame.shape[:2]
    if width < size or height < size:
        raise UnsatisfiableConstraintsError(
            f'Frame {width}x{height} is smaller than the {size}px detection region'
        )
    top = (height - size) // 2
    left = (width - size) // 2
    return frame[top:top + size, left:left + size]


class CaptureHandle:
    """Exclusive handle on a running camera reader"""

    def __init__(self, capture, qrbox: int, fps: int,
                 on_decoded: Callable[[str], None], on_failure: Callable[[str], None],
                 on_error: Optional[Callable[[CaptureError], None]] = None):
        self._capture = capture
        self._qrbox = qrbox
        self._interval = 1.0 / max(fps, 1)
        self._on_decoded = on_decoded
        self._on_failure = on_failure
        self._on_error = on_error
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name='qr-reader', daemon=True)

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop_event.is_set()

    def start(self):
        self._thread.start()
        return self

    def stop(self):
        """Stop reading frames and release the camera"""
        self._stop_event.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=2.0)
        if not self._thread.is_alive():
            self._release()

    def _release(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def _run(self):
        try:
            while not self._stop_event.is_set():
                ok, frame = self._capture.read()
                if not ok:
                    self._on_failure('Could not read a frame from the camera')
                else:
                    region = crop_square(frame, self._qrbox)
                    image = Image.fromarray(cv2.cvtColor(region, cv2.COLOR_BGR2RGB))
                    decoded = decode_frame(image)
                    if decoded:
                        self._on_decoded(decoded[0])
                    else:
                        self._on_failure(NO_CODE_DETECTED)
                self._stop_event.wait(self._interval)
        except Exception as e:
            logger.warning('QR reader stopped unexpectedly: %s', e)
            if self._on_error is not None:
                error = e if isinstance(e, CaptureError) else ReaderStoppedError(str(e))
                self._on_error(error)
        finally:
            self._stop_event.set()
            self._release()


class QRDecoder:
    """Camera access and QR decoding for the capture controller"""

    def __init__(self, max_devices: int = 4, video_capture=None):
        """
        Args:
            max_devices: Number of OpenCV capture indexes to probe
            video_capture: Factory for capture objects (defaults to cv2.VideoCapture)
        """
        self.max_devices = max_devices
        self._video_capture = video_capture or cv2.VideoCapture

    def list_video_devices(self) -> List[int]:
        """Return the indexes of cameras that can currently be opened"""
        devices = []
        for index in range(self.max_devices):
            capture = self._video_capture(index)
            try:
                if capture.isOpened():
                    devices.append(index)
            finally:
                capture.release()
        logger.info('Found %d video device(s): %s', len(devices), devices)
        return devices

    def start(self, preferred_facing: str, qrbox: int, fps: int,
              on_decoded: Callable[[str], None], on_failure: Callable[[str], None],
              devices: Optional[List[int]] = None,
              on_error: Optional[Callable[[CaptureError], None]] = None) -> CaptureHandle:
        """
        Open a camera and start decoding frames in the background

        'environment' prefers the last enumerated device (external or rear
        camera), 'user' the first one. on_failure hears about single frames;
        on_error is called once if the reader stops for good.
        """
        devices = devices if devices is not None else self.list_video_devices()
        if not devices:
            raise DeviceUnavailableError('No video devices found')
        index = devices[-1] if preferred_facing == 'environment' else devices[0]

        try:
            capture = self._video_capture(index)
        except PermissionError as e:
            raise PermissionDeniedError(str(e))

        if not capture.isOpened():
            capture.release()
            raise DeviceBusyError(f'Camera {index} could not be opened')

        capture.set(cv2.CAP_PROP_FPS, fps)
        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        if width and height and (width < qrbox or height < qrbox):
            capture.release()
            raise UnsatisfiableConstraintsError(
                f'Camera {index} resolution {width}x{height} cannot fit a {qrbox}px region'
            )

        logger.info('Started camera %d (%s) at %d fps', index, preferred_facing, fps)
        return CaptureHandle(capture, qrbox, fps, on_decoded, on_failure, on_error).start()
