"""
Capture session controller: scanner lifecycle and decoded-text handling
"""
import logging
import threading
from enum import Enum

from models.session_state import SessionState, Status
from services.errors import (
    CaptureError,
    DecodeEmptyError,
    DeviceUnavailableError,
    InsecureContextError,
)
from services.parser_service import BadgeParser

logger = logging.getLogger(__name__)

# Failure reason decoders report for frames that contain no readable QR code
NO_CODE_DETECTED = 'No MultiFormat Readers were able to detect the code'


class CaptureState(str, Enum):
    IDLE = 'idle'
    STARTING = 'starting'
    ACTIVE = 'active'
    STOPPED = 'stopped'
    ERRORED = 'errored'


class CaptureSessionController:
    """
    Drives one QR capture at a time

    Holds at most one capture handle. Each start() opens a new generation;
    callbacks from an older generation, or arriving after a stop, are ignored.
    """

    def __init__(self, state: SessionState, decoder, lock=None, parser=None,
                 preferred_facing='environment', qrbox=250, fps=10):
        self.state = state
        self.decoder = decoder
        self.parser = parser or BadgeParser()
        self.preferred_facing = preferred_facing
        self.qrbox = qrbox
        self.fps = fps
        self._lock = lock or threading.RLock()
        self._handle = None
        self._generation = 0
        self._devices = []
        self._no_code_reported = False
        self._set_capture_state(CaptureState.IDLE)

    @property
    def capture_state(self) -> CaptureState:
        return CaptureState(self.state.capture_state)

    def check_devices(self):
        """
        Enumerate cameras and gate the scanner on the result

        A running scan keeps its status; only an idle or errored scanner
        reports what was found.
        """
        try:
            devices = self.decoder.list_video_devices()
        except Exception as e:
            logger.error('Error checking camera: %s', e)
            with self._lock:
                self.state.camera_available = False
                if self.capture_state in (CaptureState.IDLE, CaptureState.ERRORED):
                    self._set_capture_state(CaptureState.ERRORED)
                    self.state.status = Status.error(f'Error checking camera availability: {e}')
            return []

        with self._lock:
            self._devices = list(devices)
            self.state.camera_available = bool(devices)
            if self.capture_state not in (CaptureState.IDLE, CaptureState.ERRORED):
                return devices
            if devices:
                self._set_capture_state(CaptureState.IDLE)
                self.state.status = Status.info('Camera detected. Click "Start Scanner" to begin.')
            else:
                self._set_capture_state(CaptureState.ERRORED)
                self.state.status = Status.error(
                    'No camera found. Please connect a camera and refresh the page.'
                )
        return devices

    def start(self, secure_context: bool = True):
        """
        Start scanning; any previous handle is released first

        Raises:
            CaptureError: when the camera cannot be used (status is set as well)
        """
        with self._lock:
            if not secure_context:
                self._fail(InsecureContextError())
            if not self.state.camera_available:
                self.state.status = Status.error('No camera available. Please connect a camera and try again.')
                raise DeviceUnavailableError()

            previous, self._handle = self._handle, None
            self._generation += 1
            generation = self._generation
            self._no_code_reported = False
            self._set_capture_state(CaptureState.STARTING)
            self.state.status = Status.info('Starting camera...')

        if previous is not None:
            self._stop_handle(previous)

        try:
            handle = self.decoder.start(
                self.preferred_facing,
                self.qrbox,
                self.fps,
                lambda text: self._on_decoded(generation, text),
                lambda reason: self._on_failure(generation, reason),
                devices=self._devices,
                on_error=lambda error: self._on_error(generation, error),
            )
        except CaptureError as e:
            logger.error('Scanner initialization error: %s', e)
            with self._lock:
                if generation == self._generation:
                    self._fail(e)
            raise

        with self._lock:
            current = generation == self._generation and self.capture_state == CaptureState.STARTING
            if current:
                self._handle = handle
                self._set_capture_state(CaptureState.ACTIVE)
                self.state.status = Status.info('Scanning... Hold the badge QR code inside the frame.')
        if not current:
            # Stopped, restarted or already decoded while the camera was opening
            self._stop_handle(handle)

    def stop(self):
        """Stop scanning; safe to call when nothing is running"""
        with self._lock:
            self._generation += 1
            handle, self._handle = self._handle, None
            if self.capture_state in (CaptureState.STARTING, CaptureState.ACTIVE):
                self._set_capture_state(CaptureState.STOPPED)
                self.state.status = Status.info('Scanner stopped')
        if handle is not None:
            self._stop_handle(handle)

    def dispose(self):
        """Best-effort release of the camera on shutdown"""
        with self._lock:
            self._generation += 1
            handle, self._handle = self._handle, None
        if handle is not None:
            self._stop_handle(handle)

    def accept_decoded(self, text: str):
        """
        Extract a contact from decoded text and make it the current record

        Raises:
            DecodeEmptyError: when nothing usable was found
        """
        result = self.parser.parse(text)
        logger.info('Extracted %s via %s', result.detected_fields, result.extraction_method)
        with self._lock:
            if result.record.is_empty():
                error = DecodeEmptyError()
                self.state.status = Status.error(error.message)
                raise error
            self.state.current_record = result.record
            self.state.status = Status.success('Badge scanned successfully!')
        return result

    def _on_decoded(self, generation, text):
        with self._lock:
            if generation != self._generation or self.capture_state not in (
                    CaptureState.STARTING, CaptureState.ACTIVE):
                logger.debug('Ignoring decode from inactive capture session')
                return
            logger.info('QR code detected (%d chars)', len(text))
            self._generation += 1
            self._set_capture_state(CaptureState.STOPPED)
            # Runs on the reader thread, so stopping does not wait on itself
            handle, self._handle = self._handle, None
            if handle is not None:
                self._stop_handle(handle)
            try:
                self.accept_decoded(text)
            except DecodeEmptyError:
                logger.warning('Decoded QR code held no usable fields')

    def _on_failure(self, generation, reason):
        # Called for every frame without a code; keep it out of the status
        logger.debug('Scanner frame not decoded: %s', reason)
        if reason != NO_CODE_DETECTED:
            return
        with self._lock:
            if generation != self._generation or self._no_code_reported:
                return
            if self.capture_state == CaptureState.ACTIVE:
                self._no_code_reported = True
                self.state.status = Status.info('No QR code detected. Please try again.')

    def _on_error(self, generation, error: CaptureError):
        """The reader stopped for good; report it and leave the scanner restartable"""
        with self._lock:
            if generation != self._generation:
                logger.debug('Ignoring reader error from inactive capture session: %s', error)
                return
            logger.error('Scanner stopped with an error: %s', error)
            self._generation += 1
            handle, self._handle = self._handle, None
            self._set_capture_state(CaptureState.ERRORED)
            self.state.status = Status.error(error.message)
        if handle is not None:
            self._stop_handle(handle)

    def _fail(self, error: CaptureError):
        self._set_capture_state(CaptureState.ERRORED)
        self.state.status = Status.error(error.message)
        raise error

    def _stop_handle(self, handle):
        try:
            handle.stop()
        except Exception as e:
            logger.warning('Error stopping scanner: %s', e)

    def _set_capture_state(self, capture_state: CaptureState):
        self.state.capture_state = capture_state.value
        self.state.scanning_active = capture_state in (CaptureState.STARTING, CaptureState.ACTIVE)
