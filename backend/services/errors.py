"""
Intake error taxonomy
Every error carries a plain-language message an operator can act on
"""


class IntakeError(Exception):
    """Base class for recoverable intake failures"""
    user_message = 'Something went wrong. Please try again.'
    status_code = 500

    def __init__(self, detail=None):
        self.detail = detail
        super().__init__(detail or self.user_message)

    @property
    def message(self):
        return self.user_message


# Capture errors

class CaptureError(IntakeError):
    status_code = 503
    prefix = 'Camera access error: '

    @property
    def message(self):
        return self.prefix + self.user_message


class DeviceUnavailableError(CaptureError):
    user_message = 'No camera found. Please connect a camera and try again.'


class PermissionDeniedError(CaptureError):
    user_message = 'Camera access was denied. Please allow camera access and try again.'


class DeviceBusyError(CaptureError):
    user_message = 'Camera is already in use by another application.'


class UnsatisfiableConstraintsError(CaptureError):
    user_message = 'Camera constraints could not be satisfied.'


class ReaderStoppedError(CaptureError):
    user_message = 'The camera stopped unexpectedly. Please restart the scanner.'


class InsecureContextError(CaptureError):
    user_message = 'Camera access requires HTTPS. Please use a secure connection.'
    status_code = 403
    prefix = ''


class DecodeEmptyError(IntakeError):
    user_message = 'No valid information found in QR code'
    status_code = 422


# Submission errors

class SubmissionError(IntakeError):
    status_code = 502
    prefix = 'Error submitting data: '

    @property
    def message(self):
        return self.prefix + (self.detail or self.user_message)


class NoDataToSubmitError(SubmissionError):
    user_message = 'No data to submit'
    status_code = 400

    @property
    def message(self):
        return self.user_message


class NetworkFailureError(SubmissionError):
    user_message = 'Could not reach the spreadsheet. Check the connection and try again.'


class BadResponseFormatError(SubmissionError):
    user_message = 'Invalid response from server'


class ApplicationError(SubmissionError):
    """Error reported by the spreadsheet endpoint itself; detail is shown verbatim"""
    user_message = 'The spreadsheet rejected the submission'


class SubmissionInProgressError(SubmissionError):
    user_message = 'A submission is already in progress'
    status_code = 409

    @property
    def message(self):
        return self.user_message


# Manual entry

class ValidationError(IntakeError):
    user_message = 'Please enter at least a name'
    status_code = 400

    @property
    def message(self):
        return self.detail or self.user_message
