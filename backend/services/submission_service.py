"""
Submission service: forwards an annotated contact to the spreadsheet endpoint
"""
import json
import logging
from datetime import datetime
from typing import Callable, Optional

import requests

from models.annotation import Annotation
from models.contact import ContactRecord
from models.submission import SubmissionRecord
from services.errors import (
    ApplicationError,
    BadResponseFormatError,
    NetworkFailureError,
    NoDataToSubmitError,
)

logger = logging.getLogger(__name__)

# Value of the reply's 'result' field when the endpoint rejects a row
ERROR_SENTINEL = 'error'


class SubmissionCoordinator:
    """Builds submission records and posts them to the spreadsheet web app"""

    def __init__(self, endpoint_url: Optional[str], content_type: str = 'text/plain',
                 timeout: Optional[float] = None, session=None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            endpoint_url: Spreadsheet web app URL
            content_type: Request content type; text/plain avoids a CORS preflight on Apps Script
            timeout: Seconds to wait for the endpoint (None keeps the transport default)
            session: requests.Session-like object
            clock: Returns the submission time (UTC)
        """
        self.endpoint_url = endpoint_url
        self.content_type = content_type
        self.timeout = timeout
        self.session = session or requests.Session()
        self.clock = clock

    def submit(self, record: Optional[ContactRecord], annotation: Annotation) -> SubmissionRecord:
        """
        Send one contact to the endpoint

        Returns:
            SubmissionRecord: the snapshot that was accepted

        Raises:
            SubmissionError: NoDataToSubmitError, NetworkFailureError,
                BadResponseFormatError or ApplicationError
        """
        if record is None:
            raise NoDataToSubmitError()
        if not self.endpoint_url:
            raise NetworkFailureError('Submission endpoint is not configured')

        now = self.clock() if self.clock else None
        submission = SubmissionRecord.build(record, annotation, now=now)
        body = json.dumps(submission.to_dict(), ensure_ascii=False)

        try:
            response = self.session.post(
                self.endpoint_url,
                data=body.encode('utf-8'),
                headers={'Content-Type': self.content_type},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error('Error submitting data: %s', e)
            raise NetworkFailureError(str(e))

        if not 200 <= response.status_code < 300:
            logger.error('Submission endpoint answered HTTP %s', response.status_code)
            raise NetworkFailureError(f'Server responded with status {response.status_code}')

        result = self._parse_reply(response.text)
        if result.get('result') == ERROR_SENTINEL:
            detail = result.get('error') or ApplicationError.user_message
            logger.error('Submission rejected by endpoint: %s', detail)
            raise ApplicationError(str(detail))

        logger.info('Submitted contact %r', submission.name)
        return submission

    def _parse_reply(self, text: str) -> dict:
        try:
            result = json.loads(text)
        except ValueError:
            raise BadResponseFormatError()
        if not isinstance(result, dict):
            raise BadResponseFormatError()
        return result
