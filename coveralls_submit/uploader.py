"""Coveralls job upload.

Usage:
    uploader = CoverallsUploader()
    result   = uploader.upload("xcov_report/tmp/coveralls_report1a2b.json")
    if not result.success:
        print(result.status_code, result.body)

A response other than HTTP 200 is reported through ``UploadResult``, not
raised. Only failures that prevent any response (DNS, refused connection,
TLS handshake) raise ``TransportError``.
"""

import warnings
from dataclasses import dataclass
from pathlib import Path

import requests

COVERALLS_JOBS_URL = "https://coveralls.io/api/v1/jobs"

#: Multipart field carrying the job file, as expected by Coveralls
FORM_FIELD = "json_file"
UPLOAD_FILENAME = "coveralls_report.json"
UPLOAD_CONTENT_TYPE = "text/plain"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class UploaderError(Exception):
    """Base exception for all uploader errors."""


class TransportError(UploaderError):
    """Raised when no HTTP response could be obtained."""


class ReportReadError(UploaderError):
    """Raised when the job file to upload cannot be opened."""


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UploadResult:
    success: bool
    status_code: int
    body: str


# ---------------------------------------------------------------------------
# Uploader
# ---------------------------------------------------------------------------

class CoverallsUploader:
    """Single-attempt multipart upload of a Coveralls job file."""

    def __init__(
        self,
        verify: bool = True,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._verify = verify
        self._timeout = timeout
        self._session = session or requests.Session()
        if not verify:
            warnings.warn(
                "TLS certificate verification is disabled for the Coveralls upload.",
                UserWarning,
                stacklevel=2,
            )

    def upload(self, file_path: str | Path, endpoint: str = COVERALLS_JOBS_URL) -> UploadResult:
        """POST the job file at *file_path* to *endpoint*.

        Raises:
            ReportReadError: the file cannot be opened
            TransportError:  DNS, connection, TLS failure or transport timeout
        """
        try:
            handle = open(file_path, "rb")
        except OSError as exc:
            raise ReportReadError(f"Unable to open Coveralls report '{file_path}': {exc}") from exc

        with handle:
            files = {FORM_FIELD: (UPLOAD_FILENAME, handle, UPLOAD_CONTENT_TYPE)}
            try:
                # passed per request so REQUESTS_CA_BUNDLE cannot override verify=False
                response = self._session.post(
                    endpoint, files=files, timeout=self._timeout, verify=self._verify,
                )
            except requests.exceptions.Timeout as exc:
                raise TransportError(
                    f"Request timed out after {self._timeout}s while contacting '{endpoint}'"
                ) from exc
            except requests.exceptions.ConnectionError as exc:
                raise TransportError(f"Unable to reach Coveralls at '{endpoint}': {exc}") from exc
            except requests.exceptions.RequestException as exc:
                raise TransportError(f"Request to '{endpoint}' failed: {exc}") from exc

        return UploadResult(
            success=response.status_code == 200,
            status_code=response.status_code,
            body=response.text,
        )
