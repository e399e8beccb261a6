"""HTTP client for the render endpoint."""
import asyncio
import logging
import re
from typing import Optional, Tuple

import requests

from encoder import build_payload
from text_utils import report_file_name
from visit_form import Notice, VisitForm

GENERATE_PATH = "/api/generate-pdf"

_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


class FormValidationError(Exception):
    """Submission blocked by the validation gate; carries the Notice."""

    def __init__(self, notice: Notice):
        super().__init__(notice.description)
        self.notice = notice


class ReportRequestError(Exception):
    """The render request failed (transport error or non-2xx answer)."""


def filename_from_disposition(header: Optional[str], fallback: str) -> str:
    match = _FILENAME_RE.search(header or "")
    return match.group(1).strip() if match else fallback


class ReportClient:
    """Validates a VisitForm, submits it and returns the rendered PDF."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 60.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

    def generate(self, form: VisitForm) -> Tuple[bytes, str]:
        """Return (pdf_bytes, file_name) for the form.

        Raises FormValidationError before any network call when the form is
        incomplete, ReportRequestError when the service can't deliver.
        """
        notice = form.validate()
        if notice is not None:
            raise FormValidationError(notice)

        payload = asyncio.run(build_payload(form))
        url = f"{self.base_url}{GENERATE_PATH}"
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.error("Render request to %s failed: %s", url, e)
            raise ReportRequestError(str(e)) from e

        if not response.ok:
            self.logger.error("Render request returned %s: %s", response.status_code, response.text[:200])
            raise ReportRequestError(f"HTTP {response.status_code}")

        fallback = report_file_name(form.project_code.strip())
        file_name = filename_from_disposition(response.headers.get("Content-Disposition"), fallback)
        self.logger.info("Report received for %r (%d bytes)", form.project_code, len(response.content))
        return response.content, file_name
