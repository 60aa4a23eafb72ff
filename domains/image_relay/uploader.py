"""
Upload pipeline for Image Relay.

Posts a single image to the processing API as multipart/form-data and stores
the returned bytes in the processed directory under the original file name.
"""

from pathlib import Path
from typing import Optional

import httpx
from loguru import logger

from app.utils.config import Settings
from app.utils.exceptions import (
    ApiResponseError,
    FileReadError,
    OutputWriteError,
    UploadTransportError,
)
from app.utils.helpers import format_bytes, guess_content_type


class ImageUploader:
    """Client for the remote background-removal API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize uploader.

        Args:
            settings: Application settings
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.settings = settings
        self.transport = transport

    def build_headers(self) -> dict[str, str]:
        """Headers sent alongside the multipart body."""
        # httpx fills in Content-Type with the multipart boundary
        return {self.settings.api_key_header: self.settings.api_key}

    def read_source(self, path: Path) -> bytes:
        """Read the whole source file into memory."""
        try:
            with path.open("rb") as fh:
                return fh.read()
        except OSError as e:
            raise FileReadError(f"Cannot open {path}: {e}", path=path) from e

    def send(self, path: Path, payload: bytes) -> httpx.Response:
        """
        POST one file part plus the configured form fields.

        Only the base name travels as the uploaded filename.
        """
        files = {
            self.settings.image_field: (path.name, payload, guess_content_type(path)),
        }

        try:
            with httpx.Client(
                timeout=self.settings.request_timeout,
                transport=self.transport,
            ) as client:
                return client.post(
                    self.settings.api_url,
                    headers=self.build_headers(),
                    data=dict(self.settings.form_fields),
                    files=files,
                )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            # InvalidURL and header encoding errors sit outside HTTPError
            raise UploadTransportError(f"Request for {path.name} failed: {e}", path=path) from e

    def write_result(self, name: str, content: bytes) -> Path:
        """
        Store API output as processed_dir/<name>, replacing any previous result.

        The bytes land in a temporary sibling first so a failed write never
        leaves a truncated result behind.
        """
        target = self.settings.processed_dir / name
        tmp_path = target.with_name(f".{target.name}.tmp")

        try:
            tmp_path.write_bytes(content)
            tmp_path.replace(target)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise OutputWriteError(f"Cannot write {target}: {e}", path=target) from e

        return target

    def process(self, path: Path) -> Path:
        """
        Upload a file and persist the API result.

        Args:
            path: Existing regular file

        Returns:
            Path of the written result

        Raises:
            FileReadError: Source could not be read
            UploadTransportError: No response from the API
            ApiResponseError: API answered with a status other than 200
            OutputWriteError: Result could not be stored
        """
        path = Path(path)
        payload = self.read_source(path)

        logger.info(f"Uploading {path.name} ({format_bytes(len(payload))})")
        response = self.send(path, payload)

        if response.status_code != 200:
            raise ApiResponseError(response.status_code, response.text, path=path)

        target = self.write_result(path.name, response.content)
        logger.debug(f"Stored {format_bytes(len(response.content))} at {target}")
        return target
