"""Slack file upload through the external upload API.

``files.upload`` is gone, so a file takes three calls:

1. ``files.getUploadURLExternal`` hands out a one-off upload URL and file id.
2. The bytes are POSTed to that URL.
3. ``files.completeUploadExternal`` finalizes the file and shares it to the channels.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Optional

import requests

from .utils.exceptions import UploadError
from .utils.session import create_session

SLACK_API_BASE = 'https://slack.com/api'
UPLOAD_TIMEOUT = 300
API_TIMEOUT = 30

logger = logging.getLogger(__name__)


@dataclass
class UploadRequest:
    """One file going to one or more channels."""
    channels: List[str]
    filename: str
    source: BinaryIO
    comment: Optional[str] = None
    title: Optional[str] = None


def stream_length(stream: BinaryIO) -> int:
    """Bytes left to read in ``stream``."""
    try:
        return os.fstat(stream.fileno()).st_size - stream.tell()
    except (AttributeError, OSError):
        pos = stream.tell()
        stream.seek(0, os.SEEK_END)
        end = stream.tell()
        stream.seek(pos)
        return end - pos


class SlackUploader:
    """Uploads files with a bot or user token."""

    def __init__(self, token: str, session: Optional[requests.Session] = None,
                 api_base: str = SLACK_API_BASE):
        self.token = token
        self.session = session or create_session()
        self.api_base = api_base.rstrip('/')

    def _auth_headers(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self.token}'}

    def _call(self, method: str, data: dict) -> dict:
        url = f'{self.api_base}/{method}'
        logger.debug(f'POST {url}')
        try:
            response = self.session.post(url, headers=self._auth_headers(), data=data, timeout=API_TIMEOUT)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise UploadError(method, str(e))

        try:
            body = response.json()
        except ValueError:
            raise UploadError(method, f'unexpected response: {response.text[:200]!r}')

        if not body.get('ok'):
            raise UploadError(method, body.get('error', 'unknown_error'))
        for warning in body.get('response_metadata', {}).get('warnings', []):
            logger.warning(f'{method}: {warning}')
        return body

    def _post_bytes(self, upload_url: str, request: UploadRequest):
        logger.debug(f'Uploading {request.filename} to {upload_url}')
        try:
            response = self.session.post(
                upload_url,
                files={'file': (request.filename, request.source)},
                timeout=UPLOAD_TIMEOUT,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise UploadError('upload', str(e))

    def upload(self, request: UploadRequest) -> dict:
        """Upload ``request.source`` and share it. Returns the completeUploadExternal body."""
        length = stream_length(request.source)

        ticket = self._call('files.getUploadURLExternal', {
            'filename': request.filename,
            'length': length,
        })
        try:
            upload_url = ticket['upload_url']
            file_id = ticket['file_id']
        except KeyError as e:
            raise UploadError('files.getUploadURLExternal', f'missing {e} in response')

        self._post_bytes(upload_url, request)

        data = {
            'files': json.dumps([{'id': file_id, 'title': request.title or request.filename}]),
            'channels': ','.join(request.channels),
        }
        if request.comment:
            data['initial_comment'] = request.comment

        result = self._call('files.completeUploadExternal', data)
        logger.info(f'Uploaded {request.filename} ({length} bytes) as {file_id}')
        return result
