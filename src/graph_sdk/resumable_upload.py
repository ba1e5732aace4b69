"""
ResumableUploader module for chunked video uploads with a bounded transfer budget
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .access_token import AccessToken, App
from .exceptions import (
    GraphTransportError, ResumableUploadError, UploadBudgetExhaustedError,
    UploadProtocolError, ValidationError
)
from .graph_client import GraphClient
from .graph_file import GraphFile
from .graph_request import build_request


@dataclass(frozen=True)
class UploadSession:
    """Server-side upload state for one upload call"""
    upload_session_id: str
    video_id: str
    file_size: int
    start_offset: int
    end_offset: int

    @property
    def is_finished(self) -> bool:
        return self.start_offset == self.end_offset

    @property
    def chunk_length(self) -> int:
        return self.end_offset - self.start_offset


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a completed upload"""
    video_id: str
    success: bool
    transfer_attempts: int

    def as_dict(self) -> Dict[str, Any]:
        return {'video_id': self.video_id, 'success': self.success}


class ResumableUploader:
    """
    Drives the start / transfer / finish upload protocol

    Transfers resume from the offset the server reports; the server offset
    always replaces the locally expected one. Only the transfer phase is
    retried, and only for transport failures and resumable upload errors.
    """

    def __init__(self, app: App, client: GraphClient,
                 access_token: Union[str, AccessToken, None] = None,
                 graph_version: Optional[str] = None):
        self.app = app
        self.client = client
        self.access_token = access_token
        self.graph_version = graph_version
        self.logger = logging.getLogger(__name__)

    def start(self, endpoint: str, file_size: int) -> UploadSession:
        """
        Open an upload session

        Args:
            endpoint: Upload edge, e.g. '/me/videos'
            file_size: Total size of the file in bytes

        Returns:
            UploadSession positioned at the first chunk
        """
        response = self._send_upload_request(endpoint, {
            'upload_phase': 'start',
            'file_size': file_size
        })

        try:
            upload_session_id = str(response['upload_session_id'])
            video_id = str(response.get('video_id') or response['file_id'])
        except KeyError as e:
            raise UploadProtocolError(f"Start phase reply is missing {e}") from e

        session = self._session_at(
            upload_session_id, video_id, file_size,
            response.get('start_offset'), response.get('end_offset')
        )
        self.logger.info(
            f"Started upload session {session.upload_session_id} for video {session.video_id} "
            f"({file_size} bytes)"
        )
        return session

    def transfer(self, endpoint: str, session: UploadSession, chunk: GraphFile) -> UploadSession:
        """
        Send one chunk and return the session at the offsets the server reports

        Raises:
            GraphTransportError: If the transport fails
            GraphResponseError: If the server rejects the chunk
            UploadProtocolError: If the reported offsets are out of range
        """
        response = self._send_upload_request(endpoint, {
            'upload_phase': 'transfer',
            'upload_session_id': session.upload_session_id,
            'start_offset': session.start_offset,
            'video_file_chunk': chunk
        })

        return self._session_at(
            session.upload_session_id, session.video_id, session.file_size,
            response.get('start_offset'), response.get('end_offset')
        )

    def finish(self, endpoint: str, upload_session_id: str,
               metadata: Optional[Mapping[str, Any]] = None) -> bool:
        """Close the upload session; failures here are never retried"""
        params = dict(metadata or {})
        params.update({
            'upload_phase': 'finish',
            'upload_session_id': upload_session_id
        })
        response = self._send_upload_request(endpoint, params)
        return bool(response.get('success', False))

    def upload(self, endpoint: str, file_path: Union[str, Path],
               metadata: Optional[Mapping[str, Any]] = None,
               max_transfer_tries: int = 5) -> UploadResult:
        """
        Upload a file through the full start / transfer / finish cycle

        Every transfer attempt, successful or not, consumes one unit of
        max_transfer_tries.

        Args:
            endpoint: Upload edge, e.g. '/me/videos'
            file_path: Path to the file to upload
            metadata: Extra params sent with the finish phase (title, description)
            max_transfer_tries: Maximum number of transfer attempts for this call

        Returns:
            UploadResult with the video id and the number of transfer attempts

        Raises:
            ValidationError: If the budget or the file is invalid
            GraphTransportError: Last transport failure when the budget is exhausted
            ResumableUploadError: Last upload error when the budget is exhausted
            UploadBudgetExhaustedError: If the budget ran out without a failure
            UploadProtocolError: If the server reports offsets outside the file
        """
        if isinstance(max_transfer_tries, bool) or not isinstance(max_transfer_tries, int) \
                or max_transfer_tries < 1:
            raise ValidationError(f"max_transfer_tries must be a positive integer, got {max_transfer_tries!r}")

        path = Path(file_path)
        if not path.is_file():
            raise ValidationError(f"Failed to open file: {path}")

        session = self.start(endpoint, path.stat().st_size)
        attempts = 0
        last_error: Optional[Exception] = None

        with open(path, 'rb') as handle:
            while not session.is_finished:
                if attempts >= max_transfer_tries:
                    if last_error is not None:
                        self.logger.error(
                            f"Upload session {session.upload_session_id} failed after "
                            f"{attempts} transfer attempts: {last_error}"
                        )
                        raise last_error
                    raise UploadBudgetExhaustedError(
                        f"Transfer budget of {max_transfer_tries} attempts exhausted at offset "
                        f"{session.start_offset} of {session.file_size}",
                        attempts=attempts
                    )

                handle.seek(session.start_offset)
                chunk = GraphFile(path.name, handle.read(session.chunk_length))
                attempts += 1

                try:
                    session = self.transfer(endpoint, session, chunk)
                    last_error = None
                except (GraphTransportError, ResumableUploadError) as e:
                    last_error = e
                    self.logger.warning(
                        f"Transfer attempt {attempts}/{max_transfer_tries} for upload session "
                        f"{session.upload_session_id} failed: {e}"
                    )
                    session = self._resume_after_error(session, e)

        success = self.finish(endpoint, session.upload_session_id, metadata)
        self.logger.info(
            f"Finished upload session {session.upload_session_id} after {attempts} transfer attempts"
        )
        return UploadResult(video_id=session.video_id, success=success, transfer_attempts=attempts)

    def _resume_after_error(self, session: UploadSession, error: Exception) -> UploadSession:
        """Adopt a corrected offset carried by the error, if any"""
        if not isinstance(error, ResumableUploadError) or error.start_offset is None:
            return session

        start_offset = error.start_offset
        end_offset = error.end_offset
        if end_offset is None:
            end_offset = min(start_offset + session.chunk_length, session.file_size)

        self.logger.info(f"Server corrected upload offset to {start_offset}")
        return self._session_at(
            session.upload_session_id, session.video_id, session.file_size,
            start_offset, end_offset
        )

    @staticmethod
    def _session_at(upload_session_id: str, video_id: str, file_size: int,
                    start_offset: Any, end_offset: Any) -> UploadSession:
        try:
            start = int(start_offset)
            end = int(end_offset)
        except (TypeError, ValueError) as e:
            raise UploadProtocolError(
                f"Invalid offsets in upload reply: start={start_offset!r} end={end_offset!r}"
            ) from e

        if not 0 <= start <= end <= file_size:
            raise UploadProtocolError(
                f"Upload offsets {start}-{end} are outside the file size of {file_size} bytes"
            )

        return UploadSession(upload_session_id, video_id, file_size, start, end)

    def _send_upload_request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        request = build_request(
            self.app,
            'POST',
            endpoint,
            params,
            access_token=self.access_token,
            graph_version=self.graph_version
        )
        return self.client.send_request(request).decoded_body
