"""
Fake transports standing in for the Graph API in tests
"""

import json
from typing import List, Optional, Tuple

from graph_sdk.exceptions import GraphTransportError
from graph_sdk.http_clients import RawResponse


class FooHttpClient:
    """Answers every request with a two-item page and an odd status code"""

    def __init__(self):
        self.sent = []

    def send(self, method, url, headers, body, timeout):
        self.sent.append({'method': method, 'url': url, 'headers': headers, 'body': body})
        return RawResponse(
            headers={'Content-Type': 'application/json'},
            body='{"data":[{"id":"123","name":"Foo"},{"id":"1337","name":"Bar"}]}',
            http_status_code=1337
        )


class FooPersistentDataHandler:
    def get(self, key):
        return 'foo'

    def set(self, key, value):
        pass

    def clear(self, key):
        pass


class FooUrlDetectionHandler:
    def get_current_url(self):
        return 'https://foo.bar'


class FakeGraphApiForResumableUpload:
    """
    Scripted upload server

    The start phase opens a session covering bytes 0-20. Each successful
    transfer pops the next (start_offset, end_offset) reply. Failures return
    the resumable upload error envelope, or raise a transport error when
    fail_with_transport_error is set.
    """

    TRANSFER_ERROR = {
        'error': {
            'message': 'There was a problem uploading your video. Please try uploading it again.',
            'type': 'FacebookApiException',
            'code': 6000,
            'error_subcode': 1363019
        }
    }

    def __init__(self, transfer_replies: Optional[List[Tuple[int, int]]] = None,
                 failing_transfers: int = 0, start_reply: Tuple[int, int] = (0, 20)):
        self.transfer_replies = list(transfer_replies if transfer_replies is not None else [(20, 40), (40, 40)])
        self.failing_transfers = failing_transfers
        self.start_reply = start_reply
        self.fail_with_transport_error = False
        self.fail_on_finish = False
        self.error_data = None
        self.transfer_attempts = 0
        self.transfer_offsets = []
        self.phases = []
        self.last_error_response = None

    def fail_on_transfer(self):
        self.failing_transfers = float('inf')

    def send(self, method, url, headers, body, timeout):
        text = body.decode('latin-1') if isinstance(body, bytes) else body

        if 'transfer' in text:
            self.phases.append('transfer')
            return self._respond_to_transfer(text)
        if 'finish' in text:
            self.phases.append('finish')
            return self._respond_to_finish()

        self.phases.append('start')
        start_offset, end_offset = self.start_reply
        return self._json_response({
            'video_id': '1337',
            'start_offset': str(start_offset),
            'end_offset': str(end_offset),
            'upload_session_id': '42'
        })

    def _respond_to_transfer(self, text):
        self.transfer_attempts += 1
        self.transfer_offsets.append(self._field(text, 'start_offset'))

        if self.transfer_attempts <= self.failing_transfers:
            if self.fail_with_transport_error:
                raise GraphTransportError(f"Connection reset on attempt {self.transfer_attempts}")
            envelope = json.loads(json.dumps(self.TRANSFER_ERROR))
            if self.error_data:
                envelope['error']['error_data'] = self.error_data
            self.last_error_response = envelope
            return self._json_response(envelope, 500)

        start_offset, end_offset = self.transfer_replies.pop(0)
        return self._json_response({
            'start_offset': str(start_offset),
            'end_offset': str(end_offset)
        })

    def _respond_to_finish(self):
        if self.fail_on_finish:
            return self._json_response({
                'error': {'message': 'Service temporarily unavailable', 'code': 2}
            }, 503)
        return self._json_response({'success': True})

    @staticmethod
    def _field(text, name):
        marker = f'name="{name}"\r\n\r\n'
        if marker not in text:
            return None
        return text.split(marker, 1)[1].split('\r\n', 1)[0]

    @staticmethod
    def _json_response(payload, status=200):
        return RawResponse(
            headers={'Content-Type': 'application/json'},
            body=json.dumps(payload),
            http_status_code=status
        )
