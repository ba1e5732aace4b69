"""
RedirectLoginHelper module for the OAuth redirect login flow
"""

import hmac
import logging
import secrets
from typing import Any, Iterable, Mapping, Optional, Union
from urllib.parse import urlencode

from .access_token import AccessToken, App
from .exceptions import GraphSDKError, ValidationError
from .graph_client import GraphClient
from .graph_request import SDK_VERSION, build_request
from .persistent_data import MemoryPersistentDataHandler, PersistentDataInterface
from .url_detection import UrlDetectionHandler, UrlDetectionInterface

BASE_AUTHORIZATION_URL = 'https://www.facebook.com'


class RedirectLoginHelper:
    """
    Builds login/logout URLs and exchanges the returned code for an access token

    The CSRF state is kept in the persistent data handler between the
    redirect and the callback, and cleared once it has been checked.
    """

    CSRF_STATE_KEY = 'state'
    CSRF_LENGTH = 32

    def __init__(self, app: App, client: GraphClient,
                 persistent_data_handler: Optional[PersistentDataInterface] = None,
                 url_detection_handler: Optional[UrlDetectionInterface] = None,
                 graph_version: Optional[str] = None):
        self.app = app
        self.client = client
        self.persistent_data_handler = persistent_data_handler or MemoryPersistentDataHandler()
        self.url_detection_handler = url_detection_handler or UrlDetectionHandler()
        self.graph_version = graph_version
        self.logger = logging.getLogger(__name__)

    def get_login_url(self, redirect_url: Optional[str] = None, scope: Iterable[str] = (),
                      params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Build the OAuth dialog URL and store a fresh CSRF state

        Args:
            redirect_url: Callback URL, the current URL when omitted
            scope: Permissions to request
            params: Extra query parameters for the dialog
        """
        state = secrets.token_hex(self.CSRF_LENGTH // 2)
        self.persistent_data_handler.set(self.CSRF_STATE_KEY, state)

        query = {
            'client_id': self.app.id,
            'state': state,
            'response_type': 'code',
            'sdk': f"graph-sdk-python-{SDK_VERSION}",
            'redirect_uri': redirect_url or self.url_detection_handler.get_current_url(),
            'scope': ','.join(scope)
        }
        query.update(params or {})

        version = f"/{self.graph_version}" if self.graph_version else ''
        return f"{BASE_AUTHORIZATION_URL}{version}/dialog/oauth?{urlencode(query)}"

    def get_logout_url(self, access_token: Union[str, AccessToken], next_url: str) -> str:
        access_token = AccessToken.coerce(access_token)
        if access_token.is_app_access_token():
            raise ValidationError('Cannot generate a logout URL with an app access token.', 722)

        query = {'next': next_url, 'access_token': str(access_token)}
        return f"{BASE_AUTHORIZATION_URL}/logout.php?{urlencode(query)}"

    def validate_csrf(self, state: Optional[str]) -> None:
        """
        Compare the callback state with the stored one, then forget it

        Raises:
            GraphSDKError: If either state is missing or they differ
        """
        saved_state = self.persistent_data_handler.get(self.CSRF_STATE_KEY)
        self.persistent_data_handler.clear(self.CSRF_STATE_KEY)

        if not state or not saved_state:
            raise GraphSDKError('Cross-site request forgery validation failed. Required param "state" missing.')
        if not hmac.compare_digest(str(saved_state), str(state)):
            raise GraphSDKError('Cross-site request forgery validation failed. The "state" param does not match.')

    def get_access_token(self, code: str, state: str, redirect_url: Optional[str] = None) -> AccessToken:
        """
        Exchange the authorization code from the callback for a user access token

        Raises:
            GraphSDKError: If CSRF validation fails
            GraphResponseError: If the token endpoint rejects the code
        """
        self.validate_csrf(state)

        request = build_request(
            self.app,
            'GET',
            '/oauth/access_token',
            {
                'client_id': self.app.id,
                'client_secret': self.app.secret,
                'redirect_uri': redirect_url or self.url_detection_handler.get_current_url(),
                'code': code
            },
            access_token=self.app.access_token(),
            graph_version=self.graph_version
        )
        body = self.client.send_request(request).decoded_body

        if 'access_token' not in body:
            raise GraphSDKError('Access token was not returned from Graph.', 401)

        self.logger.info('Exchanged authorization code for an access token')
        return AccessToken(
            str(body['access_token']),
            AccessToken.expiry_from_seconds(body.get('expires_in') or body.get('expires'))
        )
