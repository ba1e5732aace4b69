"""
Test suite for GraphResponse decoding and error classification
Following TDD approach with AAA pattern and descriptive naming
"""

import json

import pytest

from graph_sdk.access_token import App
from graph_sdk.exceptions import (
    AuthenticationError, AuthorizationError, ClientError, GraphTransportError, OtherResponseError,
    ParseError, ResumableUploadError, ServerError, ThrottleError
)
from graph_sdk.graph_nodes import GraphEdge, GraphNode, GraphPage, GraphUser
from graph_sdk.graph_request import GraphRequest
from graph_sdk.graph_response import GraphResponse, create_response_error


def error_body(**error):
    return json.dumps({'error': error})


class TestGraphResponseDecoding:
    """Test suite for body decoding rules"""

    def setup_method(self):
        self.request = GraphRequest(App('123', 'foo_secret'), 'GET', '/me')

    def test_json_object_is_decoded(self):
        # Act
        response = GraphResponse(self.request, '{"id":"123","name":"Foo"}', 200)

        # Assert
        assert response.decoded_body == {'id': '123', 'name': 'Foo'}
        assert response.is_error is False

    def test_bare_true_is_decoded_as_success(self):
        # Act
        response = GraphResponse(self.request, 'true', 200)

        # Assert
        assert response.decoded_body == {'success': True}

    def test_json_list_is_wrapped_in_data(self):
        # Act
        response = GraphResponse(self.request, '[{"id":"1"},{"id":"2"}]', 200)

        # Assert
        assert response.decoded_body == {'data': [{'id': '1'}, {'id': '2'}]}

    def test_query_string_body_is_decoded_as_mapping(self):
        # Act
        response = GraphResponse(self.request, 'access_token=foo_token&expires=5183999', 200)

        # Assert
        assert response.decoded_body == {'access_token': 'foo_token', 'expires': '5183999'}

    def test_unparseable_body_becomes_parse_error(self):
        # Arrange
        response = GraphResponse(self.request, 'not json at all', 200)

        # Act & Assert
        assert response.is_error is True
        with pytest.raises(ParseError) as exc_info:
            response.raise_for_error()
        assert exc_info.value.response is response

    def test_headers_expose_etag_and_graph_version(self):
        # Act
        response = GraphResponse(self.request, '{}', 200, {'ETag': '"abc"', 'Facebook-API-Version': 'v2.8'})

        # Assert
        assert response.get_etag() == '"abc"'
        assert response.get_graph_version() == 'v2.8'

    def test_graph_node_and_edge_are_built_from_body(self):
        # Arrange
        response = GraphResponse(self.request, '{"data":[{"id":"1"}],"paging":{"cursors":{"after":"a"}}}', 200)

        # Act
        edge = response.get_graph_edge()

        # Assert
        assert isinstance(edge, GraphEdge)
        assert isinstance(edge[0], GraphNode)
        assert edge.get_next_cursor() == 'a'

    def test_graph_node_is_built_with_requested_class(self):
        # Arrange
        response = GraphResponse(self.request, '{"id":"123","name":"Foo","location":{"id":"2"}}', 200)

        # Act
        user = response.get_graph_node(GraphUser)

        # Assert
        assert isinstance(user, GraphUser)
        assert isinstance(user['location'], GraphPage)
        assert user['name'] == 'Foo'


class TestGatewayFailures:
    """Test suite for 4xx/5xx replies that carry no Graph error object"""

    BAD_GATEWAY_PAGE = (
        '<html><head><meta charset="utf-8"></head>'
        '<body>502 Bad Gateway</body></html>'
    )

    def setup_method(self):
        self.request = GraphRequest(App('123', 'foo_secret'), 'GET', '/me')

    def test_html_error_page_raises_transport_error_with_status_and_body(self):
        """
        Test that a proxy error page containing '=' is not mistaken for a query string reply
        """
        # Arrange
        response = GraphResponse(self.request, self.BAD_GATEWAY_PAGE, 502)

        # Act & Assert
        assert response.parse_failed is True
        with pytest.raises(GraphTransportError) as exc_info:
            response.raise_for_error()

        assert exc_info.value.status_code == 502
        assert exc_info.value.body == self.BAD_GATEWAY_PAGE

    def test_query_string_body_is_only_decoded_for_success_status(self):
        # Arrange
        response = GraphResponse(self.request, 'foo=bar', 400)

        # Act & Assert
        assert response.is_error is True
        with pytest.raises(GraphTransportError):
            response.raise_for_error()

    def test_json_body_without_error_object_on_server_status_raises(self):
        # Arrange
        response = GraphResponse(self.request, '{"id":"123"}', 503)

        # Act & Assert
        with pytest.raises(GraphTransportError) as exc_info:
            response.raise_for_error()

        assert exc_info.value.status_code == 503

    def test_graph_error_object_on_server_status_is_classified(self):
        # Arrange
        response = GraphResponse(self.request, error_body(message='Service unavailable', code=2), 503)

        # Act & Assert
        with pytest.raises(ServerError):
            response.raise_for_error()


class TestErrorClassification:
    """Test suite for mapping error codes onto exception subtypes"""

    def setup_method(self):
        self.request = GraphRequest(App('123', 'foo_secret'), 'GET', '/me')

    def classify(self, status=400, **error):
        response = GraphResponse(self.request, error_body(**error), status)
        return create_response_error(response)

    @pytest.mark.parametrize('subcode', [458, 459, 460, 463, 464, 467])
    def test_authentication_subcodes(self, subcode):
        # Act & Assert
        assert isinstance(self.classify(code=190, error_subcode=subcode), AuthenticationError)

    @pytest.mark.parametrize('subcode', [1363030, 1363019, 1363033, 1363021, 1363041])
    def test_resumable_upload_subcodes(self, subcode):
        # Act
        error = self.classify(code=6000, error_subcode=subcode)

        # Assert
        assert isinstance(error, ResumableUploadError)
        assert error.subtype == 'resumable_upload'

    @pytest.mark.parametrize('code, expected', [
        (100, AuthenticationError),
        (102, AuthenticationError),
        (190, AuthenticationError),
        (1, ServerError),
        (2, ServerError),
        (4, ThrottleError),
        (17, ThrottleError),
        (32, ThrottleError),
        (341, ThrottleError),
        (613, ThrottleError),
        (506, ClientError),
        (10, AuthorizationError),
        (200, AuthorizationError),
        (299, AuthorizationError),
        (300, OtherResponseError),
    ])
    def test_codes_map_to_subtypes(self, code, expected):
        # Act & Assert
        assert type(self.classify(code=code)) is expected

    def test_subcode_takes_precedence_over_code(self):
        # Act & Assert
        assert isinstance(self.classify(code=1, error_subcode=1363030), ResumableUploadError)

    def test_oauth_exception_type_without_known_code_is_authentication(self):
        # Act & Assert
        assert isinstance(self.classify(code=1337, type='OAuthException'), AuthenticationError)

    def test_error_carries_message_codes_and_response(self):
        # Arrange
        response = GraphResponse(
            self.request,
            error_body(message='Rate limited', type='OAuthException', code=4,
                       error_subcode=None, error_data={'start_offset': '20'}),
            403
        )

        # Act
        error = response.make_exception()

        # Assert
        assert isinstance(error, ThrottleError)
        assert str(error) == 'Rate limited'
        assert error.code == 4
        assert error.subcode is None
        assert error.error_type == 'OAuthException'
        assert error.http_status_code == 403
        assert error.raw_response == response.body
        assert error.response is response

    def test_resumable_upload_error_exposes_corrected_offsets(self):
        # Act
        error = self.classify(code=6000, error_subcode=1363019,
                              error_data={'start_offset': '20', 'end_offset': '40'})

        # Assert
        assert error.start_offset == 20
        assert error.end_offset == 40

    def test_missing_message_uses_fallback(self):
        # Act
        error = self.classify(code=1337)

        # Assert
        assert str(error) == 'Unknown error from Graph.'
