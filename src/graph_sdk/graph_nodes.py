"""
Typed Graph nodes, paginated edges and the factory that builds them from decoded bodies
"""

import copy
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterable, Optional

from .exceptions import ValidationError
from .url_manipulator import base_graph_url_endpoint

# Pagination direction -> cursor parameter substituted into the original request
CURSOR_PARAMS = {
    'next': 'after',
    'previous': 'before'
}


class GraphNode(Mapping):
    """Read-only mapping over a single Graph object"""

    # Field name -> node class used when the field holds a nested object
    graph_object_map: Dict[str, type] = {}

    DATE_FIELDS = (
        'created_time',
        'updated_time',
        'start_time',
        'stop_time',
        'end_time',
        'backdated_time',
        'issued_at',
        'expires_at',
        'publish_time',
        'joined'
    )

    def __init__(self, data: Optional[Mapping] = None):
        self._items = {key: self._cast_item(key, value) for key, value in (data or {}).items()}

    def _cast_item(self, key: str, value: Any) -> Any:
        if key in self.DATE_FIELDS:
            return _parse_date(value)
        return value

    def __getitem__(self, key: str) -> Any:
        return self._items[key]

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def as_dict(self) -> Dict[str, Any]:
        """Recursively convert nodes and edges back to plain Python values"""
        return {key: _unwrap(value) for key, value in self._items.items()}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"


class GraphPicture(GraphNode):
    pass


class GraphLocation(GraphNode):
    pass


class GraphPage(GraphNode):
    graph_object_map = {
        'best_page': None,
        'global_brand_parent_page': None,
        'location': GraphLocation,
        'picture': GraphPicture
    }


class GraphUser(GraphNode):
    graph_object_map = {
        'hometown': GraphPage,
        'location': GraphPage,
        'significant_other': None,
        'picture': GraphPicture
    }


class GraphApplication(GraphNode):
    pass


class GraphAlbum(GraphNode):
    graph_object_map = {
        'from': GraphUser,
        'place': GraphPage
    }


class GraphEvent(GraphNode):
    graph_object_map = {
        'cover': GraphNode,
        'place': GraphPage,
        'picture': GraphPicture,
        'parent_group': None
    }


class GraphGroup(GraphNode):
    graph_object_map = {
        'cover': GraphNode,
        'venue': GraphLocation
    }


# Self references cannot be written in the class bodies
GraphPage.graph_object_map['best_page'] = GraphPage
GraphPage.graph_object_map['global_brand_parent_page'] = GraphPage
GraphUser.graph_object_map['significant_other'] = GraphUser
GraphEvent.graph_object_map['parent_group'] = GraphGroup


class GraphEdge(Sequence):
    """
    Immutable page of nodes returned by a list endpoint

    Paging metadata (cursors and next/previous URLs) is stored as received and
    never followed here; GraphAPI.next()/previous() fetch further pages.
    """

    def __init__(self, request, data: Iterable = (), metadata: Optional[Mapping] = None,
                 parent_edge_endpoint: Optional[str] = None, node_class: type = GraphNode):
        self.request = request
        self._items = tuple(data)
        self.metadata = MappingProxyType(copy.deepcopy(dict(metadata or {})))
        self.parent_edge_endpoint = parent_edge_endpoint
        self.node_class = node_class

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"GraphEdge(node_class={self.node_class.__name__}, items={list(self._items)!r})"

    @property
    def paging(self) -> Mapping:
        """Read-only copy of the paging metadata"""
        paging = self.metadata.get('paging')
        return MappingProxyType(copy.deepcopy(paging) if isinstance(paging, dict) else {})

    def get_cursor(self, direction: str) -> Optional[str]:
        """Return the 'after' or 'before' cursor, or None"""
        cursors = self.paging.get('cursors')
        if not isinstance(cursors, dict):
            return None
        return cursors.get(direction) or None

    def get_next_cursor(self) -> Optional[str]:
        return self.get_cursor('after')

    def get_previous_cursor(self) -> Optional[str]:
        return self.get_cursor('before')

    def get_pagination_url(self, direction: str) -> Optional[str]:
        self.validate_for_pagination()
        return self.paging.get(direction) or None

    def validate_for_pagination(self) -> None:
        if self.request is None or self.request.method != 'GET':
            raise ValidationError('You can only paginate on a GET request.', 720)

    def get_pagination_request(self, direction: str):
        """
        Build the request for the neighbouring page

        A full paging URL is preferred; without one the matching cursor is
        substituted into a copy of the original params.

        Args:
            direction: 'next' or 'previous'

        Returns:
            New GraphRequest, or None when there is no page in that direction
        """
        if direction not in CURSOR_PARAMS:
            raise ValidationError(f"Pagination direction must be 'next' or 'previous', got {direction!r}")

        page_url = self.get_pagination_url(direction)
        if page_url:
            return self.request.with_endpoint(base_graph_url_endpoint(page_url))

        cursor = self.get_cursor(CURSOR_PARAMS[direction])
        if cursor:
            params = {key: value for key, value in self.request.params.items()
                      if key not in CURSOR_PARAMS.values()}
            params[CURSOR_PARAMS[direction]] = cursor
            endpoint = self.parent_edge_endpoint or self.request.endpoint
            return self.request.with_endpoint(endpoint, params)

        return None

    def get_next_page_request(self):
        return self.get_pagination_request('next')

    def get_previous_page_request(self):
        return self.get_pagination_request('previous')

    def get_total_count(self) -> Optional[int]:
        summary = self.metadata.get('summary')
        if isinstance(summary, dict) and 'total_count' in summary:
            return int(summary['total_count'])
        return None

    def as_list(self):
        return [_unwrap(item) for item in self._items]


class GraphNodeFactory:
    """Casts decoded response bodies into GraphNode and GraphEdge objects"""

    def __init__(self, request=None):
        self.request = request

    def make_graph_node(self, data: Mapping, node_class: type = GraphNode) -> GraphNode:
        if not isinstance(data, Mapping):
            raise ValidationError(f"Unable to make a GraphNode from {type(data).__name__}")
        return self._cast_node(data, node_class)

    def make_graph_edge(self, data: Mapping, node_class: type = GraphNode,
                        parent_edge_endpoint: Optional[str] = None) -> GraphEdge:
        """
        Wrap a decoded list response

        A body without a 'data' list is treated as a single node page.
        Everything except 'data' is kept as edge metadata.
        """
        if not isinstance(data, Mapping):
            raise ValidationError(f"Unable to make a GraphEdge from {type(data).__name__}")

        if isinstance(data.get('data'), list):
            items = data['data']
            metadata = {key: value for key, value in data.items() if key != 'data'}
        else:
            items = [data]
            metadata = {}

        nodes = [self._cast_value(item, node_class) for item in items]
        return GraphEdge(self.request, nodes, metadata, parent_edge_endpoint, node_class)

    def _cast_node(self, data: Mapping, node_class: type) -> GraphNode:
        object_map = node_class.graph_object_map
        parent_id = data.get('id')
        casted = {}

        for key, value in data.items():
            child_class = object_map.get(key) or GraphNode
            if isinstance(value, Mapping) and isinstance(value.get('data'), list):
                parent_edge_endpoint = f"/{parent_id}/{key}" if parent_id else None
                casted[key] = self.make_graph_edge(value, child_class, parent_edge_endpoint)
            else:
                casted[key] = self._cast_value(value, child_class)

        return node_class(casted)

    def _cast_value(self, value: Any, node_class: type) -> Any:
        if isinstance(value, Mapping) and not isinstance(value, GraphNode):
            return self._cast_node(value, node_class)
        if isinstance(value, list):
            return tuple(self._cast_value(item, node_class) for item in value)
        return value


def make_graph_edge(request, body: Mapping, parent_edge_endpoint: Optional[str] = None,
                    node_class: type = GraphNode) -> GraphEdge:
    """Wrap a decoded body into a GraphEdge of node_class items"""
    return GraphNodeFactory(request).make_graph_edge(body, node_class, parent_edge_endpoint)


def _parse_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        for fmt in ('%Y-%m-%dT%H:%M:%S%z', '%Y-%m-%d'):
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue
    return value


def _unwrap(value: Any) -> Any:
    if isinstance(value, GraphNode):
        return value.as_dict()
    if isinstance(value, GraphEdge):
        return value.as_list()
    if isinstance(value, tuple):
        return [_unwrap(item) for item in value]
    return value
