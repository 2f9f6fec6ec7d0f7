"""
Test suite for RequestBuilder component
Following TDD approach with AAA pattern and descriptive naming
"""

import pytest
from unittest.mock import Mock
from directus_adapter.http_client import HTTPClient, APIResponse, TransportError
from directus_adapter.request_builder import RequestBuilder, TemplateResolutionError


def make_builder(raw_data=None, status_code=200):
    http_client = Mock(spec=HTTPClient)
    http_client.send.return_value = APIResponse(
        raw_data={'data': []} if raw_data is None else raw_data,
        metadata={},
        status_code=status_code
    )
    return RequestBuilder('https://cms.test.com/', http_client=http_client), http_client


class TestRequestBuilder:
    """Test suite for request accumulation, resolution and dispatch"""

    def test_get_with_all_placeholders_bound_dispatches_resolved_path(self):
        """
        Test that every placeholder is substituted before dispatch
        """
        # Arrange
        builder, http_client = make_builder()

        # Act
        builder.endpoint(':project/items/:collection/:id').parameters(
            {'project': 'shop', 'collection': 'products', 'id': 42}
        ).get()

        # Assert
        request = http_client.send.call_args[0][0]
        assert request.url == 'https://cms.test.com/shop/items/products/42'
        assert request.method == 'GET'
        assert ':' not in request.url.split('://', 1)[1]

    def test_get_with_missing_binding_raises_before_dispatch(self):
        """
        Test that an unbound placeholder fails fast without a network call
        """
        # Arrange
        builder, http_client = make_builder()
        builder.endpoint(':project/items/:collection/:id').parameter('project', 'shop')

        # Act & Assert
        with pytest.raises(TemplateResolutionError) as exc_info:
            builder.get()

        assert exc_info.value.missing == ['collection', 'id']
        assert exc_info.value.template == ':project/items/:collection/:id'
        http_client.send.assert_not_called()

    def test_failed_resolution_leaves_pending_state_untouched(self):
        """
        Test that the caller can fix the bindings and retry the same builder
        """
        # Arrange
        builder, http_client = make_builder()
        builder.endpoint(':project/items/:collection').parameter('project', 'shop').query('limit', 5)

        # Act
        with pytest.raises(TemplateResolutionError):
            builder.get()
        builder.parameter('collection', 'products').get()

        # Assert
        request = http_client.send.call_args[0][0]
        assert request.url == 'https://cms.test.com/shop/items/products'
        assert request.parameters == [('limit', '5')]

    @pytest.mark.parametrize('bound,should_fail', [
        ({}, True),
        ({'a': 1}, True),
        ({'a': 1, 'b': 2}, True),
        ({'a': 1, 'b': 2, 'c': 3}, False),
        ({'a': 1, 'b': 2, 'c': 3, 'extra': 4}, False),
    ])
    def test_resolution_fails_iff_fewer_bindings_than_placeholders(self, bound, should_fail):
        """
        Test that resolution requires a binding for every distinct placeholder
        """
        # Arrange
        builder, _ = make_builder()
        builder.endpoint(':a/x/:b/:c/:a').parameters(bound)

        # Act & Assert
        if should_fail:
            with pytest.raises(TemplateResolutionError):
                builder.resolve_path()
        else:
            assert builder.resolve_path() == '1/x/2/3/1'

    def test_resolve_path_treats_none_binding_as_missing(self):
        """
        Test that a placeholder bound to None is unresolved
        """
        builder, _ = make_builder()
        builder.endpoint(':project/files').parameter('project', None)

        with pytest.raises(TemplateResolutionError) as exc_info:
            builder.resolve_path()

        assert exc_info.value.missing == ['project']

    def test_resolve_path_without_endpoint_raises(self):
        """
        Test that dispatching with no endpoint selected is an error
        """
        builder, _ = make_builder()

        with pytest.raises(TemplateResolutionError) as exc_info:
            builder.resolve_path()

        assert "No endpoint selected" in str(exc_info.value)

    def test_resolve_path_quotes_values_as_single_segments(self):
        """
        Test that bound values cannot introduce extra path segments
        """
        builder, _ = make_builder()
        builder.endpoint('assets/:key').parameter('key', 'a b/c')

        assert builder.resolve_path() == 'assets/a%20b%2Fc'

    def test_resolve_path_strips_leading_slash(self):
        """
        Test that templates with a leading slash join cleanly with the base URL
        """
        builder, _ = make_builder()
        builder.endpoint('/server/ping')

        assert builder.build_url() == 'https://cms.test.com/server/ping'

    def test_endpoint_keeps_existing_bindings(self):
        """
        Test that parameters bound before the endpoint is selected are used
        """
        builder, _ = make_builder()
        builder.parameter('id', 9).endpoint('roles/:id')

        assert builder.resolve_path() == 'roles/9'

    def test_query_attribute_and_header_are_last_write_wins(self):
        """
        Test that setting the same key twice keeps only the last value
        """
        # Arrange
        builder, http_client = make_builder()

        # Act
        (builder.endpoint('things')
            .query('sort', 'name').query('sort', ['-date'])
            .attribute('title', 'a').attribute('title', 'b')
            .header('X-Trace', '1').header('X-Trace', '2')
            .post())

        # Assert
        request = http_client.send.call_args[0][0]
        assert request.parameters == [('sort', '-date')]
        assert request.body == {'title': 'b'}
        assert request.headers['X-Trace'] == '2'

    def test_query_normalises_recognised_keys(self):
        """
        Test that recognised query keys go through their normaliser
        """
        builder, _ = make_builder()

        builder.queries({'sort': ['name', '-date'], 'fields': ('id', 'title'), 'lang': ['en']})

        pending = builder.pending_request()['queries']
        assert pending == {'sort': 'name,-date', 'fields': 'id,title', 'lang': ['en']}

    def test_serialize_queries_flattens_filters_and_keeps_empty_values(self):
        """
        Test the wire form of structured, boolean, list and empty query values
        """
        # Arrange
        builder, _ = make_builder()
        builder.queries({
            'filter': {'price': {'gte': 10}, 'category': {'in': ['shoes', 'hats']}, 'status': 'published'},
            'single': True,
            'q': '',
            'ids': [1, 2]
        })

        # Act
        pairs = builder.serialize_queries()

        # Assert
        assert pairs == [
            ('filter[price][gte]', '10'),
            ('filter[category][in]', 'shoes,hats'),
            ('filter[status][eq]', 'published'),
            ('single', '1'),
            ('q', ''),
            ('ids', '1,2'),
        ]

    def test_serialize_body_drops_none_attributes(self):
        """
        Test that optional attributes left as None are not sent
        """
        builder, _ = make_builder()
        builder.attributes({'email': 'a@b.c', 'otp': None})

        assert builder.serialize_body('POST') == {'email': 'a@b.c'}

    def test_serialize_body_depends_on_verb(self):
        """
        Test that GET never sends a body and DELETE only when attributes exist
        """
        builder, _ = make_builder()

        assert builder.serialize_body('GET') is None
        assert builder.serialize_body('DELETE') is None
        assert builder.serialize_body('PATCH') == {}

        builder.attribute('reason', 'cleanup')
        assert builder.serialize_body('GET') is None
        assert builder.serialize_body('DELETE') == {'reason': 'cleanup'}

    def test_send_returns_decoded_body_unchanged(self):
        """
        Test that any response shape is passed through verbatim
        """
        # Arrange
        body = [{'id': 1}, {'id': 2}]
        builder, _ = make_builder(raw_data=body)

        # Act
        result = builder.endpoint('things').get()

        # Assert
        assert result is body
        assert builder.last_response.status_code == 200

    def test_send_clears_transient_state_after_dispatch(self):
        """
        Test that bindings, queries, attributes and headers reset after a request
        """
        # Arrange
        builder, _ = make_builder()
        builder.endpoint('items/:collection').parameter('collection', 'products')
        builder.query('limit', 3).attribute('title', 'x').header('X-Trace', '1')

        # Act
        builder.patch()

        # Assert
        pending = builder.pending_request()
        assert pending['parameters'] == {}
        assert pending['queries'] == {}
        assert pending['attributes'] == {}
        assert pending['headers'] == RequestBuilder.DEFAULT_HEADERS

    def test_send_with_transport_error_keeps_pending_state(self):
        """
        Test that transport failures propagate and leave the request intact for a retry
        """
        # Arrange
        builder, http_client = make_builder()
        http_client.send.side_effect = TransportError("Connection refused")
        builder.endpoint('items/:collection').parameter('collection', 'products').query('limit', 3)

        # Act & Assert
        with pytest.raises(TransportError):
            builder.get()

        pending = builder.pending_request()
        assert pending['parameters'] == {'collection': 'products'}
        assert pending['queries'] == {'limit': 3}

    @pytest.mark.parametrize('verb', ['get', 'post', 'patch', 'delete'])
    def test_verb_methods_dispatch_matching_http_method(self, verb):
        """
        Test that each verb helper sends its HTTP method
        """
        builder, http_client = make_builder()

        getattr(builder.endpoint('things'), verb)()

        assert http_client.send.call_args[0][0].method == verb.upper()

    def test_build_request_does_not_dispatch(self):
        """
        Test that building a request has no side effects
        """
        # Arrange
        builder, http_client = make_builder()
        builder.endpoint('things/:id').parameter('id', 1).query('page', 2)

        # Act
        request = builder.build_request('get')

        # Assert
        assert request.url == 'https://cms.test.com/things/1'
        assert request.parameters == [('page', '2')]
        assert request.body is None
        http_client.send.assert_not_called()
        assert builder.pending_request()['parameters'] == {'id': 1}

    def test_clear_returns_builder_for_chaining(self):
        """
        Test that an explicit reset can be chained
        """
        builder, _ = make_builder()
        builder.query('limit', 1)

        assert builder.clear() is builder
        assert builder.pending_request()['queries'] == {}
