"""
RequestBuilder module for accumulating, resolving and dispatching templated API requests
"""

import re
import logging
from typing import Dict, Any, List, Mapping, Optional, Tuple
from urllib.parse import quote

from .http_client import HTTPClient, APIRequest, APIResponse
from .query_helpers import QueryHelpers


class TemplateResolutionError(Exception):
    """Raised when an endpoint template still has unbound placeholders at dispatch time"""

    def __init__(self, template: Optional[str], missing: List[str]):
        if template is None:
            message = "No endpoint selected"
        else:
            message = (
                f"Unresolved placeholders in endpoint '{template}': "
                f"{', '.join(missing)}"
            )
        super().__init__(message)
        self.template = template
        self.missing = missing


class RequestBuilder:
    """
    Fluent builder for a single request cycle

    Chained calls mutate pending state; a verb call resolves the template,
    dispatches through the HTTP client and clears the pending state again.
    One instance must not be shared between concurrent requests.
    """

    PLACEHOLDER_PATTERN = re.compile(r':([A-Za-z_][A-Za-z0-9_]*)')

    DEFAULT_HEADERS = {'Accept': 'application/json'}

    # Verbs that carry body attributes even when none were set
    BODY_METHODS = {'POST', 'PATCH'}

    def __init__(self, base_url: str, http_client: Optional[HTTPClient] = None):
        self.base_url = base_url.rstrip('/')
        self.http_client = http_client if http_client is not None else HTTPClient()
        self.logger = logging.getLogger(__name__)
        self.last_response: Optional[APIResponse] = None

        self._template: Optional[str] = None
        self._parameters: Dict[str, Any] = {}
        self._queries: Dict[str, Any] = {}
        self._attributes: Dict[str, Any] = {}
        self._headers: Dict[str, str] = dict(self.DEFAULT_HEADERS)

    def endpoint(self, template: str) -> 'RequestBuilder':
        """Select the endpoint template; existing bindings are kept"""
        self._template = template
        return self

    def parameter(self, name: str, value: Any) -> 'RequestBuilder':
        self._parameters[name] = value
        return self

    def parameters(self, parameters: Mapping[str, Any]) -> 'RequestBuilder':
        for name, value in parameters.items():
            self.parameter(name, value)
        return self

    def query(self, key: str, value: Any) -> 'RequestBuilder':
        """Set a query parameter, normalised when the key is recognised"""
        self._queries[key] = QueryHelpers.normalize(key, value)
        return self

    def queries(self, queries: Mapping[str, Any]) -> 'RequestBuilder':
        for key, value in queries.items():
            self.query(key, value)
        return self

    def attribute(self, key: str, value: Any) -> 'RequestBuilder':
        self._attributes[key] = value
        return self

    def attributes(self, attributes: Mapping[str, Any]) -> 'RequestBuilder':
        for key, value in attributes.items():
            self.attribute(key, value)
        return self

    def header(self, name: str, value: str) -> 'RequestBuilder':
        self._headers[name] = value
        return self

    def clear(self) -> 'RequestBuilder':
        """Reset all pending request state to the baseline"""
        self._parameters = {}
        self._queries = {}
        self._attributes = {}
        self._headers = dict(self.DEFAULT_HEADERS)
        return self

    def pending_request(self) -> Dict[str, Any]:
        """
        Snapshot of the pending request state

        Returns:
            Dictionary with copies of template, parameters, queries, attributes and headers
        """
        return {
            'template': self._template,
            'parameters': dict(self._parameters),
            'queries': dict(self._queries),
            'attributes': dict(self._attributes),
            'headers': dict(self._headers)
        }

    def resolve_path(self) -> str:
        """
        Substitute every :placeholder in the selected template

        Returns:
            Resolved path without a leading slash

        Raises:
            TemplateResolutionError: If no endpoint is selected or a placeholder has no binding
        """
        if self._template is None:
            raise TemplateResolutionError(None, [])

        missing = []
        for match in self.PLACEHOLDER_PATTERN.finditer(self._template):
            name = match.group(1)
            if self._parameters.get(name) is None and name not in missing:
                missing.append(name)

        if missing:
            raise TemplateResolutionError(self._template, missing)

        path = self.PLACEHOLDER_PATTERN.sub(
            lambda match: quote(str(self._parameters[match.group(1)]), safe=''),
            self._template
        )
        return path.lstrip('/')

    def build_url(self) -> str:
        return f"{self.base_url}/{self.resolve_path()}"

    @staticmethod
    def _format_query_value(value: Any) -> str:
        if value is None:
            return ''
        if isinstance(value, bool):
            return '1' if value else '0'
        if isinstance(value, (list, tuple)):
            return ','.join(RequestBuilder._format_query_value(item) for item in value)
        return str(value)

    @classmethod
    def _flatten_query(cls, key: str, value: Any) -> List[Tuple[str, str]]:
        """Flatten nested mappings into bracketed keys, e.g. filter[title][eq]"""
        if isinstance(value, Mapping):
            pairs = []
            for sub_key, sub_value in value.items():
                pairs.extend(cls._flatten_query(f"{key}[{sub_key}]", sub_value))
            return pairs
        return [(key, cls._format_query_value(value))]

    def serialize_queries(self) -> List[Tuple[str, str]]:
        pairs = []
        for key, value in self._queries.items():
            pairs.extend(self._flatten_query(key, value))
        return pairs

    def serialize_body(self, method: str) -> Optional[Dict[str, Any]]:
        """JSON body for the verb; attributes set to None are left out"""
        body = {key: value for key, value in self._attributes.items() if value is not None}
        if method in self.BODY_METHODS:
            return body
        if method == 'DELETE' and body:
            return body
        return None

    def build_request(self, method: str) -> APIRequest:
        """
        Resolve the pending state into an APIRequest without dispatching it

        Raises:
            TemplateResolutionError: If the template cannot be fully resolved
        """
        method = method.upper()
        return APIRequest(
            url=self.build_url(),
            parameters=self.serialize_queries(),
            headers=dict(self._headers),
            method=method,
            body=self.serialize_body(method)
        )

    def send(self, method: str) -> Any:
        """
        Dispatch the pending request and reset for the next cycle

        Args:
            method: HTTP verb (GET, POST, PATCH or DELETE)

        Returns:
            Decoded JSON body, passed through unchanged

        Raises:
            TemplateResolutionError: Before any network call; pending state is kept
            TransportError: From the HTTP client; pending state is kept
        """
        request = self.build_request(method)

        masked_headers = {
            name: ('***' if name.lower() == 'authorization' else value)
            for name, value in request.headers.items()
        }
        self.logger.debug(
            f"{request.method} {request.url} params={request.parameters} headers={masked_headers}"
        )

        response = self.http_client.send(request)
        self.last_response = response
        self.logger.debug(f"{request.method} {request.url} -> HTTP {response.status_code}")

        self.clear()
        return response.raw_data

    def get(self) -> Any:
        return self.send('GET')

    def post(self) -> Any:
        return self.send('POST')

    def patch(self) -> Any:
        return self.send('PATCH')

    def delete(self) -> Any:
        return self.send('DELETE')
