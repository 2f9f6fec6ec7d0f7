"""
HTTPClient module for dispatching resolved API requests and decoding JSON responses
"""

import logging
import requests
from typing import Dict, Any, Optional, List, Tuple
from datetime import datetime
from dataclasses import dataclass, field


class TransportError(Exception):
    """Raised when a request cannot be delivered or its response cannot be decoded"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class APIRequest:
    """Represents a single, fully resolved API request"""
    url: str
    parameters: List[Tuple[str, str]] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    method: str = "GET"
    body: Optional[Dict[str, Any]] = None


@dataclass
class APIResponse:
    """Standardised API response wrapper"""
    raw_data: Any
    metadata: Dict[str, Any]
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    request_timestamp: datetime = field(default_factory=datetime.now)


class HTTPClient:
    """Thin transport over a requests session; no retries, no caching"""

    SUPPORTED_METHODS = {'GET', 'POST', 'PATCH', 'DELETE'}

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout
        self.session: Optional[requests.Session] = None
        self.logger = logging.getLogger(__name__)

    def send(self, request: APIRequest) -> APIResponse:
        """
        Dispatch a request and decode the JSON response body

        A non-2xx status with a JSON body is returned as data; the API encodes
        its own errors in the payload.

        Args:
            request: APIRequest object containing request details

        Returns:
            APIResponse object with the decoded body in raw_data

        Raises:
            TransportError: On network failure, timeout, unsupported method,
                            or a body that is not valid JSON
        """
        method = request.method.upper()
        if method not in self.SUPPORTED_METHODS:
            raise TransportError(f"Unsupported HTTP method: {request.method}")

        # Create session if not exists
        if self.session is None:
            self.session = requests.Session()

        request_timestamp = datetime.now()

        try:
            response = self.session.request(
                method,
                request.url,
                params=request.parameters or None,
                json=request.body,
                headers=request.headers,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{method} {request.url} failed: {e}")
            raise TransportError(f"{method} {request.url} failed: {e}") from e

        raw_data = self._decode(response, method, request.url)

        metadata = {
            'url': request.url,
            'method': method,
            'parameters': request.parameters,
            'ok': response.ok
        }

        return APIResponse(
            raw_data=raw_data,
            metadata=metadata,
            status_code=response.status_code,
            headers=dict(response.headers),
            request_timestamp=request_timestamp
        )

    def _decode(self, response: requests.Response, method: str, url: str) -> Any:
        """Decode a response body as JSON; an empty body decodes to an empty dict"""
        if not response.content:
            if response.ok:
                return {}
            raise TransportError(
                f"{method} {url} returned HTTP {response.status_code} with an empty body",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            self.logger.error(f"{method} {url} returned a non-JSON body (HTTP {response.status_code})")
            raise TransportError(
                f"{method} {url} returned a non-JSON body (HTTP {response.status_code})",
                status_code=response.status_code
            ) from e

    def close_connection(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None
