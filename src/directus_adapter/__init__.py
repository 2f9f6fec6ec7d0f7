"""
Fluent client package for the Directus REST API
Provides a request builder with templated endpoints, query normalisation and durable session state
"""

from .config_loader import ConfigLoader, ClientConfig, ConfigurationError, EnvironmentError, configure_logging
from .http_client import HTTPClient, TransportError, APIRequest, APIResponse
from .query_helpers import QueryHelpers
from .request_builder import RequestBuilder, TemplateResolutionError
from .endpoints import Endpoint, ENDPOINTS, get_endpoint
from .client import DirectusClient

__all__ = [
    'ConfigLoader',
    'ClientConfig',
    'ConfigurationError',
    'EnvironmentError',
    'configure_logging',
    'HTTPClient',
    'TransportError',
    'APIRequest',
    'APIResponse',
    'QueryHelpers',
    'RequestBuilder',
    'TemplateResolutionError',
    'Endpoint',
    'ENDPOINTS',
    'get_endpoint',
    'DirectusClient'
]
