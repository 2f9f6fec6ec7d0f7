"""
DirectusClient module: request builder with durable session state and the endpoint catalog
"""

from typing import Any, Mapping, Optional

from .config_loader import ClientConfig, ConfigLoader, ConfigurationError
from .endpoints import get_endpoint
from .http_client import HTTPClient
from .request_builder import RequestBuilder


class DirectusClient(RequestBuilder):
    """
    Fluent client for the Directus REST API

    The project slug and bearer token survive every reset; everything else
    set through the chaining methods lasts for one request cycle.

    Example:
        client = DirectusClient('https://cms.example.com', project='shop')
        client.authenticate('admin@example.com', 'secret')
        response = client.use('items', collection='products').sort(['-date']).limit(10).get()
    """

    ERROR_FIELD = 'error'

    def __init__(self, base_url: str, project: Optional[str] = None,
                 http_client: Optional[HTTPClient] = None):
        super().__init__(base_url, http_client)
        self.project = project
        self.access_token: Optional[str] = None
        self._apply_session()

    @classmethod
    def from_config(cls, config: ClientConfig) -> 'DirectusClient':
        """
        Build a client from configuration and apply its authentication

        Args:
            config: Loaded ClientConfig

        Returns:
            Configured (and, where requested, authenticated) client

        Raises:
            EnvironmentError: If a referenced credential variable is not set
            ConfigurationError: If credential login is rejected by the API
        """
        http_client = HTTPClient(timeout=float(config.transport.get('timeout', 30.0)))
        client = cls(config.base_url, project=config.project, http_client=http_client)

        auth = config.authentication
        if auth['type'] == 'bearer_token':
            client.token(ConfigLoader.get_environment_value(auth['token_env']))
        elif auth['type'] == 'credentials':
            response = client.authenticate(
                ConfigLoader.get_environment_value(auth['email_env']),
                ConfigLoader.get_environment_value(auth['password_env'])
            )
            if cls.is_error_response(response):
                raise ConfigurationError(
                    f"Authentication rejected: {cls.error_message(response)}"
                )

        return client

    def _apply_session(self) -> None:
        if self.project is not None:
            self.parameter('project', self.project)
        if self.access_token is not None:
            self.header('Authorization', f"Bearer {self.access_token}")

    def token(self, token: str) -> 'DirectusClient':
        """Store the bearer token and send it with this and every later request"""
        self.access_token = token
        self.header('Authorization', f"Bearer {token}")
        return self

    def clear(self) -> 'DirectusClient':
        super().clear()
        self._apply_session()
        return self

    def copy(self, http_client: Optional[HTTPClient] = None) -> 'DirectusClient':
        """
        Fresh client with the same base URL, project and token but no pending state

        Use one copy per concurrent request; a client instance is not thread-safe.
        """
        if http_client is None:
            http_client = HTTPClient(timeout=getattr(self.http_client, 'timeout', 30.0))
        duplicate = type(self)(self.base_url, project=self.project, http_client=http_client)
        if self.access_token is not None:
            duplicate.token(self.access_token)
        return duplicate

    def close(self) -> None:
        self.http_client.close_connection()

    def __enter__(self) -> 'DirectusClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @classmethod
    def is_error_response(cls, response: Any) -> bool:
        """True when the decoded response carries the API's error field"""
        return isinstance(response, Mapping) and cls.ERROR_FIELD in response

    @classmethod
    def error_message(cls, response: Any) -> Optional[str]:
        if not cls.is_error_response(response):
            return None
        error = response[cls.ERROR_FIELD]
        if isinstance(error, Mapping):
            return str(error.get('message', error))
        return str(error)

    # Endpoint catalog

    def use(self, name: str, **arguments: Any) -> 'DirectusClient':
        """
        Select a registered endpoint and route keyword arguments to it

        Each argument becomes a path parameter, query parameter or body
        attribute according to the endpoint definition.

        Raises:
            KeyError: If the endpoint name is not registered
            TypeError: If an argument is not accepted by the endpoint
        """
        definition = get_endpoint(name)

        unexpected = [key for key in arguments if key not in definition.accepted_arguments()]
        if unexpected:
            raise TypeError(
                f"Endpoint '{name}' got unexpected arguments: {', '.join(sorted(unexpected))}"
            )

        self.endpoint(definition.template)
        for key, value in arguments.items():
            if key in definition.parameters:
                self.parameter(key, value)
            elif key in definition.queries:
                self.query(key, value)
            else:
                self.attribute(key, value)
        return self

    def custom(self, path: str, parameters: Optional[Mapping[str, Any]] = None) -> 'DirectusClient':
        """Endpoint for custom API extensions under custom/"""
        self.endpoint('custom/' + path.lstrip('/'))
        return self.parameters(parameters or {})

    def fields_of(self, collection: Optional[str] = None) -> 'DirectusClient':
        if collection is None:
            return self.use('fields')
        return self.use('collection_fields', collection=collection)

    def projects(self, project: Optional[str] = None) -> 'DirectusClient':
        if project is None:
            return self.use('server_projects')
        return self.use('server_project', project=project)

    def project_root(self, project: str) -> 'DirectusClient':
        """Root of a project-scoped API, not the server's project listing"""
        return self.use('project_root', project=project)

    # Authentication

    def authenticate(self, email: str, password: str, mode: Optional[str] = None,
                     otp: Optional[str] = None) -> Any:
        """
        Retrieve a temporary access token and keep it for later requests

        Args:
            email: Email address of the user
            password: Password of the user
            mode: 'jwt' (default) or 'cookie'
            otp: One-time password when 2FA is enabled

        Returns:
            Decoded response; check is_error_response before using it
        """
        response = self.use(
            'authenticate', email=email, password=password, mode=mode, otp=otp
        ).post()
        self._store_token(response, 'Authentication')
        return response

    def token_refresh(self) -> Any:
        """
        Exchange the current token for a new one

        Raises:
            ValueError: If no token has been set
        """
        if self.access_token is None:
            raise ValueError("No token to refresh; call token() or authenticate() first")

        response = self.use('refresh', token=self.access_token).post()
        self._store_token(response, 'Token refresh')
        return response

    def _store_token(self, response: Any, action: str) -> None:
        if self.is_error_response(response):
            self.logger.warning(f"{action} failed: {self.error_message(response)}")
            return

        data = response.get('data') if isinstance(response, Mapping) else None
        token = data.get('token') if isinstance(data, Mapping) else None
        if token:
            self.token(token)
            self.logger.info(f"{action} succeeded; bearer token stored")
        else:
            self.logger.info(f"{action} succeeded without a token in the response")

    # Query shortcuts

    def single(self, value: bool = True) -> 'DirectusClient':
        return self.query('single', value)

    def limit(self, value: int) -> 'DirectusClient':
        return self.query('limit', value)

    def all(self) -> 'DirectusClient':
        """Lift the result limit"""
        return self.limit(-1)

    def offset(self, value: int) -> 'DirectusClient':
        return self.query('offset', value)

    def page(self, value: int) -> 'DirectusClient':
        return self.query('page', value)

    def meta(self, value: Any = '*') -> 'DirectusClient':
        return self.query('meta', value)

    def status(self, value: Any = '*') -> 'DirectusClient':
        return self.query('status', value)

    def sort(self, value: Any) -> 'DirectusClient':
        return self.query('sort', value)

    def q(self, value: str) -> 'DirectusClient':
        return self.query('q', value)

    def filter(self, value: Mapping[str, Any]) -> 'DirectusClient':
        return self.query('filter', value)

    def fields(self, value: Any) -> 'DirectusClient':
        return self.query('fields', value)

