"""
Endpoint registry mapping symbolic endpoint names to templates and their parameter names
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Endpoint:
    """
    A single API endpoint

    Attributes:
        template: Path template with :placeholders
        parameters: Caller-supplied placeholder names (':project' comes from the client)
        queries: Keyword arguments sent as query parameters
        attributes: Keyword arguments sent as body attributes
    """
    template: str
    parameters: Tuple[str, ...] = ()
    queries: Tuple[str, ...] = ()
    attributes: Tuple[str, ...] = ()

    def accepted_arguments(self) -> Tuple[str, ...]:
        return self.parameters + self.queries + self.attributes


ENDPOINTS: Dict[str, Endpoint] = {
    # Activity
    'activities': Endpoint(':project/activity'),
    'activity': Endpoint(':project/activity/:id', parameters=('id',)),
    'comments': Endpoint(':project/activity/comment'),
    'comment': Endpoint(':project/activity/comment/:id', parameters=('id',)),

    # Assets
    'asset': Endpoint(':project/assets/:key', parameters=('key',)),

    # Collections
    'collections': Endpoint(':project/collections'),
    'collection': Endpoint(':project/collections/:collection', parameters=('collection',)),

    # Extensions
    'interfaces': Endpoint('interfaces'),
    'layouts': Endpoint('layouts'),
    'modules': Endpoint('modules'),

    # Fields
    'fields': Endpoint(':project/fields'),
    'collection_fields': Endpoint(':project/fields/:collection', parameters=('collection',)),
    'field': Endpoint(':project/fields/:collection/:field', parameters=('collection', 'field')),

    # Files
    'files': Endpoint(':project/files'),
    'file': Endpoint(':project/files/:id', parameters=('id',)),
    'file_revisions': Endpoint(':project/files/:id/revisions', parameters=('id',)),
    'file_revision': Endpoint(':project/files/:id/revisions/:offset', parameters=('id', 'offset')),

    # Folders
    'folders': Endpoint(':project/folders'),
    'folder': Endpoint(':project/folders/:id', parameters=('id',)),

    # Items
    'items': Endpoint(':project/items/:collection', parameters=('collection',)),
    'item': Endpoint(':project/items/:collection/:id', parameters=('collection', 'id')),
    'item_revisions': Endpoint(
        ':project/items/:collection/:id/revisions', parameters=('collection', 'id')
    ),
    'item_revision': Endpoint(
        ':project/items/:collection/:id/revisions/:offset', parameters=('collection', 'id', 'offset')
    ),
    'item_revert': Endpoint(
        ':project/items/:collection/:id/revert/:revision', parameters=('collection', 'id', 'revision')
    ),

    # Mail
    'mail': Endpoint(':project/mail'),

    # Collection presets
    'presets': Endpoint(':project/collection_presets'),
    'preset': Endpoint(':project/collection_presets/:id', parameters=('id',)),

    # Server
    'info': Endpoint('server/info', queries=('super_admin_token',)),
    'ping': Endpoint('server/ping'),
    'server_projects': Endpoint('server/projects'),
    'server_project': Endpoint('server/projects/:project', parameters=('project',)),

    # Project-scoped root, e.g. GET /shop/ for the project's own info
    'project_root': Endpoint(':project/', parameters=('project',)),

    # Utilities
    'hash': Endpoint(':project/utils/hash', attributes=('string',)),
    'hash_match': Endpoint(':project/utils/hash/match', attributes=('string', 'hash')),
    'random_string': Endpoint(':project/utils/random/string', attributes=('length',)),
    'secret': Endpoint(':project/utils/2fa_secret'),

    # Permissions
    'permissions': Endpoint(':project/permissions'),
    'permission': Endpoint(':project/permissions/:id', parameters=('id',)),
    'my_permissions': Endpoint(':project/permissions/me'),
    'my_permission': Endpoint(':project/permissions/me/:collection', parameters=('collection',)),

    # Relations
    'relations': Endpoint(':project/relations'),
    'relation': Endpoint(':project/relations/:id', parameters=('id',)),

    # Revisions
    'revisions': Endpoint(':project/revisions'),
    'revision': Endpoint(':project/revisions/:id', parameters=('id',)),

    # Roles
    'roles': Endpoint(':project/roles'),
    'role': Endpoint(':project/roles/:id', parameters=('id',)),

    # SCIM
    'scim_users': Endpoint(':project/scim/v2/Users'),
    'scim_user': Endpoint(':project/scim/v2/Users/:external_id', parameters=('external_id',)),
    'scim_groups': Endpoint(':project/scim/v2/Groups'),
    'scim_group': Endpoint(':project/scim/v2/Groups/:id', parameters=('id',)),

    # Settings
    'settings': Endpoint(':project/settings'),
    'setting': Endpoint(':project/settings/:id', parameters=('id',)),

    # Users
    'users': Endpoint(':project/users'),
    'user': Endpoint(':project/users/:id', parameters=('id',)),
    'me': Endpoint(':project/users/me'),
    'invite': Endpoint(':project/users/invite', attributes=('email',)),
    'accept_user': Endpoint(':project/users/invite/:token', parameters=('token',)),
    'tracking_page': Endpoint(
        ':project/users/:id/tracking/page', parameters=('id',), attributes=('last_page',)
    ),
    'user_revisions': Endpoint(':project/users/:id/revisions', parameters=('id',)),
    'user_revision': Endpoint(':project/users/:id/revisions/:offset', parameters=('id', 'offset')),

    # Authentication
    'authenticate': Endpoint(
        ':project/auth/authenticate', attributes=('email', 'password', 'mode', 'otp')
    ),
    'refresh': Endpoint(':project/auth/refresh', attributes=('token',)),
}


def get_endpoint(name: str) -> Endpoint:
    """
    Look up an endpoint by name

    Raises:
        KeyError: If the name is not registered
    """
    try:
        return ENDPOINTS[name]
    except KeyError:
        raise KeyError(f"Unknown endpoint: {name}") from None
