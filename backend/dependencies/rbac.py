"""
RBAC dependencies for FastAPI routes
Role-based access control implemented as dependencies that run after authentication
"""
from fastapi import HTTPException, status, Request, Header
from typing import Optional
import hmac
import logging
import config

logger = logging.getLogger(__name__)

RESOURCES_FOR_ROLES = {
    'Producer': {
        'users/me': ['read', 'write'],
        'users/profiles': ['read', 'write'],
        'products': ['read', 'write'],
        'applications': ['read'],
    },
    'Receiver': {
        'users/me': ['read', 'write'],
        'users/profiles': ['read', 'write'],
        'products': ['read'],
        'applications': ['read', 'write', 'delete'],
    },
}

def normalize_path(path: str) -> str:
    """Map a request path onto a resource name"""
    segments = [segment for segment in path.strip('/').split('/') if segment]

    if len(segments) == 0:
        return path

    if segments[0] == 'users':
        if len(segments) >= 2 and segments[1] == 'me':
            return 'users/me'
        return 'users/profiles'

    return segments[0]

def translate_method_to_action(method: str) -> str:
    """Map HTTP methods to RBAC actions"""
    method_permission_mapping = {
        'GET': 'read',
        'POST': 'write',
        'PUT': 'write',
        'PATCH': 'write',
        'DELETE': 'delete',
    }
    return method_permission_mapping.get(method.upper(), 'read')

def has_permission(user_role: str, resource_name: str, required_permission: str) -> bool:
    """Check if user role has permission for the resource and action"""
    if user_role not in RESOURCES_FOR_ROLES:
        return False

    user_permissions = RESOURCES_FOR_ROLES[user_role]

    if resource_name in user_permissions:
        return required_permission in user_permissions[resource_name]

    parent_resource = resource_name.split('/')[0] if '/' in resource_name else resource_name
    if parent_resource in user_permissions:
        return required_permission in user_permissions[parent_resource]

    return False

def require_permission(resource: str = None, permission: str = None):
    """
    Create an RBAC dependency that checks permissions

    Args:
        resource: Specific resource name (auto-detected if not provided)
        permission: Specific permission (auto-detected if not provided)
    """
    def check_rbac(request: Request):
        """RBAC dependency function"""
        current_user = getattr(request.state, 'current_user', None)
        if not current_user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required"
            )

        user_role = current_user.get('role') or ''

        resource_name = resource or normalize_path(str(request.url.path))
        required_permission = permission or translate_method_to_action(request.method)

        if not has_permission(user_role, resource_name, required_permission):
            logger.warning(f"Access denied - User: {user_role}, Resource: {resource_name}, Permission: {required_permission}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {user_role or 'Unknown'} role does not have {required_permission} permission for {resource_name}"
            )

        return True

    return check_rbac

def is_internal_request(x_internal_secret: Optional[str]) -> bool:
    """True when the caller presented the shared secret of the Obyte chatbot"""
    if not config.INTERNAL_SECRET or not x_internal_secret:
        return False
    return hmac.compare_digest(x_internal_secret, config.INTERNAL_SECRET)

def require_internal_secret(x_internal_secret: Optional[str] = Header(None)):
    """Dependency for endpoints only the chatbot may call"""
    if not is_internal_request(x_internal_secret):
        logger.warning("Rejected internal request with missing or wrong secret")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid internal secret"
        )
    return True

# Product permissions
require_product_write = require_permission("products", "write")

# Application permissions
require_application_write = require_permission("applications", "write")
require_application_delete = require_permission("applications", "delete")
