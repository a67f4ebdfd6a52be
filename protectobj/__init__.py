"""
protectobj
Access controlled views which expose only the public surface of an object
"""

__version__ = "0.1.0"

from .policy import Policy, PROTECTED_PREFIX
from .config import Config
from .discovery import discover, is_protected, is_hidden
from .cache import FieldCache, field_cache, type_identity
from .view import ProtectedView, AccessDenied, FieldInfo, ABSENT, create_view, fields, as_dict, describe, unwrap, policy_of, get_field, set_field, has_field, delete_field
