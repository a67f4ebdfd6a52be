"""
view
Access controlled views over arbitrary objects

    from protectobj import create_view

    class Point(object):
        def __init__(self, x, y):
            self.x      = x
            self.y      = y
            self._cache = None
        @property
        def norm(self):
            return (self.x**2 + self.y**2)**0.5

    p = create_view( Point(3., 4.) )
    p.x          --> 3.
    p._cache     --> None (hidden, not an error)
    p._cache = 1 --> silently dropped
    dict(p)      --> {'x': 3., 'y': 4., 'norm': 5.}
    del p.x      --> AccessDenied
"""

import dataclasses as dataclasses
import functools as functools
import inspect as inspect
import types as types
from .policy import Policy
from .discovery import discover, is_hidden
from .cache import FieldCache, field_cache, type_identity
from .util import fmt_list
from .logger import Logger
_log = Logger(__file__)

_MISSING = object()

# value returned when reading a name which is not visible
ABSENT = None

class AccessDenied(Logger.LogException, AttributeError):
    """
    Raised when a view denies an operation.
    Carries the attribute 'name', the 'operation' attempted and the 'owner' type name.
    As an AttributeError, getattr(view, name, default) and hasattr() treat denied reads as missing attributes.
    """

    READ   = "read"
    WRITE  = "write"
    DELETE = "delete"

    def __init__(self, name : str, operation : str, owner : str = None ):
        Logger.LogException.__init__(self, "Access denied: cannot %s '%s' of %s" % (operation, name, owner if not owner is None else "object"))
        self.name      = name
        self.operation = operation
        self.owner     = owner

@dataclasses.dataclass(frozen=True)
class FieldInfo(object):
    """
    Describes one attribute as seen through a view.
    Data fields carry 'value'; computed properties carry 'getter' and 'setter' with is_accessor set.
    """
    name         : str
    value        : object = None
    getter       : object = None
    setter       : object = None
    is_accessor  : bool = False
    enumerable   : bool = True
    configurable : bool = True
    writable     : bool = True

# =============================================================================
# attribute lookups on the target
# =============================================================================

def _class_member( cls : type, name : str ):
    """ First definition of 'name' along the mro of 'cls', or _MISSING """
    for klass in inspect.getmro(cls):
        member = vars(klass).get(name, _MISSING)
        if not member is _MISSING:
            return member
    return _MISSING

def _own_value( target, name : str ):
    """ Value of 'name' if it is assigned on 'target' itself (__dict__ or slot), or _MISSING """
    try:
        dct = object.__getattribute__(target, "__dict__")
    except AttributeError:
        dct = None
    if isinstance(dct, dict) and name in dct:
        return dct[name]
    member = _class_member(type(target), name)
    if isinstance(member, types.MemberDescriptorType):
        try:
            return member.__get__(target, type(target))
        except AttributeError:
            return _MISSING   # slot declared but not assigned
    return _MISSING

def _reachable( target, name : str ) -> bool:
    """ Whether 'name' can be read from 'target' without running any getter to find out """
    found = inspect.getattr_static(target, name, _MISSING)
    if found is _MISSING:
        return False
    if isinstance(found, property):
        return not found.fget is None
    if isinstance(found, types.MemberDescriptorType):
        return not _own_value(target, name) is _MISSING
    return True

# =============================================================================
# interception
# =============================================================================

def _state( view ):
    """ Returns (target, fields, names, policy) of 'view' """
    _log.verify( type(view) is ProtectedView, "'view' must be a ProtectedView, found type %s", type(view).__name__ )
    return ( object.__getattribute__(view, "_ProtectedView__target"),
             object.__getattribute__(view, "_ProtectedView__fields"),
             object.__getattribute__(view, "_ProtectedView__names"),
             object.__getattribute__(view, "_ProtectedView__policy") )

def _denied( target, name : str, operation : str ) -> AccessDenied:
    owner = type_identity(type(target)) or type(target).__name__
    _log.debug( "Denied %s of '%s' on %s", operation, name, owner )
    return AccessDenied( name, operation, owner )

def _readable( target, name : str, policy : Policy ) -> bool:
    return isinstance(name, str) and not is_hidden(name, type(target)) and policy.allows(name) and _reachable(target, name)

def _read_only( target, name, names : frozenset ) -> bool:
    """ True for a getter-only property of the field set """
    if not isinstance(name, str) or not name in names:
        return False
    member = _class_member(type(target), name)
    return isinstance(member, property) and member.fset is None

def _writable( target, name : str, names : frozenset, policy : Policy ) -> bool:
    if not isinstance(name, str):
        return False
    if name in names:
        return True
    member = _class_member(type(target), name)
    # a setter without getter is never discovered, but is a deliberate public write path
    return isinstance(member, property) and member.fget is None and not member.fset is None \
           and not is_hidden(name, type(target)) and policy.allows(name)

def _read( view, name : str ):
    target, _, _, policy = _state(view)
    if _readable(target, name, policy):
        return getattr(target, name)
    if name == "keys" and not policy.allow_read_error:
        # lets {**view} and dict(view) see the fields when the target has no keys() of its own
        return functools.partial(fields, view)
    if policy.allow_read_error:
        raise _denied(target, name, AccessDenied.READ)
    return ABSENT

def _write( view, name : str, value ):
    target, _, names, policy = _state(view)
    if _read_only(target, name, names):
        _log.debug( "Dropped write to read-only property '%s' of %s", name, type(target).__name__ )
        return
    if _writable(target, name, names, policy):
        setattr(target, name, value)
        return
    if policy.allow_write_error:
        raise _denied(target, name, AccessDenied.WRITE)
    _log.debug( "Dropped write to '%s' of %s", name, type(target).__name__ )

def _delete( view, name : str ):
    target, _, _, policy = _state(view)
    if not policy.disable_delete_error:
        raise _denied(target, name, AccessDenied.DELETE)
    _log.debug( "Ignored deletion of '%s' of %s", name, type(target).__name__ )

# =============================================================================
# view
# =============================================================================

class ProtectedView(object):
    """
    Access controlled view over a 'target' object. Use create_view() to construct.

    Attribute and item access are mediated by the view's Policy:

        view.x, view['x']           read: visible names return the target's value, methods come back bound to the target.
                                    Other names return None, or raise AccessDenied if 'allow_read_error' is set.
        view.x = 1, view['x'] = 1   write: fields of the view are written to the target.
                                    Other names are dropped, or raise AccessDenied if 'allow_write_error' is set.
                                    Writes to getter-only properties of the view are always dropped.
        del view.x, del view['x']   raises AccessDenied, or is a no-op if 'disable_delete_error' is set.
        iter(view), dir(view), len(view), 'x' in view, dict(view), {**view}
                                    see the discovered fields only. With 'allow_read_error' set the view
                                    offers no 'keys', so use as_dict() in place of dict(view) and {**view}.
        copy.copy(), copy.deepcopy(), pickle
                                    produce a view with the same fields and policy over the (copied) target.

    Dunder names resolve on the view itself. Use the module functions fields(), describe(), as_dict()
    and unwrap() to inspect a view without colliding with the target's own attributes.
    """

    __slots__ = ("__target", "__fields", "__names", "__policy")

    def __init__(self, target, fields : tuple, policy : Policy ):
        object.__setattr__(self, "_ProtectedView__target", target)
        object.__setattr__(self, "_ProtectedView__fields", tuple(fields))
        object.__setattr__(self, "_ProtectedView__names", frozenset(fields))
        object.__setattr__(self, "_ProtectedView__policy", policy)

    def __getattribute__(self, name : str):
        if name[:2] == "__" and name[-2:] == "__":
            return object.__getattribute__(self, name)
        return _read(self, name)

    def __setattr__(self, name : str, value):
        _write(self, name, value)

    def __delattr__(self, name : str):
        _delete(self, name)

    def __getitem__(self, key : str):
        return _read(self, key)

    def __setitem__(self, key : str, value):
        _write(self, key, value)

    def __delitem__(self, key : str):
        _delete(self, key)

    def __iter__(self):
        return iter(_state(self)[1])

    def __len__(self) -> int:
        return len(_state(self)[1])

    def __contains__(self, key) -> bool:
        return key in _state(self)[2]

    def __bool__(self) -> bool:
        return bool(_state(self)[0])

    def __dir__(self) -> list:
        return list(_state(self)[1])

    def __reduce__(self):
        target, fields, _, policy = _state(self)
        return (ProtectedView, (target, fields, policy))

    def __repr__(self) -> str:
        target, fields, _, _ = _state(self)
        return "ProtectedView(%s: %s)" % (type(target).__name__, fmt_list(fields, none="no fields"))

# =============================================================================
# explicit interface
# =============================================================================

def create_view( instance, options = None, *, cache : FieldCache = None, **kwargs ) -> ProtectedView:
    """
    Returns an access controlled view over 'instance'.

    Parameters
    ----------
        instance :
            Object to protect. The view holds a reference to it and never copies it.
            If 'instance' is itself a view, the new view wraps its target.
        options : optional
            None, a Policy, a Config, or a mapping of options, see Policy.
        cache : FieldCache, optional
            Cache for discovered fields. Defaults to the process-wide cache.
        **kwargs :
            Options, e.g. create_view( obj, allow_read_error=True )

    Returns
    -------
        ProtectedView
    """
    if type(instance) is ProtectedView:
        instance = unwrap(instance)
    policy = Policy.create( options, **kwargs )
    cache  = cache if not cache is None else field_cache
    fields = cache.get_or_compute( type(instance), policy, lambda : discover(instance, policy) )
    return ProtectedView( instance, fields, policy )

def fields( view : ProtectedView ) -> tuple:
    """ Returns the fields of 'view': own fields of the target first, then computed properties """
    return _state(view)[1]

def as_dict( view : ProtectedView ) -> dict:
    """ Returns a dictionary of all fields of 'view' with their current values """
    return { name : _read(view, name) for name in _state(view)[1] }

def unwrap( view : ProtectedView ):
    """ Returns the object wrapped by 'view' """
    return _state(view)[0]

def policy_of( view : ProtectedView ) -> Policy:
    """ Returns the policy of 'view' """
    return _state(view)[3]

def get_field( view : ProtectedView, name : str ):
    """ Same as getattr(view, name) """
    return _read(view, name)

def set_field( view : ProtectedView, name : str, value ):
    """ Same as setattr(view, name, value) """
    _write(view, name, value)

def delete_field( view : ProtectedView, name : str ):
    """ Same as delattr(view, name) """
    _delete(view, name)

def has_field( view : ProtectedView, name : str ) -> bool:
    """ Whether reading 'name' through 'view' returns the target's value """
    target, _, _, policy = _state(view)
    return _readable(target, name, policy)

def describe( view : ProtectedView, name : str ) -> FieldInfo:
    """
    Describes 'name' as seen through 'view'.
    Fields of the view are always reported enumerable and configurable, with their value, or their
    getter and setter for computed properties.
    Other names are described as the target's own attribute, or None if the target has no own attribute 'name'.
    Hidden names always return None.
    """
    target, _, names, _ = _state(view)
    if not isinstance(name, str) or is_hidden(name, type(target)):
        return None
    own = _own_value(target, name)
    if not name in names:
        return None if own is _MISSING else FieldInfo( name=name, value=own )
    if not own is _MISSING:
        return FieldInfo( name=name, value=own )
    member = _class_member(type(target), name)
    if isinstance(member, property):
        getter, setter = member.fget, member.fset
    elif isinstance(member, functools.cached_property):
        getter, setter = member.func, None
    else:
        getter = getattr(member, "__get__", None)
        setter = getattr(member, "__set__", None)
    return FieldInfo( name=name, getter=getter, setter=setter, is_accessor=True,
                      writable=not setter is None or isinstance(member, functools.cached_property) )
