"""
discovery
Computes the public fields of an object by walking its type ancestry
"""

import inspect as inspect
import types as types
from functools import cached_property
from .policy import Policy, PROTECTED_PREFIX
from .util import fmt_list
from .logger import Logger
_log = Logger(__file__)

_SLOT_DESCRIPTORS = (types.MemberDescriptorType, types.GetSetDescriptorType)

# =============================================================================
# naming convention
# =============================================================================

def is_protected( name : str ) -> bool:
    """ Whether 'name' follows the protected naming convention, i.e. starts with '_' """
    return name.startswith(PROTECTED_PREFIX)

def is_hidden( name : str, cls : type = None ) -> bool:
    """
    Whether 'name' belongs to the hidden tier which is never visible under any policy:
        - names starting with '__', which includes dunder names
        - private names mangled for any class in the ancestry of 'cls', e.g. '_Test__secret'
    """
    if name[:2] == "__":
        return True
    if cls is None or name[:1] != "_":
        return False
    for klass in inspect.getmro(cls):
        prefix = "_" + klass.__name__.lstrip("_") + "__"
        if len(prefix) > 3 and name.startswith(prefix):
            return True
    return False

# =============================================================================
# ancestry
# =============================================================================

def ancestors( cls : type ):
    """
    Yields the ancestry of 'cls' root-most first, 'cls' last.
    'object' is the root sentinel of every chain and is never returned.
    """
    for klass in reversed(inspect.getmro(cls)):
        if klass is object:
            continue
        yield klass

def is_computed( member ) -> bool:
    """
    Whether a class level 'member' is a getter-backed computed property:
    a property with a getter, a cached_property, or any other data descriptor except slot storage.
    """
    if isinstance(member, property):
        return not member.fget is None
    if isinstance(member, cached_property):
        return True
    if isinstance(member, _SLOT_DESCRIPTORS):
        return False
    return inspect.isdatadescriptor(member)

def computed_fields( cls : type ) -> list:
    """ Names of all computed properties declared in the ancestry of 'cls', root-most first, each once """
    names = {}
    for klass in ancestors(cls):
        for name, member in vars(klass).items():
            if is_computed(member):
                names[name] = True
    return list(names)

def _slot_names( klass : type ) -> list:
    slots = vars(klass).get("__slots__", ())
    if isinstance(slots, str):
        slots = [ slots ]
    return [ s for s in slots if not s in ("__dict__", "__weakref__") ]

def own_fields( instance ) -> list:
    """
    Names currently assigned on 'instance': the keys of its __dict__ followed by every
    __slots__ entry which currently holds a value.
    Slots declared with a private name are returned in their mangled form.
    """
    names = {}
    try:
        dct = object.__getattribute__(instance, "__dict__")
    except AttributeError:
        dct = None   # slots only, or a builtin
    if isinstance(dct, dict):
        for name in dct:
            if isinstance(name, str):
                names[name] = True
    for klass in ancestors(type(instance)):
        for slot in _slot_names(klass):
            if slot[:2] == "__" and slot[-2:] != "__":
                slot = "_" + klass.__name__.lstrip("_") + slot
            member = vars(klass).get(slot, None)
            if not isinstance(member, types.MemberDescriptorType):
                continue
            try:
                member.__get__(instance, type(instance))
            except AttributeError:
                continue   # declared but not assigned
            names[slot] = True
    return list(names)

# =============================================================================
# discovery
# =============================================================================

def discover( instance, policy : Policy = None ) -> tuple:
    """
    Computes the public fields of 'instance'.

    The result contains the own fields currently assigned on 'instance' followed by the computed
    properties declared anywhere in its ancestry (root-most first). Each name appears once.
    Hidden names are never returned; protected names are removed unless the policy allows them.

    Parameters
    ----------
        instance :
            Any object.
        policy : Policy, optional
            Defaults to Policy.DEFAULT.

    Returns
    -------
        Tuple of field names.
    """
    policy = policy if not policy is None else Policy.DEFAULT
    cls    = type(instance)
    names  = {}
    for name in own_fields(instance):
        names[name] = True
    for name in computed_fields(cls):
        names[name] = True
    fields = tuple( name for name in names if not is_hidden(name, cls) and policy.allows(name) )
    if _log.getEffectiveLevel() <= Logger.DEBUG:
        _log.debug( "Discovered %ld field(s) for %s under %s: %s", len(fields), cls.__qualname__, str(policy), fmt_list(fields, none="none") )
    return fields
