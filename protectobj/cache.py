"""
cache
Process-wide cache of discovered fields per (type, policy)
"""

import threading as threading
import types as types
import weakref as weakref
from collections.abc import Callable
from .policy import Policy
from .util import fmt_list
from .logger import Logger
_log = Logger(__file__)

# instances of these types carry no class shape: each one may hold different fields
GENERIC_TYPES = ( object, types.SimpleNamespace )

def type_identity( cls : type ) -> str:
    """
    Returns the qualified name of 'cls', e.g. 'mymodule.Outer.Inner'.
    Returns None for generic types whose instances cannot share a field set.
    """
    if cls is None or cls in GENERIC_TYPES:
        return None
    name = getattr(cls, "__qualname__", None) or getattr(cls, "__name__", None)
    if not name:
        return None
    module = getattr(cls, "__module__", None)
    return name if module in (None, "builtins") else module + "." + name

class FieldCache(object):
    """
    Cache of discovered fields keyed by (type, policy.key).

    Entries are created on first discovery and live as long as their type: they are never invalidated,
    as class shapes are assumed to be static. Types are held weakly so classes created at run time
    may still be garbage collected.

    Lookups and inserts are guarded by a lock. Two threads missing the same key may both compute the
    fields; the first insert wins and both receive equal results.

    Usage:
        cache  = FieldCache.instance()
        fields = cache.get_or_compute( type(obj), policy, lambda : discover(obj, policy) )
    """

    _instance = None
    _instance_lock = threading.Lock()

    def __init__(self):
        self._lock    = threading.Lock()
        self._entries = weakref.WeakKeyDictionary()
        self._hits    = 0
        self._misses  = 0

    @staticmethod
    def instance():
        """ Returns the process-wide cache, created on first use """
        if FieldCache._instance is None:
            with FieldCache._instance_lock:
                if FieldCache._instance is None:
                    FieldCache._instance = FieldCache()
        return FieldCache._instance

    # lookups
    # -------

    def get_or_compute(self, cls : type, policy : Policy, compute : Callable ) -> tuple:
        """
        Returns the fields stored for (cls, policy), calling compute() on a miss.
        The cache is bypassed if policy.disable_cache is set or if 'cls' has no type identity.
        """
        policy   = policy if not policy is None else Policy.DEFAULT
        identity = type_identity(cls)
        if policy.disable_cache or identity is None:
            return tuple(compute())

        key = policy.key
        with self._lock:
            fields = self._entries.get(cls, {}).get(key, None)
            if not fields is None:
                self._hits += 1
                return fields
            self._misses += 1

        fields = tuple(compute())

        with self._lock:
            stored = self._entries.setdefault(cls, {}).setdefault(key, fields)
        _log.debug( "Cached fields of %s for %s", identity, key )
        return stored

    def __contains__(self, cls_policy : tuple) -> bool:
        """ Whether (cls, policy) has an entry """
        cls, policy = cls_policy
        policy = policy if not policy is None else Policy.DEFAULT
        with self._lock:
            return policy.key in self._entries.get(cls, {})

    def __len__(self) -> int:
        """ Number of cached (type, policy) entries """
        with self._lock:
            return sum( len(v) for v in self._entries.values() )

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def clear(self):
        """ Removes all entries and resets statistics. Intended for test isolation """
        with self._lock:
            self._entries.clear()
            self._hits   = 0
            self._misses = 0

    def report(self) -> str:
        """ Human readable summary of the cache contents """
        with self._lock:
            lines = [ "%s [%s]: %s" % (type_identity(cls), key, fmt_list(fields))
                      for cls, entry in self._entries.items() for key, fields in entry.items() ]
            hits, misses = self._hits, self._misses
        return "FieldCache: %ld hit(s), %ld miss(es)\n" % (hits, misses) + "\n".join(sorted(lines))

field_cache = FieldCache.instance()
