"""
policy
Immutable access policy for protected views
"""

import dataclasses as dataclasses
from collections.abc import Mapping
from .config import Config
from .logger import Logger
_log = Logger(__file__)

PROTECTED_PREFIX = "_"

# camelCase spellings accepted for each option
_ALIASES = {
    'allowProtectedField' : 'allow_protected_field',
    'allowReadError'      : 'allow_read_error',
    'allowWriteError'     : 'allow_write_error',
    'disableDeleteError'  : 'disable_delete_error',
    'disableCache'        : 'disable_cache',
}

def _to_bool( value ) -> bool:
    """ Strict cast for option flags: accepts True/False and 1/0 only, so that a string such as 'false' is not read as True """
    if not isinstance(value, (bool, int)) or not value in (0, 1):
        raise ValueError("expected a boolean, found %s '%s'" % (type(value).__name__, value))
    return bool(value)

@dataclasses.dataclass(frozen=True)
class Policy(object):
    """
    Access policy of a protected view.
    All options default to False.

        allow_protected_field : include names starting with '_' in the visible fields and permit reading and writing them
        allow_read_error      : reading a non-visible name raises AccessDenied instead of returning None
        allow_write_error     : writing a non-visible name raises AccessDenied instead of being dropped
        disable_delete_error  : deleting is accepted as a no-op instead of raising AccessDenied
        disable_cache         : bypass the field discovery cache

    Construct with Policy.create() which accepts None, a Policy, a Config or any mapping,
    in snake_case or camelCase:

        policy = Policy.create( allow_read_error=True )
        policy = Policy.create( { 'allowProtectedField': True } )
    """
    allow_protected_field : bool = False
    allow_read_error      : bool = False
    allow_write_error     : bool = False
    disable_delete_error  : bool = False
    disable_cache         : bool = False

    @staticmethod
    def create( options = None, **kwargs ):
        """
        Returns a Policy from 'options' and keyword overrides.
        Unknown option names raise an exception.
        """
        if isinstance(options, Policy) and len(kwargs) == 0:
            return options
        if isinstance(options, Policy):
            options = dataclasses.asdict(options)
        _log.verify( options is None or isinstance(options, Mapping), "'options' must be None, a Policy, a Config or a mapping. Found type %s", type(options).__name__ )
        config = Config( config_name="options" )
        for source in [ options, kwargs ]:
            if source is None:
                continue
            for key, value in source.items():
                _log.verify( isinstance(key, str), "Option names must be strings. Found type %s", type(key).__name__ )
                config[ _ALIASES.get(key, key) ] = value
        return Policy.from_config( config )

    @staticmethod
    def from_config( config : Config ):
        """ Reads all options from 'config' and closes it. Raises an exception for any unknown option """
        policy = Policy(
            allow_protected_field = config("allow_protected_field", False, _to_bool, help="Allow access to fields starting with '" + PROTECTED_PREFIX + "'"),
            allow_read_error      = config("allow_read_error", False, _to_bool, help="Raise AccessDenied when reading a name which is not visible"),
            allow_write_error     = config("allow_write_error", False, _to_bool, help="Raise AccessDenied when writing a name which is not visible"),
            disable_delete_error  = config("disable_delete_error", False, _to_bool, help="Accept deletion as a no-op instead of raising AccessDenied"),
            disable_cache         = config("disable_cache", False, _to_bool, help="Bypass the field discovery cache"),
            )
        config.done()
        return policy

    def allows(self, name : str) -> bool:
        """ Whether 'name' passes the protected field check """
        return self.allow_protected_field or not name.startswith(PROTECTED_PREFIX)

    @property
    def key(self) -> str:
        """ Canonical string form, identical for equal policies """
        return ";".join( "%s=%d" % (f.name, int(getattr(self, f.name))) for f in dataclasses.fields(self) )

    def __str__(self) -> str:
        on = [ f.name for f in dataclasses.fields(self) if getattr(self, f.name) ]
        return "Policy(" + ", ".join(on) + ")"

Policy.DEFAULT = Policy()
