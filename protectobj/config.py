"""
config
Self-recording option dictionaries used to pass view policies
"""

from collections import OrderedDict
from sortedcontainers import SortedDict
from .util import fmt_list
from .logger import Logger
_log = Logger(__file__)

class _ID(object):
    pass

no_default = _ID()    # creates a unique object which can be used to detect if a default value was provided

class Config(OrderedDict):
    """
    A simple Config class for options.

    Write
        Set data as usual:

            config = Config()
            config['allow_read_error'] = True
            config = Config(allow_read_error=True, disable_cache=True)

    Read
        def read_config( config ):
            read_error = config("allow_read_error", False, bool, help="Raise on unknown reads")
            no_cache   = config("disable_cache", False, bool, help="Bypass the field cache")
            config.done()          # raises an exception if any other key was passed, e.g. a typo

    Self-recording "help"
        Each read records its default, cast and help text. Call usage_report() for a summary.

    Attributes
    ----------
        config_name : str
            Name of the config, useful for error messages
        not_done : list
            Keys which were not read yet.
        recorder : SortedDict
            Records usage of the object.
    """

    def __init__(self, *args, config_name : str = None, **kwargs):
        """
        Parameters
        ----------
            *args : list
                List of dictionaries to update() with, iteratively.
            config_name : str, optional
                Name of the configuration for error messages. Default is 'config'
            **kwargs : dict
                Used to initialize the config, e.g. Config(a=1, b=2)
        """
        OrderedDict.__init__(self)
        self._done     = set()
        self._name     = config_name if not config_name is None else "config"
        self._recorder = SortedDict()
        for k in args:
            if not k is None:
                self.update(k)
        self.update(kwargs)

    @property
    def config_name(self) -> str:
        """ Returns the name of this config """
        return self._name

    @property
    def recorder(self) -> SortedDict:
        """ Returns the usage recorder """
        return self._recorder

    @property
    def not_done(self) -> list:
        """ Returns the list of keys which were not read yet """
        return [ k for k in self if not k in self._done ]

    def __str__(self) -> str:
        return self._name + str(dict(self))

    def __repr__(self) -> str:
        return "Config( **" + repr(dict(self)) + ", config_name='" + self._name + "' )"

    def as_dict(self) -> dict:
        """ Returns a plain dictionary copy, without marking anything as read """
        return dict(self)

    # reading
    # -------

    def __call__(self, key     : str,
                       default = no_default,
                       cast    : type = None,
                       help    : str = None ):
        """
        Reads 'key' from the config. If not found, return 'default' if specified.

            config("key")                      - returns the value for 'key' or if not found raises a KeyError
            config("key", 1)                   - returns the value for 'key' or if not found returns 1
            config("key", 1, int)              - if 'key' is found, cast the result with int().
            config("key", 1, int, "A number")  - also stores an optional help text for usage_report()
        """
        _log.verify( isinstance(key, str), "'key' must be a string. Found type %s", type(key).__name__ )

        if not key in self:
            if default is no_default:
                raise KeyError(key, "Error in config '%s': key '%s' not found " % (self._name, key))
            value = default
        else:
            value = OrderedDict.get(self,key)
            if not cast is None:
                try:
                    value = cast(value)
                except (TypeError, ValueError) as e:
                    _log.throw( "Error in config '%s': value '%s' for key '%s' cannot be cast to %s: %s", self._name, str(value)[:100], key, getattr(cast,"__name__",str(cast)), e )
        self._done.add(key)

        help = str(help) if not help is None else ""
        help = help[:-1] if help[-1:] == "." else help
        exst = self._recorder.get(key, None)
        if not exst is None and default is not no_default and 'default' in exst:
            _log.verify( exst['default'] == default, "Key '%s' of config '%s' was read twice with different default values '%s' and '%s'", key, self._name, exst['default'], default )
        record = SortedDict( value=value, help=help, help_cast=getattr(cast,"__name__","") if not cast is None else "" )
        if default is not no_default:
            record['default'] = default
        self._recorder[key] = record
        return value

    def get(self, key : str, default = None, cast : type = None, help : str = None ):
        """ Returns self(key, default, cast, help) """
        return self(key, default, cast, help)

    # handle finishing config use
    # ---------------------------

    def done(self, mark_done : bool = True ):
        """
        Closes the config and checks that no unread parameters remain.
        This is how misspelled options are caught.
        """
        rest = self.not_done
        if len(rest) > 0:
            _log.throw( "Error closing config '%s': the following config arguments were not read: %s. "\
                        "Known arguments are: %s", self._name, fmt_list(sorted(rest)), fmt_list(list(self._recorder)) )
        if mark_done:
            self.mark_done()

    def mark_done(self):
        """ Mark all members as being read. Once called calling done() will no longer trigger an error """
        self._done.update( self )

    def reset_done(self):
        """ Reset the internal list of which keys are 'done', e.g. read. The recorder is kept. """
        self._done.clear()

    # reporting
    # ---------

    def usage_report(self, with_values : bool = True ) -> str:
        """ Returns a human readable report of all keys read from this config """
        report = ""
        for key, record in self._recorder.items():
            line = self._name + "['" + key + "']"
            if with_values:
                line += " = " + str(record['value'])
            if record['help'] != "":
                line += " # " + record['help']
            if 'default' in record:
                line += "; default: " + str(record['default'])
            report += line + "\n"
        return report
