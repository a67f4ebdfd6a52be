"""
Logging for protectobj
Thin decoration of the standard 'logging' module with %-style formatting and verify() helpers.
"""

from .util import _fmt
import sys as sys
import logging as logging
import traceback as traceback

class Logger(object):
    """
    Simple utility object to decorate loggers, plus:
        - debug(), info(), warning() also accept named argument formatting ie "The field is %(name)s"
        - Exceptn() logs an error before returning an exception, and makes sure an exception is only tracked once.
    Usage:
        from .logger import Logger
        _log = Logger(__file__)
        ...
        _log.verify( isinstance(name, str), "'name' must be a string, found %s", type(name).__name__ )

    Exceptions independent of logging level

        verify( cond, text, *args, **kwargs )
            If cond is not met, raise an exception with text % args

        throw( text, *args, **kwargs )
            Raise an exception with text % args

    Logging

        debug( text, *args, **kwargs )
        info( text, *args, **kwargs )
        warning( text, *args, **kwargs )
        error( text, *args, **kwargs )
    """

    CRITICAL = logging.CRITICAL
    ERROR = logging.ERROR
    WARNING = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG
    NOTSET = logging.NOTSET

    def __init__(self,topic : str):
        assert topic !="", "Logger cannot be empty"
        setupAppLogging()   # ensure system is ready
        i = topic.rfind('/')
        if i == -1:
            i = topic.rfind('\\')
        if i != -1 and i<len(topic)-1:
            topic = topic[i+1:]
        if topic[-3:] == ".py":
            topic = "protectobj." + topic[:-3]
        self.logger   = logging.getLogger(topic)

    # Exception support
    # -----------------

    class LogException(Exception):
        """ Placeholder exception class we use to identify our own exceptions """

        def __init__(self,text : str):
            Exception.__init__(self,text)

    def Exceptn(self, text : str, *args, **kwargs ):
        """
        Returns an exception object with 'text' % kwargs and stores an 'error' message
            If an exception is present, it will be printed, too.
            If the base logger logs 'debug' information, the call stack will be printed as well

        Usage:
            raise _log.Exceptn("Something happened")
        """
        text = _fmt(text,args,kwargs)
        (typ, val, trc) = sys.exc_info()

        # are we already throwing our own exception?
        if not typ is None and issubclass(typ, Logger.LogException):
            return val               # --> already logged --> keep raising the exception but don't do anything

        # new exception?
        if typ is None:
            self.error( text )
            return Logger.LogException(text)

        # another exception is being thrown: re-cast it as one of our own
        if text[-1] == ".":
            text = text + " " + str(val)
        else:
            text = text + ". " + str(val)

        # in debug, add trace information
        if self.logger.getEffectiveLevel() <= logging.DEBUG:
            text = text.rstrip()
            txt = traceback.format_exception(typ,val,trc,limit = 100)
            for t in txt:
                text += "\n  " + t[:-1]
        self.error( text )
        return Logger.LogException(text)

    # logging() replacements
    # ----------------------

    def debug(self, text, *args, **kwargs ):
        """ Reports debug information with new style formatting """
        if self.logger.getEffectiveLevel() <= logging.DEBUG and len(text) > 0:
            self.logger.debug(_fmt(text,args,kwargs))

    def info(self, text, *args, **kwargs ):
        """ Reports information with new style formatting """
        if self.logger.getEffectiveLevel() <= logging.INFO and len(text) > 0:
            self.logger.info(_fmt(text,args,kwargs))

    def warning(self, text, *args, **kwargs ):
        """ Reports a warning with new style formatting """
        if self.logger.getEffectiveLevel() <= logging.WARNING and len(text) > 0:
            self.logger.warning(_fmt(text,args,kwargs))
    warn = warning

    def error(self, text, *args, **kwargs ):
        """ Reports an error with new style formatting """
        if self.logger.getEffectiveLevel() <= logging.ERROR and len(text) > 0:
            self.logger.error(_fmt(text,args,kwargs))

    def throw( self, text, *args, **kwargs ):
        """ Raise an exception """
        raise self.Exceptn(text,*args,**kwargs)

    # run time utilities with validity check
    # --------------------------------------

    def verify(self, cond, text, *args, **kwargs ):
        """
        Verifies 'cond'. Raises an exception if 'cond' is not met with the specified text.
        Usage:
            _log.verify( i>0, "i must be positive, found %d", i)
        """
        if not cond:
            self.throw(text,*args,**kwargs)

    # interface into logging
    # ----------------------

    def setLevel(self, level):
        """ logging.setLevel """
        self.logger.setLevel(level)

    def getEffectiveLevel(self):
        """ logging.getEffectiveLevel """
        return self.logger.getEffectiveLevel()

# ====================================================================================================
# setupAppLogging
# ---------------
# Attaches a stdout handler to the package logger, once per process.
# ====================================================================================================

GLOBAL_LOG_DATA = "protectobj.logger"

packageLog = logging.getLogger("protectobj")

def setupAppLogging( force : bool = False, levelPrint = logging.ERROR ):
    """
    Package wide logging control.
    Only the first call has an effect unless 'force' is True, in which case the print level is reset.
    """
    data = globals().get(GLOBAL_LOG_DATA,None)
    if data is None:
        fmtt   = logging.Formatter(fmt="%(asctime)s %(levelname)-10s: %(name)s: %(message)s")
        stdOut = logging.StreamHandler(sys.stdout)
        stdOut.setFormatter(fmtt)
        stdOut.setLevel( levelPrint )
        packageLog.addHandler( stdOut )
        data = {'strm':stdOut }
        globals()[GLOBAL_LOG_DATA] = data
    elif force:
        data['strm'].setLevel( levelPrint )
    return data
