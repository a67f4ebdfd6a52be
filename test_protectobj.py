# -*- coding: utf-8 -*-
"""
Tests for protectobj
"""

import unittest
import threading
import copy as copy
import pickle as pickle
import types as types
from functools import cached_property
from unittest import mock
import protectobj.view as mdl_view
import protectobj.discovery as mdl_discovery
import protectobj.policy as mdl_policy
import protectobj.config as mdl_config
import protectobj.cache as mdl_cache
import protectobj.logger as mdl_logger

Logger = mdl_logger.Logger
LogException = Logger.LogException
Config = mdl_config.Config
Policy = mdl_policy.Policy
FieldCache = mdl_cache.FieldCache
type_identity = mdl_cache.type_identity
create_view = mdl_view.create_view
AccessDenied = mdl_view.AccessDenied
fields = mdl_view.fields
as_dict = mdl_view.as_dict
describe = mdl_view.describe
unwrap = mdl_view.unwrap
discover = mdl_discovery.discover

for _mdl in [ mdl_view, mdl_discovery, mdl_policy, mdl_config, mdl_cache ]:
    _mdl._log.setLevel(Logger.CRITICAL+1)   # no logging in testing

# sample classes
# --------------

class RecordBase(object):
    def __init__(self):
        self.test3 = None
        self.test6 = { 'test7': None }
        self.__test4 = None

    @property
    def test4(self):
        return self.__test4

    @test4.setter
    def test4(self, value):
        self.__test4 = value

class Record(RecordBase):
    def __init__(self):
        RecordBase.__init__(self)
        self.test1 = None
        self._test4 = '_test4'
        self.__test2 = None
        self.__test5 = None

    @classmethod
    def create(cls, **options):
        return create_view( cls(), **options )

    @property
    def test2(self):
        return self.__test2

    @test2.setter
    def test2(self, value):
        self.__test2 = value

    @property
    def test4(self):
        return self.__test5

    @test4.setter
    def test4(self, value):
        self.__test5 = value + 100

    def func1(self):
        return self.test1

    def func2(self):
        return self.__test2

    def func3(self, num):
        return num

    def func4(self):
        return self._test4

class Named(object):
    """ own field 'a', inherited getter 'b', protected field '_c' """
    def __init__(self):
        self.a  = None
        self._c = 'c'

class NamedChild(Named):
    pass

class NamedBase(object):
    @property
    def b(self):
        return 'b'

class Shaped(NamedBase):
    def __init__(self):
        self.a  = None
        self._c = 'c'

class Slotted(object):
    __slots__ = ('x', 'y', '__hidden')
    def __init__(self):
        self.x = 1
        self.__hidden = 2

class Accessors(object):
    def __init__(self):
        self.data     = 1
        self._written = None

    @property
    def readonly(self):
        return 'ro'

    def _set_sink(self, value):
        self._written = value
    sink = property(None, _set_sink)

    @cached_property
    def lazy(self):
        return 42

# testing views
# -------------

class ProtectObjViewTest(unittest.TestCase):

    def test_structure(self):
        instance = Record.create()

        instance.test1 = 1
        instance.test2 = 2
        instance.testNew = 'new'
        instance._test4 = 'test4'

        obj = { **instance }
        self.assertEqual( obj, { 'test1': 1,
                                 'test2': 2,
                                 'test3': None,
                                 'test4': None,
                                 'test6': { 'test7': None } } )
        self.assertEqual( dict(instance), obj )
        self.assertEqual( as_dict(instance), obj )

        instance.test6['test7'] = 7
        self.assertEqual( instance.test6['test7'], 7 )

        self.assertEqual( instance.func1(), 1 )
        self.assertEqual( instance.func2(), 2 )
        self.assertEqual( instance.func3(3), 3 )
        self.assertEqual( instance.func4(), '_test4' )

    def test_read_missing(self):
        instance = Record.create()
        data = instance.testNew
        self.assertIsNone( data )
        instance.test1 = data
        self.assertIsNone( instance._test4 )
        self.assertIsNone( instance['testNew'] )

    def test_read_missing_error(self):
        instance = Record.create( allow_read_error=True )
        with self.assertRaises(AccessDenied):
            _ = instance.testNew
        with self.assertRaises(AccessDenied) as ctx:
            _ = instance._test4
        self.assertEqual( ctx.exception.name, '_test4' )
        self.assertEqual( ctx.exception.operation, AccessDenied.READ )
        self.assertIsInstance( ctx.exception, AttributeError )
        self.assertIsInstance( ctx.exception, LogException )
        self.assertFalse( hasattr( instance, 'testNew' ) )
        self.assertEqual( getattr( instance, 'testNew', 3 ), 3 )
        self.assertEqual( instance.test3, None )

    def test_write_new_fields(self):
        instance = Record.create()
        instance.testNew = 'new'
        instance._test4  = 'test4'
        target = unwrap(instance)
        self.assertFalse( 'testNew' in vars(target) )
        self.assertEqual( target._test4, '_test4' )
        self.assertFalse( 'testNew' in fields(instance) )
        self.assertFalse( 'testNew' in instance )

    def test_write_new_fields_error(self):
        instance = Record.create( allow_write_error=True )
        with self.assertRaises(AccessDenied) as ctx:
            instance.testNew = 'new'
        self.assertEqual( ctx.exception.operation, AccessDenied.WRITE )
        with self.assertRaises(AccessDenied):
            instance._test4 = 'test4'
        instance.test1 = 1
        self.assertEqual( instance.test1, 1 )

    def test_delete(self):
        instance = Record.create()
        with self.assertRaises(AccessDenied) as ctx:
            del instance.test1
        self.assertEqual( ctx.exception.operation, AccessDenied.DELETE )
        with self.assertRaises(AccessDenied):
            del instance.unknown
        with self.assertRaises(AccessDenied):
            del instance['test1']

        instance = Record.create( disable_delete_error=True )
        del instance.test1
        del instance.unknown
        self.assertTrue( 'test1' in instance )

    def test_protected_field(self):
        instance = Record.create( allow_protected_field=True )
        instance._test4 = 'test4'
        self.assertEqual( { **instance }, { 'test1': None,
                                            'test2': None,
                                            'test3': None,
                                            'test4': None,
                                            '_test4': 'test4',
                                            'test6': { 'test7': None } } )
        self.assertEqual( instance.func4(), 'test4' )
        self.assertEqual( instance._test4, 'test4' )
        self.assertEqual( instance['_test4'], 'test4' )
        # strict reads of allowed protected fields succeed
        strict = Record.create( allow_protected_field=True, allow_read_error=True )
        self.assertEqual( strict._test4, '_test4' )
        with self.assertRaises(AccessDenied):
            _ = strict._Record__test2
        # private names stay hidden
        self.assertIsNone( instance._Record__test2 )
        self.assertFalse( '_Record__test2' in fields(instance) )

    def test_named_scenario(self):
        view = create_view( Shaped() )
        self.assertEqual( set(fields(view)), {'a', 'b'} )
        self.assertEqual( set(view), {'a', 'b'} )
        self.assertEqual( fields(view), fields(view) )
        self.assertIsNone( view._c )
        view._c = 'x'
        self.assertEqual( unwrap(view)._c, 'c' )
        view.a = 3
        self.assertEqual( view.a, 3 )
        self.assertEqual( view.b, 'b' )
        self.assertEqual( len(view), 2 )
        self.assertEqual( sorted(dir(view)), ['a', 'b'] )

    def test_computed(self):
        view = create_view( Accessors() )
        self.assertEqual( set(fields(view)), {'data', 'readonly', 'lazy'} )
        self.assertEqual( view.lazy, 42 )
        # getter without setter: visible but not writable, dropped even in strict write mode
        view.readonly = 'rw'
        self.assertEqual( view.readonly, 'ro' )
        strict = create_view( Accessors(), allow_write_error=True )
        strict.readonly = 'rw'
        self.assertEqual( strict.readonly, 'ro' )
        with self.assertRaises(AccessDenied):
            strict.unknown = 'rw'
        # setter without getter: writable but never visible
        view.sink = 5
        self.assertEqual( unwrap(view)._written, 5 )
        self.assertFalse( 'sink' in view )
        self.assertIsNone( view.sink )

    def test_slots(self):
        view = create_view( Slotted(), disable_cache=True )
        self.assertEqual( fields(view), ('x',) )
        self.assertEqual( view.x, 1 )
        self.assertIsNone( view.y )
        self.assertIsNone( view._Slotted__hidden )
        view.y = 2
        self.assertFalse( hasattr( unwrap(view), 'y' ) )

    def test_describe(self):
        view = create_view( Record() )
        info = describe( view, 'test1' )
        self.assertTrue( info.enumerable )
        self.assertTrue( info.configurable )
        self.assertFalse( info.is_accessor )
        self.assertIsNone( info.value )

        info = describe( view, 'test2' )
        self.assertTrue( info.is_accessor )
        self.assertTrue( info.enumerable )
        self.assertIs( info.getter, Record.test2.fget )
        self.assertIs( info.setter, Record.test2.fset )

        info = describe( view, '_test4' )
        self.assertEqual( info.value, '_test4' )
        self.assertIsNone( describe( view, 'unknown' ) )
        self.assertIsNone( describe( view, '_Record__test2' ) )
        self.assertIsNone( describe( view, '__dict__' ) )

    def test_view_basics(self):
        target = Record()
        view   = create_view( target )
        self.assertIs( unwrap(view), target )
        self.assertIs( unwrap( create_view( view ) ), target )
        self.assertIsInstance( view, mdl_view.ProtectedView )
        self.assertTrue( 'Record' in repr(view) )
        self.assertTrue( bool(view) )
        self.assertTrue( mdl_view.has_field( view, 'func1' ) )
        self.assertFalse( mdl_view.has_field( view, '_test4' ) )
        mdl_view.set_field( view, 'test1', 11 )
        self.assertEqual( mdl_view.get_field( view, 'test1' ), 11 )
        with self.assertRaises(AccessDenied):
            mdl_view.delete_field( view, 'test1' )
        self.assertEqual( mdl_view.policy_of( view ), Policy() )
        with self.assertRaises(LogException):
            fields( target )

    def test_plain_objects(self):
        ns = types.SimpleNamespace( a=1, _b=2 )
        view = create_view( ns )
        self.assertEqual( fields(view), ('a',) )
        self.assertEqual( dict(view), {'a': 1} )

    def test_keys(self):
        view = create_view( Record() )
        self.assertTrue( callable( view.keys ) )
        self.assertEqual( tuple( view.keys() ), fields(view) )
        strict = create_view( Record(), allow_read_error=True )
        self.assertFalse( hasattr( strict, 'keys' ) )
        with self.assertRaises(AccessDenied):
            _ = strict.keys
        self.assertEqual( as_dict(strict), as_dict(view) )

    def test_copy(self):
        target = Record()
        target.test1 = 'one'
        view   = create_view( target, allow_protected_field=True )
        shallow = copy.copy( view )
        self.assertIsInstance( shallow, mdl_view.ProtectedView )
        self.assertIs( unwrap(shallow), target )
        self.assertEqual( shallow.test1, 'one' )
        self.assertEqual( fields(shallow), fields(view) )
        self.assertEqual( mdl_view.policy_of(shallow), Policy(allow_protected_field=True) )

        deep = copy.deepcopy( view )
        self.assertIsNot( unwrap(deep), target )
        self.assertEqual( deep.test1, 'one' )
        self.assertEqual( deep._test4, '_test4' )

        loaded = pickle.loads( pickle.dumps( view ) )
        self.assertIsInstance( loaded, mdl_view.ProtectedView )
        self.assertEqual( fields(loaded), fields(view) )
        self.assertEqual( as_dict(loaded), as_dict(view) )
        self.assertEqual( mdl_view.policy_of(loaded), mdl_view.policy_of(view) )

# testing discovery
# -----------------

class ProtectObjDiscoveryTest(unittest.TestCase):

    def test_discover(self):
        record = Record()
        self.assertEqual( set(discover(record)), {'test1', 'test2', 'test3', 'test4', 'test6'} )
        self.assertEqual( set(discover(record, Policy(allow_protected_field=True))), {'test1', 'test2', 'test3', 'test4', 'test6', '_test4'} )
        self.assertEqual( discover(object()), () )
        self.assertEqual( discover(NamedChild()), ('a',) )
        # own fields first, computed properties root-most first
        self.assertEqual( discover(Shaped()), ('a', 'b') )

    def test_debug_message(self):
        # the field list is only formatted when debug logging is on
        with mock.patch.object(mdl_discovery, "fmt_list", wraps=mdl_discovery.fmt_list) as formatter:
            discover(Shaped())
            self.assertEqual( formatter.call_count, 0 )
            mdl_discovery._log.setLevel(Logger.DEBUG)
            try:
                self.assertEqual( discover(Shaped()), ('a', 'b') )
            finally:
                mdl_discovery._log.setLevel(Logger.CRITICAL+1)
            self.assertEqual( formatter.call_count, 1 )

    def test_tiers(self):
        self.assertTrue( mdl_discovery.is_protected('_x') )
        self.assertFalse( mdl_discovery.is_protected('x') )
        self.assertTrue( mdl_discovery.is_hidden('__x') )
        self.assertTrue( mdl_discovery.is_hidden('__dict__') )
        self.assertTrue( mdl_discovery.is_hidden('_RecordBase__test4', Record) )
        self.assertFalse( mdl_discovery.is_hidden('_test4', Record) )
        self.assertEqual( list(mdl_discovery.ancestors(Record)), [RecordBase, Record] )
        self.assertEqual( list(mdl_discovery.ancestors(object)), [] )

# testing the cache
# -----------------

class ProtectObjCacheTest(unittest.TestCase):

    def test_cache(self):
        cache = FieldCache()
        with mock.patch.object( mdl_view, "discover", wraps=discover ) as counting:
            v1 = create_view( Record(), cache=cache )
            v2 = create_view( Record(), cache=cache )
            self.assertEqual( counting.call_count, 1 )
            self.assertEqual( fields(v1), fields(v2) )
            self.assertEqual( cache.hits, 1 )
            self.assertEqual( cache.misses, 1 )

            _ = create_view( Record(), cache=cache, allow_protected_field=True )
            self.assertEqual( counting.call_count, 2 )
            self.assertEqual( len(cache), 2 )
            self.assertTrue( (Record, Policy()) in cache )

            _ = create_view( Record(), cache=cache, disable_cache=True )
            _ = create_view( Record(), cache=cache, disable_cache=True )
            self.assertEqual( counting.call_count, 4 )
            self.assertEqual( len(cache), 2 )

            _ = create_view( types.SimpleNamespace(a=1), cache=cache )
            _ = create_view( types.SimpleNamespace(b=1), cache=cache )
            self.assertEqual( counting.call_count, 6 )
            self.assertEqual( len(cache), 2 )
        self.assertTrue( 'Record' in cache.report() )
        cache.clear()
        self.assertEqual( len(cache), 0 )

    def test_type_identity(self):
        self.assertEqual( type_identity(Record), Record.__module__ + ".Record" )
        self.assertIsNone( type_identity(object) )
        self.assertIsNone( type_identity(types.SimpleNamespace) )
        self.assertIs( FieldCache.instance(), mdl_cache.field_cache )

    def test_threads(self):
        cache   = FieldCache()
        results = []
        lock    = threading.Lock()
        def run():
            for _ in range(100):
                view = create_view( Record(), cache=cache )
                with lock:
                    results.append( fields(view) )
        threads = [ threading.Thread(target=run) for _ in range(8) ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual( len(results), 800 )
        self.assertEqual( len(set(results)), 1 )
        self.assertEqual( len(cache), 1 )

# testing policy and config
# -------------------------

class ProtectObjPolicyTest(unittest.TestCase):

    def test_policy(self):
        self.assertEqual( Policy.create(), Policy() )
        self.assertEqual( Policy.create(None).key, Policy.create({}).key )
        self.assertEqual( Policy.create(allow_read_error=False).key, Policy.DEFAULT.key )
        self.assertNotEqual( Policy.create(allow_read_error=True).key, Policy.DEFAULT.key )
        self.assertEqual( Policy.create({'allowProtectedField': True}), Policy(allow_protected_field=True) )
        self.assertEqual( Policy.create(Policy(disable_cache=True), allow_read_error=True), Policy(disable_cache=True, allow_read_error=True) )
        p = Policy(allow_read_error=True)
        self.assertIs( Policy.create(p), p )
        with self.assertRaises(LogException):
            Policy.create( allow_protected=True )
        with self.assertRaises(LogException):
            Policy.create( 1 )
        self.assertTrue( Policy(allow_protected_field=True).allows('_x') )
        self.assertFalse( Policy().allows('_x') )
        self.assertTrue( Policy().allows('x') )

    def test_config(self):
        config = Config( allow_read_error=True, config_name="options" )
        policy = Policy.create( config )
        self.assertTrue( policy.allow_read_error )

        with self.assertRaises(LogException):
            Policy.create( {'allowReadError': 'false'} )
        with self.assertRaises(LogException):
            Policy.create( disable_cache=2 )
        self.assertEqual( Policy.create( allow_read_error=0 ), Policy() )

        config = Config( disable_cache=1 )
        policy = Policy.from_config( config )
        self.assertTrue( policy.disable_cache )
        self.assertTrue( 'Bypass the field discovery cache' in config.usage_report() )
        self.assertEqual( config.not_done, [] )

        config = Config( x=0., z=-1. )
        self.assertEqual( config("x", 10., float, "test x"), 0. )
        self.assertEqual( config("y", 10., float, "test y"), 10. )
        self.assertEqual( config.not_done, ['z'] )
        with self.assertRaises(LogException):
            config.done()
        with self.assertRaises(KeyError):
            config("w")
        config.mark_done()
        config.done()
        config.reset_done()
        self.assertEqual( sorted(config.not_done), ['x', 'z'] )

if __name__ == '__main__':
    unittest.main()
