"""
Python type groupings and the ``Value`` handle that drives kind-based dispatch.

Every comparison and rendering decision is made on a :class:`Kind`, which is extracted once from the wrapped object
(and optionally a static type for typed nils). The groupings here are the only place that knows which concrete python
types map onto which kind.
"""

import array
import asyncio
import collections
import dataclasses
import enum
import functools
import multiprocessing.queues
import queue
import types
import weakref
import numpy as np
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, List, Optional


DictValuesType = type({}.values())


class _Absent:
    """Marker for a value that does not exist at all (missing attribute, missing mapping key)"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return '<absent>'

    def __bool__(self):
        return False


ABSENT = _Absent()


class Kind(enum.Enum):
    INVALID = 'invalid'
    BOOL = 'bool'
    INT = 'int'
    UINT = 'uint'
    FLOAT = 'float'
    COMPLEX = 'complex'
    STRING = 'string'
    POINTER = 'pointer'
    RECORD = 'record'
    SEQUENCE = 'sequence'
    MAPPING = 'mapping'
    INTERFACE = 'interface'
    FUNC = 'func'
    CHAN = 'chan'
    OTHER = 'other'


SCALAR_KINDS = frozenset((Kind.BOOL, Kind.INT, Kind.UINT, Kind.FLOAT, Kind.COMPLEX, Kind.STRING))
CONTAINER_KINDS = frozenset((Kind.POINTER, Kind.RECORD, Kind.SEQUENCE, Kind.MAPPING))

# Boxes around exactly one concrete value
WrapperTypes = (enum.Enum, collections.UserDict, collections.UserList, collections.UserString)

FuncTypes = (types.FunctionType, types.BuiltinFunctionType, types.MethodType, types.MethodWrapperType,
    functools.partial)

ChanTypes = (queue.Queue, queue.SimpleQueue, asyncio.Queue, multiprocessing.queues.Queue,
    multiprocessing.queues.SimpleQueue)

BytesLikeTypes = (bytes, bytearray, memoryview)

SequenceTypes = (list, tuple, np.ndarray, collections.deque, array.array, DictValuesType) + BytesLikeTypes


def kind_of(obj: 'Any', static_type: 'Optional[type]' = None) -> 'Kind':
    """Returns the structural kind of `obj`, using `static_type` to resolve typed nils"""
    if obj is ABSENT:
        return Kind.INVALID

    if obj is None:
        if static_type is None or static_type is type(None):
            return Kind.INVALID
        if issubclass(static_type, FuncTypes):
            return Kind.FUNC
        if issubclass(static_type, ChanTypes):
            return Kind.CHAN
        if issubclass(static_type, weakref.ref):
            return Kind.POINTER
        return Kind.INVALID

    # bool before int, since bool is an int subclass
    if isinstance(obj, (bool, np.bool_)):
        return Kind.BOOL

    # Enums before numerics so IntEnum/StrEnum members stay boxed
    if isinstance(obj, WrapperTypes):
        return Kind.INTERFACE

    if isinstance(obj, np.unsignedinteger):
        return Kind.UINT
    if isinstance(obj, (int, np.integer)):
        return Kind.INT
    if isinstance(obj, (float, np.floating)):
        return Kind.FLOAT
    if isinstance(obj, (complex, np.complexfloating)):
        return Kind.COMPLEX
    if isinstance(obj, str):
        return Kind.STRING

    if isinstance(obj, weakref.ref):
        return Kind.POINTER
    if isinstance(obj, FuncTypes):
        return Kind.FUNC
    if isinstance(obj, ChanTypes):
        return Kind.CHAN

    if _is_declared_record(obj):
        return Kind.RECORD

    if isinstance(obj, np.ndarray) and obj.ndim == 0:
        return Kind.OTHER
    if isinstance(obj, SequenceTypes) or (isinstance(obj, Sequence) and not isinstance(obj, range)):
        return Kind.SEQUENCE
    if isinstance(obj, Mapping):
        return Kind.MAPPING

    if _is_plain_record(obj):
        return Kind.RECORD

    return Kind.OTHER


def _is_declared_record(obj):
    """dataclass instances, namedtuples and attrs instances"""
    if isinstance(obj, type):
        return False
    return dataclasses.is_dataclass(obj) or (isinstance(obj, tuple) and hasattr(obj, '_fields')) \
        or hasattr(type(obj), '__attrs_attrs__')


def _is_plain_record(obj):
    """Instances that only carry attributes, and do not define their own notion of equality"""
    if isinstance(obj, (type, types.ModuleType)):
        return False
    if type(obj).__eq__ is not object.__eq__:
        return False
    return hasattr(obj, '__dict__') or bool(_slot_names(type(obj)))


def _slot_names(cls):
    names = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ('__dict__', '__weakref__'):
                continue
            if name.startswith('__') and not name.endswith('__'):
                name = '_%s%s' % (klass.__name__.lstrip('_'), name)
            names.append(name)
    return names


def record_fields(obj: 'Any') -> 'List[str]':
    """Returns the field names of a record in declaration order"""
    if dataclasses.is_dataclass(obj):
        return [f.name for f in dataclasses.fields(obj)]
    if isinstance(obj, tuple) and hasattr(obj, '_fields'):
        return list(obj._fields)
    if hasattr(type(obj), '__attrs_attrs__'):
        return [a.name for a in type(obj).__attrs_attrs__]

    names = ['args'] if isinstance(obj, BaseException) else []
    names.extend(_slot_names(type(obj)))
    names.extend(getattr(obj, '__dict__', {}))
    return list(dict.fromkeys(names))


def field_value(obj: 'Any', name: 'str') -> 'Any':
    """Returns the value of the field `name`, or ABSENT if it cannot be read"""
    return getattr(obj, name, ABSENT)


def is_private(name: 'str') -> 'bool':
    return name.startswith('_')


def unwrap(obj: 'Any') -> 'Any':
    """Returns the concrete value contained in an INTERFACE kind object"""
    if isinstance(obj, enum.Enum):
        return obj.value
    return obj.data


def same_storage(a: 'Any', b: 'Any') -> 'bool':
    """True if both containers are known to be views of the exact same underlying storage"""
    if a is b:
        return True
    if isinstance(a, np.ndarray) and isinstance(b, np.ndarray):
        return a.__array_interface__['data'][0] == b.__array_interface__['data'][0] and a.shape == b.shape \
            and a.strides == b.strides and a.dtype == b.dtype
    return False


def sequence_items(obj: 'Any') -> 'Sequence':
    """Returns an indexable view of a SEQUENCE kind object"""
    if isinstance(obj, BytesLikeTypes):
        return [np.uint8(b) for b in bytes(obj)]
    if isinstance(obj, DictValuesType):
        return list(obj)
    return obj


def identity(val: 'Value') -> 'Any':
    """Returns the identity of a FUNC or CHAN kind value; 0 for nil"""
    if val.is_nil:
        return 0
    obj = val.obj
    if isinstance(obj, types.MethodType):
        return id(obj.__self__), id(obj.__func__)
    if isinstance(obj, (types.BuiltinFunctionType, types.MethodWrapperType)):
        return id(obj.__self__), obj.__name__
    return id(obj)


def type_name(t: 'type') -> 'str':
    """Returns a display name for a type; builtins are unqualified"""
    if t is _Absent:
        return '<absent>'
    module = getattr(t, '__module__', 'builtins')
    if module == 'builtins':
        return t.__qualname__
    return '%s.%s' % (module, t.__qualname__)


class Value:
    """
    Handle on a runtime value: the object itself, its static type, its kind and whether it may be introspected.

    Args:
        obj (Any): the wrapped object, or ABSENT for a value that does not exist
        static_type (Optional[type]): the static type of the value. Defaults to type(obj). Pass it along with
            `obj=None` to build a typed nil, eg: Value(None, queue.Queue)
        accessible (bool): False if the value is a private attribute of its owner
    """
    __slots__ = ('obj', 'type', 'kind', 'accessible')

    def __init__(self, obj: 'Any', static_type: 'Optional[type]' = None, accessible: 'bool' = True):
        self.obj = obj
        self.type = type(obj) if static_type is None else static_type
        self.kind = kind_of(obj, static_type)
        self.accessible = accessible

    @property
    def is_valid(self) -> 'bool':
        return self.kind is not Kind.INVALID

    @property
    def is_nil(self) -> 'bool':
        if self.obj is None or self.obj is ABSENT:
            return True
        return self.kind is Kind.POINTER and self.obj() is None

    @property
    def address(self) -> 'int':
        return 0 if self.is_nil else id(self.obj)

    def __repr__(self):
        return 'Value(%r, kind=%s)' % (self.obj, self.kind.value)
