"""
Tests for the trailcheck.dump file.
"""

import queue
import types
import weakref
import numpy as np
import pytest
from collections import OrderedDict, UserList, deque
from dataclasses import dataclass
from enum import Enum
from trailcheck.dump import (VAL_ERR_USAGE, Dumper, chan_dumper, func_dumper, nil_dumper, pointer_dumper,
    record_dumper, simple_dumper)
from trailcheck.equality import byte_dumper
from trailcheck.pytypes import ABSENT, Value


@dataclass
class _Point:
    x: int
    y: int


class _Color(Enum):
    RED = 1


def test_chan_dumper():
    """Queues render as their type and address"""
    assert Dumper(show_addresses=True).any(Value(None, queue.Queue)) == '(queue.Queue)(<0x0>)'

    q = queue.Queue()
    assert Dumper(show_addresses=True).any(q) == '(queue.Queue)(<0x%x>)' % id(q)
    assert Dumper().any(q) == '(queue.Queue)(<addr>)'
    assert chan_dumper(Dumper(), 1, Value(q)) == '  (queue.Queue)(<addr>)'
    assert chan_dumper(Dumper(indent=2), 1, Value(q)) == '      (queue.Queue)(<addr>)'


def test_chan_dumper_usage_error():
    assert chan_dumper(Dumper(), 0, Value(1234)) == VAL_ERR_USAGE
    assert chan_dumper(Dumper(), 2, Value(1234)) == '    ' + VAL_ERR_USAGE


def test_func_dumper():
    assert Dumper(show_addresses=True).any(Value(None, types.FunctionType)) == '<func>(<0x0>)'

    def fn():
        pass

    assert Dumper(show_addresses=True).any(fn) == '<func>(<0x%x>)' % id(fn)
    assert func_dumper(Dumper(), 0, Value(fn)) == '<func>(<addr>)'
    assert func_dumper(Dumper(), 0, Value(len)) == '<func>(<addr>)'
    assert func_dumper(Dumper(), 0, Value(1234)) == VAL_ERR_USAGE
    assert func_dumper(Dumper(indent=2), 1, Value(1234)) == '      ' + VAL_ERR_USAGE


def test_numbers():
    """Numbers render in their shortest form"""
    d = Dumper()
    assert d.any(1) == '1'
    assert d.any(-12) == '-12'
    assert d.any(np.uint16(7)) == '7'
    assert d.any(1.0) == '1'
    assert d.any(0.1) == '0.1'
    assert d.any(1.25) == '1.25'
    assert d.any(1e20) == '100000000000000000000'
    assert d.any(np.float32(0.1)) == '0.1'
    assert d.any(True) == 'True'
    assert d.any(1 + 2j) == '(1+2j)'


def test_strings():
    """Short strings flatten, multi-line strings otherwise render literally"""
    assert Dumper().any('abc') == '"abc"'
    assert Dumper().any('a"b') == '"a"b"'
    assert Dumper().any('a\nb') == 'a\nb'
    assert Dumper(flat_strings=10).any('a\nb') == '"a\\nb"'
    assert Dumper(flat_strings=2).any('a\nb') == 'a\nb'
    assert Dumper(flat=True).any('a"b') == '"a\\"b"'


def test_levels():
    assert simple_dumper(Dumper(), 2, Value(1)) == '    1'
    assert Dumper(indent=1, tab_width=4).value(Value(1), 1) == ' ' * 8 + '1'
    assert simple_dumper(Dumper(), 0, Value([1])) == VAL_ERR_USAGE
    assert nil_dumper(Dumper(), 0, Value(1)) == VAL_ERR_USAGE
    assert record_dumper(Dumper(), 1, Value(1)) == '  ' + VAL_ERR_USAGE


def test_nil():
    assert Dumper().any(None) == 'None'
    assert Dumper().any(ABSENT) == '<absent>'


def test_records():
    assert Dumper().any(_Point(1, 2)) == '_Point(\n  x=1,\n  y=2,\n)'
    assert Dumper(flat=True).any(_Point(1, 2)) == '_Point(x=1, y=2)'
    assert Dumper(flat=True, indent=1).any(_Point(1, 2)) == '  _Point(x=1, y=2)'


def test_sequences():
    assert Dumper().any([1, [2, 3]]) == '[\n  1,\n  [\n    2,\n    3,\n  ],\n]'
    assert Dumper(indent=1).any([1]) == '  [\n    1,\n  ]'
    assert Dumper().any([]) == '[]'
    assert Dumper(flat=True).any([1, [2, 3]]) == '[1, [2, 3]]'
    assert Dumper(flat=True).any((1,)) == '(1,)'
    assert Dumper(flat=True).any((1, 2)) == '(1, 2)'
    assert Dumper(flat=True).any(()) == '()'
    assert Dumper(flat=True).any(deque([1, 2])) == 'deque([1, 2])'
    assert Dumper(flat=True).any(np.array([1, 2])) == 'ndarray([1, 2])'
    assert Dumper().any(b'ab') == "b'ab'"


def test_mappings():
    """Mappings render with their keys in canonical order"""
    assert Dumper(flat=True).any({'b': 1, 'a': 2}) == '{"a": 2, "b": 1}'
    assert Dumper().any({'b': 1}) == '{\n  "b": 1,\n}'
    assert Dumper().any({}) == '{}'
    assert Dumper(flat=True).any(OrderedDict(a=1)) == 'OrderedDict({"a": 1})'
    assert Dumper().any({'k': [1]}) == '{\n  "k": [\n    1,\n  ],\n}'


def test_interfaces():
    assert Dumper().any(_Color.RED) == '_Color.RED'
    assert Dumper(flat=True).any(UserList([1])) == 'UserList([1])'


def test_pointers():
    """Weak references render their referent, or its address"""
    p = _Point(1, 2)
    ref = weakref.ref(p)
    assert Dumper(flat=True).any(ref) == '_Point(x=1, y=2)'
    assert Dumper(show_addresses=True).any(ref) == '<0x%x>' % id(p)

    tmp = _Point(0, 0)
    dead = weakref.ref(tmp)
    del tmp
    assert Dumper().any(dead) == 'None'
    assert pointer_dumper(Dumper(show_addresses=True), 0, Value(dead)) == '<0x0>'


def test_custom_renderers():
    """Renderers registered for an exact type win over kind based rendering"""
    d = Dumper(flat=True).with_renderer(int, lambda dmp, lvl, val: dmp.pad(lvl) + 'INT')
    assert d.any([1, 2, True]) == '[INT, INT, True]'
    assert dict(Dumper().renderers) == {}


def test_byte_dumper():
    assert byte_dumper(Dumper(), 0, Value(np.uint8(0x61))) == "0x61 ('a')"
    assert byte_dumper(Dumper(), 0, Value(np.uint8(0x01))) == '0x01'
    assert byte_dumper(Dumper(), 1, Value(np.uint8(0x7f))) == '  0x7f'
    assert byte_dumper(Dumper(), 0, Value(97)) == VAL_ERR_USAGE


def test_other():
    """Everything else falls back on a length limited repr()"""
    assert Dumper().any({1, 2}) == '{1, 2}'
    text = Dumper().any(set(range(1000)))
    assert text.endswith('...')
    assert len(text) == 1003


def test_cycles():
    a = [1]
    a.append(a)
    assert Dumper(flat=True).any(a) == '[1, <cycle>]'


def test_keys():
    assert Dumper().key('a') == '"a"'
    assert Dumper(indent=3).key((1, 'a')) == '(1, "a")'


def test_bad_config():
    with pytest.raises(ValueError):
        Dumper(indent=-1)
    with pytest.raises(ValueError):
        Dumper(tab_width=-2)


def test_renderer_tables_are_read_only():
    """Renderer tables are never shared or changed in place between copies of a Dumper"""
    base = Dumper()
    derived = base.with_renderer(int, simple_dumper)
    assert dict(base.renderers) == {}
    assert derived.renderers[int] is simple_dumper
    with pytest.raises(TypeError):
        derived.renderers[str] = simple_dumper

    table = {int: simple_dumper}
    d = Dumper(renderers=table)
    table[str] = simple_dumper
    assert list(d.renderers) == [int]
    with pytest.raises(TypeError):
        d.renderers[str] = simple_dumper
