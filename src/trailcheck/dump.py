"""
Renders arbitrary python values into display strings for mismatch diagnostics.

Rendering never takes part in deciding equality. Every renderer has the signature ``(dmp, lvl, val) -> str`` where
`val` is a :class:`~trailcheck.pytypes.Value` and the first line of the returned string is indented for level `lvl`.
"""

import dataclasses
import enum
import json
import numpy as np
from types import MappingProxyType
from .pytypes import ABSENT, Kind, Value, field_value, record_fields, sequence_items, type_name, unwrap
from .trail import canonical_keys
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Callable, FrozenSet, Mapping

    Renderer = Callable[['Dumper', int, Value], str]


# Returned by a renderer when it is called with a value of a kind it does not handle
VAL_ERR_USAGE = '<dump-usage-error>'

# Placeholder for an address when addresses are not shown
VAL_ADDR = '<addr>'

DEFAULT_TAB_WIDTH = 2

_MAX_REPR_LEN = 1000


@dataclasses.dataclass(frozen=True)
class Dumper:
    """
    Rendering configuration.

    Args:
        flat (bool): if True, everything renders on one line
        flat_strings (int): strings no longer than this render escaped on a single line. 0 disables it
        indent (int): number of tabs every rendered line starts with
        tab_width (int): number of spaces in one tab
        show_addresses (bool): if True, reference-like values render as their address instead of their content
        renderers (Mapping[type, Renderer]): renderers consulted by exact type before the kind-based ones
    """
    flat: bool = False
    flat_strings: int = 0
    indent: int = 0
    tab_width: int = DEFAULT_TAB_WIDTH
    show_addresses: bool = False
    renderers: 'Mapping[type, Renderer]' = dataclasses.field(default_factory=lambda: MappingProxyType({}))
    visiting: 'FrozenSet[int]' = dataclasses.field(default=frozenset(), repr=False, compare=False)

    def __post_init__(self):
        for name in ('flat_strings', 'indent', 'tab_width'):
            if getattr(self, name) < 0:
                raise ValueError("`%s` must be non-negative, not %d" % (name, getattr(self, name)))
        if not isinstance(self.renderers, MappingProxyType):
            object.__setattr__(self, 'renderers', MappingProxyType(dict(self.renderers)))

    def with_renderer(self, typ: 'type', renderer: 'Renderer') -> 'Dumper':
        renderers = dict(self.renderers)
        renderers[typ] = renderer
        return dataclasses.replace(self, renderers=MappingProxyType(renderers))

    def any(self, obj: 'Any') -> 'str':
        """Renders `obj`, which may be a raw object or a Value"""
        return self.value(obj if isinstance(obj, Value) else Value(obj), 0)

    def value(self, val: 'Value', lvl: 'int') -> 'str':
        renderer = self.renderers.get(val.type)
        if renderer is None:
            renderer = _KIND_RENDERERS.get(val.kind, other_dumper)
        return renderer(self, lvl, val)

    def key(self, obj: 'Any') -> 'str':
        """Renders a mapping key on a single line with no indentation"""
        return dataclasses.replace(self, flat=True, indent=0).value(Value(obj), 0)

    def pad(self, lvl: 'int') -> 'str':
        return ' ' * (self.tab_width * (self.indent + lvl))

    def _enter(self, obj):
        return dataclasses.replace(self, visiting=self.visiting | {id(obj)})


def _strip(text, pad):
    return text[len(pad):] if text.startswith(pad) else text


def _inline(dmp, val):
    return _strip(dmp.value(val, 0), dmp.pad(0))


def _block(dmp, lvl, opening, closing, entries):
    """Joins already rendered entries between `opening` and `closing`, flat or one entry per line"""
    pad = dmp.pad(lvl)
    if not entries:
        return pad + opening + closing
    if dmp.flat:
        return pad + opening + ', '.join(entries) + closing
    child = dmp.pad(lvl + 1)
    lines = [pad + opening]
    lines.extend('%s%s,' % (child, e) for e in entries)
    lines.append(pad + closing)
    return '\n'.join(lines)


def _entry(dmp, lvl, val):
    """Renders a container entry without its leading indentation"""
    if dmp.flat:
        return _inline(dmp, val)
    return _strip(dmp.value(val, lvl + 1), dmp.pad(lvl + 1))


def _address(dmp, val):
    if not dmp.show_addresses:
        return VAL_ADDR
    return '<0x%x>' % val.address


def simple_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    """Renders bool, integer, float, complex and string kinds"""
    obj = val.obj
    kind = val.kind
    if kind is Kind.STRING:
        if dmp.flat or (0 < dmp.flat_strings and len(obj) <= dmp.flat_strings):
            text = json.dumps(str(obj), ensure_ascii=False)
        elif '\n' in obj:
            text = obj
        else:
            text = '"%s"' % obj
    elif kind is Kind.FLOAT:
        text = np.format_float_positional(obj, unique=True, trim='-')
    elif kind in (Kind.INT, Kind.UINT):
        text = '%d' % obj
    elif kind in (Kind.BOOL, Kind.COMPLEX):
        text = str(obj)
    else:
        text = VAL_ERR_USAGE
    return dmp.pad(lvl) + text


def chan_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    if val.kind is not Kind.CHAN:
        return dmp.pad(lvl) + VAL_ERR_USAGE
    return '%s(%s)(%s)' % (dmp.pad(lvl), type_name(val.type), _address(dmp, val))


def func_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    if val.kind is not Kind.FUNC:
        return dmp.pad(lvl) + VAL_ERR_USAGE
    return '%s<func>(%s)' % (dmp.pad(lvl), _address(dmp, val))


def pointer_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    """Renders a weak reference as its referent, or as the referent's address"""
    if val.kind is not Kind.POINTER:
        return dmp.pad(lvl) + VAL_ERR_USAGE
    if dmp.show_addresses:
        return '%s<0x%x>' % (dmp.pad(lvl), 0 if val.is_nil else id(val.obj()))
    if val.is_nil:
        return dmp.pad(lvl) + 'None'
    return dmp.value(Value(val.obj()), lvl)


def record_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    if val.kind is not Kind.RECORD:
        return dmp.pad(lvl) + VAL_ERR_USAGE
    obj = val.obj
    if id(obj) in dmp.visiting:
        return dmp.pad(lvl) + '<cycle>'

    inner = dmp._enter(obj)
    entries = []
    for name in record_fields(obj):
        field = field_value(obj, name)
        if field is ABSENT:
            continue
        entries.append('%s=%s' % (name, _entry(inner, lvl, Value(field))))
    return _block(dmp, lvl, type(obj).__name__ + '(', ')', entries)


def sequence_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    if val.kind is not Kind.SEQUENCE:
        return dmp.pad(lvl) + VAL_ERR_USAGE
    obj = val.obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return dmp.pad(lvl) + repr(bytes(obj))
    if id(obj) in dmp.visiting:
        return dmp.pad(lvl) + '<cycle>'

    inner = dmp._enter(obj)
    entries = [_entry(inner, lvl, Value(item)) for item in sequence_items(obj)]
    if type(obj) is list:
        return _block(dmp, lvl, '[', ']', entries)
    if type(obj) is tuple:
        if len(entries) == 1 and dmp.flat:
            return '%s(%s,)' % (dmp.pad(lvl), entries[0])
        return _block(dmp, lvl, '(', ')', entries)
    return _block(dmp, lvl, type(obj).__name__ + '([', '])', entries)


def mapping_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    """Renders a mapping with its keys in canonical order"""
    if val.kind is not Kind.MAPPING:
        return dmp.pad(lvl) + VAL_ERR_USAGE
    obj = val.obj
    if id(obj) in dmp.visiting:
        return dmp.pad(lvl) + '<cycle>'

    inner = dmp._enter(obj)
    entries = ['%s: %s' % (text, _entry(inner, lvl, Value(obj[key])))
        for text, key in canonical_keys(obj.keys(), inner.key)]
    if type(obj) is dict:
        return _block(dmp, lvl, '{', '}', entries)
    return _block(dmp, lvl, type(obj).__name__ + '({', '})', entries)


def interface_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    """Renders enum members by name, and other wrappers around their contained value"""
    if val.kind is not Kind.INTERFACE:
        return dmp.pad(lvl) + VAL_ERR_USAGE
    obj = val.obj
    if isinstance(obj, enum.Enum):
        return '%s%s.%s' % (dmp.pad(lvl), type(obj).__name__, obj.name)
    contained = _strip(dmp.value(Value(unwrap(obj)), lvl), dmp.pad(lvl))
    return '%s%s(%s)' % (dmp.pad(lvl), type(obj).__name__, contained)


def nil_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    if val.kind is not Kind.INVALID:
        return dmp.pad(lvl) + VAL_ERR_USAGE
    return dmp.pad(lvl) + ('<absent>' if val.obj is ABSENT else 'None')


def other_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    """Falls back on repr(), limited in length"""
    text = repr(val.obj)
    if len(text) > _MAX_REPR_LEN:
        text = text[:_MAX_REPR_LEN] + '...'
    return dmp.pad(lvl) + text


_KIND_RENDERERS = {
    Kind.INVALID: nil_dumper,
    Kind.BOOL: simple_dumper,
    Kind.INT: simple_dumper,
    Kind.UINT: simple_dumper,
    Kind.FLOAT: simple_dumper,
    Kind.COMPLEX: simple_dumper,
    Kind.STRING: simple_dumper,
    Kind.POINTER: pointer_dumper,
    Kind.RECORD: record_dumper,
    Kind.SEQUENCE: sequence_dumper,
    Kind.MAPPING: mapping_dumper,
    Kind.INTERFACE: interface_dumper,
    Kind.FUNC: func_dumper,
    Kind.CHAN: chan_dumper,
    Kind.OTHER: other_dumper,
}
