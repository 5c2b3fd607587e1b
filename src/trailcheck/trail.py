"""
Location paths ("trails") into nested values, eg: ``Order.Lines[2].Tags["x"]``.

Trails are plain immutable strings. The root trail is the empty string.
"""

from operator import itemgetter
from typing import TYPE_CHECKING, NamedTuple


if TYPE_CHECKING:
    from typing import Any, Callable, Iterable, List, Tuple, Union


class Field(NamedTuple):
    name: str


class Index(NamedTuple):
    index: int


class Key(NamedTuple):
    text: str


def extend(base: 'str', segment: 'Union[Field, Index, Key]') -> 'str':
    """Returns `base` extended with one field, index or key segment"""
    if isinstance(segment, Field):
        return segment.name if base == '' else '%s.%s' % (base, segment.name)
    if isinstance(segment, Index):
        return '%s[%d]' % (base, segment.index)
    if isinstance(segment, Key):
        return '%s[%s]' % (base, segment.text)
    raise TypeError("`segment` must be a Field, Index or Key, not %s" % repr(type(segment).__name__))


def canonical_keys(keys: 'Iterable[Any]', render: 'Callable[[Any], str]') -> 'List[Tuple[str, Any]]':
    """
    Returns (canonical string, key) pairs sorted by their canonical string.

    The canonical string is both the sort key and the trail segment of that key. Distinct keys which render to the
    same string keep their relative input order, and share the same trail segment.
    """
    return sorted(((render(k), k) for k in keys), key=itemgetter(0))
