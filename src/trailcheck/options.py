"""
Comparison options.

An :class:`Options` value is resolved once per top-level call from a list of option functions, then copied (never
shared) into every recursive call with only its trail changed. Option functions take an Options and return a new one.
"""

import dataclasses
from types import MappingProxyType
from .dump import Dumper
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Callable, FrozenSet, Mapping, Optional, Tuple
    from .dump import Renderer

    Checker = Callable[..., Optional[Exception]]
    Option = Callable[['Options'], 'Options']


# Strings up to this length render escaped on a single line in diagnostics
DEFAULT_FLAT_STRINGS = 200


def _empty():
    return MappingProxyType({})


@dataclasses.dataclass(frozen=True)
class Options:
    """
    Resolved comparison configuration for one recursion level.

    Args:
        dumper (Dumper): renders values in mismatch diagnostics
        trail (str): location of the values currently being compared
        skip_trails (Tuple[str, ...]): trails at which comparison stops and reports equal
        skip_unexported (bool): if True, private attributes are treated as equal instead of reported
        trail_checkers (Mapping[str, Checker]): comparators that replace the default rules at one exact trail
        type_checkers (Mapping[type, Checker]): comparators that replace the default rules for one exact type
        visiting (FrozenSet[tuple]): (id(want), id(have)) pairs on the current recursion path
    """
    dumper: 'Dumper' = dataclasses.field(default_factory=lambda: Dumper(flat_strings=DEFAULT_FLAT_STRINGS))
    trail: str = ''
    skip_trails: 'Tuple[str, ...]' = ()
    skip_unexported: bool = False
    trail_checkers: 'Mapping[str, Checker]' = dataclasses.field(default_factory=_empty)
    type_checkers: 'Mapping[type, Checker]' = dataclasses.field(default_factory=_empty)
    visiting: 'FrozenSet[Tuple[int, int]]' = dataclasses.field(default=frozenset(), repr=False)

    def at(self, trail: 'str') -> 'Options':
        """Returns a copy of these options at another trail"""
        return dataclasses.replace(self, trail=trail)


def resolve(*opts: 'Option') -> 'Options':
    """Applies option functions, in order, on top of the default options"""
    ops = Options()
    for opt in opts:
        if not callable(opt):
            raise TypeError("options must be callable, not %s" % repr(type(opt).__name__))
        ops = opt(ops)
    return ops


def _check_trail(trail):
    if not isinstance(trail, str):
        raise TypeError("`trail` must be str, not %s" % repr(type(trail).__name__))


def _check_width(name, width):
    if not isinstance(width, int) or isinstance(width, bool):
        raise TypeError("`%s` must be int, not %s" % (name, repr(type(width).__name__)))
    if width < 0:
        raise ValueError("`%s` must be non-negative, not %d" % (name, width))


def _with_dumper(**changes):
    def opt(ops):
        return dataclasses.replace(ops, dumper=dataclasses.replace(ops.dumper, **changes))
    return opt


def skip_trail(*trails: 'str') -> 'Option':
    """Skips comparison at each of the given exact trails"""
    for trail in trails:
        _check_trail(trail)

    def opt(ops):
        return dataclasses.replace(ops, skip_trails=ops.skip_trails + tuple(trails))
    return opt


def skip_unexported() -> 'Option':
    """Treats private attributes (names starting with '_') as equal instead of reporting them"""
    def opt(ops):
        return dataclasses.replace(ops, skip_unexported=True)
    return opt


def trail_checker(trail: 'str', checker: 'Checker') -> 'Option':
    """
    Uses `checker` instead of the default rules at exactly `trail`.

    The checker is called as ``checker(want, have, opt)`` with the raw objects and exactly one option,
    ``with_options(ops)`` carrying the options at that trail (``resolve(opt).trail`` is the trail). It returns None
    when the values are equal, or an error describing why they are not.
    """
    _check_trail(trail)
    if not callable(checker):
        raise TypeError("`checker` must be callable, not %s" % repr(type(checker).__name__))

    def opt(ops):
        checkers = dict(ops.trail_checkers)
        checkers[trail] = checker
        return dataclasses.replace(ops, trail_checkers=MappingProxyType(checkers))
    return opt


def type_checker(typ: 'type', checker: 'Checker') -> 'Option':
    """Uses `checker` instead of the default rules for values of exactly type `typ`"""
    if not isinstance(typ, type):
        raise TypeError("`typ` must be a type, not %s" % repr(type(typ).__name__))
    if not callable(checker):
        raise TypeError("`checker` must be callable, not %s" % repr(type(checker).__name__))

    def opt(ops):
        checkers = dict(ops.type_checkers)
        checkers[typ] = checker
        return dataclasses.replace(ops, type_checkers=MappingProxyType(checkers))
    return opt


def with_trail(trail: 'str') -> 'Option':
    """Starts comparison at `trail` instead of the root"""
    _check_trail(trail)

    def opt(ops):
        return ops.at(trail)
    return opt


def with_options(options: 'Options') -> 'Option':
    """Replaces all options with `options`"""
    if not isinstance(options, Options):
        raise TypeError("`options` must be Options, not %s" % repr(type(options).__name__))

    def opt(ops):
        return options
    return opt


def show_addresses() -> 'Option':
    """Renders reference-like values as their address"""
    return _with_dumper(show_addresses=True)


def indent(width: 'int') -> 'Option':
    """Starts every rendered line with `width` tabs"""
    _check_width('width', width)
    return _with_dumper(indent=width)


def tab_width(width: 'int') -> 'Option':
    """Sets the number of spaces in one rendering tab"""
    _check_width('width', width)
    return _with_dumper(tab_width=width)


def flatten_strings(threshold: 'int') -> 'Option':
    """Renders strings no longer than `threshold` escaped on a single line. 0 disables it"""
    _check_width('threshold', threshold)
    return _with_dumper(flat_strings=threshold)


def flat() -> 'Option':
    """Renders every value on a single line"""
    return _with_dumper(flat=True)


def register_renderer(typ: 'type', renderer: 'Renderer') -> 'Option':
    """Renders values of exactly type `typ` with `renderer`, before any kind-based rendering"""
    if not isinstance(typ, type):
        raise TypeError("`typ` must be a type, not %s" % repr(type(typ).__name__))
    if not callable(renderer):
        raise TypeError("`renderer` must be callable, not %s" % repr(type(renderer).__name__))

    def opt(ops):
        return dataclasses.replace(ops, dumper=ops.dumper.with_renderer(typ, renderer))
    return opt
