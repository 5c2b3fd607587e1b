"""
Recursive structural equality with a diagnostic for every point of divergence.

Handled kinds (see :func:`~trailcheck.pytypes.kind_of` for how python types map onto them):
    - weak references (dereferenced transparently)
    - records: dataclasses, namedtuples, attrs classes and plain attribute-only objects, field by field
    - sequences: list, tuple, bytes-likes, numpy ndarray, deque, array, etc., index by index
    - mappings, key by key in canonical key order
    - enum members and collections.User* wrappers, by their contained value
    - bool, int, uint, float, complex and str, by value
    - functions and queues, by identity
    - falls back on built-in __eq__

Values of different types are never equal. Sequences and mappings of different lengths are reported once, without
descending into their elements. Everywhere else every mismatch is collected, depth first.
"""

import dataclasses
import logging
import numpy as np
from .dump import VAL_ERR_USAGE
from .notice import EqualityError, Notice, join, unwrap
from .options import resolve, with_options
from .pytypes import (ABSENT, CONTAINER_KINDS, SCALAR_KINDS, Kind, Value, field_value, identity, is_private,
    record_fields, same_storage, sequence_items, type_name)
from .pytypes import unwrap as unwrap_interface
from .trail import Field, Index, Key, canonical_keys, extend
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, List, Optional
    from .dump import Dumper
    from .options import Option, Options


logger = logging.getLogger(__name__)


def equal(want: 'Any', have: 'Any', *opts: 'Option') -> 'Optional[EqualityError]':
    """
    Recursively checks whether `want` and `have` are equal.

    Args:
        want (Any): the expected value
        have (Any): the actual value
        opts (Option): option functions, applied in order. See :mod:`trailcheck.options`

    Returns:
        Optional[EqualityError]: None if the values are equal, otherwise an error listing every mismatch found
    """
    ops = resolve(*opts)
    err = join(compare(Value(want), Value(have), ops))
    logger.debug("equal() at trail %r found %d mismatch(es)", ops.trail, 0 if err is None else len(err))
    return err


def not_equal(want: 'Any', have: 'Any', *opts: 'Option') -> 'Optional[EqualityError]':
    """Returns None if `want` and `have` are not equal, otherwise an error saying they unexpectedly were"""
    if equal(want, have, *opts) is not None:
        return None
    ops = resolve(*opts)
    return join([equal_error(Value(want), Value(have), ops).with_header("expected values not to be equal")])


def assert_equal(want: 'Any', have: 'Any', *opts: 'Option') -> 'None':
    """Like :func:`equal`, but raises the EqualityError"""
    err = equal(want, have, *opts)
    if err is not None:
        raise err


def assert_not_equal(want: 'Any', have: 'Any', *opts: 'Option') -> 'None':
    """Like :func:`not_equal`, but raises the EqualityError"""
    err = not_equal(want, have, *opts)
    if err is not None:
        raise err


def compare(want: 'Value', have: 'Value', ops: 'Options') -> 'List[Exception]':
    """
    Compares two values at `ops.trail` and returns every mismatch found. An empty list means equal.

    Called recursively; every call receives its own copy of the options.
    """
    if ops.trail in ops.skip_trails:
        logger.debug("trail %r <skipped>", ops.trail)
        return []

    if not want.is_valid and not have.is_valid:
        return []
    if not want.is_valid or not have.is_valid:
        return _mismatch(want, have, ops)

    if not want.accessible:
        if ops.skip_unexported:
            logger.debug("trail %r <skipped> (private)", ops.trail)
            return []
        return [Notice("cannot compare values").with_trail(ops.trail)
            .append('cause', 'value is a private attribute')
            .append('hint', 'use skip_trail or skip_unexported option to skip this field')]

    if want.type is not have.type:
        return _mismatch(want, have, ops)

    checker = ops.trail_checkers.get(ops.trail)
    if checker is None:
        checker = ops.type_checkers.get(want.type)
    if checker is not None:
        logger.debug("trail %r delegated to checker %r", ops.trail, checker)
        return _run_checker(checker, want, have, ops)

    if want.kind in CONTAINER_KINDS:
        pair = (id(want.obj), id(have.obj))
        if pair in ops.visiting:
            logger.debug("trail %r <cycle>", ops.trail)
            return []
        ops = dataclasses.replace(ops, visiting=ops.visiting | {pair})

    return _KIND_HANDLERS.get(want.kind, _compare_other)(want, have, ops)


def _run_checker(checker, want, have, ops):
    """Calls a user checker and returns its result as a list of errors"""
    try:
        result = checker(want.obj, have.obj, with_options(ops))
    except (EqualityError, Notice) as e:
        return unwrap(e)
    except Exception as e:
        raise EqualityCheckingError("Checker %r failed at trail %r" % (checker, ops.trail)) from e

    if result is not None and not isinstance(result, Exception):
        raise EqualityCheckingError("Checker %r must return None or an Exception, not %s"
            % (checker, repr(type(result).__name__)))
    return unwrap(result)


def _compare_pointer(want, have, ops):
    if want.is_nil and have.is_nil:
        return []
    if want.is_nil or have.is_nil:
        return _mismatch(want, have, ops)
    return compare(Value(want.obj()), Value(have.obj()), ops)


def _compare_record(want, have, ops):
    # Want side fields first, then the attributes only the have side carries
    names = record_fields(want.obj)
    names.extend(name for name in record_fields(have.obj) if name not in names)

    notices = []
    for name in names:
        w_field, h_field = field_value(want.obj, name), field_value(have.obj, name)
        if w_field is ABSENT and h_field is ABSENT:
            continue
        accessible = not is_private(name)
        if not accessible and ops.skip_unexported:
            logger.debug("trail %r <skipped> (private)", extend(ops.trail, Field(name)))
            continue
        notices.extend(compare(Value(w_field, accessible=accessible), Value(h_field, accessible=accessible),
            ops.at(extend(ops.trail, Field(name)))))
    return notices


def _compare_sequence(want, have, ops):
    w_len, h_len = len(want.obj), len(have.obj)
    if w_len != h_len:
        return [equal_error(want, have, ops).prepend('have len', '%d', h_len).prepend('want len', '%d', w_len)]
    if same_storage(want.obj, have.obj):
        return []

    w_items, h_items = sequence_items(want.obj), sequence_items(have.obj)
    notices = []
    for i in range(w_len):
        notices.extend(compare(Value(w_items[i]), Value(h_items[i]), ops.at(extend(ops.trail, Index(i)))))
    return notices


def _compare_mapping(want, have, ops):
    w_len, h_len = len(want.obj), len(have.obj)
    if w_len != h_len:
        return [equal_error(want, have, ops).prepend('have len', '%d', h_len).prepend('want len', '%d', w_len)]
    if same_storage(want.obj, have.obj):
        return []

    notices = []
    for text, key in canonical_keys(want.obj.keys(), ops.dumper.key):
        k_ops = ops.at(extend(ops.trail, Key(text)))
        if key not in have.obj:
            notices.append(equal_error(have, Value(ABSENT), k_ops))
            continue
        notices.extend(compare(Value(want.obj[key]), Value(have.obj[key]), k_ops))
    return notices


def _compare_interface(want, have, ops):
    return compare(Value(unwrap_interface(want.obj)), Value(unwrap_interface(have.obj)), ops)


def _compare_scalar(want, have, ops):
    if want.obj == have.obj:
        return []
    return _mismatch(want, have, ops)


def _compare_identity(want, have, ops):
    if identity(want) == identity(have):
        return []
    return _mismatch(want, have, ops)


def _compare_other(want, have, ops):
    """Falls back on built-in __eq__"""
    try:
        if bool(want.obj == have.obj):
            return []
    except Exception as e:
        raise EqualityCheckingError("Could not determine equality between objects at trail %r\nwant: %s\nhave: %s"
            % (ops.trail, ops.dumper.any(want), ops.dumper.any(have))) from e
    return _mismatch(want, have, ops)


_KIND_HANDLERS = {
    Kind.POINTER: _compare_pointer,
    Kind.RECORD: _compare_record,
    Kind.SEQUENCE: _compare_sequence,
    Kind.MAPPING: _compare_mapping,
    Kind.INTERFACE: _compare_interface,
    Kind.FUNC: _compare_identity,
    Kind.CHAN: _compare_identity,
    Kind.OTHER: _compare_other,
}
_KIND_HANDLERS.update((kind, _compare_scalar) for kind in SCALAR_KINDS)


def _mismatch(want, have, ops):
    return [equal_error(want, have, ops)]


def _type_label(val):
    return '<absent>' if val.obj is ABSENT else type_name(val.type)


def equal_error(want: 'Value', have: 'Value', ops: 'Options') -> 'Notice':
    """Returns the notice for two values that are not equal at `ops.trail`"""
    dumper = ops.dumper
    if np.uint8 not in dumper.renderers:
        dumper = dumper.with_renderer(np.uint8, byte_dumper)

    logger.debug("mismatch at trail %r", ops.trail)
    notice = Notice("expected values to be equal").with_trail(ops.trail) \
        .with_want('%s', dumper.any(want)).with_have('%s', dumper.any(have))

    w_type, h_type = _type_label(want), _type_label(have)
    if w_type != h_type:
        notice.append('want type', '%s', w_type).append('have type', '%s', h_type)
    return notice


def byte_dumper(dmp: 'Dumper', lvl: 'int', val: 'Value') -> 'str':
    """Renders a single byte as hex, along with the character when it is printable"""
    if not isinstance(val.obj, np.uint8):
        return dmp.pad(lvl) + VAL_ERR_USAGE
    b = int(val.obj)
    if 0x20 <= b < 0x7f:
        return dmp.pad(lvl) + "0x%02x ('%s')" % (b, chr(b))
    return dmp.pad(lvl) + '0x%02x' % b


class EqualityCheckingError(Exception):
    """Error raised whenever there is an unexpected problem attempting to check equality between two objects"""
