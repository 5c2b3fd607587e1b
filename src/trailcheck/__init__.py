from .dump import VAL_ERR_USAGE, Dumper
from .equality import EqualityCheckingError, assert_equal, assert_not_equal, equal, not_equal
from .notice import EqualityError, Notice, join
from .options import (Options, flat, flatten_strings, indent, register_renderer, resolve, show_addresses, skip_trail,
    skip_unexported, tab_width, trail_checker, type_checker, with_options, with_trail)
from .pytypes import ABSENT, Kind, Value

__all__ = [
    'equal', 'not_equal', 'assert_equal', 'assert_not_equal', 'EqualityError', 'EqualityCheckingError', 'Notice',
    'join', 'Options', 'resolve', 'skip_trail', 'skip_unexported', 'trail_checker', 'type_checker', 'with_trail',
    'with_options', 'show_addresses', 'indent', 'tab_width', 'flatten_strings', 'flat', 'register_renderer', 'Dumper',
    'VAL_ERR_USAGE', 'Value', 'Kind', 'ABSENT',
]
