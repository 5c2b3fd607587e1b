"""
Structured mismatch diagnostics and their aggregation into one reportable error.
"""

from typing import TYPE_CHECKING
from typing_extensions import Self


if TYPE_CHECKING:
    from typing import Any, Iterable, Iterator, List, Optional, Tuple


def _format(fmt: 'str', args: 'Tuple[Any, ...]') -> 'str':
    return fmt % args if args else fmt


class Notice(Exception):
    """
    One point of divergence between two values.

    Rendered as the header followed by aligned rows: the trail, any rows prepended before the want/have pair, want,
    have, then any rows appended after it. Builder methods return the notice itself so they can be chained.
    """

    def __init__(self, header: 'str', *args: 'Any'):
        header = _format(header, args)
        super().__init__(header)
        self.header = header
        self.trail = ''
        self.want: 'Optional[str]' = None
        self.have: 'Optional[str]' = None
        self.before: 'List[Tuple[str, str]]' = []
        self.after: 'List[Tuple[str, str]]' = []

    def with_header(self, header: 'str', *args: 'Any') -> 'Self':
        self.header = _format(header, args)
        self.args = (self.header,)
        return self

    def with_trail(self, trail: 'str') -> 'Self':
        self.trail = trail
        return self

    def with_want(self, fmt: 'str', *args: 'Any') -> 'Self':
        self.want = _format(fmt, args)
        return self

    def with_have(self, fmt: 'str', *args: 'Any') -> 'Self':
        self.have = _format(fmt, args)
        return self

    def append(self, name: 'str', fmt: 'str', *args: 'Any') -> 'Self':
        """Adds a row below the want/have pair"""
        self.after.append((name, _format(fmt, args)))
        return self

    def prepend(self, name: 'str', fmt: 'str', *args: 'Any') -> 'Self':
        """Adds a row above the want/have pair, and above any rows prepended before it"""
        self.before.insert(0, (name, _format(fmt, args)))
        return self

    def rows(self) -> 'List[Tuple[str, str]]':
        """Returns every (label, value) row in display order"""
        rows = [('trail', self.trail)] if self.trail else []
        rows.extend(self.before)
        if self.want is not None:
            rows.append(('want', self.want))
        if self.have is not None:
            rows.append(('have', self.have))
        rows.extend(self.after)
        return rows

    def __str__(self):
        rows = self.rows()
        if not rows:
            return self.header

        width = max(len(name) for name, _ in rows)
        lines = [self.header + ':']
        for name, value in rows:
            value = value.replace('\n', '\n' + ' ' * (width + 4))
            lines.append('  %s: %s' % (name.rjust(width), value))
        return '\n'.join(lines)

    def __repr__(self):
        return '%s(%r, trail=%r)' % (type(self).__name__, self.header, self.trail)


class EqualityError(Exception):
    """Every mismatch found by one comparison, in discovery order"""

    def __init__(self, notices: 'Iterable[Exception]'):
        self.notices: 'List[Exception]' = list(notices)
        super().__init__(self.notices)

    def __str__(self):
        return '\n'.join(str(n) for n in self.notices)

    def __len__(self):
        return len(self.notices)

    def __iter__(self) -> 'Iterator[Exception]':
        return iter(self.notices)


def unwrap(err: 'Optional[Exception]') -> 'List[Exception]':
    """Returns the individual errors carried by `err`"""
    if err is None:
        return []
    if isinstance(err, EqualityError):
        return list(err.notices)
    return [err]


def join(errors: 'Iterable[Optional[Exception]]') -> 'Optional[EqualityError]':
    """Merges errors into one EqualityError, or returns None if there are none"""
    notices = [n for err in errors for n in unwrap(err)]
    if not notices:
        return None
    return EqualityError(notices)
