"""
Tests for the trailcheck.trail file.
"""

import pytest
from trailcheck.trail import Field, Index, Key, canonical_keys, extend


def test_extend():
    assert extend('', Field('A')) == 'A'
    assert extend('A', Field('B')) == 'A.B'
    assert extend('A', Index(2)) == 'A[2]'
    assert extend('', Index(0)) == '[0]'
    assert extend('A', Key('"k"')) == 'A["k"]'
    assert extend('[0]', Field('x')) == '[0].x'


def test_extend_leaves_base_alone():
    """Siblings extending the same base each get their own trail"""
    base = 'Root'
    left, right = extend(base, Field('L')), extend(base, Field('R'))
    assert (base, left, right) == ('Root', 'Root.L', 'Root.R')


def test_extend_bad_segment():
    with pytest.raises(TypeError):
        extend('A', 'B')


def test_canonical_keys():
    """Keys sort by their rendered form, lexicographically"""
    assert canonical_keys([10, 2, 1], str) == [('1', 1), ('10', 10), ('2', 2)]
    assert canonical_keys([], str) == []


def test_canonical_keys_collisions():
    """Keys rendering identically keep their input order"""
    assert canonical_keys(['1', 1], str) == [('1', '1'), ('1', 1)]
    assert canonical_keys([1, '1'], str) == [('1', 1), ('1', '1')]
