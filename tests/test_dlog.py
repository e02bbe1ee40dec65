import pytest

from fairvote.dlog import BabyStepTable, recover_count
from fairvote.elgamal import to_exponential
from fairvote.errors import RecoveryBoundExceeded


@pytest.mark.parametrize("bound", [1, 2, 16, 17, 50])
def test_recovers_every_value_below_bound(params, bound):
    table = BabyStepTable(params, bound)
    for m in range(bound):
        assert table.recover(to_exponential(params, m)) == m


@pytest.mark.parametrize("bound", [1, 16, 17, 50])
def test_values_at_or_above_bound_are_reported(params, bound):
    table = BabyStepTable(params, bound)
    for m in (bound, bound + 1, bound * 3):
        with pytest.raises(RecoveryBoundExceeded) as exc:
            table.recover(to_exponential(params, m))
        assert exc.value.bound == bound


def test_value_outside_exponent_range_is_reported(params):
    with pytest.raises(RecoveryBoundExceeded):
        recover_count(params.p - 1, params, 100)


def test_default_bound_handles_large_counts(params):
    assert recover_count(to_exponential(params, 4_999_999), params) == 4_999_999
    assert recover_count(to_exponential(params, 1234), params) == 1234


def test_bound_must_be_positive(params):
    with pytest.raises(ValueError):
        BabyStepTable(params, 0)


def test_recovery_bound_exceeded_is_not_a_value_error(params):
    with pytest.raises(RecoveryBoundExceeded) as exc:
        recover_count(to_exponential(params, 10), params, 10)
    assert not isinstance(exc.value, ValueError)
