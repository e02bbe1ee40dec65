import itertools
import threading

import pytest

from fairvote.ballot import encrypt_ballot
from fairvote.elgamal import Ciphertext, decrypt, to_exponential
from fairvote.errors import BallotShapeError
from fairvote.tally import RunningTally, Tally, empty_tally, fold, fold_all, merge


@pytest.fixture(scope="module")
def ballots(params):
    votes = [
        [[1, 0], [0, 0, 1]],
        [[0, 1], [1, 0, 0]],
        [[1, 0], [1, 0, 0]],
        [[1, 0], [0, 1, 0]],
    ]
    return [encrypt_ballot(params, v) for v in votes]


def test_empty_tally_is_identity():
    tally = empty_tally((2, 3))
    assert tally.shape() == (2, 3)
    assert all(ct == Ciphertext(1, 1) for row in tally.entries for ct in row)


def test_first_fold_equals_ballot_ciphertexts(params, ballots):
    tally = fold(empty_tally((2, 3)), ballots[0], params)
    expected = tuple(tuple(opt.ciphertext for opt in row) for row in ballots[0].entries)
    assert tally.entries == expected


def test_fold_counts_votes(params, private_key, ballots):
    tally = fold_all(empty_tally((2, 3)), ballots, params)
    counts = [[3, 1], [2, 1, 1]]
    for t_row, c_row in zip(tally.entries, counts):
        for ct, count in zip(t_row, c_row):
            assert decrypt(ct, private_key) == to_exponential(params, count)


def test_fold_is_order_independent(params, ballots):
    reference = fold_all(empty_tally((2, 3)), ballots, params)
    for perm in itertools.permutations(ballots):
        assert fold_all(empty_tally((2, 3)), perm, params) == reference


def test_fold_does_not_mutate_input(params, ballots):
    start = empty_tally((2, 3))
    fold(start, ballots[0], params)
    assert start == empty_tally((2, 3))


def test_merge_of_partial_tallies(params, ballots):
    left = fold_all(empty_tally((2, 3)), ballots[:2], params)
    right = fold_all(empty_tally((2, 3)), ballots[2:], params)
    assert merge(left, right, params) == fold_all(empty_tally((2, 3)), ballots, params)
    assert merge(left, right, params) == merge(right, left, params)


def test_shape_mismatch_is_rejected(params, ballots):
    with pytest.raises(BallotShapeError):
        fold(empty_tally((2, 2)), ballots[0], params)
    with pytest.raises(BallotShapeError):
        fold(empty_tally((2,)), ballots[0], params)
    with pytest.raises(BallotShapeError):
        merge(empty_tally((2,)), empty_tally((3,)), params)


def test_tally_wire_format(params, ballots):
    tally = fold(empty_tally((2, 3)), ballots[1], params)
    data = tally.to_dict()
    assert [len(row) for row in data["entries"]] == [2, 3]
    assert Tally.from_dict(data) == tally


def test_running_tally_under_concurrent_folds(params, ballots):
    running = RunningTally(params, (2, 3))
    workers = [threading.Thread(target=running.fold, args=(b,)) for b in ballots * 5]
    for w in workers:
        w.start()
    for w in workers:
        w.join()
    assert running.count == len(ballots) * 5
    expected = fold_all(empty_tally((2, 3)), ballots * 5, params)
    assert running.snapshot() == expected
