from dataclasses import replace

import pytest

from fairvote.ballot_proof import (
    ORProof,
    create_or_proof,
    prove_choice,
    verify_or_proof,
    verify_or_proof_dict,
)
from fairvote.elgamal import Ciphertext, encrypt_choice
from fairvote.errors import ParameterIntegrityError, RangeError
from fairvote.params import GroupParameters


@pytest.mark.parametrize("choice", [0, 1])
def test_valid_proof_verifies(params, choice):
    proof = create_or_proof(params, choice)
    assert verify_or_proof(params, proof) is True
    assert verify_or_proof_dict(params, proof.to_dict()) is True


@pytest.mark.parametrize("choice", [0, 1])
@pytest.mark.parametrize("field", ["c0", "s0", "c1", "s1"])
def test_tampered_scalar_fails(params, choice, field):
    proof = create_or_proof(params, choice)
    value = getattr(proof, field)
    tampered = replace(proof, **{field: (value + 1) % params.q})
    assert verify_or_proof(params, tampered) is False


@pytest.mark.parametrize("component", ["alpha", "beta"])
def test_tampered_ciphertext_fails(params, component):
    proof = create_or_proof(params, 1)
    ct = proof.ciphertext
    value = getattr(ct, component)
    tampered_ct = replace(ct, **{component: (value * params.g) % params.p})
    assert verify_or_proof(params, replace(proof, ciphertext=tampered_ct)) is False


def test_proof_cannot_be_replayed_on_another_ciphertext(params):
    proof = create_or_proof(params, 0)
    other = encrypt_choice(params, 0).ciphertext
    assert verify_or_proof(params, replace(proof, ciphertext=other)) is False


def test_encryption_of_two_cannot_be_proven(params):
    # a cheating voter encrypting g^2 and running the prover for either bit
    encrypted = encrypt_choice(params, 1)
    doubled = Ciphertext(
        alpha=encrypted.ciphertext.alpha,
        beta=(encrypted.ciphertext.beta * params.g) % params.p,
    )
    forged = replace(encrypted, ciphertext=doubled)
    for choice in (0, 1):
        with pytest.raises(RangeError):
            prove_choice(params, forged, choice)


def test_swapping_slots_fails(params):
    proof = create_or_proof(params, 1)
    swapped = replace(proof, c0=proof.c1, s0=proof.s1, c1=proof.c0, s1=proof.s0)
    assert verify_or_proof(params, swapped) is False


def test_fresh_randomness_per_proof(params):
    a = create_or_proof(params, 1)
    b = create_or_proof(params, 1)
    assert a.ciphertext != b.ciphertext
    assert {a.c0, a.c1}.isdisjoint({b.c0, b.c1})
    assert {a.s0, a.s1}.isdisjoint({b.s0, b.s1})


def test_out_of_range_values_fail(params):
    proof = create_or_proof(params, 0)
    assert verify_or_proof(params, replace(proof, c0=proof.c0 + params.q)) is False
    assert verify_or_proof(params, replace(proof, ciphertext=Ciphertext(alpha=0, beta=1))) is False
    assert verify_or_proof(params, replace(proof, ciphertext=Ciphertext(alpha=params.p, beta=1))) is False


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("c0"),
        lambda d: d.update(s1="not a number"),
        lambda d: d.update(c1=-3),
        lambda d: d.update(encrypted_choice={"alfa": "1"}),
        lambda d: d.update(encrypted_choice="12"),
    ],
)
def test_malformed_proof_dict_is_rejected_not_raised(params, mutate):
    data = create_or_proof(params, 1).to_dict()
    mutate(data)
    assert verify_or_proof_dict(params, data) is False


def test_non_dict_proof_is_rejected(params):
    assert verify_or_proof_dict(params, None) is False
    assert verify_or_proof_dict(params, ["c0"]) is False


def test_wire_format(params):
    data = create_or_proof(params, 0).to_dict()
    assert set(data) == {"c0", "s0", "c1", "s1", "encrypted_choice"}
    assert set(data["encrypted_choice"]) == {"alfa", "beta"}
    assert all(isinstance(data[k], str) for k in ("c0", "s0", "c1", "s1"))
    assert ORProof.from_dict(data).to_dict() == data


def test_broken_parameters_raise_instead_of_rejecting(params):
    proof = create_or_proof(params, 1)
    broken = GroupParameters(p=params.p, q=params.q, g=params.g, y=params.p - 1)
    with pytest.raises(ParameterIntegrityError):
        verify_or_proof(broken, proof)
    with pytest.raises(ParameterIntegrityError):
        create_or_proof(broken, 1)


def test_prove_choice_rejects_non_bits(params):
    with pytest.raises(RangeError):
        prove_choice(params, encrypt_choice(params, 1), 2)
