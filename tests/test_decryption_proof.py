from dataclasses import replace

import pytest

from fairvote.decryption_proof import (
    DecryptionProof,
    prove_decryption,
    verify_decryption,
    verify_decryption_dict,
)
from fairvote.elgamal import Ciphertext, encrypt_choice, multiply, to_exponential


@pytest.fixture()
def opened(params, private_key):
    ct = multiply(encrypt_choice(params, 1).ciphertext, encrypt_choice(params, 1).ciphertext, params.p)
    plaintext, proof = prove_decryption(private_key, ct)
    return ct, plaintext, proof


def test_proof_round_trip(params, opened):
    ct, plaintext, proof = opened
    assert plaintext == to_exponential(params, 2)
    assert proof.ciphertext == ct
    assert verify_decryption(params, proof, plaintext) is True


def test_verification_equations_hold(params, private_key, opened):
    # g^z == A * y^c and alpha^z == B * (beta / plaintext)^c with A, B recomputed
    ct, plaintext, proof = opened
    p = params.p
    a = (pow(params.g, proof.z, p) * pow(params.y, -proof.c, p)) % p
    shared = (ct.beta * pow(plaintext, -1, p)) % p
    b = (pow(ct.alpha, proof.z, p) * pow(shared, -proof.c, p)) % p
    assert pow(params.g, proof.z, p) == (a * pow(params.y, proof.c, p)) % p
    assert pow(ct.alpha, proof.z, p) == (b * pow(shared, proof.c, p)) % p
    assert shared == pow(ct.alpha, private_key.x, p)


def test_wrong_plaintext_fails(params, opened):
    _, plaintext, proof = opened
    assert verify_decryption(params, proof, to_exponential(params, 1)) is False
    assert verify_decryption(params, proof, (plaintext * params.g) % params.p) is False


@pytest.mark.parametrize("field", ["c", "z"])
def test_flipped_bit_fails(params, opened, field):
    _, plaintext, proof = opened
    tampered = replace(proof, **{field: getattr(proof, field) ^ 1})
    assert verify_decryption(params, tampered, plaintext) is False


def test_proof_for_other_ciphertext_fails(params, opened):
    _, plaintext, proof = opened
    other = encrypt_choice(params, 0).ciphertext
    assert verify_decryption(params, replace(proof, ciphertext=other), plaintext) is False


def test_proof_under_other_key_fails(params, opened):
    from fairvote.params import keygen

    _, plaintext, proof = opened
    other_params, _ = keygen()
    assert verify_decryption(other_params, proof, plaintext) is False


def test_out_of_range_values_fail(params, opened):
    ct, plaintext, proof = opened
    assert verify_decryption(params, proof, 0) is False
    assert verify_decryption(params, replace(proof, z=proof.z + params.q), plaintext) is False
    assert verify_decryption(params, replace(proof, ciphertext=Ciphertext(alpha=0, beta=ct.beta)), plaintext) is False


def test_wire_format_and_dict_verification(params, opened):
    _, plaintext, proof = opened
    data = proof.to_dict()
    assert set(data) == {"c", "z", "encrypted_message"}
    assert DecryptionProof.from_dict(data) == proof
    assert verify_decryption_dict(params, data, str(plaintext)) is True
    assert verify_decryption_dict(params, {"c": data["c"]}, str(plaintext)) is False
    assert verify_decryption_dict(params, data, "abc") is False


def test_each_proof_uses_fresh_nonce(private_key, opened):
    ct, _, proof = opened
    _, again = prove_decryption(private_key, ct)
    assert again.c != proof.c
    assert again.z != proof.z
