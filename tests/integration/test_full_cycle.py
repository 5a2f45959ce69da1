"""
ztron Full Cycle Integration Tests

Mint -> recipient scans -> note enters the tree -> transfer -> both parties scan
"""

import pytest

from ztron.builder import Builder
from ztron.core.descriptors import OutputDescription
from ztron.core.note import Memo
from ztron.core.types import Point, Signature
from ztron.crypto import curve, reddsa
from ztron.crypto.merkle import CommitmentTree
from ztron.crypto.note_encryption import try_note_decryption, try_output_recovery
from ztron.crypto.pedersen import value_balance_point
from ztron.protocol.abi import decode_transfer
from ztron.protocol.classifier import TransactionType
from ztron.protocol.sighash import compute_sighash, mint_sighash_data, transfer_sighash_data
from ztron.proving.prover import MockTxProver


MINT_VALUE = 10


def decode_mint(payload: bytes):
    body, binding, ciphertexts = payload[32:320], payload[320:384], payload[384:]
    return OutputDescription.deserialize(body, ciphertexts), Signature(binding)


@pytest.fixture
def minted(contract_address, expsk, recipient_address, rng):
    """Mint MINT_VALUE to the recipient and append the commitment to a fresh tree."""
    builder = Builder(contract_address, rng=rng)
    builder.add_transparent_input(MINT_VALUE * 10 ** 18)
    builder.add_shielded_output(expsk.ovk, recipient_address, MINT_VALUE, Memo.from_text("welcome"))
    kind, payload = builder.build(MockTxProver(rng))
    assert kind == TransactionType.MINT

    output, binding = decode_mint(payload)
    tree = CommitmentTree()
    position = tree.append(output.cmu)
    return output, binding, tree, position


class TestMintCycle:
    """Tests for the mint half of the cycle."""

    def test_binding_signature(self, minted, contract_address):
        """Test a verifier can check the mint against its public value."""
        output, binding, _, _ = minted
        sighash = compute_sighash(mint_sighash_data(contract_address, MINT_VALUE, output))
        bvk = curve.point_sub(curve.point_negate(output.cv.data), value_balance_point(-MINT_VALUE))
        assert reddsa.verify_binding_sig(Point(bvk), sighash, binding)

    def test_recipient_scans(self, minted, recipient_expsk, recipient_address):
        """Test the recipient finds the note and memo."""
        output, _, _, _ = minted
        ivk = recipient_expsk.full_viewing_key().vk.ivk()
        note, address, memo = try_note_decryption(ivk, output.ephemeral_key, output.cmu, output.enc_ciphertext)
        assert note.value == MINT_VALUE
        assert address == recipient_address
        assert memo.to_text() == "welcome"

    def test_sender_recovers(self, minted, expsk):
        """Test the minter recovers the output with ovk."""
        output, _, _, _ = minted
        result = try_output_recovery(
            expsk.ovk, output.cv, output.cmu, output.ephemeral_key, output.enc_ciphertext, output.out_ciphertext
        )
        assert result is not None
        assert result[0].value == MINT_VALUE


class TestTransferCycle:
    """Tests for spending a minted note."""

    @pytest.fixture
    def transferred(self, minted, contract_address, recipient_expsk, recipient_address, own_address, rng):
        output, _, tree, position = minted
        ivk = recipient_expsk.full_viewing_key().vk.ivk()
        note, _, _ = try_note_decryption(ivk, output.ephemeral_key, output.cmu, output.enc_ciphertext)
        path = tree.path(position)

        _, sender_address = own_address
        builder = Builder(contract_address, rng=rng, parallel_proofs=True)
        builder.add_shielded_spend(recipient_expsk, recipient_address.diversifier, note, path)
        builder.add_shielded_output(recipient_expsk.ovk, sender_address, 6, Memo.from_text("payment"))
        builder.add_shielded_output(recipient_expsk.ovk, recipient_address, 4)
        kind, payload = builder.build(MockTxProver(rng))
        assert kind == TransactionType.TRANSFER

        return note, tree, position, decode_transfer(payload)

    def test_signatures_verify(self, transferred, contract_address):
        """Test spend and binding signatures against the recomputed sighash."""
        _, _, _, call = transferred
        sighash = compute_sighash(transfer_sighash_data(contract_address, call.spends, call.outputs))

        for spend in call.spends:
            assert reddsa.verify_spend_sig(spend.rk, sighash, spend.spend_auth_sig)

        bvk = call.spends[0].cv.data
        for output in call.outputs:
            bvk = curve.point_sub(bvk, output.cv.data)
        assert reddsa.verify_binding_sig(Point(bvk), sighash, call.binding_sig)

    def test_spend_public_fields(self, transferred, recipient_expsk):
        """Test the spend reveals the tree root and the minted note's nullifier."""
        note, tree, position, call = transferred
        spend = call.spends[0]
        assert spend.anchor == tree.root()
        assert spend.nullifier == note.nf(recipient_expsk.full_viewing_key().vk, position)

    def test_parties_scan(self, transferred, fvk, recipient_expsk):
        """Test each output is found only by its recipient, in insertion order."""
        _, _, _, call = transferred
        sender_ivk = fvk.vk.ivk()
        recipient_ivk = recipient_expsk.full_viewing_key().vk.ivk()
        payment, change = call.outputs

        note, _, memo = try_note_decryption(sender_ivk, payment.ephemeral_key, payment.cmu, payment.enc_ciphertext)
        assert note.value == 6
        assert memo.to_text() == "payment"
        assert try_note_decryption(recipient_ivk, payment.ephemeral_key, payment.cmu, payment.enc_ciphertext) is None

        note, _, memo = try_note_decryption(recipient_ivk, change.ephemeral_key, change.cmu, change.enc_ciphertext)
        assert note.value == 4
        assert memo.is_empty()

    def test_change_spendable(self, transferred, contract_address, recipient_expsk, recipient_address, rng):
        """Test the change note can be spent after entering the tree."""
        _, tree, _, call = transferred
        change = call.outputs[1]
        ivk = recipient_expsk.full_viewing_key().vk.ivk()
        note, _, _ = try_note_decryption(ivk, change.ephemeral_key, change.cmu, change.enc_ciphertext)

        for output in call.outputs:
            tree.append(output.cmu)
        path = tree.path(len(tree.leaves) - 1)

        builder = Builder(contract_address, rng=rng)
        builder.add_shielded_spend(recipient_expsk, recipient_address.diversifier, note, path)
        builder.add_shielded_output(recipient_expsk.ovk, recipient_address, 4)
        kind, payload = builder.build(MockTxProver(rng))

        assert kind == TransactionType.TRANSFER
        assert decode_transfer(payload).spends[0].anchor == tree.root()
