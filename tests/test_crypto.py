"""
ztron Cryptographic Primitive Tests
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from ztron.constants import MERKLE_DEPTH
from ztron.core.note import Memo, Note
from ztron.core.types import Hash, Point, Scalar
from ztron.crypto import curve, reddsa
from ztron.crypto.curve import Generators
from ztron.crypto.keys import Diversifier, PaymentAddress, SpendingKey
from ztron.crypto.merkle import CommitmentTree, MerklePath, empty_root
from ztron.crypto.note_encryption import NoteEncryption, try_note_decryption, try_output_recovery
from ztron.crypto.pedersen import value_commitment, value_balance_point, sum_points
from ztron.errors import InvalidAddressError


class TestCurve:
    """Tests for group operations."""

    def test_identity_handling(self):
        """Test zero scalars and the neutral element."""
        g = Generators.spending_key()
        assert curve.scalarmult(curve.ZERO_SCALAR, g) == curve.IDENTITY
        assert curve.point_add(curve.IDENTITY, g) == g
        assert curve.point_sub(g, g) == curve.IDENTITY

    def test_scalar_arithmetic(self):
        """Test (a + b) * G == a * G + b * G."""
        a = curve.scalar_from_int(11)
        b = curve.scalar_from_int(31)
        g = Generators.value_commitment_value()
        lhs = curve.scalarmult(curve.scalar_add(a, b), g)
        rhs = curve.point_add(curve.scalarmult(a, g), curve.scalarmult(b, g))
        assert lhs == rhs

    def test_negative_scalar(self):
        """Test -1 encodes as L - 1."""
        minus_one = curve.scalar_from_int(-1)
        assert curve.scalar_to_int(minus_one) == curve.CURVE_ORDER - 1

    def test_generators_distinct(self):
        """Test generators are independent valid points."""
        points = {
            Generators.spending_key(),
            Generators.proof_generation_key(),
            Generators.value_commitment_value(),
            Generators.value_commitment_randomness(),
            Generators.note_commitment_randomness(),
            Generators.nullifier_position(),
        }
        assert len(points) == 6
        assert all(curve.is_valid_point(p) for p in points)

    def test_hash_to_point_deterministic(self):
        """Test hash to point is a function."""
        assert curve.hash_to_point(b"abc") == curve.hash_to_point(b"abc")
        assert curve.hash_to_point(b"abc") != curve.hash_to_point(b"abd")

    def test_random_scalar_nonzero(self, rng):
        """Test random scalars are reduced and non-zero."""
        s = curve.scalar_random(rng)
        assert s != curve.ZERO_SCALAR
        assert curve.scalar_to_int(s) < curve.CURVE_ORDER

    def test_locked_rng_serializes_draws(self, recording_rng):
        """Test concurrent draws through LockedRng never overlap or repeat."""
        inner = recording_rng(b"shared")
        locked = curve.LockedRng(inner)

        with ThreadPoolExecutor(max_workers=8) as executor:
            draws = list(executor.map(lambda _: locked(32), range(32)))

        assert inner.overlaps == 0
        assert len(set(draws)) == len(draws)

    def test_locked_rng_default_source(self):
        """Test LockedRng falls back to the system source."""
        assert len(curve.LockedRng()(32)) == 32


class TestKeys:
    """Tests for key derivation and addresses."""

    def test_expansion_deterministic(self, spending_key):
        """Test the same spending key expands identically."""
        a = spending_key.expand()
        b = spending_key.expand()
        assert a == b
        assert a.ask != a.nsk

    def test_ivk_below_order(self, fvk):
        """Test ivk is truncated to 251 bits."""
        assert fvk.vk.ivk().to_int() < 2 ** 251

    def test_default_address(self, fvk):
        """Test pk_d = ivk * g_d."""
        diversifier, address = fvk.default_address()
        g_d = diversifier.g_d()
        assert g_d is not None
        assert address.pk_d.data == curve.scalarmult(fvk.vk.ivk().data, g_d.data)

    def test_address_bytes_round_trip(self, own_address):
        """Test 43-byte address parsing."""
        _, address = own_address
        raw = address.to_bytes()
        assert len(raw) == 43
        assert PaymentAddress.from_bytes(raw) == address

    def test_invalid_address_bytes(self, own_address, invalid_diversifier):
        """Test address validation."""
        _, address = own_address
        with pytest.raises(InvalidAddressError):
            PaymentAddress.from_bytes(address.to_bytes()[:-1])
        with pytest.raises(InvalidAddressError):
            PaymentAddress.from_bytes(invalid_diversifier.data + address.pk_d.data)

    def test_invalid_diversifier_has_no_address(self, fvk, invalid_diversifier):
        """Test to_payment_address refuses an invalid diversifier."""
        assert fvk.vk.to_payment_address(invalid_diversifier) is None

    def test_rk_matches_randomized_key(self, expsk, rng):
        """Test ak + alpha * G == (ask + alpha) * G."""
        alpha = Scalar(curve.scalar_random(rng))
        vk = expsk.proof_generation_key().to_viewing_key()
        rsk = reddsa.randomize_private(expsk.ask, alpha)
        assert vk.rk(alpha) == reddsa.public_key(rsk, Generators.spending_key())

    def test_spending_key_repr_redacted(self, spending_key):
        """Test secret keys are not printed."""
        assert spending_key.hex() not in repr(spending_key)


class TestCommitments:
    """Tests for value and note commitments."""

    def test_value_commitment_homomorphic(self, rng):
        """Test cv(a) + cv(b) - cv(a + b) is a pure randomness term."""
        r1 = Scalar(curve.scalar_random(rng))
        r2 = Scalar(curve.scalar_random(rng))
        r3 = Scalar(curve.scalar_add(r1.data, r2.data))
        total = curve.point_add(value_commitment(3, r1).data, value_commitment(4, r2).data)
        assert total == value_commitment(7, r3).data

    def test_balance_point(self):
        """Test value_balance * V."""
        assert value_balance_point(0) == curve.IDENTITY
        assert curve.point_add(value_balance_point(5), value_balance_point(-5)) == curve.IDENTITY

    def test_sum_points(self):
        """Test summing an empty sequence."""
        assert sum_points([]) == curve.IDENTITY

    def test_note_commitment_binds_value(self, own_address, rng):
        """Test changing the value changes the commitment."""
        _, address = own_address
        note = Note.create(address, 10, rng)
        other = Note(value=11, rcm=note.rcm, g_d=note.g_d, pk_d=note.pk_d)
        assert note.cm() != other.cm()

    def test_nullifier_depends_on_position(self, fvk, own_address, rng):
        """Test identical notes at different leaves have different nullifiers."""
        _, address = own_address
        note = Note.create(address, 10, rng)
        assert note.nf(fvk.vk, 0) != note.nf(fvk.vk, 1)
        assert note.nf(fvk.vk, 3) == note.nf(fvk.vk, 3)

    def test_note_create_invalid_address(self, own_address, invalid_diversifier, rng):
        """Test notes need a valid diversifier."""
        _, address = own_address
        bad = PaymentAddress(diversifier=invalid_diversifier, pk_d=address.pk_d)
        with pytest.raises(InvalidAddressError):
            Note.create(bad, 1, rng)


class TestRedDSA:
    """Tests for spend authorization and binding signatures."""

    def test_spend_sig(self, expsk, rng):
        """Test spend signature verifies under rk only."""
        alpha = Scalar(curve.scalar_random(rng))
        sighash = Hash(bytes(range(32)))
        sig = reddsa.spend_sig(expsk.ask, alpha, sighash, rng)
        rk = expsk.proof_generation_key().to_viewing_key().rk(alpha)

        assert reddsa.verify_spend_sig(rk, sighash, sig)
        assert not reddsa.verify_spend_sig(rk, Hash.zero(), sig)
        assert not reddsa.verify_spend_sig(expsk.ak(), sighash, sig)

    def test_binding_sig(self, rng):
        """Test binding signature verification."""
        bsk = Scalar(curve.scalar_random(rng))
        bvk = reddsa.public_key(bsk, Generators.value_commitment_randomness())
        sighash = Hash(bytes([7] * 32))
        sig = reddsa.binding_sig(bsk, sighash, rng)

        assert reddsa.verify_binding_sig(bvk, sighash, sig)
        tampered = sig.data[:40] + bytes([sig.data[40] ^ 1]) + sig.data[41:]
        assert not reddsa.verify_binding_sig(bvk, sighash, type(sig)(tampered))


class TestMerkle:
    """Tests for the commitment tree."""

    def test_empty_root_chain(self):
        """Test empty roots differ per level."""
        assert empty_root(0) == Hash.zero()
        assert empty_root(1) != empty_root(0)

    def test_path_authenticates_leaf(self, rng):
        """Test every leaf's path recomputes the tree root."""
        tree = CommitmentTree()
        leaves = [Hash(rng(32)) for _ in range(5)]
        for leaf in leaves:
            tree.append(leaf)

        root = tree.root()
        for position, leaf in enumerate(leaves):
            path = tree.path(position)
            assert path.depth == MERKLE_DEPTH
            assert path.verify(leaf, root)
            assert not path.verify(Hash.zero(), root)

    def test_root_changes_on_append(self, rng):
        """Test appending moves the root."""
        tree = CommitmentTree()
        before = tree.root()
        tree.append(Hash(rng(32)))
        assert tree.root() != before

    def test_path_serialization(self, rng):
        """Test path bytes layout and parsing."""
        tree = CommitmentTree(depth=4)
        for _ in range(3):
            tree.append(Hash(rng(32)))
        path = tree.path(2)
        data = path.serialize()
        assert len(data) == 1 + 4 * 32 + 8
        parsed, size = MerklePath.deserialize(data)
        assert size == len(data)
        assert parsed == path

    def test_position_range(self):
        """Test positions must fit the depth."""
        with pytest.raises(ValueError):
            MerklePath(auth_path=[Hash.zero()] * 2, position=4)

    def test_missing_leaf(self):
        """Test paths only exist for appended leaves."""
        with pytest.raises(IndexError):
            CommitmentTree().path(0)


class TestNoteEncryption:
    """Tests for in-band note encryption."""

    @pytest.fixture
    def encrypted(self, expsk, recipient_address, rng):
        note = Note.create(recipient_address, 42, rng)
        enc = NoteEncryption.new(expsk.ovk, note, recipient_address, Memo.from_text("hi"), rng)
        cv = value_commitment(42, Scalar(curve.scalar_random(rng)))
        cmu = note.cm()
        return note, enc, cv, cmu, enc.encrypt_note_plaintext(), enc.encrypt_outgoing_plaintext(cv, cmu)

    def test_recipient_decrypts(self, encrypted, recipient_expsk, recipient_address):
        """Test the recipient recovers note, address and memo."""
        note, enc, _, cmu, c_enc, _ = encrypted
        ivk = recipient_expsk.full_viewing_key().vk.ivk()
        result = try_note_decryption(ivk, enc.epk, cmu, c_enc)
        assert result is not None
        decrypted, address, memo = result
        assert decrypted == note
        assert address == recipient_address
        assert memo.to_text() == "hi"

    def test_other_ivk_fails(self, encrypted, fvk):
        """Test a different ivk cannot decrypt."""
        _, enc, _, cmu, c_enc, _ = encrypted
        assert try_note_decryption(fvk.vk.ivk(), enc.epk, cmu, c_enc) is None

    def test_sender_recovers(self, encrypted, expsk):
        """Test ovk recovery of an output."""
        note, enc, cv, cmu, c_enc, c_out = encrypted
        result = try_output_recovery(expsk.ovk, cv, cmu, enc.epk, c_enc, c_out)
        assert result is not None
        assert result[0] == note

    def test_wrong_ovk_fails(self, encrypted, recipient_expsk):
        """Test another ovk cannot recover."""
        _, enc, cv, cmu, c_enc, c_out = encrypted
        assert try_output_recovery(recipient_expsk.ovk, cv, cmu, enc.epk, c_enc, c_out) is None

    def test_commitment_mismatch(self, encrypted, recipient_expsk):
        """Test decryption checks the note commitment."""
        _, enc, _, _, c_enc, _ = encrypted
        ivk = recipient_expsk.full_viewing_key().vk.ivk()
        assert try_note_decryption(ivk, enc.epk, Hash.zero(), c_enc) is None

    def test_ciphertext_sizes(self, encrypted):
        """Test fixed ciphertext lengths."""
        *_, c_enc, c_out = encrypted
        assert len(c_enc.data) == 580
        assert len(c_out.data) == 80
