"""
ztron In-band Note Encryption

Each output carries two ciphertexts:

    enc_ciphertext (580) = AEAD(K_enc, 0x01 || d || v || rcm || memo)
    out_ciphertext (80)  = AEAD(ock,   pk_d || esk)

K_enc = BLAKE2b(esk * pk_d || epk), ock = BLAKE2b(ovk || cv || cmu || epk).
Both keys are single use, so the AEAD nonce is all zeros.

Uses ChaCha20-Poly1305 from pycryptodome.
"""

from __future__ import annotations
import logging
import struct
from dataclasses import dataclass
from typing import Optional, Tuple

from Crypto.Cipher import ChaCha20_Poly1305

from ztron.constants import (
    AEAD_TAG_SIZE,
    DIVERSIFIER_SIZE,
    NOTE_PLAINTEXT_LEAD_BYTE,
    NOTE_PLAINTEXT_SIZE,
    OUT_PLAINTEXT_SIZE,
    PERSONAL_KDF,
    PERSONAL_OCK,
    POINT_SIZE,
    SCALAR_SIZE,
    MEMO_SIZE,
)
from ztron.core.note import Memo, Note
from ztron.core.types import EncCiphertext, Hash, OutCiphertext, Point, Scalar
from ztron.crypto import curve
from ztron.crypto.hash import blake2b_personal
from ztron.crypto.keys import Diversifier, OutgoingViewingKey, PaymentAddress
from ztron.errors import NoteEncryptionError

logger = logging.getLogger(__name__)

AEAD_NONCE = bytes(12)


def kdf(shared_secret: bytes, epk: Point) -> bytes:
    """Symmetric key for the note plaintext."""
    return blake2b_personal(PERSONAL_KDF, shared_secret, epk.data)


def prf_ock(ovk: OutgoingViewingKey, cv: Point, cmu: Hash, epk: Point) -> bytes:
    """Outgoing cipher key."""
    return blake2b_personal(PERSONAL_OCK, ovk.data, cv.data, cmu.data, epk.data)


def _seal(key: bytes, plaintext: bytes) -> bytes:
    cipher = ChaCha20_Poly1305.new(key=key, nonce=AEAD_NONCE)
    ciphertext, tag = cipher.encrypt_and_digest(plaintext)
    return ciphertext + tag


def _open(key: bytes, sealed: bytes) -> Optional[bytes]:
    cipher = ChaCha20_Poly1305.new(key=key, nonce=AEAD_NONCE)
    try:
        return cipher.decrypt_and_verify(sealed[:-AEAD_TAG_SIZE], sealed[-AEAD_TAG_SIZE:])
    except ValueError:
        return None


def note_plaintext(diversifier: Diversifier, note: Note, memo: Memo) -> bytes:
    """Serialize: 0x01 || d (11) || value (u64 LE) || rcm (32) || memo (512)."""
    return (
        bytes([NOTE_PLAINTEXT_LEAD_BYTE])
        + diversifier.data
        + struct.pack("<Q", note.value)
        + note.rcm.data
        + memo.data
    )


def parse_note_plaintext(plaintext: bytes) -> Tuple[Diversifier, int, Scalar, Memo]:
    if len(plaintext) != NOTE_PLAINTEXT_SIZE:
        raise NoteEncryptionError(f"note plaintext must be {NOTE_PLAINTEXT_SIZE} bytes")
    if plaintext[0] != NOTE_PLAINTEXT_LEAD_BYTE:
        raise NoteEncryptionError(f"unknown note plaintext lead byte {plaintext[0]:#04x}")

    offset = 1
    diversifier = Diversifier(plaintext[offset:offset + DIVERSIFIER_SIZE])
    offset += DIVERSIFIER_SIZE
    value = struct.unpack_from("<Q", plaintext, offset)[0]
    offset += 8
    rcm = Scalar(plaintext[offset:offset + SCALAR_SIZE])
    offset += SCALAR_SIZE
    memo = Memo(plaintext[offset:offset + MEMO_SIZE])
    return diversifier, value, rcm, memo


@dataclass
class NoteEncryption:
    """
    Encryptor for a single output.

    Holds the ephemeral secret esk; epk = esk * g_d is published in the
    output description.
    """
    esk: Scalar
    epk: Point
    note: Note
    to: PaymentAddress
    memo: Memo
    ovk: OutgoingViewingKey

    @classmethod
    def new(cls, ovk: OutgoingViewingKey, note: Note, to: PaymentAddress, memo: Memo,
            rng: Optional[curve.Rng] = None) -> NoteEncryption:
        esk = Scalar(curve.scalar_random(rng))
        epk = Point(curve.scalarmult(esk.data, note.g_d.data))
        return cls(esk=esk, epk=epk, note=note, to=to, memo=memo, ovk=ovk)

    def encrypt_note_plaintext(self) -> EncCiphertext:
        shared_secret = curve.scalarmult(self.esk.data, self.to.pk_d.data)
        key = kdf(shared_secret, self.epk)
        return EncCiphertext(_seal(key, note_plaintext(self.to.diversifier, self.note, self.memo)))

    def encrypt_outgoing_plaintext(self, cv: Point, cmu: Hash) -> OutCiphertext:
        ock = prf_ock(self.ovk, cv, cmu, self.epk)
        return OutCiphertext(_seal(ock, self.to.pk_d.data + self.esk.data))


def _note_from_plaintext(plaintext: bytes, pk_d: Point, cmu: Hash) -> Optional[Tuple[Note, PaymentAddress, Memo]]:
    diversifier, value, rcm, memo = parse_note_plaintext(plaintext)
    g_d = diversifier.g_d()
    if g_d is None:
        return None
    note = Note(value=value, rcm=rcm, g_d=g_d, pk_d=pk_d)
    if note.cm() != cmu:
        logger.debug("Decrypted note does not match its commitment")
        return None
    return note, PaymentAddress(diversifier=diversifier, pk_d=pk_d), memo


def try_note_decryption(ivk: Scalar, epk: Point, cmu: Hash,
                        enc_ciphertext: EncCiphertext) -> Optional[Tuple[Note, PaymentAddress, Memo]]:
    """
    Decrypt an output with an incoming viewing key.

    Returns None when the output is not addressed to ivk.
    """
    shared_secret = curve.scalarmult(ivk.data, epk.data)
    plaintext = _open(kdf(shared_secret, epk), enc_ciphertext.data)
    if plaintext is None:
        return None

    diversifier = Diversifier(plaintext[1:1 + DIVERSIFIER_SIZE])
    g_d = diversifier.g_d()
    if g_d is None:
        return None
    pk_d = Point(curve.scalarmult(ivk.data, g_d.data))
    return _note_from_plaintext(plaintext, pk_d, cmu)


def try_output_recovery(ovk: OutgoingViewingKey, cv: Point, cmu: Hash, epk: Point,
                        enc_ciphertext: EncCiphertext,
                        out_ciphertext: OutCiphertext) -> Optional[Tuple[Note, PaymentAddress, Memo]]:
    """
    Recover an output with the sender's outgoing viewing key.

    Returns None when ovk did not create the output.
    """
    out_plaintext = _open(prf_ock(ovk, cv, cmu, epk), out_ciphertext.data)
    if out_plaintext is None or len(out_plaintext) != OUT_PLAINTEXT_SIZE:
        return None

    pk_d = Point(out_plaintext[:POINT_SIZE])
    esk = out_plaintext[POINT_SIZE:]
    shared_secret = curve.scalarmult(esk, pk_d.data)
    plaintext = _open(kdf(shared_secret, epk), enc_ciphertext.data)
    if plaintext is None:
        return None

    result = _note_from_plaintext(plaintext, pk_d, cmu)
    if result is not None and curve.scalarmult(esk, result[0].g_d.data) != epk.data:
        return None
    return result
