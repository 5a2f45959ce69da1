"""
ztron Spend and Output Descriptions

Proven, publicly visible halves of shielded legs.

SpendDescription WIRE (10 words):
    nullifier (32) || anchor (32) || cv (32) || rk (32) || zkproof (192)

OutputDescription WIRE (9 words + 21 ciphertext words):
    cmu (32) || cv (32) || epk (32) || zkproof (192)
    enc_ciphertext (580) || out_ciphertext (80) || zeros (12)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from ztron.constants import (
    CIPHERTEXT_PADDING_SIZE,
    CIPHERTEXT_WORDS,
    ENC_CIPHERTEXT_SIZE,
    GROTH_PROOF_SIZE,
    HASH_SIZE,
    NULLIFIER_SIZE,
    OUTPUT_DESCRIPTION_WORDS,
    OUT_CIPHERTEXT_SIZE,
    POINT_SIZE,
    SPEND_DESCRIPTION_WORDS,
    WORD_SIZE,
)
from ztron.core.serialization import ByteReader, ByteWriter
from ztron.core.types import (
    EncCiphertext,
    Hash,
    Nullifier,
    OutCiphertext,
    Point,
    Signature,
    ZkProof,
)


@dataclass(slots=True)
class SpendDescription:
    """
    Public part of a spend.

    Every field except spend_auth_sig is fixed at creation; the signature
    is attached once the sighash is known.
    """
    cv: Point
    anchor: Hash
    nullifier: Nullifier
    rk: Point
    zkproof: ZkProof
    spend_auth_sig: Optional[Signature] = None

    SIZE = SPEND_DESCRIPTION_WORDS * WORD_SIZE

    def __setattr__(self, name, value):
        if name != "spend_auth_sig" and hasattr(self, name):
            raise AttributeError(f"SpendDescription.{name} is immutable")
        object.__setattr__(self, name, value)

    def is_signed(self) -> bool:
        return self.spend_auth_sig is not None

    def serialize_without_sig(self) -> bytes:
        """Serialize the signed-over fields: nf || anchor || cv || rk || proof."""
        return (
            ByteWriter()
            .write_fixed_bytes(self.nullifier.data, NULLIFIER_SIZE)
            .write_fixed_bytes(self.anchor.data, HASH_SIZE)
            .write_fixed_bytes(self.cv.data, POINT_SIZE)
            .write_fixed_bytes(self.rk.data, POINT_SIZE)
            .write_fixed_bytes(self.zkproof.data, GROTH_PROOF_SIZE)
            .to_bytes()
        )

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[SpendDescription, int]:
        """Deserialize the unsigned 10-word layout, return (description, bytes_consumed)."""
        reader = ByteReader(data, offset)
        nullifier = Nullifier(reader.read_fixed_bytes(NULLIFIER_SIZE))
        anchor = Hash(reader.read_fixed_bytes(HASH_SIZE))
        cv = Point(reader.read_fixed_bytes(POINT_SIZE))
        rk = Point(reader.read_fixed_bytes(POINT_SIZE))
        zkproof = ZkProof(reader.read_fixed_bytes(GROTH_PROOF_SIZE))
        return cls(cv=cv, anchor=anchor, nullifier=nullifier, rk=rk, zkproof=zkproof), cls.SIZE


@dataclass(frozen=True, slots=True)
class OutputDescription:
    """Public part of an output. Immutable."""
    cv: Point
    cmu: Hash
    ephemeral_key: Point
    enc_ciphertext: EncCiphertext
    out_ciphertext: OutCiphertext
    zkproof: ZkProof

    SIZE = OUTPUT_DESCRIPTION_WORDS * WORD_SIZE
    CIPHERTEXT_SIZE = CIPHERTEXT_WORDS * WORD_SIZE

    def serialize_without_ciphertexts(self) -> bytes:
        """Serialize: cmu || cv || epk || proof (9 words)."""
        return (
            ByteWriter()
            .write_fixed_bytes(self.cmu.data, HASH_SIZE)
            .write_fixed_bytes(self.cv.data, POINT_SIZE)
            .write_fixed_bytes(self.ephemeral_key.data, POINT_SIZE)
            .write_fixed_bytes(self.zkproof.data, GROTH_PROOF_SIZE)
            .to_bytes()
        )

    def serialize_ciphertexts(self) -> bytes:
        """Serialize: enc || out || 12 zero bytes (21 words)."""
        return (
            ByteWriter()
            .write_fixed_bytes(self.enc_ciphertext.data, ENC_CIPHERTEXT_SIZE)
            .write_fixed_bytes(self.out_ciphertext.data, OUT_CIPHERTEXT_SIZE)
            .write_zeros(CIPHERTEXT_PADDING_SIZE)
            .to_bytes()
        )

    @classmethod
    def deserialize(cls, body: bytes, ciphertexts: bytes) -> OutputDescription:
        """Rebuild a description from its 9-word body and 21-word ciphertext block."""
        reader = ByteReader(body)
        cmu = Hash(reader.read_fixed_bytes(HASH_SIZE))
        cv = Point(reader.read_fixed_bytes(POINT_SIZE))
        epk = Point(reader.read_fixed_bytes(POINT_SIZE))
        zkproof = ZkProof(reader.read_fixed_bytes(GROTH_PROOF_SIZE))

        reader = ByteReader(ciphertexts)
        enc = EncCiphertext(reader.read_fixed_bytes(ENC_CIPHERTEXT_SIZE))
        out = OutCiphertext(reader.read_fixed_bytes(OUT_CIPHERTEXT_SIZE))
        if reader.read_fixed_bytes(CIPHERTEXT_PADDING_SIZE) != bytes(CIPHERTEXT_PADDING_SIZE):
            raise ValueError("Ciphertext padding must be zero")

        return cls(
            cv=cv,
            cmu=cmu,
            ephemeral_key=epk,
            enc_ciphertext=enc,
            out_ciphertext=out,
            zkproof=zkproof,
        )
