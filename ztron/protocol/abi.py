"""
ztron Contract Call Encoding

MINT payload (1056 bytes, no ABI head):
    u256(value * scaling_factor) || cmu || cv || epk || proof (192)
    || binding_sig (64) || enc (580) || out (80) || zeros (12)

TRANSFER payload, Solidity ABI for

    transfer(bytes32[10][] input, bytes32[2][] spendAuthoritySignature,
             bytes32[9][] output, bytes32[2] bindingSignature,
             bytes32[21][] c)

HEAD (6 words):
    offset(input) || offset(spendAuthoritySignature) || offset(output)
    || bindingSignature (2 words, static) || offset(c)
TAIL: each dynamic array as length word || elements inline.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

from ztron.constants import (
    BINDING_SIG_WORDS,
    CIPHERTEXT_WORDS,
    OUTPUT_DESCRIPTION_WORDS,
    SIGNATURE_SIZE,
    SPEND_AUTH_SIG_WORDS,
    SPEND_DESCRIPTION_WORDS,
    WORD_SIZE,
)
from ztron.core.descriptors import OutputDescription, SpendDescription
from ztron.core.serialization import ByteReader, ByteWriter
from ztron.core.types import Signature
from ztron.errors import InvalidTransactionError

TRANSFER_HEAD_WORDS = 4 + BINDING_SIG_WORDS


def _encode_array(elements: Sequence[bytes], element_words: int) -> bytes:
    """Dynamic array of a static bytes32[n] type: length || elements."""
    writer = ByteWriter().write_u256(len(elements))
    for element in elements:
        writer.write_fixed_bytes(element, element_words * WORD_SIZE)
    return writer.to_bytes()


def _decode_array(payload: bytes, offset: int, element_words: int) -> List[bytes]:
    reader = ByteReader(payload, offset)
    count = reader.read_u256()
    if count * element_words * WORD_SIZE > reader.remaining():
        raise ValueError(f"Array of {count} elements at offset {offset} exceeds payload")
    return [reader.read_fixed_bytes(element_words * WORD_SIZE) for _ in range(count)]


# ==============================================================================
# Field groups
# ==============================================================================

def encode_spend_descriptions(spends: Sequence[SpendDescription]) -> bytes:
    """bytes32[10][] input: nf, anchor, cv, rk, proof per spend."""
    return _encode_array([spend.serialize_without_sig() for spend in spends], SPEND_DESCRIPTION_WORDS)


def encode_spend_auth_sigs(spends: Sequence[SpendDescription]) -> bytes:
    """bytes32[2][] spendAuthoritySignature."""
    sigs = []
    for index, spend in enumerate(spends):
        if spend.spend_auth_sig is None:
            raise InvalidTransactionError(f"spend {index} is not signed")
        sigs.append(spend.spend_auth_sig.data)
    return _encode_array(sigs, SPEND_AUTH_SIG_WORDS)


def encode_output_descriptions(outputs: Sequence[OutputDescription]) -> bytes:
    """bytes32[9][] output: cmu, cv, epk, proof per output."""
    return _encode_array([output.serialize_without_ciphertexts() for output in outputs], OUTPUT_DESCRIPTION_WORDS)


def encode_binding_signature(binding_sig: Signature) -> bytes:
    """bytes32[2] bindingSignature, encoded in place."""
    return ByteWriter().write_fixed_bytes(binding_sig.data, SIGNATURE_SIZE).to_bytes()


def encode_ciphertexts(outputs: Sequence[OutputDescription]) -> bytes:
    """bytes32[21][] c: enc || out || zeros per output."""
    return _encode_array([output.serialize_ciphertexts() for output in outputs], CIPHERTEXT_WORDS)


# ==============================================================================
# Calls
# ==============================================================================

def encode_transfer(spends: Sequence[SpendDescription], outputs: Sequence[OutputDescription],
                    binding_sig: Signature) -> bytes:
    """ABI-encode the transfer parameters (no function selector)."""
    tails = [
        encode_spend_descriptions(spends),
        encode_spend_auth_sigs(spends),
        encode_output_descriptions(outputs),
        encode_ciphertexts(outputs),
    ]

    offsets = []
    offset = TRANSFER_HEAD_WORDS * WORD_SIZE
    for tail in tails:
        offsets.append(offset)
        offset += len(tail)

    writer = ByteWriter()
    writer.write_u256(offsets[0])
    writer.write_u256(offsets[1])
    writer.write_u256(offsets[2])
    writer.write_raw(encode_binding_signature(binding_sig))
    writer.write_u256(offsets[3])
    for tail in tails:
        writer.write_raw(tail)
    return writer.to_bytes()


def encode_mint(scaled_value: int, output: OutputDescription, binding_sig: Signature) -> bytes:
    """Raw mint payload; scaled_value is the shielded value times the scaling factor."""
    return (
        ByteWriter()
        .write_u256(scaled_value)
        .write_raw(output.serialize_without_ciphertexts())
        .write_raw(encode_binding_signature(binding_sig))
        .write_raw(output.serialize_ciphertexts())
        .to_bytes()
    )


# ==============================================================================
# Decoding
# ==============================================================================

@dataclass
class TransferCall:
    """Decoded transfer parameters."""
    spends: List[SpendDescription]
    outputs: List[OutputDescription]
    binding_sig: Signature


def decode_transfer(payload: bytes) -> TransferCall:
    """
    Decode a transfer payload produced by encode_transfer.

    Raises:
        ValueError: On truncated or inconsistent payloads
    """
    reader = ByteReader(payload)
    input_offset = reader.read_u256()
    sig_offset = reader.read_u256()
    output_offset = reader.read_u256()
    binding_sig = Signature(reader.read_fixed_bytes(SIGNATURE_SIZE))
    c_offset = reader.read_u256()

    spend_bodies = _decode_array(payload, input_offset, SPEND_DESCRIPTION_WORDS)
    auth_sigs = _decode_array(payload, sig_offset, SPEND_AUTH_SIG_WORDS)
    output_bodies = _decode_array(payload, output_offset, OUTPUT_DESCRIPTION_WORDS)
    ciphertexts = _decode_array(payload, c_offset, CIPHERTEXT_WORDS)

    if len(spend_bodies) != len(auth_sigs):
        raise ValueError(f"{len(spend_bodies)} spends but {len(auth_sigs)} signatures")
    if len(output_bodies) != len(ciphertexts):
        raise ValueError(f"{len(output_bodies)} outputs but {len(ciphertexts)} ciphertexts")

    spends = []
    for body, sig in zip(spend_bodies, auth_sigs):
        spend, _ = SpendDescription.deserialize(body)
        spend.spend_auth_sig = Signature(sig)
        spends.append(spend)

    outputs = [OutputDescription.deserialize(body, c) for body, c in zip(output_bodies, ciphertexts)]

    return TransferCall(spends=spends, outputs=outputs, binding_sig=binding_sig)
