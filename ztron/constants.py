"""
ztron Shielded Transaction Constants

All protocol constants defined here for single source of truth.
All wire words are 32 bytes; integers on the wire are BIG-ENDIAN.
Curve scalars are LITTLE-ENDIAN (libsodium encoding).
"""

from typing import Final

BIG_ENDIAN: Final[str] = "big"
LITTLE_ENDIAN: Final[str] = "little"

# ==============================================================================
# TRANSACTION SHAPE
# ==============================================================================

MAX_SHIELDED_SPENDS: Final[int] = 2
MAX_SHIELDED_OUTPUTS: Final[int] = 2
MAX_TRANSPARENT_INPUTS: Final[int] = 1
MAX_TRANSPARENT_OUTPUTS: Final[int] = 1

# Token amounts are scaled by 10^exponent when crossing into the contract
DEFAULT_SCALING_EXPONENT: Final[int] = 18
MAX_SCALING_EXPONENT: Final[int] = 77           # 10^77 < 2^256

# ==============================================================================
# AMOUNTS
# ==============================================================================

COIN: Final[int] = 100_000_000
MAX_MONEY: Final[int] = 21_000_000 * COIN
MAX_U64: Final[int] = 0xFFFFFFFFFFFFFFFF
MAX_U256: Final[int] = (1 << 256) - 1

# ==============================================================================
# CRYPTOGRAPHIC ARTIFACT SIZES (bytes)
# ==============================================================================

WORD_SIZE: Final[int] = 32
SCALAR_SIZE: Final[int] = 32
POINT_SIZE: Final[int] = 32
HASH_SIZE: Final[int] = 32
NULLIFIER_SIZE: Final[int] = 32

GROTH_PROOF_SIZE: Final[int] = 192              # 48 + 96 + 48
SIGNATURE_SIZE: Final[int] = 64                 # R || S

DIVERSIFIER_SIZE: Final[int] = 11
PAYMENT_ADDRESS_SIZE: Final[int] = DIVERSIFIER_SIZE + POINT_SIZE
OVK_SIZE: Final[int] = 32
SPENDING_KEY_SIZE: Final[int] = 32

MEMO_SIZE: Final[int] = 512
EMPTY_MEMO_LEAD_BYTE: Final[int] = 0xF6

NOTE_PLAINTEXT_LEAD_BYTE: Final[int] = 0x01
NOTE_PLAINTEXT_SIZE: Final[int] = 1 + DIVERSIFIER_SIZE + 8 + SCALAR_SIZE + MEMO_SIZE   # 564
OUT_PLAINTEXT_SIZE: Final[int] = POINT_SIZE + SCALAR_SIZE                              # 64
AEAD_TAG_SIZE: Final[int] = 16
ENC_CIPHERTEXT_SIZE: Final[int] = NOTE_PLAINTEXT_SIZE + AEAD_TAG_SIZE                  # 580
OUT_CIPHERTEXT_SIZE: Final[int] = OUT_PLAINTEXT_SIZE + AEAD_TAG_SIZE                   # 80

# ciphertext pair is padded to a whole number of words: 580 + 80 + 12 = 21 * 32
CIPHERTEXT_PADDING_SIZE: Final[int] = 12

# ==============================================================================
# CONTRACT CALL LAYOUT (words of 32 bytes)
# ==============================================================================

SPEND_DESCRIPTION_WORDS: Final[int] = 10        # nf, anchor, cv, rk, proof(6)
SPEND_AUTH_SIG_WORDS: Final[int] = 2
OUTPUT_DESCRIPTION_WORDS: Final[int] = 9        # cm, cv, epk, proof(6)
BINDING_SIG_WORDS: Final[int] = 2
CIPHERTEXT_WORDS: Final[int] = 21               # enc(580) + out(80) + pad(12)

MINT_PAYLOAD_SIZE: Final[int] = (
    WORD_SIZE
    + OUTPUT_DESCRIPTION_WORDS * WORD_SIZE
    + SIGNATURE_SIZE
    + CIPHERTEXT_WORDS * WORD_SIZE
)                                               # 1056

# ==============================================================================
# ADDRESSES
# ==============================================================================

TRON_ADDRESS_PREFIX: Final[int] = 0x41
TRON_ADDRESS_SIZE: Final[int] = 21
TVM_ADDRESS_SIZE: Final[int] = 20

# ==============================================================================
# NOTE COMMITMENT TREE
# ==============================================================================

MERKLE_DEPTH: Final[int] = 32

# ==============================================================================
# DOMAIN SEPARATION (BLAKE2 personalizations)
# ==============================================================================

PERSONAL_EXPAND_SEED: Final[bytes] = b"Ztron_ExpandSeed"     # BLAKE2b, 16 bytes
PERSONAL_IVK: Final[bytes] = b"Ztronivk"                     # BLAKE2s, 8 bytes
PERSONAL_NULLIFIER: Final[bytes] = b"Ztron_nf"               # BLAKE2s, 8 bytes
PERSONAL_DIVERSIFY: Final[bytes] = b"Ztron_gd"               # BLAKE2s, 8 bytes
PERSONAL_KDF: Final[bytes] = b"Ztron_SaplingKDF"             # BLAKE2b, 16 bytes
PERSONAL_OCK: Final[bytes] = b"Ztron_Derive_ock"             # BLAKE2b, 16 bytes
PERSONAL_MERKLE: Final[bytes] = b"Ztron_MerkleTree"          # BLAKE2b, 16 bytes
PERSONAL_NOTE_COMMIT: Final[bytes] = b"Ztron_NoteCommit"     # BLAKE2b, 16 bytes
PERSONAL_SIGNATURE: Final[bytes] = b"Ztron_RedDSA_Chl"       # BLAKE2b, 16 bytes

# Generator seeds (hash-to-point, nothing-up-my-sleeve)
GENERATOR_SPENDING_KEY: Final[bytes] = b"ztron:generator:spending_key"
GENERATOR_PROOF_GENERATION_KEY: Final[bytes] = b"ztron:generator:proof_generation_key"
GENERATOR_VALUE_COMMITMENT_VALUE: Final[bytes] = b"ztron:generator:value_commitment_value"
GENERATOR_VALUE_COMMITMENT_RANDOMNESS: Final[bytes] = b"ztron:generator:value_commitment_randomness"
GENERATOR_NOTE_COMMITMENT_RANDOMNESS: Final[bytes] = b"ztron:generator:note_commitment_randomness"
GENERATOR_NULLIFIER_POSITION: Final[bytes] = b"ztron:generator:nullifier_position"

# ==============================================================================
# PROVING PARAMETERS
# ==============================================================================

SPEND_PARAMS_FILENAME: Final[str] = "sapling-spend.params"
OUTPUT_PARAMS_FILENAME: Final[str] = "sapling-output.params"
DEFAULT_PARAMS_DIR: Final[str] = "../ztron-params"
