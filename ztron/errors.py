"""
ztron Error Handling

All error codes and exception classes. Every error is terminal for the
build attempt that raised it; callers own any retry policy.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Builder error codes."""

    # 1xxx - General errors
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001
    INTERNAL_ERROR = 1002
    NOT_IMPLEMENTED = 1003
    BUILDER_CONSUMED = 1004

    # 2xxx - Structural errors
    INVALID_TRANSACTION = 2001
    ANCHOR_MISMATCH = 2002

    # 3xxx - Address and amount errors
    INVALID_ADDRESS = 3001
    INVALID_AMOUNT = 3002
    AMOUNT_MISMATCH = 3003
    CHANGE_IS_NEGATIVE = 3004
    NO_CHANGE_ADDRESS = 3005

    # 4xxx - Proving errors
    SPEND_PROOF = 4001
    BINDING_SIG = 4002
    PROVING_PARAMETERS = 4003

    # 5xxx - Primitive errors
    CURVE_ERROR = 5001
    NOTE_ENCRYPTION = 5002


class ZtronError(Exception):
    """Base exception for all shielded builder errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidParameterError(ZtronError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


class NotImplementedFeatureError(ZtronError):
    def __init__(self, feature: str):
        super().__init__(
            ErrorCode.NOT_IMPLEMENTED,
            f"Feature not implemented: {feature}",
            {"feature": feature}
        )


class BuilderConsumedError(ZtronError):
    def __init__(self, operation: str):
        super().__init__(
            ErrorCode.BUILDER_CONSUMED,
            f"Builder already consumed by build(), cannot call {operation}",
            {"operation": operation}
        )


# ==============================================================================
# Structural Errors (2xxx)
# ==============================================================================

class InvalidTransactionError(ZtronError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.INVALID_TRANSACTION,
            f"Invalid transaction: {reason}",
            {"reason": reason}
        )

    @property
    def reason(self) -> str:
        return self.details["reason"]


class AnchorMismatchError(ZtronError):
    def __init__(self, expected: bytes, got: bytes):
        super().__init__(
            ErrorCode.ANCHOR_MISMATCH,
            f"Anchor mismatch: expected {expected.hex()[:16]}..., got {got.hex()[:16]}...",
            {"expected": expected.hex(), "got": got.hex()}
        )


# ==============================================================================
# Address and Amount Errors (3xxx)
# ==============================================================================

class InvalidAddressError(ZtronError):
    def __init__(self, reason: str = ""):
        msg = "Invalid address"
        if reason:
            msg += f": {reason}"
        super().__init__(ErrorCode.INVALID_ADDRESS, msg)


class InvalidAmountError(ZtronError):
    def __init__(self, amount: Optional[int] = None, reason: str = ""):
        msg = "Invalid amount"
        if amount is not None:
            msg += f" {amount}"
        if reason:
            msg += f": {reason}"
        details = {"amount": amount} if amount is not None else None
        super().__init__(ErrorCode.INVALID_AMOUNT, msg, details)


class AmountMismatchError(ZtronError):
    def __init__(self, shielded: int, transparent: int):
        super().__init__(
            ErrorCode.AMOUNT_MISMATCH,
            f"Input & output amount mismatch: scaled shielded {shielded} != transparent {transparent}",
            {"shielded": shielded, "transparent": transparent}
        )


class ChangeIsNegativeError(ZtronError):
    def __init__(self, change: int):
        super().__init__(
            ErrorCode.CHANGE_IS_NEGATIVE,
            f"Change is negative: {change}",
            {"change": change}
        )


class NoChangeAddressError(ZtronError):
    def __init__(self):
        super().__init__(
            ErrorCode.NO_CHANGE_ADDRESS,
            "No change address configured"
        )


# ==============================================================================
# Proving Errors (4xxx)
# ==============================================================================

class SpendProofError(ZtronError):
    def __init__(self, reason: str = ""):
        msg = "Spend proof generation failed"
        if reason:
            msg += f": {reason}"
        super().__init__(ErrorCode.SPEND_PROOF, msg)


class BindingSignatureError(ZtronError):
    def __init__(self, reason: str = ""):
        msg = "Binding signature generation failed"
        if reason:
            msg += f": {reason}"
        super().__init__(ErrorCode.BINDING_SIG, msg)


class ProvingParametersError(ZtronError):
    def __init__(self, path: str, reason: str):
        super().__init__(
            ErrorCode.PROVING_PARAMETERS,
            f"Proving parameters unavailable at {path}: {reason}",
            {"path": path, "reason": reason}
        )


# ==============================================================================
# Primitive Errors (5xxx)
# ==============================================================================

class CurveError(ZtronError):
    def __init__(self, operation: str, reason: str = ""):
        msg = f"Curve operation failed: {operation}"
        if reason:
            msg += f" ({reason})"
        super().__init__(ErrorCode.CURVE_ERROR, msg, {"operation": operation})


class NoteEncryptionError(ZtronError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.NOTE_ENCRYPTION,
            f"Note encryption failed: {reason}",
            {"reason": reason}
        )
