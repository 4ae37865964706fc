"""Error codes returned by use cases

Every code belongs to exactly one ErrorKind. The HTTP layer maps kinds to
status codes; callers that need finer control switch on the code itself.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    CODE_UNUSABLE = "code_unusable"
    EXPIRED = "expired"
    FORBIDDEN = "forbidden"
    STORAGE_ERROR = "storage_error"
    SIGNATURE_INVALID = "signature_invalid"
    PARTIAL_FAILURE = "partial_failure"


class ErrorCode(str, Enum):
    # NotFound
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    CODE_NOT_FOUND = "CODE_NOT_FOUND"
    RULE_NOT_FOUND = "RULE_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    VERIFICATION_CODE_NOT_FOUND = "VERIFICATION_CODE_NOT_FOUND"
    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"

    # InvalidState
    INVALID_ORDER_STATE = "INVALID_ORDER_STATE"
    INVALID_REGISTRATION_STATE = "INVALID_REGISTRATION_STATE"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    VERIFICATION_CODE_MISMATCH = "VERIFICATION_CODE_MISMATCH"

    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    CODE_UNUSABLE = "CODE_UNUSABLE"

    # Expired
    ORDER_EXPIRED = "ORDER_EXPIRED"
    REGISTRATION_EXPIRED = "REGISTRATION_EXPIRED"
    VERIFICATION_CODE_EXPIRED = "VERIFICATION_CODE_EXPIRED"

    FORBIDDEN = "FORBIDDEN"

    # StorageError
    STORAGE_ERROR = "STORAGE_ERROR"
    CONCURRENT_UPDATE = "CONCURRENT_UPDATE"
    PROVIDER_ERROR = "PROVIDER_ERROR"

    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    PARTIAL_REDEMPTION_FAILURE = "PARTIAL_REDEMPTION_FAILURE"


ERROR_KINDS = {
    ErrorCode.ACCOUNT_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.ORDER_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.CODE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.RULE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.REGISTRATION_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.VERIFICATION_CODE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.PROVIDER_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.INVALID_ORDER_STATE: ErrorKind.INVALID_STATE,
    ErrorCode.INVALID_REGISTRATION_STATE: ErrorKind.INVALID_STATE,
    ErrorCode.AMOUNT_MISMATCH: ErrorKind.INVALID_STATE,
    ErrorCode.DUPLICATE_REGISTRATION: ErrorKind.INVALID_STATE,
    ErrorCode.INVALID_AMOUNT: ErrorKind.INVALID_STATE,
    ErrorCode.VERIFICATION_CODE_MISMATCH: ErrorKind.INVALID_STATE,
    ErrorCode.INSUFFICIENT_BALANCE: ErrorKind.INSUFFICIENT_BALANCE,
    ErrorCode.CODE_UNUSABLE: ErrorKind.CODE_UNUSABLE,
    ErrorCode.ORDER_EXPIRED: ErrorKind.EXPIRED,
    ErrorCode.REGISTRATION_EXPIRED: ErrorKind.EXPIRED,
    ErrorCode.VERIFICATION_CODE_EXPIRED: ErrorKind.EXPIRED,
    ErrorCode.FORBIDDEN: ErrorKind.FORBIDDEN,
    ErrorCode.STORAGE_ERROR: ErrorKind.STORAGE_ERROR,
    ErrorCode.CONCURRENT_UPDATE: ErrorKind.STORAGE_ERROR,
    ErrorCode.PROVIDER_ERROR: ErrorKind.STORAGE_ERROR,
    ErrorCode.SIGNATURE_INVALID: ErrorKind.SIGNATURE_INVALID,
    ErrorCode.PARTIAL_REDEMPTION_FAILURE: ErrorKind.PARTIAL_FAILURE,
}


def kind_of(code: str) -> ErrorKind:
    """Return the ErrorKind for a code; unknown codes count as storage errors"""
    try:
        return ERROR_KINDS[ErrorCode(code)]
    except ValueError:
        return ErrorKind.STORAGE_ERROR
