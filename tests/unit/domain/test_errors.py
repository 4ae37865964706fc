"""Unit tests for the error taxonomy"""

from libs.result import Error, Return
from src.domain.errors import ERROR_KINDS, ErrorCode, ErrorKind, kind_of


def test_every_code_has_a_kind():
    assert set(ERROR_KINDS) == set(ErrorCode)


def test_kind_lookup_accepts_plain_strings():
    assert kind_of("INSUFFICIENT_BALANCE") == ErrorKind.INSUFFICIENT_BALANCE
    assert kind_of("ORDER_EXPIRED") == ErrorKind.EXPIRED
    assert kind_of("SOMETHING_ELSE") == ErrorKind.STORAGE_ERROR


def test_error_unwraps_enum_codes():
    error = Error(code=ErrorCode.CODE_UNUSABLE, message="nope")

    assert error.code == "CODE_UNUSABLE"
    assert error.reason is None


def test_result_accessors():
    ok = Return.ok(5)
    err = Return.err(Error(code=ErrorCode.FORBIDDEN, message="no"))

    assert ok.is_ok() and ok.value == 5 and ok.error is None
    assert err.is_err() and err.error.code == "FORBIDDEN"
