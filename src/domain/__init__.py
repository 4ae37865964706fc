from .base import BaseModel
from .credit_account import CreditAccount
from .credit_transaction import CreditTransaction, TransactionKind, TransactionSource
from .pricing_rule import PricingRule
from .redeem_code import RedeemCode, RedeemCodeUsage
from .payment_order import PaymentOrder, PaymentOrderStatus
from .user_registration import (
    UserRegistration,
    RegistrationStatus,
    VerificationCode,
    VerificationPurpose,
)
from .user import User
from .errors import ErrorCode, ErrorKind

__all__ = [
    "BaseModel",
    "CreditAccount",
    "CreditTransaction",
    "TransactionKind",
    "TransactionSource",
    "PricingRule",
    "RedeemCode",
    "RedeemCodeUsage",
    "PaymentOrder",
    "PaymentOrderStatus",
    "UserRegistration",
    "RegistrationStatus",
    "VerificationCode",
    "VerificationPurpose",
    "User",
    "ErrorCode",
    "ErrorKind",
]
