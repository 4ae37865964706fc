from .credit_account_repository import CreditAccountRepository
from .credit_transaction_repository import CreditTransactionRepository
from .pricing_rule_repository import PricingRuleRepository
from .redeem_code_repository import RedeemCodeRepository
from .payment_order_repository import PaymentOrderRepository
from .user_registration_repository import (
    UserRegistrationRepository,
    VerificationCodeRepository,
    UserRepository,
)

__all__ = [
    "CreditAccountRepository",
    "CreditTransactionRepository",
    "PricingRuleRepository",
    "RedeemCodeRepository",
    "PaymentOrderRepository",
    "UserRegistrationRepository",
    "VerificationCodeRepository",
    "UserRepository",
]
