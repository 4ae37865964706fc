from .credit_account_repository import SqlAlchemyCreditAccountRepository
from .credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from .pricing_rule_repository import SqlAlchemyPricingRuleRepository
from .redeem_code_repository import SqlAlchemyRedeemCodeRepository
from .payment_order_repository import SqlAlchemyPaymentOrderRepository
from .user_registration_repository import (
    SqlAlchemyUserRegistrationRepository,
    SqlAlchemyVerificationCodeRepository,
    SqlAlchemyUserRepository,
)

__all__ = [
    "SqlAlchemyCreditAccountRepository",
    "SqlAlchemyCreditTransactionRepository",
    "SqlAlchemyPricingRuleRepository",
    "SqlAlchemyRedeemCodeRepository",
    "SqlAlchemyPaymentOrderRepository",
    "SqlAlchemyUserRegistrationRepository",
    "SqlAlchemyVerificationCodeRepository",
    "SqlAlchemyUserRepository",
]
