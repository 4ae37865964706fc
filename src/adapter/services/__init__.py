from .unit_of_work import SqlAlchemyUnitOfWork
from .notification_service import (
    LoggingNotificationService,
    WebhookNotificationService,
    CompositeNotificationService,
    create_notification_service,
)
from .alipay_provider import AlipayProvider
from .wechat_provider import WechatProvider
from .payment_providers import create_payment_provider_registry

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingNotificationService",
    "WebhookNotificationService",
    "CompositeNotificationService",
    "create_notification_service",
    "AlipayProvider",
    "WechatProvider",
    "create_payment_provider_registry",
]
