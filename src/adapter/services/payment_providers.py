"""Builds the payment provider registry from configuration"""

import logging
from typing import Optional
import httpx
from src.app.services.payment_provider import PaymentProviderRegistry
from .alipay_provider import AlipayProvider
from .wechat_provider import WechatProvider

logger = logging.getLogger(__name__)


def create_payment_provider_registry(config, http_client: Optional[httpx.AsyncClient] = None) -> PaymentProviderRegistry:
    """
    Register every provider enabled in config

    Args:
        config: ApplicationConfig (or any object with the same attributes)
        http_client: Optional shared client handed to the adapters

    Returns:
        PaymentProviderRegistry, possibly empty
    """
    registry = PaymentProviderRegistry()

    if config.ALIPAY_ENABLED:
        registry.register(
            AlipayProvider.from_key_files(
                config.ALIPAY_APP_ID,
                config.ALIPAY_PRIVATE_KEY_PATH,
                config.ALIPAY_PUBLIC_KEY_PATH,
                gateway=config.ALIPAY_GATEWAY,
                notify_url=config.ALIPAY_NOTIFY_URL,
                return_url=config.ALIPAY_RETURN_URL,
                http_client=http_client,
            )
        )

    if config.WECHAT_ENABLED:
        registry.register(
            WechatProvider(
                app_id=config.WECHAT_APP_ID,
                mch_id=config.WECHAT_MCH_ID,
                api_key=config.WECHAT_API_KEY,
                gateway=config.WECHAT_GATEWAY,
                notify_url=config.WECHAT_NOTIFY_URL,
                http_client=http_client,
            )
        )

    logger.info(f"Payment providers enabled: {registry.names() or 'none'}")
    return registry
