import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./credits.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTH_DISABLED = bool(data.get("AUTH_DISABLED", False))
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))

    # Ledger
    LEDGER_MAX_RETRIES = data.get("LEDGER_MAX_RETRIES", 5)  # CAS attempts per mutation

    # Payment orders
    PAYMENT_ORDER_TTL_MINUTES = data.get("PAYMENT_ORDER_TTL_MINUTES", 30)
    PAYMENT_ORDER_SETTLEMENT_GRACE_SECONDS = data.get("PAYMENT_ORDER_SETTLEMENT_GRACE_SECONDS", 0)
    CREDIT_PRICE_MINOR_UNITS = data.get("CREDIT_PRICE_MINOR_UNITS", 1)  # 1 credit = 1 fen
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "CNY")

    # Redeem codes
    REDEEM_CODE_PREFIX = data.get("REDEEM_CODE_PREFIX", "OL")

    # Registration
    REGISTRATION_TTL_HOURS = data.get("REGISTRATION_TTL_HOURS", 24)
    VERIFICATION_CODE_TTL_MINUTES = data.get("VERIFICATION_CODE_TTL_MINUTES", 10)
    VERIFICATION_BASE_URL = data.get("VERIFICATION_BASE_URL", "http://localhost:5244/api/auth/verify")
    NOTIFICATION_WEBHOOK = data.get("NOTIFICATION_WEBHOOK", None)

    # Alipay (RSA2)
    ALIPAY_ENABLED = bool(data.get("ALIPAY_ENABLED", False))
    ALIPAY_APP_ID = data.get("ALIPAY_APP_ID", "")
    ALIPAY_PRIVATE_KEY_PATH = data.get("ALIPAY_PRIVATE_KEY_PATH", "")
    ALIPAY_PUBLIC_KEY_PATH = data.get("ALIPAY_PUBLIC_KEY_PATH", "")
    ALIPAY_GATEWAY = data.get("ALIPAY_GATEWAY", "https://openapi.alipay.com/gateway.do")
    ALIPAY_NOTIFY_URL = data.get("ALIPAY_NOTIFY_URL", "")
    ALIPAY_RETURN_URL = data.get("ALIPAY_RETURN_URL", "")

    # WeChat Pay (keyed MD5)
    WECHAT_ENABLED = bool(data.get("WECHAT_ENABLED", False))
    WECHAT_APP_ID = data.get("WECHAT_APP_ID", "")
    WECHAT_MCH_ID = data.get("WECHAT_MCH_ID", "")
    WECHAT_API_KEY = data.get("WECHAT_API_KEY", "")
    WECHAT_GATEWAY = data.get("WECHAT_GATEWAY", "https://api.mch.weixin.qq.com/pay/unifiedorder")
    WECHAT_NOTIFY_URL = data.get("WECHAT_NOTIFY_URL", "")

    # Expiry sweep worker
    ORDER_SWEEP_ENABLED = bool(data.get("ORDER_SWEEP_ENABLED", True))
    ORDER_SWEEP_INTERVAL_SECONDS = data.get("ORDER_SWEEP_INTERVAL_SECONDS", 60)

    # Ledger reconciliation worker
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily
