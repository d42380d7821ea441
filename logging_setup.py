# ===============================================================
# logging_setup.py
# ===============================================================
import logging
import os
import sys
import re
import sentry_sdk

# ------------------------------------------------
# Environment & log level
# ------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, LOG_LEVEL, logging.INFO)
SENTRY_DSN = os.getenv("SENTRY_DSN")  # optional, leave empty if not using
ENVIRONMENT = os.getenv("ENVIRONMENT", "production")

# ------------------------------------------------
# 🔒 Secret Filter to hide tokens / API keys
# ------------------------------------------------
class SecretFilter(logging.Filter):
    # JWTs and itsdangerous session tokens
    TOKEN_PATTERN = re.compile(r"\b[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{6,}\.[A-Za-z0-9_-]{10,}\b")
    BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)
    KEY_PATTERN = re.compile(
        r"(?:secret|token|key|password|api)[^\s=:'\"]*['\"]?[:=]['\"]?([\w-]+)['\"]?",
        re.IGNORECASE
    )

    def _mask(self, value: str) -> str:
        value = self.BEARER_PATTERN.sub(r"\1[SECRET]", value)
        value = self.TOKEN_PATTERN.sub("[SECRET]", value)
        return value

    def filter(self, record):
        msg = self._mask(str(record.msg))
        msg = self.KEY_PATTERN.sub("[REDACTED]", msg)
        record.msg = msg
        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._mask(str(v)) for k, v in record.args.items()}
            else:
                record.args = tuple(self._mask(str(a)) for a in record.args)
        return True

# ------------------------------------------------
# Configure root logger
# ------------------------------------------------
formatter = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    "%Y-%m-%d %H:%M:%S",
)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(formatter)
handler.addFilter(SecretFilter())

logger = logging.getLogger("GoldenFortune")
logger.setLevel(numeric_level)
logger.addHandler(handler)
logger.propagate = False

# Module loggers (logging.getLogger(__name__)) go through the root logger
root = logging.getLogger()
if not any(getattr(h, "_golden_fortune", False) for h in root.handlers):
    root_handler = logging.StreamHandler(sys.stdout)
    root_handler.setFormatter(formatter)
    root_handler.addFilter(SecretFilter())
    root_handler._golden_fortune = True
    root.addHandler(root_handler)
    root.setLevel(numeric_level)

# ------------------------------------------------
# Ensure uvicorn/gunicorn logs flow through this formatter
# ------------------------------------------------
for noisy in ("uvicorn", "uvicorn.error", "uvicorn.access",
              "gunicorn", "gunicorn.error", "gunicorn.access"):
    logging.getLogger(noisy).handlers = []
    logging.getLogger(noisy).propagate = True

# ------------------------------------------------
# Optional: Initialize Sentry
# ------------------------------------------------
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        traces_sample_rate=1.0,
        environment=ENVIRONMENT,
    )

logger.info("✅ Secure logger initialized (tokens masked from output).")


def capture_exception(exc: BaseException) -> None:
    """Forward an unexpected exception to Sentry (if configured)."""
    if SENTRY_DSN:
        sentry_sdk.capture_exception(exc)
