"""Centralized configuration for the Realty AI orchestration core.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/realty-ai/<VARIABLE_NAME>``.

API keys are resolved lazily (see ``api_key_for``) so that only the vendors
actually configured for a model profile need credentials.
"""

from __future__ import annotations

import logging
import os
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))


# ── Secret resolution ────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that local-dev
    fallback still works.
    """
    try:
        import boto3  # noqa: PLC0415 (lazy: only needed on AWS)

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/realty-ai/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _require_env(name: str) -> str:
    """Return a config value from env-var or SSM, or raise a clear error."""
    value = os.getenv(name)
    if value and not value.startswith("your_"):
        return value

    if _ON_AWS:
        ssm_value = _get_ssm_parameter(name)
        if ssm_value:
            return ssm_value

    raise OSError(
        f"Missing required configuration: {name}. "
        f"Set it in .env (local) or SSM Parameter Store /realty-ai/{name} (AWS)."
    )


_API_KEY_VARS = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def api_key_for(vendor: str) -> str:
    """Resolve the API key for a model vendor (``anthropic`` or ``openai``)."""
    try:
        var = _API_KEY_VARS[vendor]
    except KeyError:
        raise ValueError(f"Unsupported model vendor: {vendor!r}") from None
    return _require_env(var)


# ── Model profiles ──────────────────────────────────────────────────
# design: UX/UI-oriented reasoning; logic: business-rule reasoning;
# chat: the tool-calling property assistant.
DESIGN_PROVIDER: str = os.getenv("DESIGN_PROVIDER", "anthropic")
DESIGN_MODEL_NAME: str = os.getenv("DESIGN_MODEL_NAME", "claude-haiku-4-5")

LOGIC_PROVIDER: str = os.getenv("LOGIC_PROVIDER", "openai")
LOGIC_MODEL_NAME: str = os.getenv("LOGIC_MODEL_NAME", "gpt-4o")

CHAT_PROVIDER: str = os.getenv("CHAT_PROVIDER", "openai")
CHAT_MODEL_NAME: str = os.getenv("CHAT_MODEL_NAME", "gpt-4o-mini")

LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
LLM_MAX_RETRIES: int = int(os.getenv("LLM_MAX_RETRIES", "1"))

# Where MIXED requests go when collaboration is off: "ux-ui" or "logic"
MIXED_INTENT_ROUTE: str = os.getenv("MIXED_INTENT_ROUTE", "ux-ui")

# Viewing times are interpreted in the agencies' local time
AGENCY_TIMEZONE: ZoneInfo = ZoneInfo(os.getenv("AGENCY_TIMEZONE", "America/Cancun"))

# ── Persistence (host application API) ──────────────────────────────
STORAGE_API_URL: str | None = os.getenv("STORAGE_API_URL") or None
STORAGE_API_TOKEN: str | None = os.getenv("STORAGE_API_TOKEN") or None
