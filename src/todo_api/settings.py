from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .errors import ConfigError

# Required environment variable -> service account / client config key
_SERVICE_ACCOUNT_ENV = {
    "FIREBASE_TYPE": "type",
    "FIREBASE_PROJECT_ID": "project_id",
    "FIREBASE_PRIVATE_KEY": "private_key",
    "FIREBASE_CLIENT_EMAIL": "client_email",
    "FIREBASE_CLIENT_ID": "client_id",
    "FIREBASE_AUTH_URI": "auth_uri",
    "FIREBASE_TOKEN_URI": "token_uri",
    "FIREBASE_AUTH_PROVIDER_CERT_URL": "auth_provider_x509_cert_url",
    "FIREBASE_CLIENT_CERT_URL": "client_x509_cert_url",
}

_CLIENT_ENV = (
    "FIREBASE_STORAGE_BUCKET",
    "FIREBASE_API_KEY",
    "FIREBASE_MESSAGING_SENDER_ID",
    "FIREBASE_APP_ID",
)

REQUIRED_ENV = tuple(_SERVICE_ACCOUNT_ENV) + _CLIENT_ENV


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars (required):
    - FIREBASE_TYPE, FIREBASE_PROJECT_ID, FIREBASE_PRIVATE_KEY, FIREBASE_CLIENT_EMAIL,
      FIREBASE_CLIENT_ID, FIREBASE_AUTH_URI, FIREBASE_TOKEN_URI,
      FIREBASE_AUTH_PROVIDER_CERT_URL, FIREBASE_CLIENT_CERT_URL: admin service account
    - FIREBASE_STORAGE_BUCKET: default storage bucket of the admin app
    - FIREBASE_API_KEY, FIREBASE_MESSAGING_SENDER_ID, FIREBASE_APP_ID: client-facing web app config

    Env vars (optional):
    - FIREBASE_AUTH_DOMAIN: client auth domain (informational)
    - FIREBASE_AUTH_EMULATOR_HOST: host:port of the auth emulator
    - PORT: listen port (default 5000)
    - HOST: listen address (default 0.0.0.0)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - AUTH_STRIP_BEARER_PREFIX: 'true' to strip a leading 'Bearer ' from Authorization
    - LOG_LEVEL: root log level (default INFO)
    """

    service_account: Dict[str, str]
    storage_bucket: str
    api_key: str
    auth_domain: Optional[str]
    messaging_sender_id: str
    app_id: str
    auth_emulator_host: Optional[str]
    host: str
    port: int
    cors_allow_origins: List[str]
    strip_bearer_prefix: bool
    log_level: str

    @property
    def project_id(self) -> str:
        return self.service_account["project_id"]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError as e:
        raise ConfigError(f"PORT must be an integer, got {value!r}") from e
    if not (0 < port < 65536):
        raise ConfigError(f"PORT out of range: {port}")
    return port


# PUBLIC_INTERFACE
def get_settings(load_env_file: bool = True) -> Settings:
    """
    Return application settings loaded from environment variables.

    Raises:
        ConfigError: if any required variable is missing or a value cannot be parsed.
    """
    if load_env_file:
        load_dotenv()

    missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    service_account = {key: os.environ[name] for name, key in _SERVICE_ACCOUNT_ENV.items()}
    # Keys are usually stored on one line with escaped newlines
    service_account["private_key"] = service_account["private_key"].replace("\\n", "\n")

    return Settings(
        service_account=service_account,
        storage_bucket=os.environ["FIREBASE_STORAGE_BUCKET"],
        api_key=os.environ["FIREBASE_API_KEY"],
        auth_domain=os.getenv("FIREBASE_AUTH_DOMAIN") or None,
        messaging_sender_id=os.environ["FIREBASE_MESSAGING_SENDER_ID"],
        app_id=os.environ["FIREBASE_APP_ID"],
        auth_emulator_host=os.getenv("FIREBASE_AUTH_EMULATOR_HOST") or None,
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_port(_get_env("PORT", "5000").strip()),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        strip_bearer_prefix=_parse_bool(_get_env("AUTH_STRIP_BEARER_PREFIX", "false"), False),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
