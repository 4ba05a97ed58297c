from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # MongoDB URL including the database name, e.g. mongodb://localhost/web3signer
    database_timeout_ms: int = 10_000  # Upper bound for every storage call
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    session_secret_key: str  # Signs the session cookie
    session_ttl_days: int = 7
    session_https_only: bool = False  # Set to True in production with HTTPS
    cors_origins: list[str] = []
    # Shared salt for deterministic TOTP secrets. Must never be committed to version control.
    mfa_server_salt: str
    mfa_issuer: str = "CAT Web3Signer"  # Issuer shown by authenticator apps
    mfa_window_minutes: int = 5  # How long a pending MFA login stays valid
    mfa_totp_window: int = 2  # Accepted TOTP steps before/after the current one
    recent_messages_limit: int = 10  # Messages returned with login and profile responses

    model_config = {
        "env_file": [".env"],
        "env_prefix": "WEB3SIGNER_",
        "extra": "ignore",
    }
