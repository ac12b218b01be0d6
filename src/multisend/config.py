"""
Configuration management for the multi-send client.

Supports configuration via environment variables and .env files.
"""

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class MultiSendConfig(BaseSettings):
    """
    Configuration settings for the multi-send client.
    
    All settings can be configured via environment variables with the MULTISEND_ prefix.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="MULTISEND_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    # Connection settings
    rpc_url: Optional[str] = Field(
        default=None,
        description="JSON-RPC endpoint used when no client is supplied"
    )
    
    # Contract settings
    contract_address: Optional[str] = Field(
        default=None,
        description="Address of the deployed multi-send contract"
    )
    
    # Gas defaults (per-call options take precedence)
    default_gas_limit: Optional[int] = Field(
        default=None,
        ge=1,
        description="Gas limit applied to batch calls when not given per call"
    )
    default_gas_price: Optional[int] = Field(
        default=None,
        ge=0,
        description="Gas price in wei applied to batch calls when not given per call"
    )
    approve_gas_limit: int = Field(
        default=100_000,
        ge=1,
        description="Gas limit used for token approvals when not given per call"
    )
    
    # Signing settings
    signing_key: Optional[SecretStr] = Field(
        default=None,
        description="Hex-encoded private key used by the CLI to build a signer"
    )
    
    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )


# Global config instance
_config: Optional[MultiSendConfig] = None


def get_config() -> MultiSendConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = MultiSendConfig()
    return _config


def set_config(config: MultiSendConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
