"""
Transaction Signer - handles transaction signing.

Wraps an eth-account local account. Keys are supplied by the caller; this
module never stores or encrypts them.
"""

from typing import Optional

import structlog
from eth_account import Account
from eth_account.signers.local import LocalAccount

from multisend.config import MultiSendConfig, get_config

logger = structlog.get_logger(__name__)


class TransactionSigner:
    """
    Signs transactions with a single account.
    
    Usage:
        ```python
        signer = TransactionSigner.from_key("0x...")
        sending = assembler.connect(signer)
        ```
    """
    
    def __init__(self, account: LocalAccount):
        """
        Initialize the signer.
        
        Args:
            account: eth-account local account holding the key
        """
        self._account = account
    
    @classmethod
    def from_key(cls, private_key: str) -> "TransactionSigner":
        """
        Build a signer from a hex-encoded private key.
        
        Args:
            private_key: 32-byte key as hex, with or without 0x prefix
        """
        account = Account.from_key(private_key)
        logger.info("signing_key_loaded", address=account.address[:10] + "...")
        return cls(account)
    
    @classmethod
    def from_config(cls, config: Optional[MultiSendConfig] = None) -> "TransactionSigner":
        """Build a signer from the configured signing key."""
        config = config or get_config()
        if config.signing_key is None:
            raise ValueError("No signing key configured")
        return cls.from_key(config.signing_key.get_secret_value())
    
    @property
    def address(self) -> str:
        """Checksum address of the signing account."""
        return self._account.address
    
    def sign_transaction(self, tx: dict) -> bytes:
        """
        Sign a fully populated transaction dict.
        
        Args:
            tx: Transaction parameters (to, data, value, gas, nonce, chainId, fees)
            
        Returns:
            Raw signed transaction bytes ready for broadcast
        """
        signed = self._account.sign_transaction(tx)
        logger.debug("transaction_signed", tx_hash=signed.hash.hex()[:18] + "...")
        return bytes(signed.raw_transaction)
    
    def __repr__(self) -> str:
        return f"TransactionSigner(address={self.address})"


def generate_test_key() -> TransactionSigner:
    """
    Generate a new random signer for testing.
    
    WARNING: Do not use in production. The key is not persisted.
    """
    account = Account.create()
    logger.warning("test_key_generated", address=account.address[:10] + "...")
    return TransactionSigner(account)
