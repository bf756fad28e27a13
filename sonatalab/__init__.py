"""SONATA cipher lab: a didactic SPN block cipher with CBC chaining and
avalanche measurement.

Research / education only. Do NOT use in production.
"""

__version__ = "0.1.0"

from .cipher import decrypt_block, decrypt_stream, encrypt_block, encrypt_stream, random_iv
from .config import Settings, load_settings

__all__ = [
    "decrypt_block",
    "decrypt_stream",
    "encrypt_block",
    "encrypt_stream",
    "random_iv",
    "Settings",
    "load_settings",
]
