"""
Decrypts an environment-specific ``.env`` file at startup and loads it into the process.
"""

from .bootstrap import DecryptResult, DecryptStatus, EnvironmentDecrypter, decrypt_environment
from .config import load_config

__all__ = ["DecryptResult", "DecryptStatus", "EnvironmentDecrypter", "decrypt_environment", "load_config"]
