"""Age encryption of secrets stored in the config file."""

import base64
from pathlib import Path

import pyrage

AGE_PREFIX = "AGE:"
DEFAULT_IDENTITY_FILE = Path.home() / ".config" / "vsprovision" / ".age-identity"


def _load_identity(identity_file: Path) -> pyrage.x25519.Identity:
    """Load the age identity, generating it on first use."""
    if identity_file.exists():
        return pyrage.x25519.Identity.from_str(identity_file.read_text().strip())

    identity_file.parent.mkdir(parents=True, exist_ok=True)
    identity = pyrage.x25519.Identity.generate()
    identity_file.write_text(str(identity))
    identity_file.chmod(0o600)
    return identity


def is_encrypted(value: str) -> bool:
    """Check if a value is age-encrypted."""
    return value.startswith(AGE_PREFIX)


def encrypt(value: str, identity_file: Path = DEFAULT_IDENTITY_FILE) -> str:
    """Encrypt a plaintext secret.

    Args:
        value: Plaintext (already encrypted values are returned unchanged)
        identity_file: Age identity to encrypt to

    Returns:
        ``AGE:`` followed by the base64 of the age ciphertext
    """
    if is_encrypted(value):
        return value
    recipient = _load_identity(identity_file).to_public()
    encrypted = pyrage.encrypt(value.encode(), [recipient])
    return AGE_PREFIX + base64.b64encode(encrypted).decode()


def decrypt(value: str, identity_file: Path = DEFAULT_IDENTITY_FILE) -> str:
    """Decrypt an ``AGE:`` value; plaintext is returned unchanged."""
    if not is_encrypted(value):
        return value
    raw = base64.b64decode(value[len(AGE_PREFIX):])
    return pyrage.decrypt(raw, [_load_identity(identity_file)]).decode()
