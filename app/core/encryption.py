from typing import Any, Dict, Iterable, Optional
import logging

from cryptography.fernet import Fernet, InvalidToken

from app.config import settings

logger = logging.getLogger(__name__)

# plaintext field -> encrypted column
PROJECT_SENSITIVE_FIELDS = {
    "budget": "encrypted_budget",
    "sensitive_notes": "encrypted_notes",
}


class FieldEncryption:
    """Fernet field-level encryption for sensitive column values."""

    def __init__(self, key: Optional[str] = None):
        key = key if key is not None else settings.field_encryption_key
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key) if key else None

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def encrypt_field(self, plaintext: str) -> str:
        if not self._fernet:
            raise RuntimeError("Field encryption key is not configured")
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt_field(self, token: str) -> str:
        if not self._fernet:
            raise RuntimeError("Field encryption key is not configured")
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken as e:
            raise ValueError("Encrypted field could not be decrypted") from e

    def encrypt_fields(self, data: Dict[str, Any], fields: Dict[str, str] = PROJECT_SENSITIVE_FIELDS) -> Dict[str, Any]:
        """Replace each plaintext field with its encrypted column. No-op when disabled."""
        if not self.enabled:
            if any(data.get(f) for f in fields):
                logger.warning("Field encryption disabled; storing sensitive fields as plaintext")
            return dict(data)
        result = dict(data)
        for plain_field, encrypted_field in fields.items():
            value = result.pop(plain_field, None)
            if value is not None and value != "":
                result[encrypted_field] = self.encrypt_field(str(value))
        return result

    def decrypt_fields(self, data: Dict[str, Any], fields: Dict[str, str] = PROJECT_SENSITIVE_FIELDS) -> Dict[str, Any]:
        """Inverse of encrypt_fields. A row that fails to decrypt is returned unchanged."""
        if not self.enabled or not any(data.get(col) for col in fields.values()):
            return data
        result = dict(data)
        try:
            for plain_field, encrypted_field in fields.items():
                token = result.pop(encrypted_field, None)
                if token:
                    result[plain_field] = self.decrypt_field(token)
        except ValueError as e:
            logger.error(f"Decryption error for row {data.get('id')}: {e}")
            return data
        return result

    def decrypt_rows(self, rows: Iterable[Dict[str, Any]]) -> list:
        return [self.decrypt_fields(row) for row in rows]


def get_field_encryption() -> FieldEncryption:
    return FieldEncryption()
