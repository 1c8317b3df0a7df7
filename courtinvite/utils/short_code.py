# courtinvite/utils/short_code.py
import secrets

# No 0/O or 1/I/L so codes survive being read aloud or retyped
PUBLIC_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
PUBLIC_CODE_LENGTH = 8


def generate_public_code(length: int = PUBLIC_CODE_LENGTH) -> str:
    return "".join(secrets.choice(PUBLIC_CODE_ALPHABET) for _ in range(length))


def normalize_public_code(code: str) -> str:
    return code.strip().upper()
