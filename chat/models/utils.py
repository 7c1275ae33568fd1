"""ID generation utility."""

import secrets


def gen_id(prefix: str) -> str:
    """Generate IDs with a type prefix: msg_xxx, call_xxx, chat_xxx"""
    return f"{prefix}{secrets.token_urlsafe(12)}"
