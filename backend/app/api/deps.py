"""
Shared API dependencies.
"""

from fastapi import Header


async def get_caller(x_caller_id: str = Header(..., description="Identity performing the operation")) -> str:
    """Caller identity from the X-Caller-Id header."""
    return x_caller_id
