"""
Identity backend boundary.

Dependencies: python-jose
System role: Bearer token verification
"""

from edu_assistant.boundary.auth.token_verifier import TokenVerifier, extract_bearer_token

__all__ = ["TokenVerifier", "extract_bearer_token"]
