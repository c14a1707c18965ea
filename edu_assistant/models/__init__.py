"""
API and domain schemas.

Dependencies: pydantic
System role: Shared data contracts between layers
"""
