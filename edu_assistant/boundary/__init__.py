"""
Adapters for everything outside the process: PostgreSQL (records, chat log,
pgvector chunks), the embedding and chat model APIs, and bearer-token
verification.
"""
