"""
Test suite for actionstore.

Focus areas:
- Result normalization (value, awaitable, generator, async generator)
- FIFO serialization of action calls
- Middleware ordering and failure policy
- Commit notification and partial-failure visibility
"""
