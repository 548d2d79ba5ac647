"""
Application-level constants for hardcoded business logic.

These values define input validation limits and protocol details and should
NEVER be changed via environment variables. For configurable values
(connection pools, token lifetime, queue sizes, etc.), see
catalog/settings.py.
"""

# ============================================================================
# Input Validation Limits
# ============================================================================

# Minimum length of a book title accepted by addBook
MIN_BOOK_TITLE_LENGTH = 2

# Minimum length of an author name accepted by addBook and addAuthor
MIN_AUTHOR_NAME_LENGTH = 4

# bcrypt only considers the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


# ============================================================================
# Authentication
# ============================================================================

# Authorization scheme marker, compared case-insensitively
BEARER_PREFIX = "bearer "

# Message returned for every failed login, whatever the cause
WRONG_CREDENTIALS_MSG = "wrong credentials"

# Shortest HMAC secret, in bytes, accepted for each signing algorithm
MIN_HMAC_SECRET_BYTES = {"HS256": 32, "HS384": 48, "HS512": 64}


# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# WebSocket close code for policy violations (RFC 6455 standard)
# Used when rejecting subscription connections carrying a bad token
WS_POLICY_VIOLATION_CODE = 1008


# ============================================================================
# Logging
# ============================================================================

# Maximum size of a single structured log line
MAX_LOG_SIZE_BYTES = 250_000
