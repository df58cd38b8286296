"""
utils/constants.py

Purpose: Centralized static content

- All user-facing API messages
- Upload limits and accepted image types

(Prevents hardcoding across the codebase)
"""

# ============================================================
# AUTHENTICATION
# ============================================================

EMAIL_IN_USE = "Email in use"

NO_SUCH_USER = "No such user"

WRONG_CREDENTIALS = "Email or password is wrong"

NOT_AUTHORIZED = "Not authorized"

LOGGED_OUT = "user logged out"

# ============================================================
# AVATARS
# ============================================================

NO_FILE_UPLOADED = "No file uploaded"

UNSUPPORTED_IMAGE = "Unsupported image file"

AVATARS_URL_PATH = "/avatars"

# Chunk size used when spooling uploads to disk
UPLOAD_CHUNK_SIZE = 1024 * 1024
