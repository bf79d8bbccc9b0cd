"""
auth — User authentication module.

Provides:
  • Access-token (JWT, HMAC-SHA256) creation & verification
  • Opaque refresh tokens, stored as SHA-256 digests
  • Password hashing (bcrypt)
  • Register / Login / Refresh API routes
  • ``get_current_user_id`` FastAPI dependency
"""
