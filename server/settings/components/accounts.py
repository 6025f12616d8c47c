"""Bearer token settings."""

from server.settings.components import config

# Lifetime of an access token issued at login, in seconds
ACCESS_TOKEN_TTL = config('ACCESS_TOKEN_TTL', cast=int, default=3600)
