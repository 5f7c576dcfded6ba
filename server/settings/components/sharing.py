"""File sharing settings."""

from server.settings.components import config

# Compared verbatim with the Authorization header of API requests
SHARING_SHARED_SECRET = config('SHARING_SHARED_SECRET', default='')

# Advertised to clients slicing large files; one size for every session
SHARING_MULTIPART_CHUNK_SIZE = config(
    'SHARING_MULTIPART_CHUNK_SIZE',
    cast=int,
    default=8 * 1024 * 1024,
)

# Expired entry sweeps piggyback on requests at most once per interval
SHARING_SWEEP_INTERVAL_SECONDS = config(
    'SHARING_SWEEP_INTERVAL_SECONDS',
    cast=int,
    default=60,
)
SHARING_SWEEP_LIMIT = config('SHARING_SWEEP_LIMIT', cast=int, default=100)

# Lifetime for guest uploads whose link sets none (empty = never expire)
SHARING_DEFAULT_EXPIRATION_DAYS = config(
    'SHARING_DEFAULT_EXPIRATION_DAYS',
    cast=lambda raw: int(raw) if raw else None,
    default='',
)
