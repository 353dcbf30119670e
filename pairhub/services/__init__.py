from pairhub.services.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceError,
    UpstreamError,
)

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "UpstreamError",
]
