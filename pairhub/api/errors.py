from pairhub.services.exceptions import ConflictError, NotFoundError, ServiceError, UpstreamError


def status_for_service_error(err: ServiceError) -> int:
    if isinstance(err, NotFoundError):
        return 404
    if isinstance(err, ConflictError):
        return 409
    if isinstance(err, UpstreamError):
        return 502
    return 500
