class ProcurementError(Exception):
    """Base for errors scoped to a single tracker operation.

    `status_code` is the HTTP status the API answers with; `extra` is merged
    into the JSON error body next to `detail`.
    """

    status_code = 400

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra


class DraftValidationError(ProcurementError):
    status_code = 422

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            f"Missing required fields: {', '.join(missing_fields)}",
            missing_fields=missing_fields,
        )
        self.missing_fields = missing_fields


class RequestNotFound(ProcurementError):
    status_code = 404

    def __init__(self, request_id: str):
        super().__init__(f"Request not found: {request_id}", request_id=request_id)
        self.request_id = request_id


class UnsupportedTransition(ProcurementError):
    status_code = 409

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot move a request from '{current}' to '{requested}'",
            current=current,
            requested=requested,
        )
        self.current = current
        self.requested = requested


class InvalidStatusFilter(ProcurementError):
    def __init__(self, value: str):
        super().__init__(f"Unknown status filter: {value}", value=value)


class UnknownTransitionTarget(ProcurementError):
    def __init__(self, value: str):
        super().__init__(f"Unknown action or status: {value}", value=value)
