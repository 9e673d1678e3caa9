class EngineError(Exception):
    """Error base del motor; cada subclase sabe con qué status responder."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(EngineError):
    status_code = 404


class ForbiddenError(EngineError):
    status_code = 403


class InvalidArgumentError(EngineError):
    status_code = 400


class LockTimeoutError(EngineError):
    status_code = 409
