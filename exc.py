NO_NAME_PROVIDED = "no name was provided in the HTTP body"


class ApplicationError(Exception):
    pass


class ResponseEncodingError(ApplicationError):
    pass


class InvalidRequestError(Exception):
    """Raised when a request cannot be answered with an admission verdict.

    Every subclass renders as the same fixed message, so callers only ever
    see a generic failure. The subclass and `detail` identify the actual
    cause in the logs.
    """

    reason = "InvalidRequest"

    def __init__(self, detail=None):
        super().__init__(NO_NAME_PROVIDED)
        self.detail = detail

    def __str__(self):
        return NO_NAME_PROVIDED


class EmptyBody(InvalidRequestError):
    reason = "EmptyBody"


class DecodeEnvelopeFailed(InvalidRequestError):
    reason = "DecodeEnvelopeFailed"


class UnsupportedResource(InvalidRequestError):
    reason = "UnsupportedResource"


class DecodeObjectFailed(InvalidRequestError):
    reason = "DecodeObjectFailed"
