from typing import Optional


class SlideGenError(Exception):
    """Base class for every error the pipeline surfaces."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class InvalidInputError(SlideGenError):
    status_code = 400


class ExtractionError(SlideGenError):
    status_code = 400


# =========================
# Web fetch failures
# =========================
class FetchError(SlideGenError):
    status_code = 400


class HostNotFoundError(FetchError):
    pass


class FetchTimeoutError(FetchError, TimeoutError):
    pass


class BlockedError(FetchError):
    pass


class NotFoundError(FetchError):
    pass


# =========================
# Generative service failures
# =========================
class ServiceError(SlideGenError):
    status_code = 502

    def __init__(self, message: str, provider: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status = status


class InvalidAIResponseError(SlideGenError):
    status_code = 502


class DeckValidationError(SlideGenError):
    status_code = 422

    def __init__(self, message: str, slide_index: Optional[int] = None):
        super().__init__(message)
        self.slide_index = slide_index
