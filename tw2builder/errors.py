from __future__ import annotations

EMPTY_INPUT_MESSAGE = "Input cannot be empty."
MALFORMED_RESPONSE_MESSAGE = "Failed to parse AI response. The generated CSS might be too complex or invalid."
GENERIC_FAILURE_MESSAGE = "Conversion failed."


class ConversionError(Exception):
    """Base for every terminal conversion failure. `kind` is stable for API clients."""

    kind = "conversion"

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class EmptyInputError(ConversionError):
    kind = "empty_input"

    def __init__(self, message: str = EMPTY_INPUT_MESSAGE) -> None:
        super().__init__(message)


class ServiceError(ConversionError):
    """The external call failed outright: no key, network, auth, quota, non-200."""

    kind = "service"

    def __init__(self, message: str = "", status_code: int | None = None) -> None:
        super().__init__(message or GENERIC_FAILURE_MESSAGE)
        self.status_code = status_code


class MalformedResponseError(ConversionError):
    kind = "malformed_response"

    def __init__(self, message: str = MALFORMED_RESPONSE_MESSAGE) -> None:
        super().__init__(message)
