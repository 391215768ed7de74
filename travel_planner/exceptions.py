"""
Error taxonomy for the action pipeline.
Each error knows the HTTP status it maps to.
"""

GENERATION_ERROR_MESSAGE = "Failed to generate the travel plan. Please try again shortly."
MISSING_API_KEY_MESSAGE = "The model API key is not configured on the server."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while processing the request."


class TravelPlannerError(Exception):
    """Base error carrying a user-facing message and a status code."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict:
        return {"error": self.message}


class ConfigurationError(TravelPlannerError):
    """Required server configuration (e.g. the model credential) is missing."""

    def __init__(self, message: str = MISSING_API_KEY_MESSAGE):
        super().__init__(message)


class PayloadValidationError(TravelPlannerError):
    """The action payload is malformed."""

    status_code = 400


class UpstreamGenerationError(TravelPlannerError):
    """The model call failed or its output could not be reduced to JSON."""

    def __init__(self, message: str = GENERATION_ERROR_MESSAGE):
        super().__init__(message)


class StoreError(TravelPlannerError):
    """Reading or writing the plan store failed."""
