from pydantic import BaseModel

SPOKEN_MESSAGE = "Text spoken successfully"
FAILED_MESSAGE = "Failed to execute say command"
MISSING_TEXT_MESSAGE = "Missing or invalid 'text' parameter"


class SayResponse(BaseModel):
    success: bool
    message: str

    @classmethod
    def from_result(cls, succeeded: bool) -> "SayResponse":
        return cls(success=succeeded, message=SPOKEN_MESSAGE if succeeded else FAILED_MESSAGE)


class ErrorResponse(BaseModel):
    error: str
