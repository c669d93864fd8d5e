import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ghostsay.interfaces.speech_output import ISpeechOutput
from ghostsay.server.models import ErrorResponse, MISSING_TEXT_MESSAGE, SayResponse
from ghostsay.speech.sanitizer import sanitize


def create_app(speech_output: ISpeechOutput) -> FastAPI:
    """
    Builds the HTTP app. The only route is GET /say.
    The speech output lives on app.state so each app owns its own.
    """
    app = FastAPI(title="GhostSay", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.speech_output = speech_output

    @app.get(
        "/say",
        response_model=SayResponse,
        responses={400: {"model": ErrorResponse}},
    )
    async def say(request: Request):
        """
        Speak the 'text' query parameter on the host.
        Returns whether the speech command succeeded; the text itself is never echoed.
        """
        values = request.query_params.getlist("text")
        if len(values) != 1:
            logging.info("Rejected /say request without a single 'text' parameter")
            return JSONResponse(
                status_code=400,
                content=ErrorResponse(error=MISSING_TEXT_MESSAGE).model_dump(),
            )

        text = sanitize(values[0])
        succeeded = await request.app.state.speech_output.speak(text)
        return SayResponse.from_result(succeeded)

    return app
