"""Internship application submission endpoint."""

import time

from robyn import Request, Response, status_codes

from app.core.errors import IntakeError
from app.core.logger import LogIcon, logger
from app.core.router import Router, json_response
from app.middlewares.cors import cors_headers
from app.models.application import ErrorResponse, SubmissionResponse
from app.models.core import FormData
from app.services.intake import ApplicationIntake, ClientInfo

router = Router(__file__)

ENDPOINT = "/applications"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip=getattr(request, "ip_addr", None),
        user_agent=request.headers.get("user-agent"),
    )


async def handle_submission(intake: ApplicationIntake, form: FormData, client: ClientInfo) -> Response:
    """Run a decoded submission through intake and render the outcome.

    Validation and store failures are reported separately from body decode
    failures, which never reach this point.
    """
    started = time.perf_counter()
    try:
        application_id = await intake.submit(form, client)
    except IntakeError as ex:
        logger.warning("Submission rejected", icon=LogIcon.FORBIDDEN, error=ex.code)
        return json_response(ex.status_code, ErrorResponse(**ex.to_dict(), duration=_elapsed_ms(started)))
    except Exception as ex:
        logger.error("Submission failed", icon=LogIcon.ERROR, error=str(ex))
        payload = ErrorResponse(error="Processing failed", duration=_elapsed_ms(started))
        return json_response(status_codes.HTTP_500_INTERNAL_SERVER_ERROR, payload)

    duration = _elapsed_ms(started)
    logger.info("Application received", icon=LogIcon.LATENCY, id=application_id, duration_ms=duration)
    return json_response(status_codes.HTTP_200_OK, SubmissionResponse(application_id=application_id, duration=duration))


@router.post(ENDPOINT)
async def submit_application(request: Request, form: FormData, global_dependencies) -> Response:
    """Validate a submission, persist it, and return its application id."""
    intake: ApplicationIntake = global_dependencies["state"].intake
    return await handle_submission(intake, form, client_info(request))


@router.options(ENDPOINT)
async def preflight() -> Response:
    # Robyn skips after_request hooks on OPTIONS
    return Response(status_code=status_codes.HTTP_204_NO_CONTENT, headers=cors_headers(), description="")


async def method_not_allowed() -> Response:
    return json_response(
        status_codes.HTTP_405_METHOD_NOT_ALLOWED,
        ErrorResponse(error="Method not allowed"),
        headers={"allow": "POST, OPTIONS"},
    )


for _register in (router.get, router.put, router.patch, router.delete):
    _register(ENDPOINT)(method_not_allowed)
