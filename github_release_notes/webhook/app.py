"""FastAPI application receiving GitHub webhooks for tag pushes and releases."""

from typing import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from github_release_notes.configuration.env import Settings, get_settings
from github_release_notes.configuration.exceptions import ConfigurationError
from github_release_notes.configuration.models import PipelineConfig
from github_release_notes.configuration.reconcile import reconcile_pipeline_configuration
from github_release_notes.release_notes.driver import run_release_notes_workflow
from github_release_notes.release_notes.models import ReleaseNotesResult, ReleaseNotesStatus, TriggerContext, TriggerKind

from .events import WebhookPayloadError, decode_payload, extract_release_tag, verify_signature

logger = structlog.get_logger(__name__)

WorkflowRunner = Callable[[PipelineConfig, TriggerContext], Awaitable[ReleaseNotesResult]]

ACKNOWLEDGEMENT = {"message": "Webhook received"}


def create_app(settings: Settings | None = None, runner: WorkflowRunner = run_release_notes_workflow) -> FastAPI:
    """Create the webhook application.

    Args:
        settings: Settings to resolve credentials from (read from the environment when omitted)
        runner: Coroutine running the pipeline for a resolved configuration and trigger

    Returns:
        The FastAPI application
    """
    app = FastAPI(title="github-release-notes webhook")
    app_settings = settings or get_settings()

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/github")
    @app.post("/github-webhook")
    async def handle_github_webhook(request: Request) -> JSONResponse:
        body = await request.body()
        event = request.headers.get("X-GitHub-Event")
        logger.info("Webhook received", github_event=event, delivery=request.headers.get("X-GitHub-Delivery"))

        if app_settings.GITHUB_WEBHOOK_SECRET:
            if not verify_signature(app_settings.GITHUB_WEBHOOK_SECRET, body, request.headers.get("X-Hub-Signature-256")):
                logger.warning("Rejected webhook with invalid signature", github_event=event)
                return JSONResponse({"error": "Invalid signature"}, status_code=401)

        try:
            config = await reconcile_pipeline_configuration(app_settings)
        except ConfigurationError as e:
            logger.error("GitHub or text generation credentials are missing", error=str(e))
            return JSONResponse({"error": "Missing credentials"}, status_code=400)

        try:
            payload = decode_payload(body, request.headers.get("content-type"))
        except WebhookPayloadError as e:
            logger.warning("Rejected malformed webhook payload", error=str(e))
            return JSONResponse({"error": str(e)}, status_code=400)

        tag = extract_release_tag(event, payload)
        if tag is None:
            logger.info("Webhook received but no relevant action", github_event=event)
            return JSONResponse(ACKNOWLEDGEMENT, status_code=200)

        result = await runner(config, TriggerContext(kind=TriggerKind.WEBHOOK, tag=tag))
        status_code = 502 if result.status == ReleaseNotesStatus.ERROR else 200
        return JSONResponse({**ACKNOWLEDGEMENT, "result": result.model_dump(mode="json")}, status_code=status_code)

    return app
