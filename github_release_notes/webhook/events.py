"""Parsing and verification of GitHub webhook deliveries."""

import hashlib
import hmac
import json
from typing import Any
from urllib.parse import parse_qs

import structlog

from github_release_notes.utils.github import tag_from_ref

logger = structlog.get_logger(__name__)

RELEASE_EVENT = "release"
PUSH_EVENT = "push"
RELEASE_ACTIONS = frozenset({"created", "published"})
"""Release actions that trigger a run; a delivery without an action is treated as created."""

SIGNATURE_PREFIX = "sha256="


class WebhookPayloadError(ValueError):
    """Raised when a webhook body cannot be decoded into a JSON object."""

    pass


def decode_payload(body: bytes, content_type: str | None) -> dict[str, Any]:
    """Decode a delivery body sent as application/json or as a form with a 'payload' field."""
    try:
        if content_type and content_type.split(";")[0].strip() == "application/x-www-form-urlencoded":
            form = parse_qs(body.decode("utf-8"))
            raw = form.get("payload", ["{}"])[0]
            payload = json.loads(raw)
        else:
            payload = json.loads(body or b"{}")
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise WebhookPayloadError(f"Webhook body is not valid JSON: {e}") from e

    # Some proxies forward the JSON payload as a string inside a JSON object
    if isinstance(payload, dict) and isinstance(payload.get("payload"), str):
        try:
            payload = json.loads(payload["payload"])
        except json.JSONDecodeError as e:
            raise WebhookPayloadError(f"Nested webhook payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise WebhookPayloadError("Webhook payload must be a JSON object")
    return payload


def extract_release_tag(event: str | None, payload: dict[str, Any]) -> str | None:
    """Return the tag a delivery asks release notes for, or None if the delivery is not relevant.

    Relevant deliveries are 'release' events (created or published) and 'push'
    events for a tag ref that was not deleted.
    """
    if event == RELEASE_EVENT:
        release = payload.get("release")
        action = payload.get("action")
        if action is not None and action not in RELEASE_ACTIONS:
            logger.info("Ignoring release event action", action=action)
            return None
        if not isinstance(release, dict):
            logger.info("Ignoring release event without a release object")
            return None
        tag_name = release.get("tag_name")
        return tag_name if isinstance(tag_name, str) and tag_name else None

    if event == PUSH_EVENT:
        if payload.get("deleted"):
            return None
        ref = payload.get("ref")
        return tag_from_ref(ref) if isinstance(ref, str) else None

    return None


def verify_signature(secret: str, body: bytes, signature_header: str | None) -> bool:
    """Check an X-Hub-Signature-256 header against the HMAC-SHA256 of the body."""
    if not signature_header or not signature_header.startswith(SIGNATURE_PREFIX):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature_header[len(SIGNATURE_PREFIX) :])
