"""Shared constants used across the application."""

# This file is intended to hold shared constants.

# GitHub Constants
# ----------------

DEFAULT_GITHUB_API_URL = "https://api.github.com"
"""Default GitHub REST API URL (override for GitHub Enterprise Server)."""

GITHUB_MAX_PER_PAGE = 100
"""Largest page size the GitHub REST API accepts for list endpoints."""

RELEASE_NAME_TEMPLATE = "Release {tag}"
"""Display name given to releases created by the publisher."""

MANUAL_TAG_FORMAT = "v%Y%m%d%H%M%S"
"""strftime format of the tag used when a manual run does not name one."""

TAG_REF_PREFIX = "refs/tags/"
"""Prefix of git refs that point at tags in push webhook payloads."""

# Text Generation Constants
# -------------------------

DEFAULT_OPENAI_API_URL = "https://api.openai.com/v1"
"""Base URL of the OpenAI-compatible chat-completions API."""

DEFAULT_OPENAI_MODEL = "gpt-4-turbo"
"""Model requested from the chat-completions API."""

COMMIT_REWRITE_MAX_TOKENS = 150
"""Output token bound for a single rewritten commit message."""

SUMMARY_MAX_TOKENS = 300
"""Output token bound for a summary over several commit messages."""

COMMIT_REWRITE_SYSTEM_PROMPT = "You are an AI assistant that generates well-written commit messages from code changes."

COMMIT_REWRITE_PROMPT = (
    "Analyze the following code changes and generate a clear, professional commit message. "
    "Answer with one concise paragraph:\n\n{changes}"
)

SUMMARY_SYSTEM_PROMPT = "You are an AI assistant specialized in generating clean, structured, and informative release notes."

SUMMARY_PROMPT = (
    "You are an expert technical writer. Convert the following commit messages into a structured, "
    "well-written summary for the category '{category}'. Keep it professional and concise:\n\n{messages}"
)

# Placeholders
# ------------

PLACEHOLDER_DETAILS_UNAVAILABLE = "Unknown commit changes (unable to fetch details)."
"""Used when the per-commit detail request fails."""

PLACEHOLDER_NO_FILES = "Unknown commit changes (no files modified)."
"""Used when a commit touches no files with a diff."""

PLACEHOLDER_MESSAGE_UNAVAILABLE = "Generated commit message unavailable."
"""Used when the model answers without usable content."""

PLACEHOLDER_SERVICE_UNAVAILABLE = "Commit description unavailable (text generation service unreachable)."
"""Used when the text generation request itself fails."""

PLACEHOLDER_NO_SUMMARY = "No summary available."
"""Used when a summary request fails or returns nothing."""

NO_CHANGES_TEXT = "No changes were made in this release window."
"""Body of the document composed for an empty commit window."""

# Release Notes Constants
# -----------------------

DEFAULT_RELEASE_TITLE = "Project Updates"
"""Category title handed to the summarizer for the overall summary."""

DEFAULT_PATCH_EXCERPT_MAX_CHARS = 500
"""Hard character cap applied to every file patch before it enters a prompt."""

DEFAULT_LOOKBACK_DAYS = 30
"""Days before now used as window start when no prior release exists."""

DEFAULT_INSTALL_OFFSET_DAYS = 15
"""Days added to the install date when the install-date anchor is selected."""

DEFAULT_MAX_CONCURRENCY = 4
"""Upper bound on concurrent per-commit detail fetches and rewrites."""

DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
"""Timeout applied to every outbound HTTP request."""

DEFAULT_RELEASE_NOTES_PATH = "release-notes.md"
"""Default path of the local release notes artifact written by manual runs."""

SHORT_SHA_LENGTH = 7
"""Number of SHA characters shown next to each commit entry."""

# Rate Limit Constants
# --------------------

DEFAULT_RATE_LIMIT_RETRIES = 1
"""Retries granted to a request rejected with a rate limit response."""

DEFAULT_RATE_LIMIT_INITIAL_DELAY = 5.0
"""Seconds to wait before retrying when the response carries no hint."""

DEFAULT_RATE_LIMIT_MAX_DELAY = 60.0
"""Upper bound in seconds on any rate limit wait."""
