"""Third-party API clients: OpenRouter, fal and GitHub Actions."""

from goat.clients.fal import FalClient, FalError, FalImage, FalMissingAPIKeyError, FalNoImagesError
from goat.clients.github import GitHubActionsClient, GitHubError, GitHubMissingTokenError
from goat.clients.http import MissingCredentialsError, UpstreamError
from goat.clients.openrouter import (
    GOAT_SYSTEM_PROMPT,
    OpenRouterClient,
    OpenRouterError,
    OpenRouterMissingAPIKeyError,
)

__all__ = [
    "GOAT_SYSTEM_PROMPT",
    "FalClient",
    "FalError",
    "FalImage",
    "FalMissingAPIKeyError",
    "FalNoImagesError",
    "GitHubActionsClient",
    "GitHubError",
    "GitHubMissingTokenError",
    "MissingCredentialsError",
    "OpenRouterClient",
    "OpenRouterError",
    "OpenRouterMissingAPIKeyError",
    "UpstreamError",
]
