"""GitHub App authentication: exchange the App key for an installation token."""

import asyncio

import structlog
from github import Auth, GithubException, GithubIntegration  # type: ignore[import-not-found]

from autotag.config.settings import AppSettings
from autotag.exceptions import ConfigurationError, ExternalServiceError

log = structlog.get_logger(__name__)


async def get_installation_token(settings: AppSettings, installation_id: int) -> str:
    """Create an access token for one installation of the GitHub App.

    Args:
        settings: Process settings holding the App id and private key source
        installation_id: Installation id from the webhook payload

    Returns:
        Installation access token

    Raises:
        ConfigurationError: If the App id or private key is not configured
        ExternalServiceError: If GitHub refuses to issue the token
    """
    if settings.app_id is None:
        raise ConfigurationError("GitHub App id not configured: set ATC_APP_ID")

    private_key = settings.private_key()

    def _create_token() -> str:
        integration = GithubIntegration(
            auth=Auth.AppAuth(settings.app_id, private_key),
            base_url=settings.github_base_url,
        )
        return integration.get_access_token(installation_id).token

    try:
        token = await asyncio.to_thread(_create_token)
    except GithubException as e:
        log.error("installation_token_failed", installation_id=installation_id, status=e.status)
        raise ExternalServiceError(
            f"Cannot create access token for installation {installation_id}",
            status_code=e.status,
        ) from e

    log.info("installation_token_created", installation_id=installation_id)
    return token
