"""
JIRA client

Looks up ticket summaries for excluded tickets. Lookup is best effort:
missing credentials or a failed request never fail the caller.
"""

import asyncio
from typing import Iterable, List, Optional

import httpx
import structlog

from greenlight.core.config import Settings, settings
from greenlight.database.release_repository import TicketDetails

logger = structlog.get_logger(__name__)


class JiraClient:
    """JIRA REST v2 client"""

    def __init__(
        self,
        base_url: str = "",
        user_email: str = "",
        api_token: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_email = user_email
        self.api_token = api_token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "JiraClient":
        config = config or settings
        return cls(
            base_url=config.JIRA_BASE_URL,
            user_email=config.JIRA_USER_EMAIL,
            api_token=config.JIRA_API_TOKEN,
            timeout=config.JIRA_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.user_email and self.api_token)

    def browse_url(self, ticket_key: str) -> Optional[str]:
        if not self.base_url:
            return None
        return f"{self.base_url}/browse/{ticket_key}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.user_email, self.api_token),
            headers={"Accept": "application/json"},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _get_issue(self, ticket_key: str) -> httpx.Response:
        async with self._client() as client:
            return await client.get(f"/rest/api/2/issue/{ticket_key}")

    async def fetch_ticket(self, ticket_key: str) -> Optional[TicketDetails]:
        """Ticket details, or None when the lookup fails"""
        log = logger.bind(ticket_key=ticket_key)

        try:
            response = await self._get_issue(ticket_key)
        except httpx.HTTPError as e:
            log.warning("jira_ticket_fetch_error", error=str(e))
            return None

        if not response.is_success:
            log.warning("jira_ticket_fetch_failed", status_code=response.status_code)
            return None

        try:
            summary = response.json()["fields"]["summary"]
        except (ValueError, KeyError, TypeError):
            log.warning("jira_ticket_malformed_response")
            return None

        return TicketDetails(
            key=ticket_key,
            summary=summary,
            url=self.browse_url(ticket_key),
        )

    async def resolve(self, ticket_key: str) -> TicketDetails:
        """
        Always returns details for the key

        - lookup skipped (no credentials): browse URL built from the key
        - lookup failed: key only, summary and url left empty
        """
        if not self.configured:
            return TicketDetails(key=ticket_key, url=self.browse_url(ticket_key))

        details = await self.fetch_ticket(ticket_key)
        if details is None:
            return TicketDetails(key=ticket_key)
        return details

    async def resolve_many(self, ticket_keys: Iterable[str]) -> List[TicketDetails]:
        """Resolve concurrently, keeping the submitted order"""
        return list(await asyncio.gather(*(self.resolve(key) for key in ticket_keys)))

    async def validate_ticket(self, ticket_key: str) -> bool:
        """Whether the ticket exists; False when not configured"""
        if not self.configured:
            return False

        try:
            response = await self._get_issue(ticket_key)
        except httpx.HTTPError as e:
            logger.warning("jira_ticket_validate_error", ticket_key=ticket_key, error=str(e))
            return False

        return response.is_success
