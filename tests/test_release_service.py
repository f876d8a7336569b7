"""
Release service tests

Orchestration: validation, ticket lookup, persistence, notification
"""

from datetime import date

import httpx
import pytest
from sqlalchemy import func, select

from greenlight.core.release_service import (
    ReleaseService,
    ReleaseValidationError,
    normalize_ticket_keys,
)
from greenlight.database.models.release import Release, ReleaseStatus, ReleaseType
from greenlight.database.release_repository import ReleaseDraft
from greenlight.integrations.jira import JiraClient

from conftest import JIRA_BASE_URL, RecordingNotifier

USER = "a@x.com"


def lookup_handler(request: httpx.Request) -> httpx.Response:
    key = request.url.path.rsplit("/", 1)[-1]
    if key == "ABC-1":
        return httpx.Response(200, json={"fields": {"summary": "Broken login"}})
    return httpx.Response(404)


@pytest.fixture
def configured_jira() -> JiraClient:
    return JiraClient(
        base_url=JIRA_BASE_URL,
        user_email="bot@x.com",
        api_token="secret",
        transport=httpx.MockTransport(lookup_handler),
    )


@pytest.fixture
def service(db_session, jira_client, notifier) -> ReleaseService:
    return ReleaseService(db_session, jira_client, notifier)


class TestNormalizeTicketKeys:

    def test_strips_and_drops_blanks(self):
        assert normalize_ticket_keys([" ABC-1 ", "", "   ", "ABC-2"]) == ["ABC-1", "ABC-2"]

    def test_none(self):
        assert normalize_ticket_keys(None) == []


class TestCreate:

    @pytest.mark.asyncio
    async def test_scenario_go_with_two_tickets(self, service, notifier):
        release = await service.create(
            ReleaseDraft(
                release_date=date(2024, 6, 2),
                status=ReleaseStatus.GO,
                release_type=ReleaseType.FULL,
            ),
            ["ABC-1", "ABC-2"],
            USER,
        )

        assert [t.ticket_key for t in release.tickets] == ["ABC-1", "ABC-2"]
        assert release.created_by == USER
        assert [t.created_by for t in release.tickets] == [USER, USER]
        # Lookup skipped: link built from the key, no summary
        assert [t.ticket_url for t in release.tickets] == [
            f"{JIRA_BASE_URL}/browse/ABC-1",
            f"{JIRA_BASE_URL}/browse/ABC-2",
        ]
        assert all(t.ticket_summary is None for t in release.tickets)

        assert len(notifier.calls) == 1
        notified, action, actor = notifier.calls[0]
        assert notified.id == release.id
        assert action == "Created"
        assert actor == USER

    @pytest.mark.asyncio
    async def test_scenario_no_go_with_explanation(self, service):
        release = await service.create(
            ReleaseDraft(
                release_date=date(2024, 6, 2),
                status=ReleaseStatus.NO_GO,
                explanation="rollback risk",
            ),
            [],
            USER,
        )

        assert release.tickets == []
        assert release.explanation == "rollback risk"
        assert release.release_type == ReleaseType.FULL

    @pytest.mark.asyncio
    @pytest.mark.parametrize("explanation", [None, "", "   "])
    async def test_no_go_requires_explanation(self, service, db_session, notifier, explanation):
        with pytest.raises(ReleaseValidationError):
            await service.create(
                ReleaseDraft(
                    release_date=date(2024, 6, 2),
                    status=ReleaseStatus.NO_GO,
                    explanation=explanation,
                ),
                ["ABC-1"],
                USER,
            )

        count = (await db_session.execute(select(func.count()).select_from(Release))).scalar_one()
        assert count == 0
        assert notifier.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("explanation", ["", "  "])
    async def test_blank_explanation_stored_as_null(self, service, explanation):
        release = await service.create(
            ReleaseDraft(
                release_date=date(2024, 6, 2),
                status=ReleaseStatus.GO,
                explanation=explanation,
            ),
            [],
            USER,
        )

        assert release.explanation is None

    @pytest.mark.asyncio
    async def test_lookup_enriches_and_degrades(self, db_session, configured_jira, notifier):
        service = ReleaseService(db_session, configured_jira, notifier)

        release = await service.create(
            ReleaseDraft(release_date=date(2024, 6, 2), status=ReleaseStatus.GO),
            ["ABC-1", "ABC-404"],
            USER,
        )

        found, missing = release.tickets
        assert found.ticket_summary == "Broken login"
        assert found.ticket_url == f"{JIRA_BASE_URL}/browse/ABC-1"
        assert missing.ticket_key == "ABC-404"
        assert missing.ticket_summary is None
        assert missing.ticket_url is None

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_create(self, db_session, jira_client):
        notifier = RecordingNotifier(error=ConnectionRefusedError("smtp down"))
        service = ReleaseService(db_session, jira_client, notifier)

        release = await service.create(
            ReleaseDraft(release_date=date(2024, 6, 2), status=ReleaseStatus.GO),
            [],
            USER,
        )

        assert len(notifier.calls) == 1
        assert await service.get(release.id) is not None


class TestListAndDelete:

    @pytest.mark.asyncio
    async def test_delete_hides_release(self, service):
        release = await service.create(
            ReleaseDraft(release_date=date(2024, 6, 2), status=ReleaseStatus.GO),
            [],
            USER,
        )

        assert [r.id for r in await service.list_recent()] == [release.id]
        assert await service.delete(release.id, "root@x.com") is True
        assert await service.delete(release.id, "root@x.com") is False
        assert await service.list_recent() == []
