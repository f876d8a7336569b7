"""
Settings and identity boundary tests
"""

import pytest

from greenlight.core.auth import is_root_user
from greenlight.core.config import Settings


class TestSettings:

    def test_root_users_parsed(self):
        config = Settings(ROOT_USERS=" root@x.com,lead@x.com ,, ")
        assert config.root_users == ["root@x.com", "lead@x.com"]

    def test_root_users_empty(self):
        assert Settings(ROOT_USERS="").root_users == []

    @pytest.mark.parametrize(
        "email, token, expected",
        [
            ("bot@x.com", "secret", True),
            ("bot@x.com", "", False),
            ("", "secret", False),
        ],
    )
    def test_jira_configured(self, email, token, expected):
        config = Settings(JIRA_USER_EMAIL=email, JIRA_API_TOKEN=token)
        assert config.jira_configured is expected

    def test_notification_recipients(self):
        config = Settings(NOTIFICATION_EMAIL_TO="team@x.com, qa@x.com")
        assert config.notification_recipients == ["team@x.com", "qa@x.com"]


class TestIsRootUser:

    def test_exact_match(self):
        assert is_root_user("root@x.com", ["root@x.com"]) is True

    @pytest.mark.parametrize("email", ["Root@x.com", "root@x.co", "", "root@x.com "])
    def test_no_partial_or_case_insensitive_match(self, email):
        assert is_root_user(email, ["root@x.com"]) is False

    def test_empty_allow_list(self):
        assert is_root_user("root@x.com", []) is False
