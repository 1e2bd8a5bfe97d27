"""Tests for expiry_reminder.core.messages — subject and body templates."""

from datetime import date

import pytest

from expiry_reminder.core.messages import (
    EN,
    ZH,
    build_chat_content,
    build_email_html,
    build_short_status,
    build_status,
    build_subject,
    get_templates,
)
from expiry_reminder.data.models import Severity

EXPIRY = date(2026, 3, 22)


class TestSubjectEnglish:
    def test_upcoming(self):
        assert build_subject("Domain X", Severity.UPCOMING, 7, EN) == "[Reminder] Domain X expires in 7 days"

    def test_due_today(self):
        assert build_subject("Domain X", Severity.DUE_TODAY, 0, EN) == "[Urgent] Domain X expires today!"

    def test_overdue_uses_absolute_days(self):
        assert build_subject("Domain X", Severity.OVERDUE, -3, EN) == "[Critical] Domain X overdue by 3 days!"


class TestSubjectChinese:
    def test_upcoming(self):
        assert build_subject("工商银行U盾", Severity.UPCOMING, 30, ZH) == "[提醒] 工商银行U盾 还有 30 天到期"

    def test_due_today(self):
        assert build_subject("CA", Severity.DUE_TODAY, 0, ZH) == "[紧急] CA 今天到期！"

    def test_overdue(self):
        assert build_subject("CA", Severity.OVERDUE, -12, ZH) == "[严重过期] CA 已过期 12 天！"


class TestStatus:
    def test_status_fragments_english(self):
        assert build_status(Severity.UPCOMING, 7, EN) == "7 days remaining"
        assert build_status(Severity.DUE_TODAY, 0, EN) == "Expires today"
        assert build_status(Severity.OVERDUE, -3, EN) == "Overdue by 3 days"

    def test_short_status_chinese(self):
        assert build_short_status(Severity.UPCOMING, 7, ZH) == "7 天"
        assert build_short_status(Severity.DUE_TODAY, 0, ZH) == "今天到期"
        assert build_short_status(Severity.OVERDUE, -3, ZH) == "过期 3 天"


class TestEmailHtml:
    def test_contains_name_status_and_date(self):
        html = build_email_html("Domain X", Severity.UPCOMING, 7, EXPIRY, EN)
        assert "<strong>Domain X</strong>" in html
        assert "7 days remaining" in html
        assert "2026-03-22" in html

    def test_upcoming_is_amber(self):
        html = build_email_html("X", Severity.UPCOMING, 7, EXPIRY)
        assert "#D97706" in html
        assert "剩余天数：" in html

    def test_overdue_is_red(self):
        html = build_email_html("X", Severity.OVERDUE, -2, EXPIRY)
        assert "#DC2626" in html
        assert "已过期 2 天" in html

    def test_name_is_escaped(self):
        html = build_email_html("<script>", Severity.DUE_TODAY, 0, EXPIRY)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestChatContent:
    def test_short_html(self):
        content = build_chat_content("Domain X", Severity.OVERDUE, -3, EXPIRY, EN)
        assert content == (
            "Your asset <b>Domain X</b> needs attention.<br/>"
            'Status: <b style="color:red">Overdue by 3 days</b><br/>'
            "Expiry date: 2026-03-22"
        )


class TestGetTemplates:
    def test_known_locales(self):
        assert get_templates("zh") is ZH
        assert get_templates("en") is EN

    def test_unknown_locale(self):
        with pytest.raises(ValueError):
            get_templates("fr")
