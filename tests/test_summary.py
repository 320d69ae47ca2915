"""Tests for the AI summary and its rule-based fallback."""

import json
from datetime import date
from typing import Any

import httpx
import pytest
import respx

from gh_year_report.config import AIConfig
from gh_year_report.models import TopLanguage, TopRepository, YearlyStatistics
from gh_year_report.summary import (
    DISABLED_REASON,
    AiSummary,
    SummaryRequest,
    _SummaryError,
    build_chat_payload,
    build_fallback_summary,
    build_prompt_data,
    generate_ai_summary,
    parse_summary_content,
)

AI_BASE_URL = "https://llm.example.test/v1"
COMPLETIONS_URL = f"{AI_BASE_URL}/chat/completions"
API_KEY = "sk-test-abcdefghijklmnop"


@pytest.fixture
def settings() -> AIConfig:
    return AIConfig(base_url=AI_BASE_URL, model="test-model", timeout_seconds=5)


@pytest.fixture
def request_data() -> SummaryRequest:
    stats = YearlyStatistics(
        total_contributions=1234,
        average_contributions_per_day=3.37,
        max_contributions_in_a_day=42,
        max_contributions_date=date(2024, 3, 5),
        max_contributions_month="2024-03",
        longest_streak=21,
        longest_streak_start_date=date(2024, 2, 1),
        longest_streak_end_date=date(2024, 2, 21),
        longest_gap=9,
        longest_gap_start_date=date(2024, 8, 1),
        longest_gap_end_date=date(2024, 8, 9),
    )
    return SummaryRequest(
        username="octocat",
        year=2024,
        stats=stats,
        issues_count=17,
        top_languages=[
            TopLanguage(language="Python", bytes=600, ratio=0.6),
            TopLanguage(language="Go", bytes=300, ratio=0.3),
            TopLanguage(language="Shell", bytes=50, ratio=0.05),
            TopLanguage(language="HTML", bytes=50, ratio=0.05),
        ],
        top_repos=[
            TopRepository(name_with_owner="octocat/hello-world", commits=120),
            TopRepository(name_with_owner="octocat/spoon-knife", commits=30),
        ],
    )


def _completion(content: Any) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


VALID_CONTENT = json.dumps(
    {
        "intro": "A steady year.",
        "sections": [
            {"heading": "Rhythm", "content": "Busy in March."},
            {"heading": "Focus", "content": "Mostly Python."},
            {"heading": "Outlook", "content": "Keep going."},
        ],
    }
)


class TestFallbackSummary:
    """Tests for the rule-based summary."""

    def test_fallback_sections(self, request_data: SummaryRequest) -> None:
        """Test the intro and the three fixed sections."""
        summary = build_fallback_summary(request_data, "because")

        assert summary.mode == "fallback"
        assert summary.reason == "because"
        assert summary.intro == (
            "You stayed active on GitHub through 2024 with 1,234 contributions, "
            "3.37 per day on average."
        )
        assert [section.heading for section in summary.sections] == [
            "Activity rhythm",
            "Highlight",
            "Collaboration",
        ]
        assert "Mar 2024" in summary.sections[0].content
        assert "21 days" in summary.sections[0].content
        assert summary.sections[1].content == (
            "Mar 5 was the busiest day with 42 contributions."
        )
        assert "17 issues" in summary.sections[2].content
        assert "Aug 1 - Aug 9" in summary.sections[2].content

    def test_fallback_without_activity(self) -> None:
        """Test the fallback for a year without contributions."""
        summary = build_fallback_summary(
            SummaryRequest(username="octocat", year=2024, stats=YearlyStatistics())
        )

        assert summary.reason is None
        assert "no peak month yet" in summary.sections[0].content
        assert summary.sections[1].content == "No contributions were recorded in 2024 yet."
        assert "(--)" in summary.sections[2].content


class TestPrompt:
    """Tests for the chat request body."""

    def test_prompt_data(self, request_data: SummaryRequest) -> None:
        """Test the statistics serialized into the prompt."""
        data = build_prompt_data(request_data)

        assert data["totalContributions"] == 1234
        assert data["mostActiveMonth"] == "2024-03"
        assert data["maxContributionsDate"] == "2024-03-05"
        assert data["issuesCount"] == 17
        assert data["topLanguages"] == "#1 Python, #2 Go, #3 Shell"
        assert data["topRepos"] == "octocat/hello-world(120), octocat/spoon-knife(30)"

    def test_chat_payload(self, request_data: SummaryRequest, settings: AIConfig) -> None:
        """Test model, sampling and JSON response format."""
        payload = build_chat_payload(request_data, settings)

        assert payload["model"] == "test-model"
        assert payload["temperature"] == 0.3
        assert payload["response_format"] == {"type": "json_object"}
        assert [message["role"] for message in payload["messages"]] == ["system", "user"]
        assert '"username": "octocat"' in payload["messages"][1]["content"]


class TestParseSummaryContent:
    """Tests for validating the model's answer."""

    def test_valid_content(self) -> None:
        summary = parse_summary_content(VALID_CONTENT)

        assert summary.mode == "ai"
        assert summary.intro == "A steady year."
        assert len(summary.sections) == 3
        assert summary.reason is None

    def test_extra_sections_truncated(self) -> None:
        """Test that only the first three sections are kept."""
        content = json.dumps(
            {
                "intro": "Hi",
                "sections": [{"heading": str(idx), "content": "x"} for idx in range(5)],
            }
        )

        summary = parse_summary_content(content)

        assert [section.heading for section in summary.sections] == ["0", "1", "2"]

    def test_missing_fields_get_defaults(self) -> None:
        """Test default heading and stringified content."""
        content = json.dumps({"intro": "Hi", "sections": [{"content": 42}, "bad"]})

        summary = parse_summary_content(content)

        assert summary.sections[0].heading == "Analysis"
        assert summary.sections[0].content == "42"
        assert summary.sections[1].heading == "Analysis"
        assert summary.sections[1].content == ""

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            (None, "empty content"),
            ("", "empty content"),
            ("not json", "invalid JSON"),
            ("[1, 2]", "schema is invalid"),
            ('{"intro": "", "sections": [{}]}', "schema is invalid"),
            ('{"intro": "Hi", "sections": []}', "schema is invalid"),
        ],
    )
    def test_invalid_content(self, content: str | None, message: str) -> None:
        with pytest.raises(_SummaryError, match=message):
            parse_summary_content(content)


class TestGenerateAiSummary:
    """Tests for generate_ai_summary."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_disabled(self, request_data: SummaryRequest) -> None:
        """Test that a disabled summary makes no request."""
        route = respx.post(COMPLETIONS_URL)
        settings = AIConfig(base_url=AI_BASE_URL, enabled=False)

        summary = await generate_ai_summary(request_data, settings, API_KEY)

        assert not route.called
        assert summary.mode == "fallback"
        assert summary.reason == DISABLED_REASON

    @pytest.mark.asyncio
    async def test_missing_api_key(self, request_data: SummaryRequest, settings: AIConfig) -> None:
        summary = await generate_ai_summary(request_data, settings, None)

        assert summary.mode == "fallback"
        assert summary.reason == DISABLED_REASON

    @pytest.mark.asyncio
    @respx.mock
    async def test_ai_success(self, request_data: SummaryRequest, settings: AIConfig) -> None:
        """Test a valid completion is returned in ai mode."""
        route = respx.post(COMPLETIONS_URL).mock(return_value=_completion(VALID_CONTENT))

        summary = await generate_ai_summary(request_data, settings, API_KEY)

        assert isinstance(summary, AiSummary)
        assert summary.mode == "ai"
        assert summary.sections[1].content == "Mostly Python."
        sent = route.calls.last.request
        assert sent.headers["Authorization"] == f"Bearer {API_KEY}"
        assert json.loads(sent.content)["model"] == "test-model"

    @pytest.mark.asyncio
    @respx.mock
    async def test_reuses_http_client(
        self, request_data: SummaryRequest, settings: AIConfig
    ) -> None:
        """Test that a provided client is used and left open."""
        respx.post(COMPLETIONS_URL).mock(return_value=_completion(VALID_CONTENT))

        async with httpx.AsyncClient() as client:
            summary = await generate_ai_summary(request_data, settings, API_KEY, client)
            assert not client.is_closed

        assert summary.mode == "ai"

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_status(self, request_data: SummaryRequest, settings: AIConfig) -> None:
        """Test that an error status falls back with the status in the reason."""
        respx.post(COMPLETIONS_URL).mock(return_value=httpx.Response(500, text="overloaded"))

        summary = await generate_ai_summary(request_data, settings, API_KEY)

        assert summary.mode == "fallback"
        assert summary.reason == "AI request failed (500): overloaded"

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self, request_data: SummaryRequest, settings: AIConfig) -> None:
        """Test that a timeout falls back with the configured timeout in the reason."""
        respx.post(COMPLETIONS_URL).mock(side_effect=httpx.ReadTimeout)

        summary = await generate_ai_summary(request_data, settings, API_KEY)

        assert summary.mode == "fallback"
        assert summary.reason == "AI request timed out after 5s"

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error(self, request_data: SummaryRequest, settings: AIConfig) -> None:
        respx.post(COMPLETIONS_URL).mock(side_effect=httpx.ConnectError)

        summary = await generate_ai_summary(request_data, settings, API_KEY)

        assert summary.mode == "fallback"
        assert summary.reason is not None
        assert summary.reason.startswith("AI request failed")

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json_content(
        self, request_data: SummaryRequest, settings: AIConfig
    ) -> None:
        """Test that unparseable model output falls back."""
        respx.post(COMPLETIONS_URL).mock(return_value=_completion("Sure! Here is your summary"))

        summary = await generate_ai_summary(request_data, settings, API_KEY)

        assert summary.mode == "fallback"
        assert summary.reason is not None
        assert summary.reason.startswith("AI returned invalid JSON")

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_choices(self, request_data: SummaryRequest, settings: AIConfig) -> None:
        """Test that a completion without choices falls back."""
        respx.post(COMPLETIONS_URL).mock(return_value=httpx.Response(200, json={"choices": []}))

        summary = await generate_ai_summary(request_data, settings, API_KEY)

        assert summary.mode == "fallback"
        assert summary.reason == "AI returned empty content"

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_body(self, request_data: SummaryRequest, settings: AIConfig) -> None:
        respx.post(COMPLETIONS_URL).mock(return_value=httpx.Response(200, text="<html>"))

        summary = await generate_ai_summary(request_data, settings, API_KEY)

        assert summary.mode == "fallback"
        assert summary.reason is not None
        assert summary.reason.startswith("AI returned a non-JSON body")
