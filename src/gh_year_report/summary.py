"""Narrative summary of a year, written by an OpenAI-compatible model.

The summary never fails the report: a rule-based fallback is built from the
statistics first and returned, with a reason, whenever the model cannot be
used or its answer is unusable.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from gh_year_report.config import AIConfig
from gh_year_report.models import CamelModel, TopLanguage, TopRepository, YearlyStatistics
from gh_year_report.report.formatting import (
    format_date_label,
    format_date_range,
    format_month_key,
    format_number,
)

logger = logging.getLogger(__name__)

SECTION_COUNT = 3
DEFAULT_HEADING = "Analysis"
DISABLED_REASON = "AI is disabled or the API key is missing"

SYSTEM_PROMPT = (
    "You are an analyst writing a GitHub year-in-review. Write a restrained, "
    "professional and concise English summary based on the input data. "
    'Respond with JSON of the exact form {"intro": string, "sections": '
    '[{"heading": string, "content": string}]}. sections must contain exactly 3 items.'
)


class AiSection(CamelModel):
    heading: str
    content: str


class AiSummary(CamelModel):
    """Summary shown in the report and stored in the snapshot."""

    mode: Literal["ai", "fallback"]
    intro: str
    sections: tuple[AiSection, ...] = ()
    reason: str | None = None


@dataclass(frozen=True)
class SummaryRequest:
    """Inputs to the summary prompt."""

    username: str
    year: int
    stats: YearlyStatistics
    issues_count: int = 0
    top_languages: list[TopLanguage] = field(default_factory=list)
    top_repos: list[TopRepository] = field(default_factory=list)


class _SummaryError(Exception):
    """An AI response that cannot be used."""


def build_fallback_summary(request: SummaryRequest, reason: str | None = None) -> AiSummary:
    """Rule-based summary built from the statistics alone."""
    stats = request.stats
    year = request.year

    peak_month = (
        format_month_key(stats.max_contributions_month)
        if stats.max_contributions_month
        else "no peak month yet"
    )
    if stats.max_contributions_date:
        highlight = (
            f"{format_date_label(stats.max_contributions_date)} was the busiest day "
            f"with {format_number(stats.max_contributions_in_a_day)} contributions."
        )
    else:
        highlight = f"No contributions were recorded in {year} yet."

    gap_range = format_date_range(stats.longest_gap_start_date, stats.longest_gap_end_date)

    return AiSummary(
        mode="fallback",
        intro=(
            f"You stayed active on GitHub through {year} with "
            f"{format_number(stats.total_contributions)} contributions, "
            f"{format_number(stats.average_contributions_per_day)} per day on average."
        ),
        sections=(
            AiSection(
                heading="Activity rhythm",
                content=(
                    f"Contributions peaked in {peak_month}, and the longest streak "
                    f"lasted {stats.longest_streak} days."
                ),
            ),
            AiSection(heading="Highlight", content=highlight),
            AiSection(
                heading="Collaboration",
                content=(
                    f"You opened {format_number(request.issues_count)} issues in {year}; "
                    f"the longest break was {stats.longest_gap} days ({gap_range})."
                ),
            ),
        ),
        reason=reason,
    )


def build_prompt_data(request: SummaryRequest) -> dict[str, Any]:
    """Data serialized into the user prompt."""
    stats = request.stats
    return {
        "username": request.username,
        "year": request.year,
        "totalContributions": stats.total_contributions,
        "averagePerDay": stats.average_contributions_per_day,
        "longestStreak": stats.longest_streak,
        "longestGap": stats.longest_gap,
        "mostActiveMonth": stats.max_contributions_month,
        "maxContributionsDay": stats.max_contributions_in_a_day,
        "maxContributionsDate": (
            stats.max_contributions_date.isoformat() if stats.max_contributions_date else None
        ),
        "issuesCount": request.issues_count,
        "topLanguages": ", ".join(
            f"#{idx + 1} {item.language}" for idx, item in enumerate(request.top_languages[:3])
        ),
        "topRepos": ", ".join(
            f"{repo.name_with_owner}({repo.commits})" for repo in request.top_repos[:3]
        ),
    }


def build_chat_payload(request: SummaryRequest, settings: AIConfig) -> dict[str, Any]:
    prompt_data = json.dumps(build_prompt_data(request), ensure_ascii=False)
    return {
        "model": settings.model,
        "temperature": settings.temperature,
        "response_format": {"type": "json_object"},
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f"Analyze the following data and reply in JSON: {prompt_data}"},
        ],
    }


def parse_summary_content(content: str | None) -> AiSummary:
    """Validate the model's JSON answer.

    Raises:
        _SummaryError: If the content is empty, not JSON or has the wrong shape.
    """
    if not content:
        raise _SummaryError("AI returned empty content")

    try:
        parsed = json.loads(content)
    except ValueError as e:
        raise _SummaryError(f"AI returned invalid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise _SummaryError("AI response schema is invalid")

    intro = parsed.get("intro")
    sections = parsed.get("sections")
    if not intro or not isinstance(sections, list) or not sections:
        raise _SummaryError("AI response schema is invalid")

    parsed_sections = []
    for item in sections[:SECTION_COUNT]:
        item = item if isinstance(item, dict) else {}
        heading = item.get("heading")
        content_text = item.get("content")
        parsed_sections.append(
            AiSection(
                heading=DEFAULT_HEADING if heading is None else str(heading),
                content="" if content_text is None else str(content_text),
            )
        )

    return AiSummary(mode="ai", intro=str(intro), sections=tuple(parsed_sections))


def _extract_content(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


async def _request_summary(
    client: httpx.AsyncClient,
    request: SummaryRequest,
    settings: AIConfig,
    api_key: str,
) -> AiSummary:
    response = await client.post(
        f"{settings.base_url}/chat/completions",
        json=build_chat_payload(request, settings),
        headers={"Authorization": f"Bearer {api_key}"},
        timeout=settings.timeout_seconds,
    )
    if response.status_code >= 400:
        raise _SummaryError(f"AI request failed ({response.status_code}): {response.text}")

    try:
        payload = response.json()
    except ValueError as e:
        raise _SummaryError(f"AI returned a non-JSON body: {e}") from e

    return parse_summary_content(_extract_content(payload))


async def generate_ai_summary(
    request: SummaryRequest,
    settings: AIConfig,
    api_key: str | None,
    http_client: httpx.AsyncClient | None = None,
) -> AiSummary:
    """Ask the model for a summary, falling back to the rule-based text.

    Args:
        request: Statistics and rankings to summarize.
        settings: Endpoint, model and sampling settings.
        api_key: Bearer key for the endpoint. None disables the request.
        http_client: Client to reuse; a new one is created and closed otherwise.

    Returns:
        The model's summary with mode "ai", or the fallback with mode
        "fallback" and the reason it was used. Never raises for request or
        response failures.
    """
    if not settings.enabled or not api_key:
        logger.info("Using fallback summary: %s", DISABLED_REASON)
        return build_fallback_summary(request, DISABLED_REASON)

    try:
        if http_client is not None:
            summary = await _request_summary(http_client, request, settings, api_key)
        else:
            async with httpx.AsyncClient(timeout=settings.timeout_seconds) as client:
                summary = await _request_summary(client, request, settings, api_key)
    except httpx.TimeoutException:
        reason = f"AI request timed out after {settings.timeout_seconds:g}s"
    except httpx.HTTPError as e:
        reason = f"AI request failed: {e}"
    except _SummaryError as e:
        reason = str(e)
    else:
        logger.info("Generated AI summary with %d sections", len(summary.sections))
        return summary

    logger.warning("Using fallback summary: %s", reason)
    return build_fallback_summary(request, reason)
