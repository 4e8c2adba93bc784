"""
AI text endpoints used by the logbook

- classify_skills: technical / soft skill names found in a log (skill aggregation)
- analyze_log_entry: summary, quality score and feedback suggestion for supervisors
- generate_log_entry / generate_final_summary: drafting help for students

Calls are single-shot: no retry or backoff, bounded by the configured timeouts.
"""
from anthropic import AsyncAnthropic
from typing import Optional, Dict, List, Any
import json
import httpx

from chronicle.core.config import settings
from chronicle.core.exceptions import ClassifierError
from chronicle.core.logging_config import logger


SKILLS_SYSTEM_PROMPT = (
    "You extract skills from internship logbook entries. "
    'Respond with JSON only: {"technical": [...], "soft": [...]}. '
    "Use short, canonical skill names (e.g. \"Python\", \"Team Communication\"). "
    "Return empty lists when no skill is evident."
)

ANALYZE_SYSTEM_PROMPT = (
    "You help internship supervisors review weekly logbook entries. "
    'Respond with JSON only: {"summary": "...", "qualityScore": "...", "feedbackSuggestion": "..."}. '
    "qualityScore is one of Excellent, Good, Fair, Needs Improvement."
)

DRAFT_SYSTEM_PROMPT = (
    "You help students write professional weekly internship logbook entries in markdown. "
    "Expand the student's notes into a clear entry describing tasks, skills used and lessons learned. "
    "Do not invent activities that the notes do not mention."
)

SUMMARY_SYSTEM_PROMPT = (
    "You write the final summary of a student's industrial training logbook. "
    "Summarize the key activities, skills gained and overall experience in three to five paragraphs."
)

GENERATE_LOG_FALLBACK = (
    "There was an error generating the log entry content. "
    "Please try again or write it manually."
)
FINAL_SUMMARY_FALLBACK = (
    "There was an error generating the summary. "
    "Please try again or write it manually."
)


def extract_json(content: str) -> Any:
    """Parse a JSON reply, tolerating a surrounding markdown code block"""
    content = content.strip()
    if content.startswith("```"):
        content = content.split("```")[1]
        if content.startswith("json"):
            content = content[4:]
        content = content.strip()
    return json.loads(content)


def _clean_names(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str)]


class LogbookAIClient:
    """Anthropic client wrapper for the logbook's text features"""

    def __init__(self, async_client: Optional[AsyncAnthropic] = None):
        if async_client is None:
            client_kwargs: Dict[str, Any] = {
                "api_key": settings.ANTHROPIC_API_KEY,
                "max_retries": 0,
                "timeout": httpx.Timeout(
                    connect=float(settings.AI_CONNECT_TIMEOUT),
                    read=float(settings.AI_REQUEST_TIMEOUT),
                    write=float(settings.AI_REQUEST_TIMEOUT),
                    pool=float(settings.AI_REQUEST_TIMEOUT)
                ),
            }
            if settings.ANTHROPIC_BASE_URL and settings.ANTHROPIC_BASE_URL.strip():
                client_kwargs["base_url"] = settings.ANTHROPIC_BASE_URL.strip()
                logger.info(f"Using custom AI base URL: {settings.ANTHROPIC_BASE_URL}")
            async_client = AsyncAnthropic(**client_kwargs)

        self.async_client = async_client
        self.model = settings.AI_MODEL

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> str:
        """
        Single completion request.

        Raises:
            ClassifierError: on any transport or API failure
        """
        max_tokens = max_tokens or settings.AI_MAX_TOKENS
        temperature = settings.AI_TEMPERATURE if temperature is None else temperature

        logger.info(f"AI request: model={self.model}, max_tokens={max_tokens}, prompt_len={len(prompt)}")
        try:
            response = await self.async_client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt or "",
                messages=[{"role": "user", "content": prompt}]
            )
        except Exception as e:
            logger.error(
                f"AI API error: {type(e).__name__}: {e}",
                extra={"event_type": "ai_api_error", "error_type": type(e).__name__}
            )
            raise ClassifierError(str(e)) from e

        content = response.content[0].text if response.content else ""
        logger.debug(f"AI response: id={response.id}, stop={response.stop_reason}")
        return content

    async def classify_skills(self, log_content: str) -> Optional[Dict[str, List[str]]]:
        """
        Extract skill names from a log.

        Returns:
            {"technical": [...], "soft": [...]} or None when the reply held no result

        Raises:
            ClassifierError: the request failed or the reply was not JSON
        """
        content = await self.generate(
            prompt=f"Logbook entry:\n\n{log_content}",
            system_prompt=SKILLS_SYSTEM_PROMPT,
            max_tokens=300,
            temperature=0.0
        )
        if not content.strip():
            return None
        try:
            result = extract_json(content)
        except json.JSONDecodeError as e:
            raise ClassifierError(f"Skill extraction reply was not JSON: {e}") from e
        if not isinstance(result, dict):
            return None
        return {
            "technical": _clean_names(result.get("technical")),
            "soft": _clean_names(result.get("soft")),
        }

    async def analyze_log_entry(self, log_content: str) -> Optional[Dict[str, str]]:
        """Supervisor-side review aid; None when analysis is unavailable"""
        try:
            content = await self.generate(
                prompt=f"Logbook entry:\n\n{log_content}",
                system_prompt=ANALYZE_SYSTEM_PROMPT,
                max_tokens=600
            )
            result = extract_json(content)
        except (ClassifierError, json.JSONDecodeError) as e:
            logger.warning(f"Log analysis unavailable: {e}")
            return None
        if not isinstance(result, dict):
            return None
        return {
            "summary": str(result.get("summary", "")),
            "quality_score": str(result.get("qualityScore", "")),
            "feedback_suggestion": str(result.get("feedbackSuggestion", "")),
        }

    async def generate_log_entry(self, week: int, title: str, notes: str) -> str:
        try:
            return await self.generate(
                prompt=f"Week {week}: {title}\n\nNotes:\n{notes}",
                system_prompt=DRAFT_SYSTEM_PROMPT
            )
        except ClassifierError as e:
            logger.warning(f"Log entry generation failed: {e}")
            return GENERATE_LOG_FALLBACK

    async def generate_final_summary(self, log_contents: str) -> str:
        try:
            return await self.generate(
                prompt=f"Approved logbook entries:\n\n{log_contents}",
                system_prompt=SUMMARY_SYSTEM_PROMPT
            )
        except ClassifierError as e:
            logger.warning(f"Final summary generation failed: {e}")
            return FINAL_SUMMARY_FALLBACK
