"""
Link extraction.

Fetches a booking page, reduces it to plain text and asks the provider to
pull out the fields of one plan item type.
"""

import logging
import re
from typing import Any, Dict, Optional

import httpx

from holiday_planner.operations.base import AIOperation, AIServices
from holiday_planner.operations.config import DEFAULT_CONFIG
from holiday_planner.operations.prompts.builders import build_extraction_prompt
from holiday_planner.operations.prompts.templates import EXTRACT_SYSTEM_PROMPT
from holiday_planner.operations.response_parser import parse_json_object
from holiday_planner.shared.errors import ExtractionError, FetchError, ValidationError
from holiday_planner.shared.settings import get_settings


logger = logging.getLogger(__name__)


EXTRACTABLE_ITEM_TYPES = ("accommodation", "transport", "cost", "itinerary_day")

_SCRIPT_BLOCK = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_BLOCK = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def html_to_text(html: str, max_chars: int = DEFAULT_CONFIG.max_page_chars) -> str:
    """
    Reduce an HTML document to plain text.

    Script and style blocks are dropped, remaining tags become spaces,
    whitespace runs collapse to one space and the result is truncated to
    ``max_chars`` characters.
    """
    text = _SCRIPT_BLOCK.sub("", html)
    text = _STYLE_BLOCK.sub("", text)
    text = _TAG.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text[:max_chars]


class PageFetcher:
    """Fetches web pages for extraction over httpx."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: str = DEFAULT_CONFIG.fetch_user_agent,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._timeout = timeout if timeout is not None else get_settings().link_fetch_timeout
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
        self._transport = transport

    def fetch(self, url: str) -> str:
        """
        Fetch a page body.

        Raises:
            FetchError: If the page is unreachable or answers with a non-2xx status
        """
        try:
            with httpx.Client(
                timeout=self._timeout,
                headers=self._headers,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Page fetch failed | url={url}, error={e}")
            raise FetchError("Failed to fetch URL content") from e

        if not response.is_success:
            raise FetchError(f"Failed to fetch URL: {response.status_code}")
        return response.text


class LinkExtractionOperation(AIOperation):
    name = "link_extraction"
    kind = None
    failure_message = "Link extraction failed"
    required_fields = ("url", "item_type")

    def validate(self, body: Dict[str, Any]) -> None:
        super().validate(body)
        if body["item_type"] not in EXTRACTABLE_ITEM_TYPES:
            raise ValidationError(
                f"item_type must be one of: {', '.join(EXTRACTABLE_ITEM_TYPES)}"
            )

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        fetcher = services.page_fetcher or PageFetcher(user_agent=services.config.fetch_user_agent)
        html = fetcher.fetch(body["url"])
        page_text = html_to_text(html, max_chars=services.config.max_page_chars)
        if len(page_text) < services.config.min_page_chars:
            raise ExtractionError("Unable to extract meaningful content from URL")
        return {"page_text": page_text}

    def generate(
        self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices
    ) -> Dict[str, Any]:
        text = services.provider.complete(
            EXTRACT_SYSTEM_PROMPT,
            [{"role": "user", "content": build_extraction_prompt(context["page_text"], body["item_type"])}],
            max_tokens=services.config.extraction_max_tokens,
        )
        return parse_json_object(text)

    def build_response(
        self, body: Dict[str, Any], result: Any, cached: bool, extras: Dict[str, Any]
    ) -> Dict[str, Any]:
        response = super().build_response(body, result, cached, extras)
        response["source_url"] = body["url"]
        return response
