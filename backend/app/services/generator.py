"""Landing page generation using the OpenRouter chat completions API."""
import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.schemas.site import GeneratedPage, SitePrompt
from app.utils.exceptions import GenerationFailed
from app.utils.logger import logger, mask_secret

SYSTEM_INSTRUCTION = """
You are an expert web developer and UI/UX designer.
Your task is to generate a complete, responsive, single-page landing page based on the user's requirements.

Rules:
1. Output ONLY valid HTML5 code with embedded CSS using Tailwind CSS classes via CDN.
2. Do NOT use external CSS files. Use <script src="https://cdn.tailwindcss.com"></script> in the head.
3. Use FontAwesome for icons: <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.0.0/css/all.min.css" />
4. Use placeholder images from https://picsum.photos/width/height where appropriate.
5. The design must be modern, clean, and mobile-responsive.
6. Include a Hero section, Features section, and a Call to Action footer at minimum.
7. Ensure high contrast and accessibility.

Respond with a single JSON object and nothing else, with keys:
- "html": the full HTML5 document string including <html>, <head>, and <body> tags
- "seoTitle": a catchy SEO title for the page
- "seoDescription": a meta description for search engines
""".strip()


def build_user_prompt(prompt: SitePrompt) -> str:
    """Render the structured prompt as the user message."""
    return (
        f"Create a landing page for a {prompt.business_type} business named \"{prompt.title}\".\n"
        f"Target Audience: {prompt.target_audience}.\n"
        f"Color Theme: {prompt.color_theme}.\n"
        f"Key Features/Sections: {prompt.features}.\n"
        f"Main CTA Button Text: {prompt.cta_text}.\n\n"
        "Return a JSON object with the HTML string, a recommended SEO title, and a short SEO description."
    )


class ContentGenerator(ABC):
    """Turns a structured prompt into a complete HTML document plus SEO metadata.

    One call, no streaming, no retries.
    """

    @abstractmethod
    async def generate(self, prompt: SitePrompt) -> GeneratedPage:
        """Generate a page or raise GenerationFailed."""


class OpenRouterContentGenerator(ContentGenerator):
    """Content generator calling an OpenRouter-hosted model."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = settings.generator_api_key
        self.model = settings.generator_model
        self.base_url = settings.generator_base_url
        self.max_tokens = settings.generator_max_tokens
        self.timeout = settings.generator_timeout_seconds
        self._transport = transport

        if not self.api_key:
            raise ValueError("API key required. Set GENERATOR_API_KEY environment variable.")

        logger.info(f"[GENERATOR] Initialized with model: {self.model}, API key: {mask_secret(self.api_key, 10)}")

    def _messages(self, prompt: SitePrompt) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": build_user_prompt(prompt)},
        ]

    async def _run_completion(self, prompt: SitePrompt) -> str:
        """
        Run one chat completion.

        Args:
            prompt: Structured prompt

        Returns:
            The model's reply text
        """
        payload = {
            "model": self.model,
            "messages": self._messages(prompt),
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "Landing Page Builder",
        }

        logger.info(f"[GENERATOR] Requesting page for \"{prompt.title}\" from {self.model}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.base_url, json=payload, headers=headers)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            error_message = e.response.text
            try:
                error_json = e.response.json()
                if "error" in error_json:
                    error_message = error_json["error"].get("message", error_message)
            except (ValueError, AttributeError):
                pass
            logger.error(f"[GENERATOR] HTTP error: {e.response.status_code} - {error_message}")
            raise GenerationFailed(f"Generation request failed ({e.response.status_code}): {error_message}") from e
        except httpx.HTTPError as e:
            logger.error(f"[GENERATOR] Request failed: {e}", exc_info=True)
            raise GenerationFailed(f"Generation request failed: {e}") from e
        except ValueError as e:
            raise GenerationFailed("Generator returned a non-JSON response") from e

        try:
            return result["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationFailed(f"Unexpected response format: {str(result)[:200]}") from e

    @staticmethod
    def _parse_json_from_text(text: str) -> Dict[str, Any]:
        """Extract the JSON object from model response text."""
        # Models sometimes wrap the object in prose or a ```json fence
        json_match = re.search(r'\{.*\}', text, re.DOTALL)
        if json_match:
            try:
                parsed = json.loads(json_match.group())
                if isinstance(parsed, dict):
                    return parsed
            except json.JSONDecodeError:
                pass

        logger.warning(f"[GENERATOR] Could not parse JSON from response: {text[:200]}")
        raise GenerationFailed("Generator reply was not a JSON object")

    async def generate(self, prompt: SitePrompt) -> GeneratedPage:
        text = await self._run_completion(prompt)
        if not text.strip():
            raise GenerationFailed("No response from AI")

        data = self._parse_json_from_text(text)
        html = data.get("html")
        if not isinstance(html, str) or not html.strip():
            raise GenerationFailed("Generator reply is missing the html document")

        page = GeneratedPage(
            content=html,
            seo_title=str(data.get("seoTitle") or ""),
            seo_description=str(data.get("seoDescription") or ""),
        )
        logger.info(f"[GENERATOR] Generated {len(page.content)} characters for \"{prompt.title}\"")
        return page
