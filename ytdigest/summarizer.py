"""Digest generation — one model call per digest, then reconciliation.

Works with any LLM that exposes an OpenAI-compatible API.

Setup — pick ONE provider (in .env or the environment):

  # OpenRouter
  DIGEST_LLM_API_KEY=sk-or-v1-your-key-here
  DIGEST_LLM_BASE_URL=https://openrouter.ai/api/v1
  DIGEST_LLM_MODEL=anthropic/claude-sonnet-4.5

  # OpenAI (direct)
  OPENAI_API_KEY=sk-...

  # Ollama (local)
  DIGEST_LLM_BASE_URL=http://localhost:11434/v1
  DIGEST_LLM_MODEL=llama3
  DIGEST_LLM_API_KEY=ollama
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from openai import AuthenticationError, OpenAI, OpenAIError, RateLimitError
from pydantic import ValidationError

from .chapters import extract_chapters
from .config import Settings
from .errors import UpstreamModelFailure
from .extractors import combine_urls
from .prompts import build_prompts
from .reconcile import reconcile
from .schemas import DigestResult, StructuredDigest, TranscriptEntry, VideoMetadata
from .timestamps import parse_iso_duration

logger = logging.getLogger(__name__)


def _strip_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.split("\n", 1)[-1].rsplit("```", 1)[0].strip()
    return raw


class DigestGenerator:
    """Send prompts to the model and parse the reply into a StructuredDigest.

    The client is anything shaped like ``openai.OpenAI``; tests hand in a
    stub.
    """

    def __init__(self, client: Any, model: str, temperature: float = 0.2) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> "DigestGenerator":
        if not settings.llm_api_key:
            raise UpstreamModelFailure(
                "No LLM API key configured. Set DIGEST_LLM_API_KEY or OPENAI_API_KEY."
            )
        client_kwargs: dict[str, Any] = {"api_key": settings.llm_api_key}
        if settings.llm_base_url:
            client_kwargs["base_url"] = settings.llm_base_url
        return cls(OpenAI(**client_kwargs), settings.llm_model)

    def generate(self, system_prompt: str, user_prompt: str) -> StructuredDigest:
        logger.info("Calling LLM: model=%s (%d prompt chars)", self.model, len(user_prompt))
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except AuthenticationError as exc:
            raise UpstreamModelFailure(
                "Invalid LLM API key. Check DIGEST_LLM_API_KEY / OPENAI_API_KEY."
            ) from exc
        except RateLimitError as exc:
            raise UpstreamModelFailure(
                "LLM rate limit exceeded. Please wait and try again."
            ) from exc
        except OpenAIError as exc:
            raise UpstreamModelFailure(f"Failed to generate digest: {exc}") from exc

        raw = _strip_fences(response.choices[0].message.content or "")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise UpstreamModelFailure(f"Model did not return JSON: {exc}") from exc
        try:
            digest = StructuredDigest.model_validate(data)
        except ValidationError as exc:
            raise UpstreamModelFailure(f"Model output does not match the digest schema: {exc}") from exc

        logger.info("LLM digest received (%d sections)", len(digest.sections))
        return digest


def generate_digest(
    transcript: Sequence[TranscriptEntry],
    metadata: VideoMetadata,
    generator: DigestGenerator,
) -> DigestResult:
    """Run the whole core for one video.

    Creator chapters (when the description has valid ones) become a hard
    constraint in the prompt and switch off tangent merging afterwards.
    """
    chapters = extract_chapters(metadata.description, metadata.duration)
    has_creator_chapters = chapters is not None
    urls = combine_urls(metadata.description, metadata.pinned_comment)

    system_prompt, user_prompt = build_prompts(
        metadata,
        transcript,
        urls,
        duration_seconds=parse_iso_duration(metadata.duration),
        chapters=chapters,
    )
    raw = generator.generate(system_prompt, user_prompt)
    digest = reconcile(raw, has_creator_chapters=has_creator_chapters)
    return DigestResult(metadata=metadata, digest=digest, has_creator_chapters=has_creator_chapters)

