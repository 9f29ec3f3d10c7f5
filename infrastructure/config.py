"""Dependency wiring for the BotKnowledge application."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, get_args

from domain.interfaces import (
    ChatCompletionClient,
    KnowledgeDocumentRepository,
    PageFetcher,
    RateLimiter,
)
from infrastructure.llm.openai_compatible_client import CompletionConfig, OpenAICompatibleChatClient
from infrastructure.rate_limiting.sliding_window_rate_limiter import SlidingWindowRateLimiter
from infrastructure.repositories.sqlite_knowledge_document_repository import SqliteKnowledgeDocumentRepository
from infrastructure.text_extraction.file_normalizer import (
    DocxMode,
    ExtractionErrorPolicy,
    FileNormalizer,
    build_extractors,
)
from infrastructure.web.requests_page_fetcher import RequestsPageFetcher

IngestionErrorPolicy = Literal["inline", "mark_error"]

ENV_PREFIX = "BOTKNOWLEDGE_"


@dataclass(slots=True)
class Container:
    """Simple container bundling concrete infrastructure implementations."""

    document_repository: KnowledgeDocumentRepository
    file_normalizer: FileNormalizer
    page_fetcher: PageFetcher
    completion_client: ChatCompletionClient
    rate_limiter: RateLimiter
    config: ContainerConfig


@dataclass(slots=True)
class ContainerConfig:
    """Runtime settings; every field can be overridden through ``BOTKNOWLEDGE_*`` variables."""

    db_path: str = "botknowledge.db"
    fetch_timeout: float = 10.0
    completion_timeout: float = 15.0
    completion_api_url: str = "https://api.deepseek.com/v1/chat/completions"
    completion_api_key: str | None = None
    completion_model: str = "deepseek-chat"
    docx_mode: DocxMode = "placeholder"
    extraction_error_policy: IngestionErrorPolicy = "inline"
    rate_limit_requests: int = 60
    rate_limit_window: float = 60.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ContainerConfig:
        env = os.environ if environ is None else environ
        defaults = cls()

        def _get(name: str, default: str) -> str:
            return env.get(f"{ENV_PREFIX}{name}", default)

        docx_mode = _get("DOCX_MODE", defaults.docx_mode)
        if docx_mode not in get_args(DocxMode):
            raise ValueError(f"Unknown DOCX mode '{docx_mode}'")
        policy = _get("EXTRACTION_ERROR_POLICY", defaults.extraction_error_policy)
        if policy not in get_args(IngestionErrorPolicy):
            raise ValueError(f"Unknown extraction error policy '{policy}'")

        return cls(
            db_path=_get("DB_PATH", defaults.db_path),
            fetch_timeout=float(_get("FETCH_TIMEOUT", str(defaults.fetch_timeout))),
            completion_timeout=float(_get("COMPLETION_TIMEOUT", str(defaults.completion_timeout))),
            completion_api_url=_get("COMPLETION_API_URL", defaults.completion_api_url),
            completion_api_key=env.get(f"{ENV_PREFIX}COMPLETION_API_KEY") or env.get("DEEPSEEK_API_KEY"),
            completion_model=_get("COMPLETION_MODEL", defaults.completion_model),
            docx_mode=docx_mode,  # type: ignore[arg-type]
            extraction_error_policy=policy,  # type: ignore[arg-type]
            rate_limit_requests=int(_get("RATE_LIMIT_REQUESTS", str(defaults.rate_limit_requests))),
            rate_limit_window=float(_get("RATE_LIMIT_WINDOW", str(defaults.rate_limit_window))),
        )

    @property
    def normalizer_policy(self) -> ExtractionErrorPolicy:
        return "inline" if self.extraction_error_policy == "inline" else "raise"


def build_default_container(config: ContainerConfig | None = None) -> Container:
    """Instantiate the default infrastructure stack."""

    cfg = config or ContainerConfig.from_env()
    file_normalizer = FileNormalizer(
        build_extractors(cfg.docx_mode),
        on_extraction_error=cfg.normalizer_policy,
    )
    completion_client = OpenAICompatibleChatClient(
        CompletionConfig(
            api_url=cfg.completion_api_url,
            api_key=cfg.completion_api_key,
            model=cfg.completion_model,
            timeout=cfg.completion_timeout,
        )
    )
    return Container(
        document_repository=SqliteKnowledgeDocumentRepository(cfg.db_path),
        file_normalizer=file_normalizer,
        page_fetcher=RequestsPageFetcher(timeout=cfg.fetch_timeout),
        completion_client=completion_client,
        rate_limiter=SlidingWindowRateLimiter(cfg.rate_limit_requests, cfg.rate_limit_window),
        config=cfg,
    )


__all__ = ["Container", "ContainerConfig", "IngestionErrorPolicy", "build_default_container"]
