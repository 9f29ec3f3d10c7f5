"""FastAPI layer that exposes ingestion, retrieval and grounded chat."""
from __future__ import annotations

from datetime import datetime

from fastapi import Depends, FastAPI, Query as FastAPIQuery, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from application.use_cases.chat import generate_reply
from application.use_cases.ingest_documents import ingest_file, ingest_text, process_bot_documents
from application.use_cases.scrape_website import ingest_website, scrape_website
from application.use_cases.search import get_context_for_query, search
from domain.entities import BotProfile, ChatMessage, KnowledgeDocument
from domain.errors import DocumentNotFound, KnowledgeBaseError
from infrastructure.config import Container, build_default_container
from ui.logging_utils import setup_logging


class DocumentPayload(BaseModel):
    id: int
    bot_id: int
    title: str
    content: str
    file_type: str
    file_size: int
    status: str
    processing_error: str | None = None
    file_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, document: KnowledgeDocument) -> DocumentPayload:
        return cls(
            id=document.id,
            bot_id=document.bot_id,
            title=document.title,
            content=document.content,
            file_type=document.file_type,
            file_size=document.file_size,
            status=document.status,
            processing_error=document.processing_error,
            file_url=document.file_url,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class CreateDocumentRequest(BaseModel):
    title: str = Field(..., min_length=1)
    content: str
    file_type: str = "text"


class StatusUpdateRequest(BaseModel):
    status: str
    error: str | None = None


class SearchHit(BaseModel):
    document_id: int
    title: str
    score: int
    excerpt: str


class SearchResponse(BaseModel):
    query: str
    results: list[SearchHit]


class ContextResponse(BaseModel):
    query: str
    context: str


class ProcessResponse(BaseModel):
    processed: int
    total: int
    results: list[dict]


class ScrapeRequest(BaseModel):
    url: str


class ScrapeResponse(BaseModel):
    title: str
    description: str
    content: str
    metadata: dict
    document: DocumentPayload | None = None


class MessagePayload(BaseModel):
    role: str = Field(..., pattern="^(system|user|assistant)$")
    content: str


class ChatRequest(BaseModel):
    bot_id: int
    messages: list[MessagePayload] = Field(..., min_length=1)
    system_prompt: str = "You are a helpful assistant."
    model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 1000


class ChatResponse(BaseModel):
    content: str
    model: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


def create_app(container: Container | None = None) -> FastAPI:
    """Build the API; the default container is created on first use."""

    app = FastAPI(title="BotKnowledge API")
    state: dict[str, Container] = {}
    if container is not None:
        state["container"] = container

    def get_container() -> Container:
        if "container" not in state:
            setup_logging()
            state["container"] = build_default_container()
        return state["container"]

    def rate_limit(request: Request, current: Container = Depends(get_container)) -> None:
        client = request.client.host if request.client else "anonymous"
        current.rate_limiter.hit(client)

    @app.exception_handler(KnowledgeBaseError)
    async def knowledge_base_error_handler(request: Request, exc: KnowledgeBaseError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.post("/bots/{bot_id}/documents", response_model=DocumentPayload, dependencies=[Depends(rate_limit)])
    def create_document_endpoint(
        bot_id: int,
        payload: CreateDocumentRequest,
        current: Container = Depends(get_container),
    ) -> DocumentPayload:
        document = ingest_text(
            bot_id,
            payload.title,
            payload.content,
            document_repository=current.document_repository,
            file_type=payload.file_type,
        )
        return DocumentPayload.from_document(document)

    @app.post("/bots/{bot_id}/documents/upload", response_model=DocumentPayload, dependencies=[Depends(rate_limit)])
    async def upload_document_endpoint(
        bot_id: int,
        request: Request,
        filename: str = FastAPIQuery(..., min_length=1, description="Original file name"),
        current: Container = Depends(get_container),
    ) -> DocumentPayload:
        data = await request.body()
        document = await run_in_threadpool(
            ingest_file,
            bot_id,
            filename,
            data,
            request.headers.get("content-type"),
            document_repository=current.document_repository,
            file_normalizer=current.file_normalizer,
            policy=current.config.extraction_error_policy,
        )
        return DocumentPayload.from_document(document)

    @app.get("/bots/{bot_id}/documents", response_model=list[DocumentPayload])
    def list_documents_endpoint(bot_id: int, current: Container = Depends(get_container)) -> list[DocumentPayload]:
        return [DocumentPayload.from_document(doc) for doc in current.document_repository.get_by_bot(bot_id)]

    @app.patch("/documents/{document_id}/status", response_model=DocumentPayload)
    def update_status_endpoint(
        document_id: int,
        payload: StatusUpdateRequest,
        current: Container = Depends(get_container),
    ) -> DocumentPayload:
        document = current.document_repository.update_status(document_id, payload.status, payload.error)
        return DocumentPayload.from_document(document)

    @app.delete("/documents/{document_id}")
    def delete_document_endpoint(document_id: int, current: Container = Depends(get_container)) -> dict:
        if not current.document_repository.delete(document_id):
            raise DocumentNotFound(document_id)
        return {"deleted": document_id}

    @app.post("/bots/{bot_id}/process-documents", response_model=ProcessResponse)
    def process_documents_endpoint(bot_id: int, current: Container = Depends(get_container)) -> ProcessResponse:
        report = process_bot_documents(bot_id, document_repository=current.document_repository)
        return ProcessResponse(processed=report.processed, total=report.total, results=report.results)

    @app.post("/scrape-website", response_model=ScrapeResponse, dependencies=[Depends(rate_limit)])
    def scrape_preview_endpoint(payload: ScrapeRequest, current: Container = Depends(get_container)) -> ScrapeResponse:
        page = scrape_website(payload.url, page_fetcher=current.page_fetcher)
        return ScrapeResponse(
            title=page.title,
            description=page.description,
            content=page.content,
            metadata=page.metadata,
        )

    @app.post("/bots/{bot_id}/scrape", response_model=ScrapeResponse, dependencies=[Depends(rate_limit)])
    def scrape_into_bot_endpoint(
        bot_id: int,
        payload: ScrapeRequest,
        current: Container = Depends(get_container),
    ) -> ScrapeResponse:
        document, page = ingest_website(
            bot_id,
            payload.url,
            page_fetcher=current.page_fetcher,
            document_repository=current.document_repository,
        )
        return ScrapeResponse(
            title=page.title,
            description=page.description,
            content=page.content,
            metadata=page.metadata,
            document=DocumentPayload.from_document(document),
        )

    @app.get("/bots/{bot_id}/search", response_model=SearchResponse, dependencies=[Depends(rate_limit)])
    def search_endpoint(
        bot_id: int,
        q: str = FastAPIQuery(..., description="User query"),
        limit: int = FastAPIQuery(5, ge=1, le=50),
        current: Container = Depends(get_container),
    ) -> SearchResponse:
        results = search(bot_id, q, document_repository=current.document_repository, limit=limit)
        hits = [
            SearchHit(
                document_id=result.document.id,
                title=result.document.title,
                score=result.score,
                excerpt=result.excerpt,
            )
            for result in results
        ]
        return SearchResponse(query=q, results=hits)

    @app.get("/bots/{bot_id}/context", response_model=ContextResponse, dependencies=[Depends(rate_limit)])
    def context_endpoint(
        bot_id: int,
        q: str = FastAPIQuery(..., description="User query"),
        current: Container = Depends(get_container),
    ) -> ContextResponse:
        context = get_context_for_query(bot_id, q, document_repository=current.document_repository)
        return ContextResponse(query=q, context=context)

    @app.post("/chat", response_model=ChatResponse, dependencies=[Depends(rate_limit)])
    def chat_endpoint(payload: ChatRequest, current: Container = Depends(get_container)) -> ChatResponse:
        bot = BotProfile(
            id=payload.bot_id,
            system_prompt=payload.system_prompt,
            model=payload.model,
            temperature=payload.temperature,
            max_tokens=payload.max_tokens,
        )
        messages = [ChatMessage(role=message.role, content=message.content) for message in payload.messages]
        completion = generate_reply(
            bot,
            messages,
            document_repository=current.document_repository,
            completion_client=current.completion_client,
        )
        return ChatResponse(
            content=completion.content,
            model=completion.model,
            prompt_tokens=completion.prompt_tokens,
            completion_tokens=completion.completion_tokens,
            total_tokens=completion.total_tokens,
        )

    return app


app = create_app()
