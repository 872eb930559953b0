"""Article source nodes: create from text or a scraped URL, edit, move, delete."""

from datetime import datetime

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from vidcraft.api.deps import ScraperDep, UserIdDep
from vidcraft.db.models import ArticleModel
from vidcraft.db.session import get_session_context
from vidcraft.services.articles import ArticleService

router = APIRouter(tags=["Articles"])


class CreateArticleRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    format: str | None = Field(None, description="Source format, e.g. md or txt")
    file_name: str | None = None
    storage_id: str | None = None
    canvas_x: float = 0.0
    canvas_y: float = 0.0


class ScrapeArticleRequest(BaseModel):
    url: str = Field(..., min_length=1)
    canvas_x: float = 0.0
    canvas_y: float = 0.0


class UpdateArticleRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    content: str | None = None


class PositionRequest(BaseModel):
    x: float
    y: float


class ArticleResponse(BaseModel):
    id: str
    project_id: str
    title: str
    content: str
    format: str | None
    word_count: int
    file_name: str | None
    storage_id: str | None
    source_url: str | None
    canvas_x: float
    canvas_y: float
    created_at: datetime
    updated_at: datetime | None


def _model_to_response(article: ArticleModel) -> ArticleResponse:
    return ArticleResponse(
        id=str(article.id),
        project_id=str(article.project_id),
        title=article.title,
        content=article.content,
        format=article.format,
        word_count=article.word_count,
        file_name=article.file_name,
        storage_id=article.storage_id,
        source_url=article.source_url,
        canvas_x=article.canvas_x,
        canvas_y=article.canvas_y,
        created_at=article.created_at,
        updated_at=article.updated_at,
    )


@router.post(
    "/projects/{project_id}/articles",
    response_model=ArticleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create article",
)
async def create_article(
    project_id: str, request: CreateArticleRequest, user_id: UserIdDep
) -> ArticleResponse:
    with get_session_context() as session:
        article = ArticleService(session).create(
            user_id,
            project_id,
            request.title,
            request.content,
            format=request.format,
            file_name=request.file_name,
            storage_id=request.storage_id,
            canvas_x=request.canvas_x,
            canvas_y=request.canvas_y,
        )
        return _model_to_response(article)


@router.post(
    "/projects/{project_id}/articles/scrape",
    response_model=ArticleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import article from URL",
    description="Scrape the main content of a web page as markdown and store it as an article.",
)
async def scrape_article(
    project_id: str, request: ScrapeArticleRequest, user_id: UserIdDep, scraper: ScraperDep
) -> ArticleResponse:
    # Ownership is checked before spending a scrape call
    with get_session_context() as session:
        ArticleService(session).projects.get(project_id, user_id)

    page = await scraper.scrape(request.url)

    with get_session_context() as session:
        article = ArticleService(session).create(
            user_id,
            project_id,
            page.title,
            page.content,
            format="md",
            source_url=page.url,
            canvas_x=request.canvas_x,
            canvas_y=request.canvas_y,
        )
        return _model_to_response(article)


@router.get(
    "/projects/{project_id}/articles",
    response_model=list[ArticleResponse],
    summary="List articles",
)
async def list_articles(project_id: str, user_id: UserIdDep) -> list[ArticleResponse]:
    with get_session_context() as session:
        articles = ArticleService(session).list_for_project(project_id, user_id)
        return [_model_to_response(a) for a in articles]


@router.get("/articles/{article_id}", response_model=ArticleResponse, summary="Get article")
async def get_article(article_id: str, user_id: UserIdDep) -> ArticleResponse:
    with get_session_context() as session:
        return _model_to_response(ArticleService(session).get(article_id, user_id))


@router.patch("/articles/{article_id}", response_model=ArticleResponse, summary="Edit article")
async def update_article(
    article_id: str, request: UpdateArticleRequest, user_id: UserIdDep
) -> ArticleResponse:
    with get_session_context() as session:
        article = ArticleService(session).update(
            article_id, user_id, title=request.title, content=request.content
        )
        return _model_to_response(article)


@router.put(
    "/articles/{article_id}/position",
    response_model=ArticleResponse,
    summary="Move article node",
)
async def update_article_position(
    article_id: str, request: PositionRequest, user_id: UserIdDep
) -> ArticleResponse:
    with get_session_context() as session:
        article = ArticleService(session).update_position(
            article_id, user_id, request.x, request.y
        )
        return _model_to_response(article)


@router.delete(
    "/articles/{article_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete article",
)
async def delete_article(article_id: str, user_id: UserIdDep) -> Response:
    with get_session_context() as session:
        ArticleService(session).delete(article_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
