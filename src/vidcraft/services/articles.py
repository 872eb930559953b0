"""Article source nodes: pasted, uploaded or scraped text on a canvas."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidcraft.db.models import ArticleModel
from vidcraft.errors import ValidationError
from vidcraft.logging import get_logger
from vidcraft.services.projects import ProjectService, get_owned

logger = get_logger(__name__)


def count_words(text: str) -> int:
    return len(text.split())


class ArticleService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.projects = ProjectService(session)

    def get(self, article_id: str | UUID, user_id: str | None) -> ArticleModel:
        return get_owned(self.session, ArticleModel, article_id, user_id, "Article")

    def create(
        self,
        user_id: str,
        project_id: str | UUID,
        title: str,
        content: str,
        *,
        format: str | None = None,
        file_name: str | None = None,
        storage_id: str | None = None,
        source_url: str | None = None,
        canvas_x: float = 0.0,
        canvas_y: float = 0.0,
    ) -> ArticleModel:
        if not content.strip():
            raise ValidationError("Article content is required")

        project = self.projects.get(project_id, user_id)
        article = ArticleModel(
            project_id=project.id,
            user_id=user_id,
            title=title.strip() or "Untitled",
            content=content,
            format=format,
            word_count=count_words(content),
            file_name=file_name,
            storage_id=storage_id,
            source_url=source_url,
            canvas_x=canvas_x,
            canvas_y=canvas_y,
        )
        self.session.add(article)
        self.session.flush()
        logger.info(
            "article_created",
            article_id=str(article.id),
            project_id=str(project.id),
            word_count=article.word_count,
            scraped=source_url is not None,
        )
        return article

    def list_for_project(self, project_id: str | UUID, user_id: str) -> list[ArticleModel]:
        project = self.projects.get(project_id, user_id)
        query = (
            select(ArticleModel)
            .where(ArticleModel.project_id == project.id, ArticleModel.user_id == user_id)
            .order_by(ArticleModel.created_at)
        )
        return list(self.session.execute(query).scalars().all())

    def update(
        self,
        article_id: str | UUID,
        user_id: str,
        *,
        title: str | None = None,
        content: str | None = None,
    ) -> ArticleModel:
        """Edit title or text; the word count follows the text."""
        article = self.get(article_id, user_id)
        if title is not None:
            article.title = title
        if content is not None:
            if not content.strip():
                raise ValidationError("Article content is required")
            article.content = content
            article.word_count = count_words(content)
        self.session.flush()
        return article

    def update_position(
        self, article_id: str | UUID, user_id: str, x: float, y: float
    ) -> ArticleModel:
        article = self.get(article_id, user_id)
        article.canvas_x = x
        article.canvas_y = y
        self.session.flush()
        return article

    def delete(self, article_id: str | UUID, user_id: str) -> None:
        self.session.delete(self.get(article_id, user_id))
        self.session.flush()
        logger.info("article_deleted", article_id=str(article_id))
