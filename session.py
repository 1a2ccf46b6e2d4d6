"""
Page-session state: the selected tag and the owner's article controls.

TagFilterState derives the visible articles from the full list and an
optional selected tag. OwnerSession wraps the owner's own articles with the
publish toggle and the two-step delete; any change to the article list
clears the tag selection.
"""
import logging
from typing import Callable, List, Optional, Sequence

from schemas import Article

logger = logging.getLogger("minispace.session")


def filter_articles(articles: Sequence[Article], tag: Optional[str]) -> List[Article]:
    if tag is None:
        return list(articles)
    return [a for a in articles if tag in a.tags]


class TagFilterState:
    def __init__(self, articles: Sequence[Article] = (), selected_tag: Optional[str] = None):
        self._articles = list(articles)
        self.selected_tag = selected_tag

    @property
    def articles(self) -> List[Article]:
        return list(self._articles)

    @property
    def visible(self) -> List[Article]:
        return filter_articles(self._articles, self.selected_tag)

    def select(self, tag: Optional[str]) -> None:
        if tag == self.selected_tag:
            return
        self.selected_tag = tag

    def clear(self) -> None:
        self.select(None)

    def replace_articles(self, articles: Sequence[Article]) -> None:
        self._articles = list(articles)
        self.selected_tag = None


class DeleteConfirmation(Exception):
    """Raised when a delete is confirmed with nothing pending."""


class OwnerSession:
    """The owner's view of their own articles.

    `commit` callables perform the actual store write and raise on failure.
    """

    def __init__(self, articles: Sequence[Article], selected_tag: Optional[str] = None):
        self.filter = TagFilterState(articles, selected_tag)
        self.updating_id: Optional[str] = None
        self.deleting_id: Optional[str] = None
        self.pending_delete: Optional[Article] = None

    @property
    def articles(self) -> List[Article]:
        return self.filter.articles

    @property
    def visible(self) -> List[Article]:
        return self.filter.visible

    def find(self, article_id: str) -> Optional[Article]:
        for article in self.filter.articles:
            if article.id == article_id:
                return article
        return None

    def _replace(self, article_id: str, article: Optional[Article]) -> None:
        updated = []
        for existing in self.filter.articles:
            if existing.id != article_id:
                updated.append(existing)
            elif article is not None:
                updated.append(article)
        self.filter.replace_articles(updated)

    def toggle_publish(self, article_id: str, commit: Callable[[str, bool], None]) -> Optional[Article]:
        """Flip `published` locally, then persist; the flip is undone if `commit` fails.

        Returns the updated article, or None for an unknown id.
        """
        original = self.find(article_id)
        if original is None:
            return None
        flipped = original.model_copy(update={"published": not original.published})
        self._replace(article_id, flipped)
        self.updating_id = article_id
        try:
            commit(article_id, flipped.published)
        except Exception:
            logger.warning("publish toggle failed for %s; reverting", article_id)
            self._replace(article_id, original)
            raise
        finally:
            self.updating_id = None
        return flipped

    def confirmation_message(self) -> Optional[str]:
        if self.pending_delete is None:
            return None
        return (
            f"Are you sure you want to delete {self.pending_delete.title}? "
            "This action cannot be undone."
        )

    def request_delete(self, article: Article) -> str:
        self.pending_delete = article
        return self.confirmation_message()

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self, commit: Callable[[Article], None]) -> Article:
        article = self.pending_delete
        if article is None:
            raise DeleteConfirmation("no delete is awaiting confirmation")
        self.deleting_id = article.id
        try:
            commit(article)
            self._replace(article.id, None)
        finally:
            self.deleting_id = None
            self.pending_delete = None
        return article
