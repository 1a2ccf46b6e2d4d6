import pytest
from pydantic import ValidationError

from schemas import Article, BookItem, Profile, User, UserData


def test_unknown_enum_values_fall_back() -> None:
    profile = Profile(username="Lily", profile_theme="neon", page_layout="grid", accent_color="red")
    assert profile.username == "lily"
    assert profile.profile_theme == "minimal"
    assert profile.page_layout == "default"
    assert profile.accent_color is None
    assert BookItem(title="x", status="lost").status == "want-to-read"


def test_missing_collections_default_to_empty() -> None:
    profile = Profile(username="lily", projects=None, skills=None, social_links=None, general=None)
    assert profile.projects == []
    assert profile.skills == []
    assert profile.social_links.website is None
    assert profile.general.display_name is None
    assert profile.custom_layout == "{displayProfileCard}\n\n{displayPosts}"


def test_user_data_is_an_immutable_snapshot() -> None:
    user = UserData(username="lily")
    with pytest.raises(ValidationError):
        user.bio = "changed"
    assert user.accent == "#3b82f6"
    assert UserData(username="lily", accent_color="#ABCDEF").accent == "#ABCDEF"


def test_user_requires_valid_email() -> None:
    with pytest.raises(ValidationError):
        User(username="lily", email="not-an-email", password_hash="x")


def test_article_defaults() -> None:
    article = Article(author_name="lily", title="t", tags=None, excerpt=None)
    assert article.tags == []
    assert article.excerpt == ""
    assert article.published is False
