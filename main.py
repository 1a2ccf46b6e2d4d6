import logging
from datetime import datetime, timezone
from typing import List, Literal, Optional
from urllib.parse import quote

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, ValidationError, field_validator
from pymongo.errors import PyMongoError
from bson.objectid import ObjectId
from werkzeug.security import check_password_hash, generate_password_hash

import config
import database
from dates import format_month_year, sort_key, to_datetime
from page import compose, render_page
from schemas import (
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    USERNAME_PATTERN,
    Article as ArticleSchema,
    BookItem,
    GeneralInfo,
    ProjectItem,
    Profile as ProfileSchema,
    SocialLinks,
    User as UserSchema,
    UserData,
    normalize_username,
)
from sections import render_posts, render_tag_cloud
from session import OwnerSession, filter_articles

logger = logging.getLogger("minispace.api")

app = FastAPI(title="Minispace API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Helpers

def collection(name: str):
    if database.db is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return database.db[name]


def to_public(doc: dict):
    if not doc:
        return doc
    doc = {**doc}
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    doc.pop("password_hash", None)
    return doc


def to_oid(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid id")


def load_user_data(username: str) -> UserData:
    username = normalize_username(username)
    prof = collection("profile").find_one({"username": username})
    if not prof:
        raise HTTPException(status_code=404, detail="Profile not found")
    user = collection("user").find_one({"username": username}) or {}
    data = to_public(prof)
    data["email"] = user.get("email")
    data["created_at"] = user.get("created_at", data.get("created_at"))
    return UserData(**data)


def load_articles(filt: dict) -> List[ArticleSchema]:
    articles = [ArticleSchema(**to_public(d)) for d in collection("article").find(filt)]
    # Stored timestamps come in several shapes; sort in Python, newest first
    articles.sort(key=lambda a: sort_key(a.created_at), reverse=True)
    return articles


def tag_link_for(base: str):
    def link(tag: Optional[str]) -> str:
        return f"{base}?tag={quote(tag, safe='')}" if tag is not None else base
    return link


def rename_author(old: str, new: str) -> Optional[int]:
    """Point every article of `old` at `new`.

    Runs after the profile write and is not transactional with it; on failure
    the articles keep the stale name and None is returned.
    """
    try:
        res = collection("article").update_many({"author_name": old}, {"$set": {"author_name": new}})
    except PyMongoError:
        logger.exception("failed to rewrite author_name %s -> %s", old, new)
        return None
    logger.info("rewrote author_name on %d article(s): %s -> %s", res.modified_count, old, new)
    return res.modified_count


# Health
@app.get("/")
def read_root():
    return {"message": "Minispace API running"}

@app.get("/test")
def test_database():
    status = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "❌ Not Set" if not config.DATABASE_URL else "✅ Set",
        "database_name": "❌ Not Set" if not config.DATABASE_NAME else "✅ Set",
        "collections": []
    }
    if database.db is None:
        return status
    try:
        cols = database.db.list_collection_names()
        status["database"] = "✅ Connected"
        status["collections"] = cols
    except Exception as e:
        status["database"] = f"❌ Error: {str(e)[:80]}"
    return status

# Auth (username+password signup/login; session handling lives elsewhere)
class SignupRequest(BaseModel):
    username: str
    email: str
    password: str
    display_name: Optional[str] = None

class LoginRequest(BaseModel):
    username: str
    password: str

@app.post("/auth/signup")
def signup(payload: SignupRequest):
    username = normalize_username(payload.username)
    users = collection("user")
    if users.find_one({"username": username}):
        raise HTTPException(status_code=400, detail="Username already exists")
    if users.find_one({"email": payload.email}):
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        user = UserSchema(
            username=username,
            email=payload.email,
            password_hash=generate_password_hash(payload.password),
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    user_id = database.create_document("user", user)

    profile = ProfileSchema(username=username, general={"display_name": payload.display_name})
    database.create_document("profile", profile)
    logger.info("created account %s", username)

    return {"id": user_id, "username": username}

@app.post("/auth/login")
def login(payload: LoginRequest):
    user = collection("user").find_one({"username": normalize_username(payload.username)})
    if not user or not check_password_hash(user.get("password_hash", ""), payload.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"ok": True, "username": user["username"]}

# Public fetch for a username
@app.get("/profiles/{username}")
def get_profile(username: str):
    user = load_user_data(username)
    articles = load_articles({"author_name": user.username, "published": True})
    joined = to_datetime(user.created_at)
    profile = user.model_dump(exclude={"created_at"})
    profile["created_at"] = joined.isoformat() if joined else None
    profile["joined"] = format_month_year(joined) or None
    return {
        "profile": profile,
        "articles": [a.model_dump() for a in articles],
    }

# Settings save (keyed by username)
class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(
        None, min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH, pattern=USERNAME_PATTERN,
    )
    bio: Optional[str] = None
    profile_emoji: Optional[str] = None
    banner_image: Optional[str] = None
    banner_preset: Optional[str] = None
    accent_color: Optional[str] = None
    profile_theme: Optional[str] = None
    page_layout: Optional[str] = None
    custom_css: Optional[str] = None
    header_text: Optional[str] = None
    footer_text: Optional[str] = None
    show_join_date: Optional[bool] = None
    social_links: Optional[SocialLinks] = None
    custom_layout: Optional[str] = None
    general: Optional[GeneralInfo] = None
    projects: Optional[List[ProjectItem]] = None
    bookshelf: Optional[List[BookItem]] = None
    skills: Optional[List[str]] = None
    tools: Optional[List[str]] = None

    @field_validator("username", mode="before")
    @classmethod
    def _lowercase_username(cls, v):
        return normalize_username(v) if isinstance(v, str) else v

@app.put("/profiles/{username}")
def update_profile(username: str, payload: ProfileUpdate):
    profs = collection("profile")
    old_username = normalize_username(username)
    prof = profs.find_one({"username": old_username})
    if not prof:
        raise HTTPException(status_code=404, detail="Profile not found")

    update = payload.model_dump(exclude_unset=True)
    new_username = normalize_username(update.pop("username", None) or old_username)
    renamed = new_username != old_username
    if renamed and (profs.find_one({"username": new_username})
                    or collection("user").find_one({"username": new_username})):
        raise HTTPException(status_code=400, detail="Username already exists")

    current = {k: v for k, v in prof.items() if k not in ("_id", "created_at", "updated_at")}
    try:
        snapshot = ProfileSchema(**{**current, **update, "username": new_username})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    doc = snapshot.model_dump()
    doc["updated_at"] = datetime.now(timezone.utc)
    profs.update_one({"_id": prof["_id"]}, {"$set": doc})

    articles_updated: Optional[int] = 0
    if renamed:
        collection("user").update_one({"username": old_username}, {"$set": {"username": new_username}})
        articles_updated = rename_author(old_username, new_username)

    return {
        "profile": to_public(profs.find_one({"_id": prof["_id"]})),
        "articles_updated": articles_updated or 0,
        "articles_backfill_failed": articles_updated is None,
    }

# Composed profile page
@app.get("/profiles/{username}/page")
def get_profile_page(username: str, tag: Optional[str] = None):
    user = load_user_data(username)
    published = load_articles({"author_name": user.username, "published": True})
    units = compose(user, published, all_articles=published, selected_tag=tag,
                    tag_link=tag_link_for(f"/{user.username}"))
    return {
        "username": user.username,
        "page_layout": user.page_layout,
        "profile_theme": user.profile_theme,
        "selected_tag": tag,
        "units": [u.model_dump() for u in units],
    }

@app.get("/profiles/{username}/posts")
def get_profile_posts(username: str, variant: str = "public", tag: Optional[str] = None):
    user = load_user_data(username)
    if variant == "profile":
        articles = load_articles({"author_name": user.username})
        empty_message, empty_subtext = "No articles yet", "Start writing your first article!"
    else:
        articles = load_articles({"author_name": user.username, "published": True})
        empty_message, empty_subtext = f"@{user.username} hasn't published any articles yet", None
    link = tag_link_for(f"/profiles/{user.username}/posts")
    return {
        "posts": render_posts(filter_articles(articles, tag), variant,
                              empty_message=empty_message, empty_subtext=empty_subtext,
                              accent_color=user.accent).model_dump(),
        "tags": render_tag_cloud(articles, tag, link, user.accent).model_dump(),
    }

# Articles
class ArticleCreate(BaseModel):
    title: str
    excerpt: str = ""
    content: str = ""
    tags: List[str] = []
    published: bool = False

@app.post("/profiles/{username}/articles")
def create_article(username: str, payload: ArticleCreate):
    user = load_user_data(username)
    article = ArticleSchema(author_name=user.username, **payload.model_dump())
    aid = database.create_document("article", article)
    return {"id": aid}

@app.get("/profiles/{username}/articles")
def list_articles(username: str, published_only: bool = True):
    filt = {"author_name": normalize_username(username)}
    if published_only:
        filt["published"] = True
    return [a.model_dump() for a in load_articles(filt)]

def _load_article(article_id: str) -> ArticleSchema:
    doc = collection("article").find_one({"_id": to_oid(article_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Not found")
    return ArticleSchema(**to_public(doc))

@app.get("/articles/{article_id}")
def get_article(article_id: str):
    doc = collection("article").find_one({"_id": to_oid(article_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Not found")
    return to_public(doc)

class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None

@app.put("/articles/{article_id}")
def update_article(article_id: str, payload: ArticleUpdate):
    update = payload.model_dump(exclude_unset=True)
    update["updated_at"] = datetime.now(timezone.utc)
    res = collection("article").update_one({"_id": to_oid(article_id)}, {"$set": update})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Not found")
    return to_public(collection("article").find_one({"_id": to_oid(article_id)}))

@app.post("/articles/{article_id}/publish")
def toggle_publish(article_id: str):
    article = _load_article(article_id)
    session = OwnerSession(load_articles({"author_name": article.author_name}))

    def commit(aid: str, published: bool) -> None:
        res = collection("article").update_one(
            {"_id": to_oid(aid)},
            {"$set": {"published": published, "updated_at": datetime.now(timezone.utc)}},
        )
        if res.matched_count == 0:
            raise LookupError(aid)

    try:
        updated = session.toggle_publish(article_id, commit)
    except (PyMongoError, LookupError):
        raise HTTPException(status_code=500, detail="Failed to update publish status.")
    if updated is None:
        raise HTTPException(status_code=404, detail="Not found")
    return {
        "id": updated.id,
        "published": updated.published,
        "message": "Article published." if updated.published else "Article moved to Drafts.",
    }

@app.delete("/articles/{article_id}")
def delete_article(article_id: str, confirm: bool = False):
    article = _load_article(article_id)
    session = OwnerSession(load_articles({"author_name": article.author_name}))
    prompt = session.request_delete(article)
    if not confirm:
        raise HTTPException(status_code=409, detail=prompt)
    session.confirm_delete(lambda a: collection("article").delete_one({"_id": to_oid(a.id)}))
    logger.info("deleted article %s of %s", article_id, article.author_name)
    return {"deleted": True, "remaining": len(session.articles)}

# Cross-user feed
@app.get("/discover")
def discover(tag: Optional[str] = None):
    articles = load_articles({"published": True})
    return {
        "posts": render_posts(filter_articles(articles, tag), "discover",
                              empty_message="No articles found").model_dump(),
        "tags": render_tag_cloud(articles, tag, tag_link_for("/discover")).model_dump(),
    }

# Community directory
UserSort = Literal["newest", "oldest", "most-active"]

@app.get("/users")
def list_users(q: Optional[str] = None, sort: UserSort = "newest"):
    counts = {}
    for doc in collection("article").find({"published": True}, {"author_name": 1}):
        name = doc.get("author_name")
        counts[name] = counts.get(name, 0) + 1

    profiles = {p["username"]: p for p in collection("profile").find({})}
    term = (q or "").strip().lower()
    users = []
    for doc in collection("user").find({}):
        prof = profiles.get(doc["username"], {})
        bio = prof.get("bio") or ""
        if term and term not in doc["username"] and term not in bio.lower():
            continue
        users.append({
            "username": doc["username"],
            "bio": bio or None,
            "profile_emoji": prof.get("profile_emoji"),
            "accent_color": prof.get("accent_color"),
            "created_at": doc.get("created_at"),
            "article_count": counts.get(doc["username"], 0),
        })

    if sort == "most-active":
        users.sort(key=lambda u: u["article_count"], reverse=True)
    else:
        users.sort(key=lambda u: sort_key(u["created_at"]), reverse=sort == "newest")
    return {"users": users, "total": len(users)}

# Public HTML page; registered last so it never shadows the routes above
@app.get("/{username}", response_class=HTMLResponse)
def public_page(username: str, tag: Optional[str] = None):
    user = load_user_data(username)
    published = load_articles({"author_name": user.username, "published": True})
    units = compose(user, published, all_articles=published, selected_tag=tag,
                    tag_link=tag_link_for(f"/{user.username}"))
    return HTMLResponse(render_page(user, units))


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
