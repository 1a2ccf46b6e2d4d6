from page import SECTION_RENDERERS, compose, render_page, scrub_css
from token_parser import SectionKind


def test_every_token_kind_has_a_renderer() -> None:
    assert set(SECTION_RENDERERS) == set(SectionKind)


def test_heading_name_and_posts(make_user, make_article) -> None:
    user = make_user(general={"display_name": "Lily"})
    published = make_article(title="Spring planting", published=True)
    units = compose(user, [published], template="# Hi {displayName}\n\n{displayPosts}")

    assert [u.kind for u in units] == ["markdown", "display-name", "posts"]
    assert "<h1" in units[0].html and "Hi" in units[0].html
    assert units[1].data == {"text": "Lily"}
    assert "Lily" in units[1].html
    assert [item["title"] for item in units[2].data["items"]] == ["Spring planting"]
    assert "Spring planting" in units[2].html


def test_uses_the_stored_layout_by_default(make_user) -> None:
    units = compose(make_user(), [])
    assert [u.kind for u in units] == ["profile-card", "posts"]
    assert units[1].data["empty_message"] == "No articles found"


def test_empty_collections_and_missing_fields_are_dropped(make_user) -> None:
    template = "{projects}{bookshelf}{skills}{profession}{location}"
    assert compose(make_user(), [], template=template) == []


def test_collections_render_when_present(make_user) -> None:
    user = make_user(
        projects=[{"title": "Garden", "status": "completed"}],
        bookshelf=[{"title": "Dune", "author": "Herbert", "rating": 5}],
        skills=["python"],
        general={"profession": "Writer", "location": "Lisbon"},
    )
    units = compose(user, [], template="{projects}{bookshelf}{skills}{profession}{location}")
    assert [u.kind for u in units] == ["projects", "bookshelf", "skills", "profession", "location"]
    assert "Garden" in units[0].html
    assert units[1].html.count("filled") == 5
    assert "Lisbon" in units[4].html


def test_tag_cloud_counts_everything_while_posts_follow_the_filter(make_user, make_article) -> None:
    tagged = make_article(tags=["a"])
    other = make_article(tags=["b"])
    units = compose(make_user(), [tagged, other], selected_tag="a",
                    template="{displayTags}{displayPosts}",
                    tag_link=lambda t: f"/lily?tag={t}" if t else "/lily")
    tags, posts = units
    assert [c["tag"] for c in tags.data["chips"]] == ["a", "b"]
    assert tags.data["all_chip"]["count"] == 2
    assert [i["id"] for i in posts.data["items"]] == [tagged.id]
    assert 'href="/lily?tag=b"' in tags.html


def test_unknown_tokens_stay_literal(make_user) -> None:
    units = compose(make_user(), [], template="{notAToken}")
    assert [u.kind for u in units] == ["markdown"]
    assert "{notAToken}" in units[0].html


def test_keys_follow_template_positions(make_user, make_article) -> None:
    units = compose(make_user(), [make_article()], template="intro {displayPosts}")
    assert [u.key for u in units] == ["markdown-0", "posts-1"]


def test_user_text_is_escaped_in_sections(make_user) -> None:
    user = make_user(bio="<script>alert(1)</script>", general={"display_name": "<i>Lily</i>"})
    units = compose(user, [], template="{displayProfileCard}{displayName}")
    assert "<script>" not in units[0].html
    assert "&lt;i&gt;Lily&lt;/i&gt;" in units[1].html


def test_render_page_applies_layout_and_scrubbed_css(make_user) -> None:
    user = make_user(
        page_layout="sidebar",
        profile_theme="creative",
        custom_css="body { color: red }</style><script>alert(1)</script>",
        header_text="Welcome",
        accent_color="#112233",
    )
    html = render_page(user, compose(user, []))
    assert "layout-sidebar" in html
    assert "theme-creative" in html
    assert "Welcome" in html
    assert "body { color: red }" in html
    assert "<script>" not in html
    assert "--accent-color: #112233" in html


def test_scrub_css() -> None:
    assert scrub_css(None) == ""
    assert scrub_css("a{}</style>") == "a{}/style>"


def test_all_chip_stays_when_no_article_is_tagged(make_user, make_article) -> None:
    units = compose(make_user(), [make_article()], selected_tag="x",
                    template="{displayTags}{displayPosts}",
                    tag_link=lambda t: f"/lily?tag={t}" if t else "/lily")
    tags = units[0]
    assert tags.kind == "tags"
    assert "No tags found" in tags.html
    assert 'href="/lily"' in tags.html
    assert "All (1)" in tags.html
