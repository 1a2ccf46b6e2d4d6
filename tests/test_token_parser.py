import pytest

from token_parser import LiteralMarkdown, SectionKind, SectionToken, parse, to_template


def test_parse_splits_literals_and_tokens_in_order() -> None:
    units = parse("# Hi {displayName}\n\n{displayPosts}")
    assert units == [
        LiteralMarkdown("# Hi ", 0),
        SectionToken(SectionKind.DISPLAY_NAME, 1),
        LiteralMarkdown("\n\n", 2),
        SectionToken(SectionKind.POSTS, 3),
    ]


def test_unknown_token_is_a_single_literal() -> None:
    units = parse("{notAToken}")
    assert units == [LiteralMarkdown("{notAToken}", 1)]
    assert units[0].text == "{notAToken}"


def test_adjacent_tokens_drop_the_empty_segment_between_them() -> None:
    units = parse("{projects}{skills}")
    assert [type(u) for u in units] == [SectionToken, SectionToken]
    assert [u.kind for u in units] == [SectionKind.PROJECTS, SectionKind.SKILLS]


@pytest.mark.parametrize("template", ["", None])
def test_empty_template_yields_no_units(template) -> None:
    assert parse(template) == []


@pytest.mark.parametrize(
    "template",
    [
        "{displayProfileCard}\n\n{displayPosts}",
        "plain text only",
        "{a}{displayTags} mid {bookshelf}{unknown} end",
        "unclosed { brace {skills} and } stray",
        "{}{displayName}{{profession}}",
    ],
)
def test_parse_is_a_lossless_split(template: str) -> None:
    assert to_template(parse(template)) == template


def test_token_matching_is_exact() -> None:
    units = parse("{ displayPosts }{DisplayPosts}{displayPosts}")
    assert [type(u) for u in units] == [LiteralMarkdown, LiteralMarkdown, SectionToken]


def test_every_vocabulary_token_is_recognised() -> None:
    template = "".join(kind.value for kind in SectionKind)
    units = parse(template)
    assert [u.kind for u in units] == list(SectionKind)


def test_keys_are_stable_and_unique() -> None:
    template = "intro {displayPosts} middle {displayPosts}"
    first = [u.key for u in parse(template)]
    assert first == [u.key for u in parse(template)]
    assert len(set(first)) == len(first)
    assert first[1] == "posts-1"
