from blog_service.domain.enrichment import attach, enrich, index_users

from factories import make_comment, make_post, make_user


def test_missing_author_yields_none_and_keeps_record():
    posts = [make_post("p1", author_id="ghost"), make_post("p2", author_id="u1")]

    enriched = enrich(posts, [make_user("u1")])

    assert [p.id for p in enriched] == ["p1", "p2"]
    assert enriched[0].author is None
    assert enriched[1].author.username == "user-u1"


def test_profile_carries_public_fields_only():
    user = make_user("u1", avatar="/uploads/me.png", bio="hi")

    post = attach(make_post("p1"), index_users([user]))

    assert post.author.to_dict() == {"id": "u1", "username": "user-u1", "avatar": "/uploads/me.png"}
    assert "password" not in vars(post.author)


def test_bio_is_included_on_request():
    user = make_user("u1", bio="hi")

    post = attach(make_post("p1"), index_users([user]), include_bio=True)

    assert post.author.bio == "hi"


def test_comments_get_user_profile():
    comment = make_comment("c1", user_id="u2")

    enriched = enrich([comment], {"u2": make_user("u2")})

    assert enriched[0].user.id == "u2"
    assert comment.user is None
