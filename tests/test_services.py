import pytest

from blog_service.domain.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from blog_service.domain.models import PostQuery
from blog_service.domain.repositories import COMMENTS, POSTS, USERS

from factories import make_comment, make_user


def find(users, user_id):
    return next(u for u in users if u.id == user_id)


async def seed_comments(store, *comments):
    await store.save(COMMENTS, [c.to_record() for c in comments])


# Posts

async def test_list_posts_is_newest_first_and_enriched(post_service):
    page = await post_service.list_posts(PostQuery())

    assert [p.id for p in page.items] == ["p2", "p1"]
    assert page.items[0].author.username == "user-u2"
    assert page.items[0].author.bio is None
    assert page.pagination.total_items == 2


async def test_list_posts_by_category(post_service):
    page = await post_service.list_posts(PostQuery(category="Tech"))

    assert [p.id for p in page.items] == ["p1"]


async def test_get_post_includes_author_bio(post_service):
    post = await post_service.get_post("p1")

    assert post.author.bio == "I write things"


async def test_get_missing_post(post_service):
    with pytest.raises(NotFoundError):
        await post_service.get_post("nope")


async def test_list_categories_by_usage(post_service, users):
    await post_service.create_post("u1", "Third", "Body", category="Life")

    assert await post_service.list_categories() == [("Life", 2), ("Tech", 1)]


async def test_create_post_defaults_and_persists(post_service, store):
    post = await post_service.create_post("u1", "Fresh", "Text", tags="python, web, ,")

    assert post.category == "General"
    assert post.tags == ["python", "web"]
    assert post.author.id == "u1"
    stored = [r["id"] for r in await store.load(POSTS)]
    assert post.id in stored


@pytest.mark.parametrize("title,content", [("", "Body"), ("Title", "   "), (None, "Body")])
async def test_create_post_requires_title_and_content(post_service, title, content):
    with pytest.raises(ValidationError):
        await post_service.create_post("u1", title, content)


async def test_create_post_for_unknown_author(post_service):
    with pytest.raises(NotFoundError):
        await post_service.create_post("ghost", "Title", "Body")


async def test_update_post_keeps_omitted_fields(post_service, users):
    updated = await post_service.update_post("p1", find(users, "u1"), title="Renamed")

    assert updated.title == "Renamed"
    assert updated.content == "Body"
    assert updated.category == "Tech"
    assert updated.updated_at > updated.created_at


async def test_update_post_by_stranger_is_forbidden(post_service, users):
    with pytest.raises(ForbiddenError):
        await post_service.update_post("p1", find(users, "u2"), title="Mine now")


async def test_admin_may_update_any_post(post_service, users):
    updated = await post_service.update_post("p1", find(users, "admin"), content="Moderated")

    assert updated.content == "Moderated"


async def test_delete_post(post_service, users, store):
    await post_service.delete_post("p1", find(users, "u1"))

    assert [r["id"] for r in await store.load(POSTS)] == ["p2"]


async def test_delete_post_by_stranger_is_forbidden(post_service, users, store):
    with pytest.raises(ForbiddenError):
        await post_service.delete_post("p1", find(users, "u2"))

    assert len(await store.load(POSTS)) == 2


async def test_toggle_post_like(post_service):
    assert await post_service.toggle_like("p1", "u2") == (True, 1)
    assert await post_service.toggle_like("p1", "u1") == (True, 2)
    assert await post_service.toggle_like("p1", "u2") == (False, 1)


# Comments

async def test_create_comment_attaches_user(comment_service, store):
    comment = await comment_service.create_comment("p1", "u2", "Nice post")

    assert comment.parent_id is None
    assert comment.user.username == "user-u2"
    assert [r["id"] for r in await store.load(COMMENTS)] == [comment.id]


async def test_create_comment_on_missing_post(comment_service):
    with pytest.raises(NotFoundError):
        await comment_service.create_comment("nope", "u1", "Hello")


async def test_create_comment_by_unknown_user(comment_service):
    with pytest.raises(NotFoundError):
        await comment_service.create_comment("p1", "ghost", "Hello")


async def test_create_comment_requires_content(comment_service):
    with pytest.raises(ValidationError):
        await comment_service.create_comment("p1", "u1", "  ")


async def test_reply_to_missing_parent(comment_service, store):
    with pytest.raises(NotFoundError) as excinfo:
        await comment_service.create_comment("p1", "u1", "Reply", parent_id="missing")

    assert excinfo.value.resource == "Parent comment"
    assert await store.load(COMMENTS) == []


async def test_reply_parent_must_share_the_post(comment_service, store):
    await seed_comments(store, make_comment("c1", post_id="p2"))

    with pytest.raises(ValidationError):
        await comment_service.create_comment("p1", "u1", "Reply", parent_id="c1")


async def test_list_comments_builds_the_thread(comment_service):
    top = await comment_service.create_comment("p1", "u1", "Top")
    reply = await comment_service.create_comment("p1", "u2", "Reply", parent_id=top.id)
    await comment_service.create_comment("p2", "u1", "Elsewhere")

    threads = await comment_service.list_comments("p1")

    forest = threads.items
    assert [c.id for c in forest] == [top.id]
    assert [c.id for c in forest[0].replies] == [reply.id]
    assert forest[0].replies[0].user.username == "user-u2"
    assert threads.pagination.total_items == 1


async def test_comment_threads_are_paged_by_root(comment_service, store):
    roots = [make_comment(f"r{i}", minutes=i) for i in range(5)]
    replies = [
        make_comment("r4-a", "r4", minutes=10),
        make_comment("r4-a-1", "r4-a", minutes=11),
        make_comment("r2-a", "r2", minutes=12),
    ]
    await seed_comments(store, *roots, *replies)

    first = await comment_service.list_comments("p1", page=1, limit=2)
    second = await comment_service.list_comments("p1", page=2, limit=2)
    last = await comment_service.list_comments("p1", page=3, limit=2)

    assert [c.id for c in first.items] == ["r4", "r3"]
    assert [c.id for c in second.items] == ["r2", "r1"]
    assert [c.id for c in last.items] == ["r0"]
    assert first.pagination.total_items == 5
    assert first.pagination.total_pages == 3
    assert first.pagination.has_next_page is True
    assert last.pagination.has_next_page is False
    assert last.pagination.has_prev_page is True
    # replies travel with their root, whatever page it lands on
    assert [c.id for c in first.items[0].replies] == ["r4-a"]
    assert [c.id for c in first.items[0].replies[0].replies] == ["r4-a-1"]
    assert [c.id for c in second.items[0].replies] == ["r2-a"]


async def test_comment_page_size_defaults_to_twenty(comment_service, store):
    await seed_comments(store, *(make_comment(f"c{i}", minutes=i) for i in range(25)))

    threads = await comment_service.list_comments("p1")

    assert len(threads.items) == 20
    assert threads.pagination.total_pages == 2


async def test_list_comments_for_missing_post(comment_service):
    with pytest.raises(NotFoundError):
        await comment_service.list_comments("nope")


async def test_delete_comment_cascades(comment_service, store, users):
    await seed_comments(
        store,
        make_comment("A", user_id="u1"),
        make_comment("B", "A", minutes=1, user_id="u2"),
        make_comment("C", "B", minutes=2, user_id="u2"),
        make_comment("S", minutes=3),
    )

    deleted = await comment_service.delete_comment("A", find(users, "u1"))

    assert deleted == {"A", "B", "C"}
    assert [r["id"] for r in await store.load(COMMENTS)] == ["S"]


async def test_delete_comment_by_stranger_is_forbidden(comment_service, store, users):
    await seed_comments(store, make_comment("A", user_id="u1"))

    with pytest.raises(ForbiddenError):
        await comment_service.delete_comment("A", find(users, "u2"))

    assert len(await store.load(COMMENTS)) == 1


async def test_admin_may_delete_any_comment(comment_service, store, users):
    await seed_comments(store, make_comment("A", user_id="u1"), make_comment("B", "A", minutes=1))

    assert await comment_service.delete_comment("A", find(users, "admin")) == {"A", "B"}


async def test_delete_missing_comment(comment_service, users):
    with pytest.raises(NotFoundError):
        await comment_service.delete_comment("nope", find(users, "u1"))


async def test_update_comment(comment_service, store, users):
    await seed_comments(store, make_comment("A", user_id="u1"))

    updated = await comment_service.update_comment("A", find(users, "u1"), "Edited")

    assert updated.content == "Edited"
    with pytest.raises(ForbiddenError):
        await comment_service.update_comment("A", find(users, "u2"), "Hijacked")


async def test_toggle_comment_like(comment_service, store):
    await seed_comments(store, make_comment("A"))

    assert await comment_service.toggle_like("A", "u2") == (True, 1)
    assert await comment_service.toggle_like("A", "u2") == (False, 0)


# Users

async def test_register_hashes_password_and_issues_token(user_service, store):
    user, token = await user_service.register("newbie", "new@example.com", "secret")

    assert token == f"token-{user.id}"
    assert user.password == "hashed:secret"
    assert any(r["email"] == "new@example.com" for r in await store.load(USERS))


@pytest.mark.parametrize("username,email", [("user-u1", "other@example.com"), ("other", "u1@example.com")])
async def test_register_duplicate_is_conflict(user_service, username, email):
    with pytest.raises(ConflictError):
        await user_service.register(username, email, "secret")


async def test_register_requires_all_fields(user_service):
    with pytest.raises(ValidationError):
        await user_service.register("name", "", "secret")


async def test_login(user_service):
    user, token = await user_service.login("u1@example.com", "pw-u1")

    assert user.id == "u1"
    assert token == "token-u1"


@pytest.mark.parametrize("email,password", [("u1@example.com", "wrong"), ("nobody@example.com", "pw-u1")])
async def test_login_with_bad_credentials(user_service, email, password):
    with pytest.raises(AuthenticationError):
        await user_service.login(email, password)


async def test_update_profile(user_service):
    updated = await user_service.update_profile("u2", bio="Hello there")

    assert updated.bio == "Hello there"
    assert updated.username == "user-u2"


async def test_update_profile_username_taken(user_service):
    with pytest.raises(ConflictError):
        await user_service.update_profile("u2", username="user-u1")


async def test_resolve_token(user_service):
    assert (await user_service.resolve_token("token-u2")).id == "u2"

    with pytest.raises(AuthenticationError):
        await user_service.resolve_token("garbage")
    with pytest.raises(AuthenticationError):
        await user_service.resolve_token("token-ghost")


async def test_seeded_user_lookup(user_service):
    profile = await user_service.get_profile("admin")

    assert profile.is_admin
    assert make_user("x").is_admin is False
