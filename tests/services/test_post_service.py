from __future__ import annotations

import pytest
from bson import ObjectId

from snapgram.core.exceptions import (
    ConflictError,
    PostNotFoundError,
    ValidationError,
)
from snapgram.core.security import TokenClaim
from snapgram.repositories.comments import CommentRepository
from snapgram.repositories.posts import PostRepository
from snapgram.repositories.users import UserRepository
from snapgram.services.posts import PostService


@pytest.fixture
def repos(database):
    return (
        UserRepository(database),
        PostRepository(database),
        CommentRepository(database),
    )


@pytest.fixture
def service(database, repos):
    users, posts, comments = repos
    return PostService(database, posts, users, comments)


async def make_user(users: UserRepository, username: str = "alice") -> TokenClaim:
    user_id = await users.create(username, "hash")
    return TokenClaim(user_id=str(user_id), username=username)


@pytest.mark.asyncio
async def test_create_post_links_owner_exactly_once(open_database, service, repos):
    users, posts, _ = repos
    claim = await make_user(users)

    post_id = await service.create_post(claim, ["a/1.jpg"], "hello")

    owner = await users.find_by_id(ObjectId(claim.user_id))
    assert owner["posts"].count(ObjectId(post_id)) == 1
    post = await posts.find_by_id(ObjectId(post_id))
    assert post["user"] == ObjectId(claim.user_id)
    assert post["caption"] == "hello"
    assert post["likes"] == [] and post["comments"] == []


@pytest.mark.asyncio
async def test_create_post_requires_images(open_database, service, repos):
    claim = await make_user(repos[0])

    with pytest.raises(ValidationError, match="Picture\\(s\\) missing!"):
        await service.create_post(claim, [], "x")


@pytest.mark.asyncio
async def test_create_post_for_missing_owner_conflicts(open_database, service):
    ghost = TokenClaim(user_id=str(ObjectId()), username="ghost")

    with pytest.raises(ConflictError):
        await service.create_post(ghost, ["a.jpg"], None)


@pytest.mark.asyncio
async def test_like_toggle_parity(open_database, service, repos):
    users, posts, _ = repos
    owner = await make_user(users, "owner")
    fan = await make_user(users, "fan")
    post_id = await service.create_post(owner, ["a.jpg"], None)
    fan_oid = ObjectId(fan.user_id)

    for count in range(1, 6):
        await service.update_post(fan, post_id, like=True)
        likes = (await posts.find_by_id(ObjectId(post_id)))["likes"]
        if count % 2:
            assert likes == [fan_oid]
        else:
            assert fan_oid not in likes


@pytest.mark.asyncio
async def test_update_applies_only_truthy_fields(open_database, service, repos):
    users, posts, _ = repos
    owner = await make_user(users)
    post_id = await service.create_post(owner, ["a.jpg"], "before")

    await service.update_post(owner, post_id, images=[], caption="after")

    post = await posts.find_by_id(ObjectId(post_id))
    assert post["images"] == ["a.jpg"]
    assert post["caption"] == "after"
    assert post["likes"] == []


@pytest.mark.asyncio
async def test_update_appends_comment_reference(open_database, service, repos):
    users, posts, _ = repos
    owner = await make_user(users)
    post_id = await service.create_post(owner, ["a.jpg"], None)
    comment_id = ObjectId()

    await service.update_post(owner, post_id, comment=str(comment_id))

    assert (await posts.find_by_id(ObjectId(post_id)))["comments"] == [comment_id]


@pytest.mark.asyncio
async def test_update_unknown_post(open_database, service, repos):
    owner = await make_user(repos[0])

    with pytest.raises(ValidationError, match="Post ID required!"):
        await service.update_post(owner, None)
    with pytest.raises(PostNotFoundError):
        await service.update_post(owner, str(ObjectId()), caption="x")


@pytest.mark.asyncio
async def test_delete_post_cascades(open_database, service, repos):
    users, posts, comments = repos
    owner = await make_user(users)
    post_id = await service.create_post(owner, ["a.jpg"], None)
    first = await comments.create(ObjectId(owner.user_id), "one")
    second = await comments.create(ObjectId(owner.user_id), "two")
    unrelated = await comments.create(ObjectId(owner.user_id), "elsewhere")
    await service.update_post(owner, post_id, comment=str(first))
    await service.update_post(owner, post_id, comment=str(second))

    await service.delete_post(post_id)

    assert await posts.find_by_id(ObjectId(post_id)) is None
    assert await comments.find_by_id(first) is None
    assert await comments.find_by_id(second) is None
    assert await comments.find_by_id(unrelated) is not None
    owner_doc = await users.find_by_id(ObjectId(owner.user_id))
    assert ObjectId(post_id) not in owner_doc["posts"]


@pytest.mark.asyncio
@pytest.mark.parametrize("post_id", [str(ObjectId()), "not-an-object-id"])
async def test_delete_missing_post_is_not_found(open_database, service, post_id):
    with pytest.raises(PostNotFoundError, match="Post not found!"):
        await service.delete_post(post_id)


@pytest.mark.asyncio
async def test_list_posts_empty_is_not_found(open_database, service):
    with pytest.raises(PostNotFoundError, match="No posts found!"):
        await service.list_posts()
