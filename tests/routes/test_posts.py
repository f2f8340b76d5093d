# tests/routes/test_posts.py
"""End-to-end tests for the /posts routes."""

from pathlib import Path
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql.dml import Update
from sqlmodel.ext.asyncio.session import AsyncSession

from inkwell.models import PostDB
from inkwell.repositories import PostRepository


def post_form(seed, **overrides: str) -> dict[str, str]:
    form = {
        "title": "Writing async Python that reads well",
        "content": "Coroutines are easiest to follow when every await is a visible step.",
        "topicId": str(seed.topic.id),
    }
    form.update(overrides)
    return form


def disk_failure(statement: str) -> OperationalError:
    return OperationalError(statement, {}, Exception("disk I/O error"))


async def reload_post(session_factory, post_id) -> PostDB:
    async with session_factory() as db_session:
        post = await PostRepository(db_session).get_by_id(post_id)
    assert post is not None
    return post


def failing_updates():
    """Make every UPDATE statement fail as if the database broke mid-request."""
    original_execute = AsyncSession.execute

    async def execute(self, statement, *args, **kwargs):
        if isinstance(statement, Update):
            raise disk_failure(str(statement))
        return await original_execute(self, statement, *args, **kwargs)

    return patch.object(AsyncSession, "execute", execute)


class TestCreatePost:
    """Tests for POST /posts."""

    @pytest.mark.asyncio
    async def test_create_returns_enriched_post(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """The author comes from the token and references are resolved."""
        response = await client.post("/posts", data=post_form(seed), headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Writing async Python that reads well"
        assert body["author"] == {
            "id": str(seed.author.id),
            "username": "ada",
            "displayName": "Ada L.",
        }
        assert body["topic"] == {"id": str(seed.topic.id), "name": "python"}
        assert body["views"] == 0
        assert body["likedBy"] == []
        assert body["likeCount"] == 0
        assert body["thumbnail"] is None
        assert body["createdAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client: AsyncClient, seed) -> None:
        """Anonymous creation is rejected."""
        response = await client.post("/posts", data=post_form(seed))

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_create_rejects_invalid_token(self, client: AsyncClient, seed) -> None:
        """A token that does not verify is rejected."""
        response = await client.post(
            "/posts",
            data=post_form(seed),
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_missing_title(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """Missing form fields fail validation with a 400."""
        form = post_form(seed)
        del form["title"]

        response = await client.post("/posts", data=form, headers=auth_headers)

        assert response.status_code == 400
        fields = [error["field"] for error in response.json()["errors"]]
        assert "title" in fields

    @pytest.mark.asyncio
    async def test_create_blank_title(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """A whitespace-only title is rejected."""
        response = await client.post(
            "/posts",
            data=post_form(seed, title="   "),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid post data"

    @pytest.mark.asyncio
    async def test_create_unknown_topic(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """A topic id that resolves to nothing is rejected."""
        response = await client.post(
            "/posts",
            data=post_form(seed, topicId=str(uuid4())),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "Topic" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_create_with_thumbnail_url(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """A pre-hosted thumbnail URI is stored as given."""
        response = await client.post(
            "/posts",
            data=post_form(seed, thumbnailUrl="https://cdn.example.com/cover.png"),
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["thumbnail"] == "https://cdn.example.com/cover.png"

    @pytest.mark.asyncio
    async def test_create_with_uploaded_thumbnail(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
        uploads_dir: Path,
        valid_png_bytes: bytes,
    ) -> None:
        """An uploaded file is stored and wins over thumbnailUrl."""
        response = await client.post(
            "/posts",
            data=post_form(seed, thumbnailUrl="https://cdn.example.com/ignored.png"),
            files={"thumbnail": ("my cover.png", valid_png_bytes, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 201
        thumbnail = response.json()["thumbnail"]
        assert thumbnail.startswith("/uploads/thumbnails/")
        assert thumbnail.endswith("-my_cover.png")
        stored = uploads_dir / "thumbnails" / thumbnail.rsplit("/", 1)[-1]
        assert stored.read_bytes() == valid_png_bytes

    @pytest.mark.asyncio
    async def test_create_rejects_unsupported_upload(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """Non-image uploads are refused with 415."""
        response = await client.post(
            "/posts",
            data=post_form(seed),
            files={"thumbnail": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 415

    @pytest.mark.asyncio
    async def test_create_rejects_corrupt_image(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
        uploads_dir: Path,
    ) -> None:
        """A file claiming to be an image but not decodable is refused."""
        response = await client.post(
            "/posts",
            data=post_form(seed),
            files={"thumbnail": ("cover.png", b"not really a png", "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert not any((uploads_dir / "thumbnails").iterdir())


class TestReadPosts:
    """Tests for GET /posts and GET /posts/{id}."""

    @pytest.mark.asyncio
    async def test_list_newest_first(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """Posts come back newest first."""
        for title in ("first", "second"):
            response = await client.post(
                "/posts",
                data=post_form(seed, title=title),
                headers=auth_headers,
            )
            assert response.status_code == 201

        response = await client.get("/posts")

        assert response.status_code == 200
        assert [post["title"] for post in response.json()] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_list_empty(self, client: AsyncClient, seed) -> None:
        """No posts gives an empty list."""
        response = await client.get("/posts")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_get_by_id(self, client: AsyncClient, stored_post) -> None:
        """A stored post is returned by id."""
        response = await client.get(f"/posts/{stored_post.id}")

        assert response.status_code == 200
        assert response.json()["id"] == str(stored_post.id)

    @pytest.mark.asyncio
    async def test_get_missing(self, client: AsyncClient, seed) -> None:
        """An unknown id is a 404."""
        post_id = uuid4()
        response = await client.get(f"/posts/{post_id}")

        assert response.status_code == 404
        assert response.json() == {
            "detail": f"Post with ID {post_id} not found",
            "post_id": str(post_id),
        }

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, client: AsyncClient, seed) -> None:
        """A malformed id is a 400."""
        response = await client.get("/posts/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["detail"] == "Validation failed"


class TestUpdatePost:
    """Tests for PUT /posts/{id}."""

    @pytest.mark.asyncio
    async def test_author_updates(
        self,
        client: AsyncClient,
        stored_post,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """The author can change fields, including the topic."""
        response = await client.put(
            f"/posts/{stored_post.id}",
            json={"title": "Revised", "topicId": str(seed.other_topic.id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Revised"
        assert body["content"] == stored_post.content
        assert body["topic"]["name"] == "databases"
        assert body["updatedAt"] is not None

    @pytest.mark.asyncio
    async def test_non_author_forbidden(
        self,
        client: AsyncClient,
        stored_post,
        reader_headers: dict[str, str],
    ) -> None:
        """Only the author may update."""
        response = await client.put(
            f"/posts/{stored_post.id}",
            json={"title": "Hijacked"},
            headers=reader_headers,
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "You can only update your own posts"

    @pytest.mark.asyncio
    async def test_update_missing(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """Updating an unknown post is a 404."""
        response = await client.put(
            f"/posts/{uuid4()}",
            json={"title": "Revised"},
            headers=auth_headers,
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(
        self,
        client: AsyncClient,
        stored_post,
        auth_headers: dict[str, str],
    ) -> None:
        """Counters and the like set cannot be written through update."""
        response = await client.put(
            f"/posts/{stored_post.id}",
            json={"views": 1000},
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_rejects_null_title(
        self,
        client: AsyncClient,
        stored_post,
        auth_headers: dict[str, str],
    ) -> None:
        """Required fields cannot be cleared."""
        response = await client.put(
            f"/posts/{stored_post.id}",
            json={"title": None},
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_unknown_topic(
        self,
        client: AsyncClient,
        stored_post,
        auth_headers: dict[str, str],
    ) -> None:
        """Moving a post to an unknown topic is rejected."""
        response = await client.put(
            f"/posts/{stored_post.id}",
            json={"topicId": str(uuid4())},
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_keeps_likes(
        self,
        client: AsyncClient,
        stored_post,
        seed,
        auth_headers: dict[str, str],
        reader_headers: dict[str, str],
    ) -> None:
        """Editing a post leaves its likes and views alone."""
        await client.post(f"/posts/{stored_post.id}/like", headers=reader_headers)
        await client.post(f"/posts/{stored_post.id}/view")

        response = await client.put(
            f"/posts/{stored_post.id}",
            json={"content": "New body"},
            headers=auth_headers,
        )

        body = response.json()
        assert body["likedBy"] == [str(seed.reader.id)]
        assert body["views"] == 1


class TestDeletePost:
    """Tests for DELETE /posts/{id}."""

    @pytest.mark.asyncio
    async def test_author_deletes(
        self,
        client: AsyncClient,
        stored_post,
        auth_headers: dict[str, str],
    ) -> None:
        """The author can delete and the post is gone afterwards."""
        response = await client.delete(f"/posts/{stored_post.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Post deleted", "id": str(stored_post.id)}
        assert (await client.get(f"/posts/{stored_post.id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_non_author_forbidden(
        self,
        client: AsyncClient,
        stored_post,
        reader_headers: dict[str, str],
    ) -> None:
        """Only the author may delete."""
        response = await client.delete(f"/posts/{stored_post.id}", headers=reader_headers)

        assert response.status_code == 403
        assert (await client.get(f"/posts/{stored_post.id}")).status_code == 200

    @pytest.mark.asyncio
    async def test_delete_missing(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
    ) -> None:
        """Deleting an unknown post is a 404."""
        response = await client.delete(f"/posts/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_removes_uploaded_thumbnail(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
        uploads_dir: Path,
        valid_jpeg_bytes: bytes,
    ) -> None:
        """A thumbnail stored by the service is removed with its post."""
        created = await client.post(
            "/posts",
            data=post_form(seed),
            files={"thumbnail": ("cover.jpg", valid_jpeg_bytes, "image/jpeg")},
            headers=auth_headers,
        )
        body = created.json()
        stored = uploads_dir / "thumbnails" / body["thumbnail"].rsplit("/", 1)[-1]
        assert stored.exists()

        response = await client.delete(f"/posts/{body['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert not stored.exists()

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_thumbnail(
        self,
        client: AsyncClient,
        seed,
        auth_headers: dict[str, str],
        uploads_dir: Path,
        valid_png_bytes: bytes,
    ) -> None:
        """When the delete cannot be committed the post and its file both stay."""
        created = await client.post(
            "/posts",
            data=post_form(seed),
            files={"thumbnail": ("cover.png", valid_png_bytes, "image/png")},
            headers=auth_headers,
        )
        body = created.json()
        stored = uploads_dir / "thumbnails" / body["thumbnail"].rsplit("/", 1)[-1]

        failure = disk_failure("DELETE FROM posts")
        with patch.object(AsyncSession, "commit", AsyncMock(side_effect=failure)):
            response = await client.delete(f"/posts/{body['id']}", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Failed to delete record")
        assert stored.exists()
        assert (await client.get(f"/posts/{body['id']}")).status_code == 200


class TestViewAndLike:
    """Tests for POST /posts/{id}/view and POST /posts/{id}/like."""

    @pytest.mark.asyncio
    async def test_view_increments(self, client: AsyncClient, stored_post) -> None:
        """Each view adds exactly one, without authentication."""
        first = await client.post(f"/posts/{stored_post.id}/view")
        second = await client.post(f"/posts/{stored_post.id}/view")

        assert first.status_code == 200
        assert first.json()["views"] == 1
        assert second.json()["views"] == 2

    @pytest.mark.asyncio
    async def test_view_missing(self, client: AsyncClient, seed) -> None:
        """Viewing an unknown post is a 404."""
        response = await client.post(f"/posts/{uuid4()}/view")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_like_toggles(
        self,
        client: AsyncClient,
        stored_post,
        seed,
        reader_headers: dict[str, str],
    ) -> None:
        """Liking twice adds then removes the actor."""
        liked = await client.post(f"/posts/{stored_post.id}/like", headers=reader_headers)
        assert liked.status_code == 200
        assert liked.json()["likedBy"] == [str(seed.reader.id)]
        assert liked.json()["likeCount"] == 1

        unliked = await client.post(f"/posts/{stored_post.id}/like", headers=reader_headers)
        assert unliked.json()["likedBy"] == []
        assert unliked.json()["likeCount"] == 0

    @pytest.mark.asyncio
    async def test_two_actors_scenario(
        self,
        client: AsyncClient,
        stored_post,
        seed,
        auth_headers: dict[str, str],
        reader_headers: dict[str, str],
    ) -> None:
        """A likes, B likes, A unlikes, three views: liked by B with three views."""
        url = f"/posts/{stored_post.id}/like"
        await client.post(url, headers=auth_headers)
        await client.post(url, headers=reader_headers)
        await client.post(url, headers=auth_headers)
        for _ in range(3):
            response = await client.post(f"/posts/{stored_post.id}/view")

        assert response.status_code == 200
        body = response.json()
        assert body["likedBy"] == [str(seed.reader.id)]
        assert body["likeCount"] == 1
        assert body["views"] == 3

    @pytest.mark.asyncio
    async def test_like_requires_auth(self, client: AsyncClient, stored_post) -> None:
        """Anonymous likes are rejected."""
        response = await client.post(f"/posts/{stored_post.id}/like")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_like_missing(
        self,
        client: AsyncClient,
        seed,
        reader_headers: dict[str, str],
    ) -> None:
        """Liking an unknown post is a 404 and nothing is created."""
        response = await client.post(f"/posts/{uuid4()}/like", headers=reader_headers)

        assert response.status_code == 404
        assert (await client.get("/posts")).json() == []


class TestStorageFailures:
    """A database failure on a write is a 500 and leaves the post untouched."""

    @pytest.mark.asyncio
    async def test_like_write_failure(
        self,
        client: AsyncClient,
        session_factory,
        stored_post,
        seed,
        auth_headers: dict[str, str],
        reader_headers: dict[str, str],
    ) -> None:
        """A failed like reports a storage error and keeps the old like set."""
        url = f"/posts/{stored_post.id}/like"
        assert (await client.post(url, headers=auth_headers)).status_code == 200

        with failing_updates():
            response = await client.post(url, headers=reader_headers)

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Failed to write likes")
        post = await reload_post(session_factory, stored_post.id)
        assert post.liked_by == [str(seed.author.id)]
        assert post.version == 1

    @pytest.mark.asyncio
    async def test_view_write_failure(
        self,
        client: AsyncClient,
        session_factory,
        stored_post,
    ) -> None:
        """A failed view reports a storage error and keeps the old count."""
        url = f"/posts/{stored_post.id}/view"
        assert (await client.post(url)).json()["views"] == 1

        with failing_updates():
            response = await client.post(url)

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Failed to record view")
        post = await reload_post(session_factory, stored_post.id)
        assert post.views == 1
        assert post.version == 1


class TestServiceEndpoints:
    """Tests for the health and root endpoints."""

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient) -> None:
        """The root endpoint greets."""
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "Welcome to Inkwell Backend"}

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient) -> None:
        """A well-formed incoming request id is echoed back."""
        response = await client.get("/", headers={"X-Request-ID": "abc12345-req"})

        assert response.headers["X-Request-ID"] == "abc12345-req"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
