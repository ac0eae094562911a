"""
Integration tests for the GraphQL API against a real SQLite database
"""

from dataclasses import replace

import pytest
from sqlalchemy import delete

from inkwell.auth.passwords import PasswordHasher
from inkwell.dbmodels import Users

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

REGISTER = """
mutation Register($username: String!, $email: String!, $password: String!) {
  register(username: $username, email: $email, password: $password) {
    token
    user { id username email createdAt }
  }
}
"""

LOGIN = """
mutation Login($email: String!, $password: String!) {
  login(email: $email, password: $password) {
    token
    user { id username }
  }
}
"""

ME = "query { me { id username email } }"

CREATE_POST = """
mutation CreatePost($title: String!, $content: String!, $published: Boolean) {
  createPost(title: $title, content: $content, published: $published) {
    id title content published createdAt updatedAt
    author { id username }
  }
}
"""

UPDATE_POST = """
mutation UpdatePost($id: ID!, $title: String, $content: String, $published: Boolean) {
  updatePost(id: $id, title: $title, content: $content, published: $published) {
    id title content published createdAt updatedAt
  }
}
"""

DELETE_POST = "mutation DeletePost($id: ID!) { deletePost(id: $id) }"

CREATE_COMMENT = """
mutation CreateComment($postId: ID!, $content: String!) {
  createComment(postId: $postId, content: $content) {
    id content
    author { username }
    post { id title }
  }
}
"""

DELETE_COMMENT = "mutation DeleteComment($id: ID!) { deleteComment(id: $id) }"

COMMENTS = "query Comments($postId: ID!) { comments(postId: $postId) { id content } }"

POSTS = """
query Posts($published: Boolean) {
  posts(published: $published) { id title published }
}
"""


def error_messages(result) -> list[str]:
    return [error.message for error in result.errors or []]


async def register(client, username: str, password: str = "pw123456") -> dict:
    result = await client.execute(
        REGISTER,
        {"username": username, "email": f"{username}@x.com", "password": password},
    )
    assert result.errors is None, error_messages(result)
    return result.data["register"]


async def create_post(client, token: str, title: str = "T", published: bool = False) -> dict:
    result = await client.execute(
        CREATE_POST,
        {"title": title, "content": "Body", "published": published},
        token=token,
    )
    assert result.errors is None, error_messages(result)
    return result.data["createPost"]


class TestAuthentication:
    async def test_register_then_login_same_user(self, graphql_client, services):
        registered = await register(graphql_client, "alice")

        result = await graphql_client.execute(
            LOGIN, {"email": "alice@x.com", "password": "pw123456"}
        )

        assert result.errors is None
        assert result.data["login"]["user"]["id"] == registered["user"]["id"]

        register_claims = await services.tokens.verify(registered["token"])
        login_claims = await services.tokens.verify(result.data["login"]["token"])
        assert login_claims.user_id == register_claims.user_id
        assert register_claims.user_id == int(registered["user"]["id"])

    async def test_register_token_identifies_user(self, graphql_client):
        registered = await register(graphql_client, "alice")

        result = await graphql_client.execute(ME, token=registered["token"])

        assert result.errors is None
        assert result.data["me"] == {
            "id": registered["user"]["id"],
            "username": "alice",
            "email": "alice@x.com",
        }

    async def test_login_failures_are_indistinguishable(self, graphql_client):
        await register(graphql_client, "alice")

        unknown = await graphql_client.execute(
            LOGIN, {"email": "nobody@x.com", "password": "pw123456"}
        )
        wrong = await graphql_client.execute(
            LOGIN, {"email": "alice@x.com", "password": "wrong-password"}
        )

        assert error_messages(unknown) == ["Invalid credentials"]
        assert error_messages(wrong) == error_messages(unknown)

    @pytest.mark.parametrize(
        "username,email",
        [("alice", "other@x.com"), ("someone", "alice@x.com")],
    )
    async def test_duplicate_username_or_email_conflicts(self, graphql_client, username, email):
        await register(graphql_client, "alice")

        result = await graphql_client.execute(
            REGISTER, {"username": username, "email": email, "password": "pw123456"}
        )

        assert result.data is None
        assert error_messages(result) == ["User with this email or username already exists"]

    async def test_register_blank_fields(self, graphql_client):
        result = await graphql_client.execute(
            REGISTER, {"username": " ", "email": "a@x.com", "password": "pw"}
        )

        assert error_messages(result) == ["Username, email and password are required"]

    async def test_password_is_not_stored_in_plaintext(self, graphql_client, services):
        registered = await register(graphql_client, "alice")

        async with services.database.session() as session:
            user = await session.get(Users, int(registered["user"]["id"]))

        assert user.password_hash != "pw123456"
        assert services.passwords.verify("pw123456", user.password_hash)

    async def test_me_without_token(self, graphql_client):
        result = await graphql_client.execute(ME)

        assert result.data == {"me": None}
        assert error_messages(result) == ["Not authenticated"]

    async def test_me_after_user_deleted(self, graphql_client, services):
        registered = await register(graphql_client, "alice")
        async with services.database.session() as session:
            await session.execute(delete(Users).where(Users.id == int(registered["user"]["id"])))

        result = await graphql_client.execute(ME, token=registered["token"])

        assert error_messages(result) == ["User not found"]

    async def test_login_upgrades_hash_after_cost_change(self, graphql_client, services):
        registered = await register(graphql_client, "alice")
        stronger = PasswordHasher(time_cost=2, memory_cost=1024, parallelism=1)
        upgraded_client = type(graphql_client)(replace(services, passwords=stronger))

        result = await upgraded_client.execute(
            LOGIN, {"email": "alice@x.com", "password": "pw123456"}
        )

        assert result.errors is None
        async with services.database.session() as session:
            user = await session.get(Users, int(registered["user"]["id"]))
        assert stronger.needs_rehash(user.password_hash) is False
        assert services.passwords.needs_rehash(user.password_hash) is True
        assert stronger.verify("pw123456", user.password_hash)


class TestTokenHandling:
    async def test_tampered_token_allows_public_queries(self, graphql_client):
        alice = await register(graphql_client, "alice")
        await create_post(graphql_client, alice["token"], "Public", published=True)

        result = await graphql_client.execute(POSTS, token=alice["token"] + "tampered")

        assert result.errors is None
        assert [p["title"] for p in result.data["posts"]] == ["Public"]

    async def test_tampered_token_rejected_for_mutations(self, graphql_client):
        alice = await register(graphql_client, "alice")

        result = await graphql_client.execute(
            CREATE_POST,
            {"title": "T", "content": "C"},
            token=alice["token"] + "tampered",
        )

        assert result.data is None
        assert error_messages(result) == ["Invalid or expired token"]

    async def test_malformed_header_rejected_for_mutations(self, graphql_client):
        alice = await register(graphql_client, "alice")

        result = await graphql_client.execute(
            CREATE_POST,
            {"title": "T", "content": "C"},
            authorization=f"Token {alice['token']}",
        )

        assert error_messages(result) == ["Invalid or expired token"]


class TestPostOwnership:
    async def test_create_post_defaults_to_unpublished(self, graphql_client):
        alice = await register(graphql_client, "alice")

        result = await graphql_client.execute(
            CREATE_POST, {"title": "T", "content": "C"}, token=alice["token"]
        )

        post = result.data["createPost"]
        assert post["published"] is False
        assert post["author"] == {"id": alice["user"]["id"], "username": "alice"}

    async def test_create_post_requires_authentication(self, graphql_client):
        result = await graphql_client.execute(CREATE_POST, {"title": "T", "content": "C"})

        assert error_messages(result) == ["Not authenticated"]

    async def test_other_user_cannot_update_or_delete(self, graphql_client):
        alice = await register(graphql_client, "alice")
        bob = await register(graphql_client, "bob")
        post = await create_post(graphql_client, alice["token"], "Alice's")

        update = await graphql_client.execute(
            UPDATE_POST, {"id": post["id"], "title": "Bob's now"}, token=bob["token"]
        )
        remove = await graphql_client.execute(
            DELETE_POST, {"id": post["id"]}, token=bob["token"]
        )

        assert error_messages(update) == ["Not authorized to update this post"]
        assert error_messages(remove) == ["Not authorized to delete this post"]

        current = await graphql_client.execute(
            "query Post($id: ID!) { post(id: $id) { title } }", {"id": post["id"]}
        )
        assert current.data["post"]["title"] == "Alice's"

    async def test_update_without_token(self, graphql_client):
        alice = await register(graphql_client, "alice")
        post = await create_post(graphql_client, alice["token"])

        result = await graphql_client.execute(UPDATE_POST, {"id": post["id"], "title": "x"})

        assert error_messages(result) == ["Not authenticated"]

    async def test_delete_without_token(self, graphql_client):
        alice = await register(graphql_client, "alice")
        post = await create_post(graphql_client, alice["token"])

        result = await graphql_client.execute(DELETE_POST, {"id": post["id"]})

        assert result.data is None
        assert error_messages(result) == ["Not authenticated"]

    async def test_owner_deletes_post(self, graphql_client):
        alice = await register(graphql_client, "alice")
        post = await create_post(graphql_client, alice["token"])

        result = await graphql_client.execute(
            DELETE_POST, {"id": post["id"]}, token=alice["token"]
        )
        remaining = await graphql_client.execute("query { myPosts { id } }", token=alice["token"])

        assert result.errors is None
        assert result.data == {"deletePost": True}
        assert remaining.data == {"myPosts": []}

    @pytest.mark.parametrize("fields", [{"title": "   "}, {"content": ""}])
    async def test_update_rejects_blank_fields(self, graphql_client, fields):
        alice = await register(graphql_client, "alice")
        post = await create_post(graphql_client, alice["token"], "Kept")

        result = await graphql_client.execute(
            UPDATE_POST, {"id": post["id"], **fields}, token=alice["token"]
        )
        current = await graphql_client.execute(
            "query Post($id: ID!) { post(id: $id) { title content } }", {"id": post["id"]}
        )

        assert error_messages(result) == ["Title and content are required"]
        assert current.data["post"] == {"title": "Kept", "content": "Body"}

    async def test_partial_update(self, graphql_client):
        alice = await register(graphql_client, "alice")
        post = await create_post(graphql_client, alice["token"], "Title")

        result = await graphql_client.execute(
            UPDATE_POST, {"id": post["id"], "published": True}, token=alice["token"]
        )

        assert result.errors is None
        updated = result.data["updatePost"]
        assert updated["published"] is True
        assert updated["title"] == "Title"
        assert updated["content"] == "Body"
        assert updated["createdAt"] == post["createdAt"]
        assert updated["updatedAt"] != post["updatedAt"]

    async def test_update_missing_post(self, graphql_client):
        alice = await register(graphql_client, "alice")

        result = await graphql_client.execute(
            UPDATE_POST, {"id": "9999", "title": "x"}, token=alice["token"]
        )

        assert error_messages(result) == ["Post not found"]

    async def test_delete_post_cascades_to_comments(self, graphql_client):
        alice = await register(graphql_client, "alice")
        bob = await register(graphql_client, "bob")
        post = await create_post(graphql_client, alice["token"])
        for text in ("first", "second"):
            result = await graphql_client.execute(
                CREATE_COMMENT, {"postId": post["id"], "content": text}, token=bob["token"]
            )
            assert result.errors is None

        result = await graphql_client.execute(
            DELETE_POST, {"id": post["id"]}, token=alice["token"]
        )
        assert result.data == {"deletePost": True}

        comments = await graphql_client.execute(COMMENTS, {"postId": post["id"]})
        assert comments.data == {"comments": []}

        gone = await graphql_client.execute(
            "query Post($id: ID!) { post(id: $id) { id } }", {"id": post["id"]}
        )
        assert error_messages(gone) == ["Post not found"]


class TestComments:
    async def test_comment_on_another_users_post(self, graphql_client):
        alice = await register(graphql_client, "alice")
        bob = await register(graphql_client, "bob")
        post = await create_post(graphql_client, alice["token"], "Alice's")

        result = await graphql_client.execute(
            CREATE_COMMENT, {"postId": post["id"], "content": "Nice"}, token=bob["token"]
        )

        assert result.errors is None
        comment = result.data["createComment"]
        assert comment["author"] == {"username": "bob"}
        assert comment["post"] == {"id": post["id"], "title": "Alice's"}

    async def test_comment_on_missing_post(self, graphql_client):
        alice = await register(graphql_client, "alice")

        result = await graphql_client.execute(
            CREATE_COMMENT, {"postId": "9999", "content": "Hello"}, token=alice["token"]
        )

        assert error_messages(result) == ["Post not found"]

    async def test_post_author_cannot_delete_others_comment(self, graphql_client):
        alice = await register(graphql_client, "alice")
        bob = await register(graphql_client, "bob")
        post = await create_post(graphql_client, alice["token"])
        created = await graphql_client.execute(
            CREATE_COMMENT, {"postId": post["id"], "content": "Bob's"}, token=bob["token"]
        )
        comment_id = created.data["createComment"]["id"]

        denied = await graphql_client.execute(
            DELETE_COMMENT, {"id": comment_id}, token=alice["token"]
        )
        allowed = await graphql_client.execute(
            DELETE_COMMENT, {"id": comment_id}, token=bob["token"]
        )

        assert error_messages(denied) == ["Not authorized to delete this comment"]
        assert allowed.data == {"deleteComment": True}

    async def test_comments_newest_first(self, graphql_client):
        alice = await register(graphql_client, "alice")
        post = await create_post(graphql_client, alice["token"])
        for text in ("one", "two", "three"):
            await graphql_client.execute(
                CREATE_COMMENT, {"postId": post["id"], "content": text}, token=alice["token"]
            )

        result = await graphql_client.execute(COMMENTS, {"postId": post["id"]})

        assert [c["content"] for c in result.data["comments"]] == ["three", "two", "one"]

    async def test_comments_for_non_numeric_post_id(self, graphql_client):
        result = await graphql_client.execute(COMMENTS, {"postId": "abc"})

        assert result.data == {"comments": []}


class TestQueries:
    async def test_posts_published_filter(self, graphql_client):
        alice = await register(graphql_client, "alice")
        await create_post(graphql_client, alice["token"], "Draft", published=False)
        await create_post(graphql_client, alice["token"], "Live", published=True)

        everything = await graphql_client.execute(POSTS)
        live = await graphql_client.execute(POSTS, {"published": True})
        drafts = await graphql_client.execute(POSTS, {"published": False})

        assert [p["title"] for p in everything.data["posts"]] == ["Live", "Draft"]
        assert [p["title"] for p in live.data["posts"]] == ["Live"]
        assert [p["title"] for p in drafts.data["posts"]] == ["Draft"]

    async def test_post_with_non_numeric_id(self, graphql_client):
        result = await graphql_client.execute(
            "query Post($id: ID!) { post(id: $id) { id } }", {"id": "not-a-number"}
        )

        assert result.data == {"post": None}
        assert error_messages(result) == ["Post not found"]

    async def test_user_not_found(self, graphql_client):
        result = await graphql_client.execute(
            "query User($id: ID!) { user(id: $id) { id } }", {"id": "9999"}
        )

        assert error_messages(result) == ["User not found"]

    async def test_my_posts(self, graphql_client):
        alice = await register(graphql_client, "alice")
        bob = await register(graphql_client, "bob")
        await create_post(graphql_client, alice["token"], "Alice 1")
        await create_post(graphql_client, bob["token"], "Bob 1")
        await create_post(graphql_client, alice["token"], "Alice 2")

        mine = await graphql_client.execute(
            "query { myPosts { title } }", token=alice["token"]
        )
        anonymous = await graphql_client.execute("query { myPosts { title } }")

        assert [p["title"] for p in mine.data["myPosts"]] == ["Alice 2", "Alice 1"]
        assert error_messages(anonymous) == ["Not authenticated"]

    async def test_relationship_fields(self, graphql_client):
        alice = await register(graphql_client, "alice")
        bob = await register(graphql_client, "bob")
        post = await create_post(graphql_client, alice["token"], "Hello")
        await graphql_client.execute(
            CREATE_COMMENT, {"postId": post["id"], "content": "Hi"}, token=bob["token"]
        )

        result = await graphql_client.execute(
            """
            query {
              users {
                username
                posts { title comments { content author { username } } }
              }
            }
            """
        )

        assert result.errors is None
        by_name = {u["username"]: u for u in result.data["users"]}
        assert by_name["bob"]["posts"] == []
        assert by_name["alice"]["posts"] == [
            {"title": "Hello", "comments": [{"content": "Hi", "author": {"username": "bob"}}]}
        ]

    async def test_users_hide_password(self, graphql_client):
        result = await graphql_client.execute("query { users { password } }")

        assert result.errors is not None
        assert result.data is None


class TestScenario:
    async def test_alice_and_bob(self, graphql_client):
        """Two users, one post, a comment, and each one's rights over it."""
        alice = await register(graphql_client, "alice")
        bob = await register(graphql_client, "bob")

        post = await create_post(graphql_client, alice["token"], "Hello", published=True)
        comment = await graphql_client.execute(
            CREATE_COMMENT, {"postId": post["id"], "content": "Welcome"}, token=bob["token"]
        )
        assert comment.errors is None

        bob_edit = await graphql_client.execute(
            UPDATE_POST, {"id": post["id"], "content": "Bob was here"}, token=bob["token"]
        )
        assert error_messages(bob_edit) == ["Not authorized to update this post"]

        alice_edit = await graphql_client.execute(
            UPDATE_POST, {"id": post["id"], "content": "Edited"}, token=alice["token"]
        )
        assert alice_edit.data["updatePost"]["content"] == "Edited"

        view = await graphql_client.execute(
            """
            query Post($id: ID!) {
              post(id: $id) { content author { username } comments { content author { username } } }
            }
            """,
            {"id": post["id"]},
        )
        assert view.data["post"] == {
            "content": "Edited",
            "author": {"username": "alice"},
            "comments": [{"content": "Welcome", "author": {"username": "bob"}}],
        }


class TestWritesWithinOneDocument:
    async def test_later_fields_see_earlier_writes(self, graphql_client):
        alice = await register(graphql_client, "alice")
        post = await create_post(graphql_client, alice["token"], "Old")

        result = await graphql_client.execute(
            """
            mutation Edit($id: ID!) {
              first: createComment(postId: $id, content: "a") {
                post { title comments { content } }
              }
              rename: updatePost(id: $id, title: "New") { title }
              second: createComment(postId: $id, content: "b") {
                post { title comments { content } }
              }
            }
            """,
            {"id": post["id"]},
            token=alice["token"],
        )

        assert result.errors is None, error_messages(result)
        assert result.data["first"]["post"] == {
            "title": "Old",
            "comments": [{"content": "a"}],
        }
        assert result.data["second"]["post"] == {
            "title": "New",
            "comments": [{"content": "b"}, {"content": "a"}],
        }

    async def test_deleted_post_disappears_from_author_posts(self, graphql_client):
        alice = await register(graphql_client, "alice")
        post = await create_post(graphql_client, alice["token"], "Gone soon")

        result = await graphql_client.execute(
            """
            mutation Remove($id: ID!) {
              before: createPost(title: "Kept", content: "c") { author { posts { title } } }
              remove: deletePost(id: $id)
              after: createPost(title: "Newest", content: "c") { author { posts { title } } }
            }
            """,
            {"id": post["id"]},
            token=alice["token"],
        )

        assert result.errors is None, error_messages(result)
        assert result.data["before"]["author"]["posts"] == [
            {"title": "Kept"},
            {"title": "Gone soon"},
        ]
        assert result.data["after"]["author"]["posts"] == [
            {"title": "Newest"},
            {"title": "Kept"},
        ]
