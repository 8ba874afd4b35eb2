"""
Tests that run operations through the Strawberry schema
"""

import uuid

import pytest

from ratemyportfolio.auth.context import AuthContext
from ratemyportfolio.graphql.schema import schema, validate_schema

pytestmark = pytest.mark.requires_db

SIGN_UP = """
mutation SignUp($username: String!, $email: String!, $password: String!) {
  addUser(username: $username, email: $email, password: $password) {
    token
    user { _id username email followerCount followingCount portfolios { _id } }
  }
}
"""

ADD_PORTFOLIO = """
mutation AddPortfolio($text: String!, $link: String) {
  addPortfolio(portfolioText: $text, portfolioLink: $link) {
    _id
    portfolioText
    portfolioLink
    portfolioAuthor
    ratingCount
    averageRating
    ratings { _id ratingNumber ratingAuthor }
    feedbacks { _id feedbackText feedbackAuthor }
  }
}
"""


async def sign_up(username):
    result = await schema.execute(
        SIGN_UP,
        variable_values={
            "username": username,
            "email": f"{username}@example.com",
            "password": "secret123",
        },
        context_value={"auth": AuthContext.anonymous()},
    )
    assert result.errors is None
    payload = result.data["addUser"]
    return payload, AuthContext(
        user_id=uuid.UUID(payload["user"]["_id"]),
        username=username,
        token=payload["token"],
    )


@pytest.mark.unit
def test_schema_is_valid():
    validate_schema()


@pytest.mark.unit
def test_schema_uses_underscore_ids_and_camel_case():
    sdl = schema.as_str()

    assert "_id: UUID!" in sdl
    assert "portfolioAuthor: String!" in sdl
    assert "followUser(userId: UUID!)" in sdl
    assert "removePortfolio(portfolioId: UUID!)" in sdl


@pytest.mark.asyncio
async def test_sign_up_payload(database):
    payload, _ = await sign_up("alice")

    assert payload["token"]
    assert payload["user"]["username"] == "alice"
    assert payload["user"]["portfolios"] == []
    assert payload["user"]["followerCount"] == 0
    assert payload["user"]["followingCount"] == 0


@pytest.mark.asyncio
async def test_unauthenticated_mutation_reports_code(database):
    result = await schema.execute(
        ADD_PORTFOLIO,
        variable_values={"text": "Anonymous"},
        context_value={"auth": AuthContext.anonymous()},
    )

    assert result.data is None
    assert result.errors[0].message == "You need to be logged in"
    assert result.errors[0].extensions == {"code": "UNAUTHENTICATED"}

    listing = await schema.execute(
        "{ portfolios { _id } }", context_value={"auth": AuthContext.anonymous()}
    )
    assert listing.data == {"portfolios": []}


@pytest.mark.asyncio
async def test_portfolio_round_trip_and_rating(database):
    _, alice = await sign_up("alice")
    _, bob = await sign_up("bob")

    created = await schema.execute(
        ADD_PORTFOLIO,
        variable_values={"text": "My designs", "link": "https://alice.dev"},
        context_value={"auth": alice},
    )
    assert created.errors is None
    portfolio = created.data["addPortfolio"]
    assert portfolio["portfolioAuthor"] == "alice"
    assert portfolio["ratingCount"] == 0
    assert portfolio["averageRating"] is None

    rated = await schema.execute(
        """
        mutation Rate($id: UUID!) {
          addRating(portfolioId: $id, ratingNumber: 4) { ratingCount averageRating }
        }
        """,
        variable_values={"id": portfolio["_id"]},
        context_value={"auth": bob},
    )
    assert rated.errors is None
    assert rated.data["addRating"] == {"ratingCount": 1, "averageRating": 4.0}

    fetched = await schema.execute(
        """
        query Get($id: UUID!) {
          portfolio(portfolioId: $id) { _id portfolioText ratings { ratingAuthor } }
        }
        """,
        variable_values={"id": portfolio["_id"]},
        context_value={"auth": AuthContext.anonymous()},
    )
    assert fetched.data["portfolio"] == {
        "_id": portfolio["_id"],
        "portfolioText": "My designs",
        "ratings": [{"ratingAuthor": "bob"}],
    }


@pytest.mark.asyncio
async def test_forbidden_and_not_found_codes(database):
    _, alice = await sign_up("alice")

    self_follow = await schema.execute(
        "mutation F($id: UUID!) { followUser(userId: $id) { _id } }",
        variable_values={"id": str(alice.user_id)},
        context_value={"auth": alice},
    )
    assert self_follow.errors[0].message == "You can not follow yourself"
    assert self_follow.errors[0].extensions == {"code": "FORBIDDEN"}

    missing = await schema.execute(
        "mutation F($id: UUID!) { followUser(userId: $id) { _id } }",
        variable_values={"id": "00000000-0000-0000-0000-000000000000"},
        context_value={"auth": alice},
    )
    assert missing.errors[0].extensions == {"code": "NOT_FOUND"}


@pytest.mark.asyncio
async def test_me_and_follow_counts(database):
    _, alice = await sign_up("alice")
    _, bob = await sign_up("bob")

    await schema.execute(
        "mutation F($id: UUID!) { followUser(userId: $id) { _id } }",
        variable_values={"id": str(bob.user_id)},
        context_value={"auth": alice},
    )

    me = await schema.execute(
        "{ me { username followingCount followings { username followerCount } } }",
        context_value={"auth": alice},
    )
    assert me.errors is None
    assert me.data["me"] == {
        "username": "alice",
        "followingCount": 1,
        "followings": [{"username": "bob", "followerCount": 1}],
    }
