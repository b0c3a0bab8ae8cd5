"""Tests for the Supabase client and article storage helpers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from aperio import articles
from aperio.db import DatabaseError, SupabaseClient, _filter_params
from aperio.models import ValidationError


def _response(body=None, status=200, text=None):
    resp = MagicMock()
    resp.is_error = status >= 400
    resp.status_code = status
    if isinstance(body, Exception):
        resp.json.side_effect = body
        resp.text = text or "boom"
    else:
        resp.json.return_value = body
        resp.text = text if text is not None else ("" if body is None else "x")
    return resp


def _mock_client(mock_client_cls, resp=None, side_effect=None):
    mock_client = AsyncMock()
    if side_effect is not None:
        mock_client.request.side_effect = side_effect
    else:
        mock_client.request.return_value = resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


@pytest.fixture
def db():
    return SupabaseClient("https://proj.supabase.co/", "anon-key")


def test_requires_url_and_key():
    with pytest.raises(ValueError):
        SupabaseClient("", "anon-key")
    with pytest.raises(ValueError):
        SupabaseClient("https://proj.supabase.co", "")


def test_filter_params():
    assert _filter_params({"slug": "a", "id": ("neq", 3), "live": True}) == {
        "slug": "eq.a", "id": "neq.3", "live": "eq.true",
    }
    assert _filter_params(None) == {}


@pytest.mark.asyncio
@patch("aperio.db.httpx.AsyncClient")
async def test_select_single(mock_client_cls, db):
    mock_client = _mock_client(mock_client_cls, _response({"id": 1, "slug": "a"}))

    row = await db.select("articles", "id,slug", {"slug": "a"}, order="name", limit=1, single=True)

    assert row == {"id": 1, "slug": "a"}
    call = mock_client.request.call_args
    assert call.args == ("GET", "https://proj.supabase.co/rest/v1/articles")
    assert call.kwargs["params"] == {
        "select": "id,slug", "slug": "eq.a", "order": "name", "limit": "1",
    }
    headers = call.kwargs["headers"]
    assert headers["Accept"] == "application/vnd.pgrst.object+json"
    assert headers["apikey"] == "anon-key"
    assert headers["Authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
@patch("aperio.db.httpx.AsyncClient")
async def test_error_body_becomes_database_error(mock_client_cls, db):
    _mock_client(mock_client_cls, _response(
        {"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"},
        status=406,
    ))

    with pytest.raises(DatabaseError) as excinfo:
        await db.select("articles", single=True)
    assert excinfo.value.code == "PGRST116"


@pytest.mark.asyncio
@patch("aperio.db.httpx.AsyncClient")
async def test_non_json_error_uses_status(mock_client_cls, db):
    _mock_client(mock_client_cls, _response(ValueError("not json"), status=502, text="Bad Gateway"))

    with pytest.raises(DatabaseError) as excinfo:
        await db.delete("bookmarks", {"id": 1})
    assert excinfo.value.code == "502"
    assert excinfo.value.message == "Bad Gateway"


@pytest.mark.asyncio
@patch("aperio.db.httpx.AsyncClient")
async def test_non_json_success_body(mock_client_cls, db):
    _mock_client(mock_client_cls, _response(ValueError("not json"), status=200, text="<html>"))

    with pytest.raises(DatabaseError) as excinfo:
        await db.select("articles", "id")
    assert excinfo.value.code == "invalid_response"


@pytest.mark.asyncio
@patch("aperio.db.httpx.AsyncClient")
async def test_network_error(mock_client_cls, db):
    _mock_client(mock_client_cls, side_effect=httpx.ConnectError("offline"))

    with pytest.raises(DatabaseError) as excinfo:
        await db.insert("articles", {"title": "x"})
    assert excinfo.value.code == "network"


@pytest.mark.asyncio
@patch("aperio.db.httpx.AsyncClient")
async def test_insert_wraps_single_row(mock_client_cls, db):
    mock_client = _mock_client(mock_client_cls, _response([{"id": 9}]))

    rows = await db.insert("bookmarks", {"user_id": "u"})

    assert rows == [{"id": 9}]
    call = mock_client.request.call_args
    assert call.kwargs["json"] == [{"user_id": "u"}]
    assert call.kwargs["headers"]["Prefer"] == "return=representation"


@pytest.mark.asyncio
@patch("aperio.db.httpx.AsyncClient")
async def test_sign_in_sets_bearer_and_sign_out_clears(mock_client_cls, db):
    mock_client = _mock_client(mock_client_cls, _response({
        "access_token": "user-jwt",
        "user": {"id": "u1", "email": "a@b.co", "user_metadata": {"name": "A"}},
    }))

    user = await db.sign_in("a@b.co", "secret")

    assert user.id == "u1"
    assert user.metadata == {"name": "A"}
    assert db.access_token == "user-jwt"
    assert mock_client.request.call_args.kwargs["params"] == {"grant_type": "password"}

    mock_client.request.return_value = _response(None)
    await db.sign_out()
    assert mock_client.request.call_args.kwargs["headers"]["Authorization"] == "Bearer user-jwt"
    assert db.access_token is None
    assert await db.get_user() is None


@pytest.mark.asyncio
@patch("aperio.db.httpx.AsyncClient")
async def test_sign_up_top_level_user(mock_client_cls, db):
    _mock_client(mock_client_cls, _response({"id": "u2", "email": "c@d.co"}))
    user = await db.sign_up("c@d.co", "secret", {"name": "C"})
    assert user.email == "c@d.co"


# -- Article helpers ----------------------------------------------------------


def test_slugify():
    assert articles.slugify("Fed Holds Rates: What's Next?") == "fed-holds-rates-whats-next"
    assert articles.slugify("  Many   spaces  ") == "many-spaces"


def test_validate_signup():
    articles.validate_signup("a@b.co", "secret", "secret")
    with pytest.raises(ValidationError, match="do not match"):
        articles.validate_signup("a@b.co", "secret", "other")
    with pytest.raises(ValidationError, match="at least 6"):
        articles.validate_signup("a@b.co", "abc", "abc")
    with pytest.raises(ValidationError, match="Email"):
        articles.validate_signup(" ", "secret", "secret")


@pytest.mark.asyncio
async def test_create_article_row():
    db = MagicMock()
    db.insert = AsyncMock(side_effect=lambda table, row: [{**row, "id": "a1"}])

    row = await articles.create_article(
        db, "author-1", " Rate Cuts Ahead ", "word " * 450,
        tags="fed, rates, ", status="published",
    )

    assert row["id"] == "a1"
    assert row["slug"] == "rate-cuts-ahead"
    assert row["title"] == "Rate Cuts Ahead"
    assert row["tags"] == ["fed", "rates"]
    assert row["reading_time"] == 3
    assert row["published_at"] is not None
    assert row["excerpt"] is None


@pytest.mark.asyncio
async def test_create_article_duplicate_title():
    db = MagicMock()
    db.insert = AsyncMock(side_effect=DatabaseError("23505", "duplicate key value"))

    with pytest.raises(ValidationError, match="already exists"):
        await articles.create_article(db, "a", "Title", "Body")

    db.insert = AsyncMock(side_effect=DatabaseError("42501", "permission denied"))
    with pytest.raises(DatabaseError):
        await articles.create_article(db, "a", "Title", "Body")


@pytest.mark.asyncio
async def test_create_article_requires_title_and_content():
    with pytest.raises(ValidationError):
        await articles.create_article(MagicMock(), "a", "", "Body")


@pytest.mark.asyncio
async def test_get_published_by_slug_not_found():
    db = MagicMock()
    db.select = AsyncMock(side_effect=DatabaseError("PGRST116", "no rows"))
    with pytest.raises(LookupError, match="missing-slug"):
        await articles.get_published_by_slug(db, "missing-slug")


@pytest.mark.asyncio
async def test_list_published_filters():
    db = MagicMock()
    db.select = AsyncMock(return_value=None)

    assert await articles.list_published(db, category="all") == []
    filters = db.select.call_args.args[2]
    assert filters == {"status": "published"}

    await articles.list_published(db, category="crypto")
    assert db.select.call_args.args[2]["category"] == "crypto"


@pytest.mark.asyncio
async def test_record_view_is_best_effort():
    db = MagicMock()
    db.insert = AsyncMock(side_effect=DatabaseError("network", "offline"))
    assert await articles.record_view(db, "a1") is False

    db.insert = AsyncMock(return_value=[{}])
    assert await articles.record_view(db, "a1", "u1") is True


@pytest.mark.asyncio
async def test_toggle_bookmark():
    db = MagicMock()
    db.select = AsyncMock(return_value=[])
    db.insert = AsyncMock(return_value=[{}])
    db.delete = AsyncMock(return_value=None)

    assert await articles.toggle_bookmark(db, "u1", "a1") is True
    db.insert.assert_awaited_once_with("bookmarks", {"user_id": "u1", "article_id": "a1"})

    db.select = AsyncMock(return_value=[{"id": "b1"}])
    assert await articles.toggle_bookmark(db, "u1", "a1") is False
    db.delete.assert_awaited_once()


@pytest.mark.asyncio
async def test_related_articles_excludes_current():
    db = MagicMock()
    db.select = AsyncMock(return_value=[{"id": "b"}])
    assert await articles.related_articles(db, "markets", "a") == [{"id": "b"}]
    assert db.select.call_args.args[2]["id"] == ("neq", "a")
