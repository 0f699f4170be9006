"""Test order history, order detail and statistics."""
import pytest

from bookstore.auth_service.models import User
from bookstore.transaction_service.schemas import CheckoutItem
from bookstore.transaction_service.service import CheckoutService
from shared.security import AuthenticatedUser


async def buy(session_factory, user, *lines):
    async with session_factory() as session:
        items = [CheckoutItem(book_id=book_id, quantity=qty) for book_id, qty in lines]
        return await CheckoutService.checkout(session, user, items)


@pytest.fixture
def make_user(session_factory):
    async def _make_user(email: str, username: str) -> AuthenticatedUser:
        async with session_factory() as session:
            user = User(email=email, username=username, password="not-a-real-hash")
            session.add(user)
            await session.commit()
            return AuthenticatedUser(id=user.id, email=user.email, username=user.username)

    return _make_user


@pytest.mark.asyncio
async def test_statistics_scenario(client, auth_headers, session_factory, reader, make_book):
    book_a = await make_book("Book A", price="10.00", stock=10, writer="Writer A")
    book_b = await make_book("Book B", price="9.10", stock=10, writer="Writer B")
    await buy(session_factory, reader, (book_a, 3))
    await buy(session_factory, reader, (book_b, 5))

    resp = await client.get("/transactions/statistics", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "totalOrders": 2,
        "totalRevenue": "75.50",
        "topSellingBooks": [
            {"book_id": book_b, "quantity": 5, "book_title": "Book B", "writer": "Writer B"},
            {"book_id": book_a, "quantity": 3, "book_title": "Book A", "writer": "Writer A"},
        ],
    }


@pytest.mark.asyncio
async def test_statistics_without_orders(client, auth_headers):
    resp = await client.get("/transactions/statistics", headers=auth_headers)
    assert resp.json() == {"totalOrders": 0, "totalRevenue": "0.00", "topSellingBooks": []}


@pytest.mark.asyncio
async def test_statistics_require_authentication(client):
    assert (await client.get("/transactions/statistics")).status_code == 401


@pytest.mark.asyncio
async def test_top_selling_keeps_five_and_breaks_ties_by_book_id(client, auth_headers, session_factory, reader, make_book):
    book_ids = [await make_book(f"Book {n}", stock=50) for n in range(7)]
    for book_id in book_ids:
        await buy(session_factory, reader, (book_id, 2))
    await buy(session_factory, reader, (book_ids[6], 1))

    top = (await client.get("/transactions/statistics", headers=auth_headers)).json()["topSellingBooks"]
    assert len(top) == 5
    assert top[0] == {"book_id": book_ids[6], "quantity": 3, "book_title": "Book 6", "writer": "Some Writer"}
    tied = [row["book_id"] for row in top[1:]]
    assert tied == sorted(book_ids[:6])[:4]


@pytest.mark.asyncio
async def test_statistics_include_soft_deleted_books(client, auth_headers, session_factory, reader, make_book):
    book_a = await make_book("Retired", stock=5)
    await buy(session_factory, reader, (book_a, 2))
    await client.delete(f"/books/{book_a}", headers=auth_headers)

    top = (await client.get("/transactions/statistics", headers=auth_headers)).json()["topSellingBooks"]
    assert top == [{"book_id": book_a, "quantity": 2, "book_title": "Retired", "writer": "Some Writer"}]


@pytest.mark.asyncio
async def test_history_is_newest_first_and_scoped_to_caller(
    client, auth_headers, auth_headers_for, session_factory, reader, make_user, make_book
):
    other = await make_user("other@example.com", "other")
    book_a = await make_book("Book A", stock=20)
    first = await buy(session_factory, reader, (book_a, 1))
    second = await buy(session_factory, reader, (book_a, 2))
    await buy(session_factory, other, (book_a, 3))

    history = (await client.get("/transactions", headers=auth_headers)).json()
    assert [o["id"] for o in history] == [second.id, first.id]
    assert history[0]["items"][0]["book"]["title"] == "Book A"

    others = (await client.get("/transactions", headers=auth_headers_for(other))).json()
    assert len(others) == 1


@pytest.mark.asyncio
async def test_order_detail_only_for_owner(client, auth_headers, auth_headers_for, session_factory, reader, make_user, make_book):
    book_a = await make_book("Book A", stock=5)
    order = await buy(session_factory, reader, (book_a, 1))
    stranger = await make_user("stranger@example.com", "stranger")

    mine = await client.get(f"/transactions/{order.id}", headers=auth_headers)
    assert mine.status_code == 200
    assert mine.json()["items"][0]["book"]["writer"] == "Some Writer"

    theirs = await client.get(f"/transactions/{order.id}", headers=auth_headers_for(stranger))
    assert theirs.status_code == 404
    assert (await client.get("/transactions/no-such-order", headers=auth_headers)).status_code == 404


@pytest.mark.asyncio
async def test_reads_are_idempotent(client, auth_headers, session_factory, reader, make_book):
    book_a = await make_book("Book A", stock=5)
    order = await buy(session_factory, reader, (book_a, 2))

    for path in (f"/transactions/{order.id}", "/transactions/statistics", "/transactions"):
        first = await client.get(path, headers=auth_headers)
        second = await client.get(path, headers=auth_headers)
        assert first.json() == second.json()
