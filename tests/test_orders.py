"""
Checkout, the order state machine and claim-code fulfilment.
Run: pytest tests/test_orders.py -v
"""

from decimal import Decimal

from sqlmodel import select

from bookshop.models.book import Book
from bookshop.models.notifications import Notification
from bookshop.models.user import User
from bookshop.services.order_service import CLAIM_CODE_ALPHABET
from conftest import auth_headers


def stock_of(session, book_id):
    session.expire_all()
    return session.get(Book, book_id).stock


class TestCheckout:
    def test_place_order_totals(self, client, session, member_headers, make_book, place_order, sale_window):
        start, end = sale_window
        book = make_book(price=Decimal("20.00"), stock=8, is_on_sale=True,
                         discount_percentage=Decimal("25"),
                         discount_start_date=start, discount_end_date=end)

        response = place_order(member_headers, [(book.id, 5)])
        assert response.status_code == 201
        data = response.json()
        assert data["subtotal"] == 75.0
        assert data["discount_amount"] == 3.75
        assert data["volume_discount"] is True
        assert data["loyalty_discount"] is False
        assert data["shipping_cost"] == 5.99
        assert data["total_amount"] == 77.24
        assert data["order_number"].startswith("ORD")
        assert len(data["order_number"]) <= 20

        code = data["claim_code"]
        assert len(code) == 6
        assert set(code) <= set(CLAIM_CODE_ALPHABET)

        assert stock_of(session, book.id) == 3

    def test_price_is_snapshotted(self, client, session, member_headers, admin_headers, make_book, place_order):
        book = make_book(price=Decimal("12.00"))
        order_id = place_order(member_headers, [(book.id, 2)]).json()["order_id"]

        client.put(f"/api/books/{book.id}", json={"price": "30.00"}, headers=admin_headers)

        order = client.get(f"/api/orders/{order_id}", headers=member_headers).json()
        assert order["items"][0]["unit_price"] == 12.0
        assert order["items"][0]["total"] == 24.0
        assert order["subtotal"] == 24.0

    def test_duplicate_lines_are_merged(self, client, member_headers, make_book, place_order):
        book = make_book(stock=5)
        order_id = place_order(member_headers, [(book.id, 2), (book.id, 3)]).json()["order_id"]

        order = client.get(f"/api/orders/{order_id}", headers=member_headers).json()
        assert len(order["items"]) == 1
        assert order["items"][0]["quantity"] == 5
        assert order["received_volume_discount"] is True

    def test_insufficient_stock_rolls_back_everything(
        self, client, session, member_headers, make_book, place_order
    ):
        plenty = make_book(stock=10)
        scarce = make_book(stock=1)

        response = place_order(member_headers, [(plenty.id, 2), (scarce.id, 2)])
        assert response.status_code == 400
        assert "Insufficient stock" in response.json()["detail"]

        assert stock_of(session, plenty.id) == 10
        assert stock_of(session, scarce.id) == 1
        assert client.get("/api/orders", headers=member_headers).json() == []

    def test_missing_book_is_404(self, client, member_headers, make_book, place_order):
        book = make_book()
        response = place_order(member_headers, [(book.id, 1), (9999, 1)])
        assert response.status_code == 404

    def test_empty_order(self, client, member_headers, place_order):
        response = place_order(member_headers, [])
        assert response.status_code == 400

    def test_requires_login(self, client, make_book, place_order):
        response = place_order({}, [(make_book().id, 1)])
        assert response.status_code == 401

    def test_ordered_books_leave_the_cart(self, client, member_headers, make_book, place_order):
        ordered = make_book()
        kept = make_book()
        for book in (ordered, kept):
            client.post("/api/cart/add", json={"book_id": book.id}, headers=member_headers)

        place_order(member_headers, [(ordered.id, 1)])

        cart = client.get("/api/cart", headers=member_headers).json()
        assert [line["book_id"] for line in cart["items"]] == [kept.id]

    def test_placement_logs_timeline_and_admin_notification(
        self, client, session, member_headers, make_book, place_order
    ):
        order_id = place_order(member_headers, [(make_book().id, 1)]).json()["order_id"]

        order = client.get(f"/api/orders/{order_id}", headers=member_headers).json()
        assert [event["event_type"] for event in order["timeline"]] == ["order_placed"]

        session.expire_all()
        notes = session.exec(select(Notification).where(Notification.related_id == order_id)).all()
        assert [n.trigger_source for n in notes] == ["order_placed"]

    def test_loyal_customer_gets_loyalty_discount(self, client, make_user, make_book, place_order):
        loyal = auth_headers(make_user(successful_order_count=10))
        data = place_order(loyal, [(make_book().id, 1)]).json()
        assert data["loyalty_discount"] is True
        assert data["discount_amount"] == 2.0
        assert data["total_amount"] == 23.99


class TestOrderQueries:
    def test_list_only_own_orders_newest_first(self, client, member_headers, make_user, make_book, place_order):
        book = make_book()
        first = place_order(member_headers, [(book.id, 1)]).json()["order_id"]
        second = place_order(member_headers, [(book.id, 1)]).json()["order_id"]
        place_order(auth_headers(make_user()), [(book.id, 1)])

        orders = client.get("/api/orders", headers=member_headers).json()
        assert [o["id"] for o in orders] == [second, first]

    def test_other_users_order_is_404(self, client, member_headers, make_user, make_book, place_order):
        order_id = place_order(member_headers, [(make_book().id, 1)]).json()["order_id"]
        stranger = auth_headers(make_user())
        assert client.get(f"/api/orders/{order_id}", headers=stranger).status_code == 404

    def test_purchased(self, client, member_headers, make_book, place_order):
        bought = make_book()
        other = make_book()
        place_order(member_headers, [(bought.id, 1)])

        assert client.get(f"/api/orders/purchased/{bought.id}", headers=member_headers).json()["purchased"] is True
        assert client.get(f"/api/orders/purchased/{other.id}", headers=member_headers).json()["purchased"] is False

    def test_admin_listing(self, client, member_headers, staff_headers, admin_headers, make_book, place_order):
        book = make_book()
        first = place_order(member_headers, [(book.id, 1)]).json()["order_id"]
        place_order(member_headers, [(book.id, 1)])
        client.put(f"/api/orders/{first}/cancel", headers=member_headers)

        everything = client.get("/api/orders/admin", headers=staff_headers).json()
        assert everything["total_items"] == 2

        cancelled = client.get(
            "/api/orders/admin", params={"status": "cancelled"}, headers=admin_headers
        ).json()
        assert [row["order_id"] for row in cancelled["results"]] == [first]
        assert cancelled["results"][0]["customer_email"].endswith("@example.com")


class TestCancel:
    def test_cancel_pending_restocks(self, client, session, member_headers, make_book, place_order):
        book = make_book(stock=5)
        order_id = place_order(member_headers, [(book.id, 3)]).json()["order_id"]
        assert stock_of(session, book.id) == 2

        response = client.put(f"/api/orders/{order_id}/cancel", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancelled_at"] is not None
        assert stock_of(session, book.id) == 5

    def test_cancel_confirmed(self, client, member_headers, admin_headers, make_book, place_order):
        order_id = place_order(member_headers, [(make_book().id, 1)]).json()["order_id"]
        client.put(f"/api/orders/{order_id}/confirm", headers=admin_headers)

        response = client.put(f"/api/orders/{order_id}/cancel", headers=member_headers)
        assert response.json()["status"] == "cancelled"

    def test_cannot_cancel_twice(self, client, member_headers, make_book, place_order):
        order_id = place_order(member_headers, [(make_book().id, 1)]).json()["order_id"]
        client.put(f"/api/orders/{order_id}/cancel", headers=member_headers)

        response = client.put(f"/api/orders/{order_id}/cancel", headers=member_headers)
        assert response.status_code == 400

    def test_cannot_cancel_completed(self, client, member_headers, admin_headers, make_book, place_order):
        data = place_order(member_headers, [(make_book().id, 1)]).json()
        client.put(
            f"/api/orders/{data['order_id']}/fulfill",
            json={"claim_code": data["claim_code"]},
            headers=admin_headers,
        )

        response = client.put(f"/api/orders/{data['order_id']}/cancel", headers=member_headers)
        assert response.status_code == 400

    def test_only_owner_can_cancel(self, client, member_headers, make_user, make_book, place_order):
        order_id = place_order(member_headers, [(make_book().id, 1)]).json()["order_id"]
        response = client.put(f"/api/orders/{order_id}/cancel", headers=auth_headers(make_user()))
        assert response.status_code == 404

    def test_cancelled_order_does_not_count_as_purchase(self, client, member_headers, make_book, place_order):
        book = make_book()
        order_id = place_order(member_headers, [(book.id, 1)]).json()["order_id"]
        client.put(f"/api/orders/{order_id}/cancel", headers=member_headers)

        assert client.get(f"/api/orders/purchased/{book.id}", headers=member_headers).json()["purchased"] is False


class TestFulfilment:
    def test_confirm_then_fulfill(self, client, session, member, member_headers, admin_headers, make_book, place_order):
        data = place_order(member_headers, [(make_book().id, 1)]).json()
        order_id = data["order_id"]

        confirmed = client.put(f"/api/orders/{order_id}/confirm", headers=admin_headers)
        assert confirmed.json()["status"] == "confirmed"

        response = client.put(
            f"/api/orders/{order_id}/fulfill",
            json={"claim_code": data["claim_code"].lower()},
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["order"]["status"] == "completed"
        assert body["successful_orders"] == 1
        assert body["has_loyalty_discount"] is False

        session.expire_all()
        assert session.get(User, member.id).successful_order_count == 1

        timeline = client.get(f"/api/orders/{order_id}", headers=member_headers).json()["timeline"]
        assert [e["event_type"] for e in timeline] == ["order_placed", "order_confirmed", "order_completed"]

    def test_wrong_code_leaves_status(self, client, member_headers, admin_headers, make_book, place_order):
        order_id = place_order(member_headers, [(make_book().id, 1)]).json()["order_id"]

        response = client.put(
            f"/api/orders/{order_id}/fulfill", json={"claim_code": "WRONG1"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid claim code"

        order = client.get(f"/api/orders/{order_id}", headers=member_headers).json()
        assert order["status"] == "pending"

    def test_fulfill_is_admin_only(self, client, member_headers, staff_headers, make_book, place_order):
        data = place_order(member_headers, [(make_book().id, 1)]).json()
        response = client.put(
            f"/api/orders/{data['order_id']}/fulfill",
            json={"claim_code": data["claim_code"]},
            headers=staff_headers,
        )
        assert response.status_code == 403

    def test_cannot_fulfill_cancelled(self, client, member_headers, admin_headers, make_book, place_order):
        data = place_order(member_headers, [(make_book().id, 1)]).json()
        client.put(f"/api/orders/{data['order_id']}/cancel", headers=member_headers)

        response = client.put(
            f"/api/orders/{data['order_id']}/fulfill",
            json={"claim_code": data["claim_code"]},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_confirm_requires_pending(self, client, member_headers, admin_headers, make_book, place_order):
        order_id = place_order(member_headers, [(make_book().id, 1)]).json()["order_id"]
        client.put(f"/api/orders/{order_id}/confirm", headers=admin_headers)

        assert client.put(f"/api/orders/{order_id}/confirm", headers=admin_headers).status_code == 400

    def test_staff_redeems_claim_code(self, client, member_headers, staff_headers, make_book, place_order):
        data = place_order(member_headers, [(make_book().id, 1)]).json()

        response = client.post(
            "/api/orders/claim-code", json={"claim_code": data["claim_code"]}, headers=staff_headers
        )
        assert response.status_code == 200
        assert response.json()["order"]["id"] == data["order_id"]
        assert response.json()["order"]["status"] == "completed"

        again = client.post(
            "/api/orders/claim-code", json={"claim_code": data["claim_code"]}, headers=staff_headers
        )
        assert again.status_code == 400

    def test_unknown_claim_code(self, client, staff_headers):
        response = client.post("/api/orders/claim-code", json={"claim_code": "ZZZZZZ"}, headers=staff_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or already used claim code"

    def test_non_ascii_claim_code_is_rejected(self, client, member_headers, admin_headers, make_book, place_order):
        order_id = place_order(member_headers, [(make_book().id, 1)]).json()["order_id"]

        response = client.put(
            f"/api/orders/{order_id}/fulfill", json={"claim_code": "\u00c4BCDEF"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid claim code"

        order = client.get(f"/api/orders/{order_id}", headers=member_headers).json()
        assert order["status"] == "pending"

    def test_tenth_pickup_unlocks_loyalty(self, client, make_user, admin_headers, make_book, place_order):
        regular = make_user(successful_order_count=9)
        data = place_order(auth_headers(regular), [(make_book().id, 1)]).json()
        assert data["loyalty_discount"] is False

        body = client.put(
            f"/api/orders/{data['order_id']}/fulfill",
            json={"claim_code": data["claim_code"]},
            headers=admin_headers,
        ).json()
        assert body["successful_orders"] == 10
        assert body["has_loyalty_discount"] is True
