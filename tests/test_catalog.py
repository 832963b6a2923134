"""
Catalogue browsing, detail and admin maintenance.
Run: pytest tests/test_catalog.py -v
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from bookshop.models.award import Award, BookAward
from bookshop.models.review import Review
from bookshop.utils.clock import utcnow


class TestListBooks:
    def test_pagination(self, client, make_book):
        for _ in range(25):
            make_book()

        response = client.get("/api/books", params={"page": 2, "page_size": 10})
        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 10
        assert data["total_count"] == 25
        assert data["total_pages"] == 3
        assert data["current_page"] == 2
        assert data["items"][0]["title"] == "Book 011"

    def test_page_size_bounds(self, client, make_book):
        for _ in range(3):
            make_book()

        data = client.get("/api/books", params={"page": 0, "page_size": 0}).json()
        assert data["current_page"] == 1
        assert data["page_size"] == 10

        data = client.get("/api/books", params={"page_size": 1000}).json()
        assert data["page_size"] == 100

    def test_default_sort_is_title(self, client, make_book):
        make_book(title="Zebra")
        make_book(title="apple")
        make_book(title="Mango")

        titles = [b["title"] for b in client.get("/api/books").json()["items"]]
        assert titles == sorted(titles)

    def test_search_matches_author_and_isbn(self, client, make_book):
        make_book(title="Dune", author="Frank Herbert", isbn="9780441013593")
        make_book(title="Emma", author="Jane Austen")

        by_author = client.get("/api/books", params={"search": "herbert"}).json()
        assert [b["title"] for b in by_author["items"]] == ["Dune"]

        by_isbn = client.get("/api/books", params={"search": "0441013593"}).json()
        assert by_isbn["total_count"] == 1

    def test_multi_value_facets(self, client, make_book):
        make_book(title="A", genre="Fiction", language="English")
        make_book(title="B", genre="History", language="English")
        make_book(title="C", genre="Poetry", language="English")
        make_book(title="D", genre="History", language="French")

        data = client.get(
            "/api/books",
            params=[("genre", "fiction"), ("genre", "History"), ("language", "English")],
        ).json()
        assert [b["title"] for b in data["items"]] == ["A", "B"]
        assert set(data["facets"]["genres"]) == {"Fiction", "History", "Poetry"}
        assert set(data["facets"]["languages"]) == {"English", "French"}

    def test_price_range_and_stock(self, client, make_book):
        make_book(title="Cheap", price=Decimal("5.00"))
        make_book(title="Mid", price=Decimal("15.00"), stock=0)
        make_book(title="Dear", price=Decimal("50.00"))

        data = client.get("/api/books", params={"min_price": 10, "max_price": 60}).json()
        assert [b["title"] for b in data["items"]] == ["Dear", "Mid"]

        data = client.get(
            "/api/books", params={"min_price": 10, "max_price": 60, "in_stock": True}
        ).json()
        assert [b["title"] for b in data["items"]] == ["Dear"]

    def test_on_sale_filter_uses_window(self, client, make_book, sale_window):
        start, end = sale_window
        make_book(title="Live", is_on_sale=True, discount_percentage=Decimal("25"),
                  discount_start_date=start, discount_end_date=end)
        make_book(title="Future", is_on_sale=True, discount_percentage=Decimal("25"),
                  discount_start_date=end, discount_end_date=end + timedelta(days=3))
        make_book(title="Plain")

        data = client.get("/api/books", params={"on_sale": True}).json()
        assert [b["title"] for b in data["items"]] == ["Live"]
        assert data["items"][0]["effective_price"] == 15.0
        assert data["items"][0]["is_on_sale"] is True

    def test_time_based_facets(self, client, make_book):
        now = utcnow()
        make_book(title="Recent", publish_date=now - timedelta(days=10))
        make_book(title="Flagged", is_new_release=True, publish_date=now - timedelta(days=900))
        make_book(title="Old", publish_date=now - timedelta(days=900))
        make_book(title="Upcoming", publish_date=now + timedelta(days=30))
        make_book(title="Stale", created_at=now - timedelta(days=60))

        new_release = client.get("/api/books", params={"new_release": True}).json()
        assert {b["title"] for b in new_release["items"]} == {"Recent", "Flagged", "Upcoming"}

        coming = client.get("/api/books", params={"coming_soon": True}).json()
        assert [b["title"] for b in coming["items"]] == ["Upcoming"]

        arrivals = client.get("/api/books", params={"new_arrival": True}).json()
        assert "Stale" not in {b["title"] for b in arrivals["items"]}

    def test_award_and_rating_filters(self, client, session, make_book, make_user):
        winner = make_book(title="Winner")
        make_book(title="Unrated")
        low = make_book(title="Low")

        award = Award(name="Booker Prize")
        session.add(award)
        session.commit()
        session.add(BookAward(book_id=winner.id, award_id=award.id, year=2020))

        reader = make_user()
        session.add(Review(book_id=winner.id, user_id=reader.id, rating=5))
        session.add(Review(book_id=low.id, user_id=reader.id, rating=2))
        session.commit()

        awarded = client.get("/api/books", params={"award_winner": True}).json()
        assert [b["title"] for b in awarded["items"]] == ["Winner"]

        rated = client.get("/api/books", params={"min_rating": 4}).json()
        assert [b["title"] for b in rated["items"]] == ["Winner"]

    def test_sort_by_price_desc(self, client, make_book):
        make_book(title="A", price=Decimal("10.00"))
        make_book(title="B", price=Decimal("30.00"))
        make_book(title="C", price=Decimal("20.00"))

        data = client.get("/api/books", params={"sort_by": "price", "desc": True}).json()
        assert [b["title"] for b in data["items"]] == ["B", "C", "A"]

    def test_sort_by_popularity(self, client, make_book, member_headers, place_order):
        quiet = make_book(title="Quiet")
        hit = make_book(title="Hit")
        make_book(title="Unsold")

        place_order(member_headers, [(hit.id, 3), (quiet.id, 1)])

        data = client.get("/api/books", params={"sort_by": "popularity", "desc": True}).json()
        assert [b["title"] for b in data["items"]] == ["Hit", "Quiet", "Unsold"]

    def test_bookmarked_flag_is_per_viewer(self, client, make_book, member_headers):
        book = make_book()
        client.post("/api/bookmarks", json={"book_id": book.id}, headers=member_headers)

        anonymous = client.get("/api/books").json()["items"][0]
        assert anonymous["is_bookmarked"] is False

        mine = client.get("/api/books", headers=member_headers).json()["items"][0]
        assert mine["is_bookmarked"] is True

    def test_genres(self, client, make_book):
        make_book(genre="History")
        make_book(genre="Fiction")
        make_book(genre="History")

        assert client.get("/api/books/genres").json() == ["Fiction", "History"]


class TestBookDetail:
    def test_detail_with_reviews_and_awards(self, client, session, make_book, make_user):
        book = make_book()
        award = Award(name="Hugo")
        session.add(award)
        session.commit()
        session.add(BookAward(book_id=book.id, award_id=award.id))
        for rating in (4, 5):
            session.add(Review(book_id=book.id, user_id=make_user().id, rating=rating))
        session.commit()

        response = client.get(f"/api/books/{book.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["average_rating"] == 4.5
        assert data["review_count"] == 2
        assert data["is_award_winner"] is True
        assert data["awards"] == ["Hugo"]
        assert data["is_new_arrival"] is True

    def test_detail_without_reviews(self, client, make_book):
        book = make_book()
        data = client.get(f"/api/books/{book.id}").json()
        assert data["average_rating"] == 0
        assert data["review_count"] == 0
        assert data["is_bookmarked"] is False

    def test_detail_by_slug(self, client, make_book):
        book = make_book(slug="the-hobbit")
        response = client.get("/api/books/slug/the-hobbit")
        assert response.status_code == 200
        assert response.json()["id"] == book.id

    def test_missing_book(self, client):
        assert client.get("/api/books/999").status_code == 404
        assert client.get("/api/books/slug/nope").status_code == 404


class TestBookAdmin:
    def book_payload(self, **overrides):
        payload = {
            "title": "The Left Hand of Darkness",
            "author": "Ursula K. Le Guin",
            "description": "Winter.",
            "isbn": "9780441478125",
            "genre": "Science Fiction",
            "price": "18.50",
            "stock": 4,
        }
        payload.update(overrides)
        return payload

    def test_create_derives_slug_and_original_price(self, client, admin_headers):
        response = client.post("/api/books", json=self.book_payload(), headers=admin_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "the-left-hand-of-darkness"
        assert data["original_price"] == 18.5

        again = client.post("/api/books", json=self.book_payload(), headers=admin_headers)
        assert again.json()["slug"] == "the-left-hand-of-darkness-2"

    def test_member_cannot_create(self, client, member_headers):
        response = client.post("/api/books", json=self.book_payload(), headers=member_headers)
        assert response.status_code == 403

    def test_partial_update(self, client, admin_headers, make_book):
        book = make_book(publisher="Ace", pages=300)

        response = client.put(
            f"/api/books/{book.id}",
            json={"price": "25.00", "publisher": None},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["price"] == 25.0
        assert data["publisher"] is None
        assert data["pages"] == 300
        assert data["title"] == book.title

    def test_turning_sale_off_clears_discount(self, client, admin_headers, make_book, sale_window):
        start, end = sale_window
        book = make_book(is_on_sale=True, discount_percentage=Decimal("20"),
                         discount_start_date=start, discount_end_date=end)

        data = client.put(
            f"/api/books/{book.id}", json={"is_on_sale": False}, headers=admin_headers
        ).json()
        assert data["is_on_sale"] is False
        assert data["discount_percentage"] is None
        assert data["discount_start_date"] is None

    def test_discount_endpoints(self, client, admin_headers, make_book, sale_window):
        book = make_book(price=Decimal("20.00"), original_price=None)
        start, end = sale_window

        data = client.post(
            f"/api/books/{book.id}/discount",
            json={"discount_percentage": "25", "start_date": start.isoformat(),
                  "end_date": end.isoformat()},
            headers=admin_headers,
        ).json()
        assert data["effective_price"] == 15.0
        assert data["original_price"] == 20.0

        data = client.delete(f"/api/books/{book.id}/discount", headers=admin_headers).json()
        assert data["effective_price"] == 20.0
        assert data["is_on_sale"] is False

    def test_inventory(self, client, admin_headers, make_book):
        book = make_book(stock=2)
        response = client.patch(
            f"/api/books/{book.id}/inventory", json={"quantity": 0}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["in_stock"] is False

        negative = client.patch(
            f"/api/books/{book.id}/inventory", json={"quantity": -1}, headers=admin_headers
        )
        assert negative.status_code == 422

    def test_delete_keeps_order_history(
        self, client, session, admin_headers, member_headers, make_book, place_order
    ):
        book = make_book()
        order_id = place_order(member_headers, [(book.id, 1)]).json()["order_id"]
        client.post("/api/cart/add", json={"book_id": book.id}, headers=member_headers)

        response = client.delete(f"/api/books/{book.id}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"/api/books/{book.id}").status_code == 404

        order = client.get(f"/api/orders/{order_id}", headers=member_headers).json()
        assert order["items"][0]["book_id"] is None
        assert order["items"][0]["title"] == book.title
        assert client.get("/api/cart", headers=member_headers).json()["items"] == []

    def test_discount_dates_with_offset_are_stored_as_utc(self, client, admin_headers, make_book):
        book = make_book(price=Decimal("20.00"))
        started = utcnow() - timedelta(hours=1)
        kathmandu = timezone(timedelta(hours=5, minutes=45))
        local_start = started.replace(tzinfo=timezone.utc).astimezone(kathmandu)

        response = client.post(
            f"/api/books/{book.id}/discount",
            json={"discount_percentage": "25", "start_date": local_start.isoformat()},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["is_on_sale"] is True
        assert data["effective_price"] == 15.0
        stored = datetime.fromisoformat(data["discount_start_date"])
        assert abs(stored - started) < timedelta(seconds=1)

    def test_discount_window_with_mixed_offsets(self, client, admin_headers, make_book):
        book = make_book()
        now = utcnow()
        response = client.post(
            f"/api/books/{book.id}/discount",
            json={
                "discount_percentage": "10",
                "start_date": now.isoformat(),
                "end_date": (now - timedelta(days=1)).isoformat() + "Z",
            },
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_search_treats_wildcards_literally(self, client, make_book):
        make_book(title="100% Cotton")
        make_book(title="snake_case")
        make_book(title="Snakescase")

        percent = client.get("/api/books", params={"search": "%"}).json()
        assert [b["title"] for b in percent["items"]] == ["100% Cotton"]

        underscore = client.get("/api/books", params={"search": "e_c"}).json()
        assert [b["title"] for b in underscore["items"]] == ["snake_case"]
