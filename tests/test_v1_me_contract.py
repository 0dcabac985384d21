from fastapi.testclient import TestClient

from trekbook.core.auth import AuthContext
from trekbook.main import app

client = TestClient(app)


def _auth_header() -> dict[str, str]:
    return {"Authorization": "Bearer test-token"}


def _mock_customer_auth(_: str) -> AuthContext:
    return AuthContext(
        user_id="customer-user",
        email="customer@example.com",
        role="customer",
        access_token="test-token",
    )


def _profile(**overrides) -> dict:
    row = {
        "id": "customer-user",
        "email": "customer@example.com",
        "name": "Asha Rao",
        "phone": "9876543210",
        "is_admin": False,
        "created_at": "2026-01-05T10:00:00+00:00",
    }
    row.update(overrides)
    return row


def _booking(status: str, amount: float, created_at: str) -> dict:
    return {
        "id": f"bk-{status}-{created_at[:10]}",
        "user_id": "customer-user",
        "package_id": "pkg-1",
        "start_date": "2026-12-01",
        "group_size": 1,
        "total_amount": amount,
        "status": status,
        "created_at": created_at,
    }


def _activity(activity_id: str, created_at: str) -> dict:
    return {
        "id": activity_id,
        "user_id": "customer-user",
        "activity_type": "booking_created",
        "activity_description": "Booked Hampta Pass",
        "metadata": {},
        "created_at": created_at,
    }


def test_profile_requires_authentication() -> None:
    response = client.get("/v1/me/profile")
    assert response.status_code == 401


def test_profile_not_found(monkeypatch) -> None:
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr("trekbook.api.v1.routes.me.get_profile", lambda _: None)

    response = client.get("/v1/me/profile", headers=_auth_header())
    assert response.status_code == 404
    assert response.json()["detail"] == "Profile not found"


def test_profile_update_logs_changed_fields(monkeypatch) -> None:
    captured: dict = {}
    activity: list = []

    def fake_update(**kwargs):
        captured.update(kwargs)
        return _profile(**kwargs["payload"])

    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr("trekbook.api.v1.routes.me.update_profile_row", fake_update)
    monkeypatch.setattr(
        "trekbook.api.v1.routes.me.record_activity",
        lambda *args, **kwargs: activity.append(args) or True,
    )

    response = client.patch(
        "/v1/me/profile",
        headers=_auth_header(),
        json={"name": "  Asha R  ", "bio": "Weekend hiker", "date_of_birth": "1994-03-02"},
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Asha R"
    assert captured["payload"] == {"name": "Asha R", "bio": "Weekend hiker", "date_of_birth": "1994-03-02"}
    user_id, activity_type, _, metadata = activity[0]
    assert user_id == "customer-user"
    assert activity_type == "profile_update"
    assert metadata == {"updated_fields": ["bio", "date_of_birth", "name"], "fields_count": 3}


def test_profile_update_rejects_bad_phone(monkeypatch) -> None:
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)

    response = client.patch("/v1/me/profile", headers=_auth_header(), json={"phone": "98-76"})
    assert response.status_code == 422
    assert response.json()["detail"] == "Phone number must be exactly 10 digits"


def test_profile_update_requires_fields(monkeypatch) -> None:
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)

    response = client.patch("/v1/me/profile", headers=_auth_header(), json={})
    assert response.status_code == 400


def test_my_bookings_passes_status_filter(monkeypatch) -> None:
    captured: dict = {}

    def fake_list(**kwargs):
        captured.update(kwargs)
        return [_booking("confirmed", 9000, "2026-09-01T00:00:00+00:00")]

    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr("trekbook.api.v1.routes.me.list_user_bookings", fake_list)

    response = client.get("/v1/me/bookings?status=confirmed", headers=_auth_header())

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert captured == {"user_id": "customer-user", "status_filter": "confirmed"}


def test_my_activity_defaults_to_fifty(monkeypatch) -> None:
    captured: dict = {}

    def fake_activity(**kwargs):
        captured.update(kwargs)
        return ([_activity("act-1", "2026-09-01T00:00:00+00:00")], 12)

    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr("trekbook.api.v1.routes.me.list_user_activity", fake_activity)

    response = client.get("/v1/me/activity", headers=_auth_header())

    assert response.status_code == 200
    assert response.json()["count"] == 12
    assert captured["limit"] == 50


def test_dashboard_aggregates_stats(monkeypatch) -> None:
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr("trekbook.api.v1.routes.me.get_profile", lambda _: _profile())
    monkeypatch.setattr(
        "trekbook.api.v1.routes.me.list_user_bookings",
        lambda **_: [
            _booking("confirmed", 9000, "2026-09-10T00:00:00+00:00"),
            _booking("completed", 4500.5, "2026-08-01T00:00:00+00:00"),
            _booking("pending", 7000, "2026-09-20T00:00:00+00:00"),
            _booking("cancelled", 3000, "2026-07-01T00:00:00+00:00"),
        ],
    )
    monkeypatch.setattr(
        "trekbook.api.v1.routes.me.list_user_activity",
        lambda **_: (
            [
                _activity("act-2", "2026-09-20T00:00:00+00:00"),
                _activity("act-1", "2026-09-10T00:00:00+00:00"),
            ],
            7,
        ),
    )

    response = client.get("/v1/me/dashboard", headers=_auth_header())

    assert response.status_code == 200
    payload = response.json()
    stats = payload["booking_stats"]
    assert stats["total_bookings"] == 4
    assert stats["confirmed_bookings"] == 1
    assert stats["completed_bookings"] == 1
    assert stats["pending_bookings"] == 1
    assert stats["total_spent"] == 13500.5
    assert stats["last_booking_date"].startswith("2026-09-20")
    assert payload["activity_stats"]["total_activities"] == 7
    assert payload["activity_stats"]["last_activity"].startswith("2026-09-20")
    assert payload["activity_stats"]["registration_date"].startswith("2026-01-05")
    assert len(payload["recent_activity"]) == 2


def test_wishlist_add_unknown_package(monkeypatch) -> None:
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr("trekbook.api.v1.routes.wishlist.get_active_package_by_id", lambda _: None)

    response = client.post("/v1/me/wishlist", headers=_auth_header(), json={"package_id": "missing"})
    assert response.status_code == 404


def test_wishlist_add_duplicate_is_conflict(monkeypatch) -> None:
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr("trekbook.api.v1.routes.wishlist.get_active_package_by_id", lambda _: {"id": "pkg-1"})
    monkeypatch.setattr("trekbook.api.v1.routes.wishlist.is_in_wishlist", lambda **_: True)

    response = client.post("/v1/me/wishlist", headers=_auth_header(), json={"package_id": "pkg-1"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Package is already in your wishlist."


def test_wishlist_add_contract(monkeypatch) -> None:
    captured: dict = {}

    def fake_add(**kwargs):
        captured.update(kwargs)
        return {"id": "wl-1", "user_id": kwargs["user_id"], "package_id": kwargs["package_id"]}

    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr(
        "trekbook.api.v1.routes.wishlist.get_active_package_by_id",
        lambda _: {"id": "pkg-1", "title": "Triund"},
    )
    monkeypatch.setattr("trekbook.api.v1.routes.wishlist.is_in_wishlist", lambda **_: False)
    monkeypatch.setattr("trekbook.api.v1.routes.wishlist.add_to_wishlist_row", fake_add)
    monkeypatch.setattr("trekbook.api.v1.routes.wishlist.record_activity", lambda *args, **kwargs: True)

    response = client.post("/v1/me/wishlist", headers=_auth_header(), json={"package_id": "pkg-1"})

    assert response.status_code == 200
    assert response.json()["id"] == "wl-1"
    assert captured == {"access_token": "test-token", "user_id": "customer-user", "package_id": "pkg-1"}


def test_wishlist_status_and_remove(monkeypatch) -> None:
    removed: dict = {}
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr("trekbook.api.v1.routes.wishlist.is_in_wishlist", lambda **_: True)
    monkeypatch.setattr(
        "trekbook.api.v1.routes.wishlist.remove_from_wishlist_row",
        lambda **kwargs: removed.update(kwargs),
    )
    monkeypatch.setattr("trekbook.api.v1.routes.wishlist.record_activity", lambda *args, **kwargs: True)

    status_response = client.get("/v1/me/wishlist/pkg-1", headers=_auth_header())
    delete_response = client.delete("/v1/me/wishlist/pkg-1", headers=_auth_header())

    assert status_response.json() == {"package_id": "pkg-1", "in_wishlist": True}
    assert delete_response.status_code == 200
    assert delete_response.json() == {"package_id": "pkg-1", "in_wishlist": False}
    assert removed["package_id"] == "pkg-1"


def test_wishlist_list_contract(monkeypatch) -> None:
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr(
        "trekbook.api.v1.routes.wishlist.list_wishlist",
        lambda _: [
            {
                "id": "wl-1",
                "user_id": "customer-user",
                "package_id": "pkg-1",
                "package": {"title": "Triund", "price": 3500},
            }
        ],
    )

    response = client.get("/v1/me/wishlist", headers=_auth_header())

    assert response.status_code == 200
    assert response.json()["items"][0]["package"]["title"] == "Triund"


def test_review_edit_is_owner_only(monkeypatch) -> None:
    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr(
        "trekbook.api.v1.routes.reviews.get_review_by_id",
        lambda _: {"id": "rv-1", "user_id": "someone-else"},
    )

    response = client.patch("/v1/reviews/rv-1", headers=_auth_header(), json={"rating": 3})
    assert response.status_code == 403
    assert response.json()["detail"] == "You can only edit your own reviews."


def test_review_edit_contract(monkeypatch) -> None:
    captured: dict = {}

    def fake_update(**kwargs):
        captured.update(kwargs)
        return {
            "id": "rv-1",
            "user_id": "customer-user",
            "package_id": "pkg-1",
            "booking_id": "bk-1",
            "rating": kwargs["payload"].get("rating", 5),
            "comment": kwargs["payload"].get("comment", "Old comment"),
        }

    monkeypatch.setattr("trekbook.core.auth.verify_access_token", _mock_customer_auth)
    monkeypatch.setattr(
        "trekbook.api.v1.routes.reviews.get_review_by_id",
        lambda _: {"id": "rv-1", "user_id": "customer-user"},
    )
    monkeypatch.setattr("trekbook.api.v1.routes.reviews.update_review_row", fake_update)

    response = client.patch("/v1/reviews/rv-1", headers=_auth_header(), json={"rating": 3})

    assert response.status_code == 200
    assert response.json()["rating"] == 3
    assert captured["payload"] == {"rating": 3}
