"""Contrato HTTP de /api/v1: códigos de estado y cuerpos {code, detail}"""
from urllib.parse import urlparse, parse_qs

from shared.utils.rate_limiter import RATE_LIMITS


async def book(client, headers, show_id, seat_label):
    return await client.post(
        "/api/v1/book",
        json={"showId": str(show_id), "seatLabel": seat_label},
        headers=headers
    )


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


async def test_book_and_validate(client, make_show, student_headers, admin_headers):
    show = await make_show()

    response = await book(client, student_headers("m1"), show.id, "A-1")
    assert response.status_code == 201
    body = response.json()
    assert body["showId"] == str(show.id)
    assert body["seatLabel"] == "A-1"
    assert body["ticketId"].startswith("TICK_")
    assert body["ticketId"] != body["bookingId"]
    assert body["scannableCode"].startswith("data:image/png;base64,")
    assert parse_qs(urlparse(body["validationUrl"]).query)["token"] == [body["token"]]

    response = await client.post(
        "/api/v1/tickets/validate",
        json={"token": body["token"], "scannerId": "gate-1"}
    )
    assert response.status_code == 200
    assert response.json() == {
        "result": "ok",
        "ticketId": body["ticketId"],
        "eventId": str(show.id),
        "userId": "m1"
    }

    response = await client.post("/api/v1/tickets/validate", json={"token": body["token"]})
    assert response.status_code == 409
    assert response.json()["code"] == "already-used"

    response = await client.get(f"/api/v1/tickets/{body['ticketId']}", headers=admin_headers)
    assert response.status_code == 200
    detail = response.json()
    assert detail["ticket"]["status"] == "used"
    assert detail["ticket"]["scanned_by"] == "gate-1"
    assert detail["ticket"]["booking_id"] == body["bookingId"]
    assert [entry["reason"] for entry in detail["logs"]] == ["already-used", "validated"]


async def test_validate_with_query_params(client, admin_headers):
    response = await client.post(
        "/api/v1/tickets/create",
        json={"eventId": "event-1", "userId": "guest-1", "metadata": {"note": "cortesía"}},
        headers=admin_headers
    )
    assert response.status_code == 201
    token = response.json()["token"]

    response = await client.post("/api/v1/tickets/validate", params={"token": token, "scannerId": "gate-9"})
    assert response.status_code == 200
    assert response.json()["userId"] == "guest-1"


async def test_validation_errors(client):
    response = await client.post("/api/v1/tickets/validate", json={"token": "garbage"})
    assert response.status_code == 401
    assert response.json()["code"] == "invalid"

    response = await client.post("/api/v1/tickets/validate", json={})
    assert response.status_code == 400
    assert response.json()["code"] == "bad-request"


async def test_validation_is_rate_limited_per_ip(client):
    limit = int(RATE_LIMITS["validation"].split("/")[0])

    for _ in range(limit):
        response = await client.post("/api/v1/tickets/validate", json={"token": "garbage"})
        assert response.status_code == 401

    response = await client.post("/api/v1/tickets/validate", json={"token": "garbage"})
    assert response.status_code == 429
    assert response.json()["code"] == "rate_limit_exceeded"
    assert "Retry-After" in response.headers


async def test_booking_error_codes(client, make_show, student_headers):
    show = await make_show(damaged_seats=["B-2"])
    await book(client, student_headers("m1"), show.id, "A-1")

    cases = [
        (student_headers("f1", "female"), show.id, "A-2", 403, "access-denied"),
        (student_headers("m1"), show.id, "A-3", 409, "duplicate-booking"),
        (student_headers("m2"), show.id, "A-1", 409, "seat-taken"),
        (student_headers("m2"), show.id, "A1", 400, "invalid-seat-format"),
        (student_headers("m2"), show.id, "M-40", 400, "seat-out-of-range"),
        (student_headers("m2"), show.id, "B-2", 400, "seat-damaged"),
        (student_headers("m2"), "00000000-0000-0000-0000-000000000000", "A-2", 404, "show-not-found"),
    ]
    for headers, show_id, seat, status_code, code in cases:
        response = await book(client, headers, show_id, seat)
        assert response.status_code == status_code, (seat, response.json())
        assert response.json()["code"] == code


async def test_booking_request_validation(client, make_show, student_headers):
    show = await make_show()

    response = await client.post("/api/v1/book", json={"showId": str(show.id)}, headers=student_headers("m1"))
    assert response.status_code == 400
    assert response.json()["code"] == "bad-request"


async def test_booking_requires_student(client, make_show, admin_headers):
    show = await make_show()

    response = await book(client, admin_headers, show.id, "A-1")
    assert response.status_code == 403

    response = await book(client, {}, show.id, "A-1")
    assert response.status_code in (401, 403)

    response = await book(client, {"Authorization": "Bearer not-a-jwt"}, show.id, "A-1")
    assert response.status_code == 401


async def test_my_bookings_and_cancel(client, make_show, student_headers):
    show = await make_show()
    booked = (await book(client, student_headers("m1"), show.id, "A-1")).json()

    response = await client.get("/api/v1/book/my-bookings", headers=student_headers("m1"))
    assert response.status_code == 200
    bookings = response.json()["bookings"]
    assert len(bookings) == 1
    assert bookings[0]["show"]["movie"] == "Avengers"
    assert bookings[0]["ticketStatus"] == "issued"

    response = await client.delete(f"/api/v1/book/{booked['bookingId']}", headers=student_headers("m2"))
    assert response.status_code == 403
    assert response.json()["code"] == "not-authorized"

    response = await client.delete(f"/api/v1/book/{booked['bookingId']}", headers=student_headers("m1"))
    assert response.status_code == 200
    assert response.json()["bookingId"] == booked["bookingId"]

    response = await client.delete(f"/api/v1/book/{booked['bookingId']}", headers=student_headers("m1"))
    assert response.status_code == 404
    assert response.json()["code"] == "not-found"

    response = await client.post("/api/v1/tickets/validate", json={"token": booked["token"]})
    assert response.status_code == 409
    assert response.json()["code"] == "already-used"

    # El asiento vuelve a estar disponible
    response = await book(client, student_headers("m2"), show.id, "A-1")
    assert response.status_code == 201


async def test_shows_catalog(client, make_show, student_headers, admin_headers):
    male_show = await make_show(allowed_gender="male", movie="Leo")
    await make_show(allowed_gender="female", movie="Barbie")
    await book(client, student_headers("m1"), male_show.id, "C-5")

    response = await client.get("/api/v1/shows", headers=student_headers("m2"))
    assert response.status_code == 200
    shows = response.json()["shows"]
    assert [(s["movie"], s["booked_count"]) for s in shows] == [("Leo", 1)]

    response = await client.get("/api/v1/shows", headers=student_headers("f1", "female"))
    assert [s["movie"] for s in response.json()["shows"]] == ["Barbie"]

    response = await client.get(f"/api/v1/shows/{male_show.id}/seats", headers=student_headers("m2"))
    assert response.status_code == 200
    assert response.json()["booked_seats"] == ["C-5"]

    response = await client.get("/api/v1/shows/not-a-show", headers=student_headers("m2"))
    assert response.status_code == 404
    assert response.json()["code"] == "show-not-found"


async def test_admin_creates_show_and_marks_damaged_seats(client, student_headers, admin_headers):
    payload = {
        "movie": "Jawan",
        "date": "2025-12-18",
        "time": "18:30",
        "allowed_gender": "female",
        "rows": 4,
        "seat_bands": [
            {"from_row": "A", "to_row": "B", "max_seats": 10},
            {"from_row": "C", "to_row": "D", "max_seats": 8},
        ],
    }

    response = await client.post("/api/v1/shows", json=payload, headers=student_headers("f1", "female"))
    assert response.status_code == 403

    response = await client.post("/api/v1/shows", json=payload, headers=admin_headers)
    assert response.status_code == 201
    show_id = response.json()["id"]

    response = await client.post(
        "/api/v1/shows",
        json={**payload, "rows": 5},
        headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "bad-request"

    response = await client.put(
        f"/api/v1/shows/{show_id}/damaged-seats",
        json={"mark": ["D-8", "A-1"]},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["damaged_seats"] == ["A-1", "D-8"]

    response = await client.put(
        f"/api/v1/shows/{show_id}/damaged-seats",
        json={"mark": ["D-9"]},
        headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "seat-out-of-range"

    response = await book(client, student_headers("f1", "female"), show_id, "D-8")
    assert response.status_code == 400
    assert response.json()["code"] == "seat-damaged"


async def test_admin_stats_bookings_and_reconcile(client, make_show, student_headers, admin_headers):
    show = await make_show()
    booked = (await book(client, student_headers("m1"), show.id, "A-1")).json()
    await book(client, student_headers("m2"), show.id, "A-2")
    await client.post("/api/v1/tickets/validate", json={"token": booked["token"]})
    await client.post("/api/v1/tickets/validate", json={"token": booked["token"]})

    response = await client.get("/api/v1/admin/stats", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {
        "total_shows": 1,
        "total_bookings": 2,
        "tickets_by_status": {"used": 1, "issued": 1},
        "validations_by_result": {"ok": 1, "fail": 1},
        "pending_damage_reports": 0,
    }

    response = await client.get("/api/v1/admin/bookings", headers=admin_headers)
    assert response.status_code == 200
    assert {b["student_id"] for b in response.json()["bookings"]} == {"m1", "m2"}
    assert response.json()["total"] == 2

    response = await client.post("/api/v1/admin/tickets/reconcile", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"voided_tickets": 0}

    response = await client.get("/api/v1/admin/stats", headers=student_headers("m1"))
    assert response.status_code == 403


async def test_admin_bookings_total_is_independent_of_page(client, make_show, student_headers, admin_headers):
    show = await make_show()
    for i, seat in enumerate(("A-1", "A-2", "A-3")):
        await book(client, student_headers(f"m{i}"), show.id, seat)

    response = await client.get("/api/v1/admin/bookings", params={"limit": 2}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert len(body["bookings"]) == 2
    assert body["total"] == 3

    response = await client.get("/api/v1/admin/bookings", params={"limit": 2, "offset": 2}, headers=admin_headers)
    assert len(response.json()["bookings"]) == 1
    assert response.json()["total"] == 3


async def test_damage_reports(client, make_show, student_headers, admin_headers):
    show = await make_show()

    report_payload = {
        "showId": str(show.id),
        "seatLabel": "F-12",
        "description": "Respaldo roto",
        "photoUrl": "https://storage.example.com/damage/f12.jpg",
    }
    response = await client.post("/api/v1/admin/damage-reports", json=report_payload, headers=admin_headers)
    assert response.status_code == 201
    report = response.json()
    assert report["status"] == "pending"
    assert report["reported_by"] == "admin-1"
    assert report["photo_url"] == report_payload["photoUrl"]

    response = await client.post(
        "/api/v1/admin/damage-reports",
        json={"showId": str(show.id), "seatLabel": "G-1", "description": "Apoyabrazos suelto"},
        headers=admin_headers
    )
    assert response.status_code == 201
    assert response.json()["photo_url"] is None

    response = await client.get("/api/v1/admin/stats", headers=admin_headers)
    assert response.json()["pending_damage_reports"] == 2

    response = await client.put(
        f"/api/v1/admin/damage-reports/{report['id']}/status",
        json={"status": "resolved"},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "resolved"

    response = await client.get("/api/v1/admin/stats", headers=admin_headers)
    assert response.json()["pending_damage_reports"] == 1

    response = await client.get("/api/v1/admin/damage-reports", headers=admin_headers)
    assert response.status_code == 200
    reports = response.json()["reports"]
    assert [r["seat_label"] for r in reports] == ["G-1", "F-12"]
    assert reports[0]["movie"] == "Avengers"

    response = await client.get("/api/v1/admin/damage-reports", params={"status": "pending"}, headers=admin_headers)
    assert [r["seat_label"] for r in response.json()["reports"]] == ["G-1"]

    # Un reporte no marca el asiento como dañado
    response = await book(client, student_headers("m1"), show.id, "G-1")
    assert response.status_code == 201


async def test_damage_report_errors(client, make_show, student_headers, admin_headers):
    show = await make_show()
    payload = {"showId": str(show.id), "seatLabel": "A-1", "description": "Tapiz rasgado"}

    response = await client.post("/api/v1/admin/damage-reports", json=payload, headers=student_headers("m1"))
    assert response.status_code == 403

    response = await client.post(
        "/api/v1/admin/damage-reports",
        json={**payload, "seatLabel": "M-35"},
        headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "seat-out-of-range"

    response = await client.post(
        "/api/v1/admin/damage-reports",
        json={**payload, "showId": "00000000-0000-0000-0000-000000000000"},
        headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json()["code"] == "show-not-found"

    response = await client.post(
        "/api/v1/admin/damage-reports",
        json={"showId": str(show.id), "seatLabel": "A-1"},
        headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "bad-request"

    report_id = (await client.post("/api/v1/admin/damage-reports", json=payload, headers=admin_headers)).json()["id"]
    response = await client.put(
        f"/api/v1/admin/damage-reports/{report_id}/status",
        json={"status": "archived"},
        headers=admin_headers
    )
    assert response.status_code == 400

    response = await client.put(
        "/api/v1/admin/damage-reports/00000000-0000-0000-0000-000000000000/status",
        json={"status": "investigating"},
        headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json()["code"] == "not-found"
