"""End-to-end checks through the FastAPI app with a per-test SQLite database."""


def _create_client(api_client, headers, name="Maple House"):
    response = api_client.post("/clients", json={"name": name}, headers=headers)
    assert response.status_code == 201
    return response.json()


def _create_shift(api_client, headers, client_id, start, end, rate=50):
    response = api_client.post(
        "/shifts",
        json={"client_id": client_id, "start_time": start, "end_time": end, "hourly_rate": rate},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


# =========================
# AUTH
# =========================
def test_register_login_and_profile(api_client):
    register = api_client.post(
        "/auth/register",
        json={
            "first_name": "Jordan",
            "last_name": "Lee",
            "email": "Jordan@Example.com",
            "password": "secret123",
        },
    )
    assert register.status_code == 201
    assert register.json()["user"]["email"] == "jordan@example.com"

    login = api_client.post(
        "/auth/login",
        data={"username": "jordan@example.com", "password": "secret123"},
    )
    assert login.status_code == 200

    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
    profile = api_client.get("/users/profile", headers=headers)

    assert profile.status_code == 200
    assert profile.json()["hst_percentage"] == 13


def test_duplicate_registration_conflicts(api_client, auth_headers):
    response = api_client.post(
        "/auth/register",
        json={
            "first_name": "Alex",
            "last_name": "Rivera",
            "email": "alex@example.com",
            "password": "secret123",
        },
    )

    assert response.status_code == 409


def test_wrong_password_is_rejected(api_client, auth_headers):
    response = api_client.post(
        "/auth/login",
        data={"username": "alex@example.com", "password": "wrong-password"},
    )

    assert response.status_code == 401


def test_refresh_rotates_tokens(api_client):
    register = api_client.post(
        "/auth/register",
        json={
            "first_name": "Robin",
            "last_name": "Park",
            "email": "robin@example.com",
            "password": "secret123",
        },
    )
    refresh_token = register.json()["refresh_token"]

    rotated = api_client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert rotated.status_code == 200
    assert rotated.json()["refresh_token"] != refresh_token

    reused = api_client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert reused.status_code == 401


def test_logout_revokes_refresh_token(api_client):
    register = api_client.post(
        "/auth/register",
        json={
            "first_name": "Casey",
            "last_name": "Ng",
            "email": "casey@example.com",
            "password": "secret123",
        },
    )
    refresh_token = register.json()["refresh_token"]

    assert api_client.post("/auth/logout", json={"refresh_token": refresh_token}).status_code == 200
    assert api_client.post("/auth/refresh", json={"refresh_token": refresh_token}).status_code == 401


def test_endpoints_require_authentication(api_client):
    assert api_client.get("/invoices").status_code == 401


# =========================
# INVOICE FLOW
# =========================
def test_invoice_lifecycle_over_http(api_client, auth_headers):
    client = _create_client(api_client, auth_headers)
    shift = _create_shift(
        api_client, auth_headers, client["id"], "2024-03-04T09:00:00", "2024-03-04T13:00:00"
    )
    assert shift["total_hours"] == 4
    assert shift["hst_amount"] == 26

    created = api_client.post(
        "/invoices",
        json={"client_id": client["id"], "shift_ids": [shift["id"]]},
        headers=auth_headers,
    )
    assert created.status_code == 201
    invoice = created.json()
    assert invoice["grand_total"] == 226
    assert invoice["status"] == "draft"

    # Claimed shifts are frozen
    edit_shift = api_client.patch(
        f"/shifts/{shift['id']}", json={"notes": "changed"}, headers=auth_headers
    )
    assert edit_shift.status_code == 400

    again = api_client.post(
        "/invoices",
        json={"client_id": client["id"], "shift_ids": [shift["id"]]},
        headers=auth_headers,
    )
    assert again.status_code == 400

    paid = api_client.post(
        f"/invoices/{invoice['id']}/mark-as-paid",
        json={"payment_notes": "cheque"},
        headers=auth_headers,
    )
    assert paid.status_code == 200
    assert paid.json()["status"] == "paid"

    locked = api_client.patch(
        f"/invoices/{invoice['id']}", json={"notes": "too late"}, headers=auth_headers
    )
    assert locked.status_code == 400

    listing = api_client.get("/invoices", params={"status": "paid"}, headers=auth_headers)
    assert listing.status_code == 200
    assert listing.json()["meta"]["item_count"] == 1


def test_payment_proof_upload_and_download(api_client, auth_headers):
    client = _create_client(api_client, auth_headers)
    invoice = api_client.post(
        "/invoices", json={"client_id": client["id"]}, headers=auth_headers
    ).json()

    upload = api_client.post(
        f"/invoices/{invoice['id']}/payment-proof",
        files={"file": ("receipt.png", b"fake-image", "image/png")},
        headers=auth_headers,
    )
    assert upload.status_code == 200
    assert upload.json()["status"] == "paid"

    download = api_client.get(f"/invoices/{invoice['id']}/payment-proof", headers=auth_headers)
    assert download.status_code == 200
    assert download.content == b"fake-image"


def test_deleting_draft_frees_shift(api_client, auth_headers):
    client = _create_client(api_client, auth_headers)
    shift = _create_shift(
        api_client, auth_headers, client["id"], "2024-03-04T09:00:00", "2024-03-04T13:00:00"
    )
    invoice = api_client.post(
        "/invoices",
        json={"client_id": client["id"], "shift_ids": [shift["id"]]},
        headers=auth_headers,
    ).json()

    assert api_client.delete(f"/invoices/{invoice['id']}", headers=auth_headers).status_code == 200

    reloaded = api_client.get(f"/shifts/{shift['id']}", headers=auth_headers)
    assert reloaded.json()["is_invoiced"] is False


def test_shift_with_end_before_start_is_unprocessable(api_client, auth_headers):
    client = _create_client(api_client, auth_headers)

    response = api_client.post(
        "/shifts",
        json={
            "client_id": client["id"],
            "start_time": "2024-03-04T13:00:00",
            "end_time": "2024-03-04T09:00:00",
            "hourly_rate": 40,
        },
        headers=auth_headers,
    )

    assert response.status_code == 422


def test_missing_invoice_is_not_found(api_client, auth_headers):
    response = api_client.get("/invoices/does-not-exist", headers=auth_headers)

    assert response.status_code == 404


# =========================
# DASHBOARD / EXPORTS
# =========================
def test_dashboard_week_buckets(api_client, auth_headers):
    client = _create_client(api_client, auth_headers)
    _create_shift(api_client, auth_headers, client["id"], "2024-03-05T09:00:00", "2024-03-05T13:00:00")
    _create_shift(api_client, auth_headers, client["id"], "2024-03-13T09:00:00", "2024-03-13T11:00:00")

    response = api_client.get(
        "/dashboard/summary",
        params={
            "time_frame": "week",
            "start_date": "2024-03-04T00:00:00",
            "end_date": "2024-03-17T23:59:59",
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    periods = response.json()["period_summaries"]
    assert [period["period"] for period in periods] == ["2024-W10", "2024-W11"]
    assert response.json()["total_hours"] == 6


def test_excel_export_download(api_client, auth_headers):
    client = _create_client(api_client, auth_headers)
    _create_shift(api_client, auth_headers, client["id"], "2024-03-05T09:00:00", "2024-03-05T13:00:00")

    response = api_client.post(
        "/exports",
        json={"export_type": "excel", "data_type": "shifts"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.content[:2] == b"PK"


def test_export_file_is_removed_after_download(api_client, auth_headers, tmp_path):
    client = _create_client(api_client, auth_headers)
    _create_shift(api_client, auth_headers, client["id"], "2024-03-05T09:00:00", "2024-03-05T13:00:00")

    response = api_client.post(
        "/exports",
        json={"export_type": "pdf", "data_type": "shifts"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.content[:4] == b"%PDF"
    assert [path for path in (tmp_path / "exports").rglob("*") if path.is_file()] == []
