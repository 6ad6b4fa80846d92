from feedback360.services.pins import NO_PINS_LEFT


async def test_requires_token(client):
    response = await client.get("/pins/allowance")
    assert response.status_code == 401
    assert response.json() == {"error": "Could not validate credentials"}


async def test_bad_token_rejected(client):
    response = await client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401


async def test_login_and_me(client, make_user):
    await make_user(full_name="Ani", email="ani@company.co.id", password="rahasia123")

    response = await client.post("/auth/login", json={"email": "ani@company.co.id", "password": "rahasia123"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["full_name"] == "Ani"
    assert me.json()["data"]["role"] == "user"


async def test_login_wrong_password(client, make_user):
    await make_user(email="budi@company.co.id", password="rahasia123")
    response = await client.post("/auth/login", json={"email": "budi@company.co.id", "password": "salah"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


async def test_admin_routes_forbidden_for_users(client, make_user, auth_headers):
    user = await make_user()
    response = await client.get("/admin/stats", headers=auth_headers(user))
    assert response.status_code == 403


async def test_admin_stats(client, make_user, make_period, auth_headers):
    admin = await make_user(role="admin")
    await make_user()
    await make_period()

    response = await client.get("/admin/stats", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["data"]["total_users"] == 1


async def test_active_triwulan_is_public(client, make_period):
    await make_period(2025, 8, is_active=True)

    response = await client.get("/admin/triwulan", params={"active": 1})
    assert response.status_code == 200
    assert [q["id"] for q in response.json()["data"]] == ["2025-Q3"]


async def test_triwulan_management_roles(client, make_user, auth_headers):
    user = await make_user()
    supervisor = await make_user(role="supervisor")

    payload = {"year": 2025, "quarter": 3}
    assert (await client.post("/admin/triwulan", json=payload, headers=auth_headers(user))).status_code == 403

    created = await client.post("/admin/triwulan", json=payload, headers=auth_headers(supervisor))
    assert created.status_code == 200
    assert created.json()["data"]["id"] == "2025-Q3"

    deleted = await client.delete("/admin/triwulan", params={"id": "2025-Q3"}, headers=auth_headers(supervisor))
    assert deleted.status_code == 200
    assert (await client.get("/admin/triwulan")).json() == {"data": []}

    bad = await client.delete("/admin/triwulan", params={"id": "2025-Q9"}, headers=auth_headers(supervisor))
    assert bad.status_code == 400


async def test_give_pin_limit_over_http(client, make_user, auth_headers):
    giver = await make_user()
    receivers = [await make_user() for _ in range(5)]
    headers = auth_headers(giver)

    for receiver in receivers[:4]:
        response = await client.post("/pins/give", json={"receiver_id": receiver.id}, headers=headers)
        assert response.status_code == 200

    response = await client.post("/pins/give", json={"receiver_id": receivers[4].id}, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"error": NO_PINS_LEFT}

    duplicate = await client.post("/pins/give", json={"receiver_id": receivers[0].id}, headers=headers)
    assert duplicate.status_code == 400

    allowance = await client.get("/pins/allowance", headers=headers)
    assert allowance.json()["data"]["pins_remaining"] == 0


async def test_duplicate_pin_conflict_over_http(client, make_user, auth_headers):
    giver = await make_user()
    receiver = await make_user()
    headers = auth_headers(giver)

    await client.post("/pins/give", json={"receiver_id": receiver.id}, headers=headers)
    response = await client.post("/pins/give", json={"receiver_id": receiver.id}, headers=headers)
    assert response.status_code == 409

    notifications = await client.get("/notifications", headers=auth_headers(receiver))
    assert notifications.json()["data"]["unread_count"] == 1

    await client.post("/notifications/mark-all-read", headers=auth_headers(receiver))
    notifications = await client.get("/notifications", headers=auth_headers(receiver))
    assert notifications.json()["data"]["unread_count"] == 0


async def test_validation_errors_are_400(client, make_user, auth_headers):
    user = await make_user()
    response = await client.post("/pins/give", json={}, headers=auth_headers(user))
    assert response.status_code == 400
    assert "receiver_id" in response.json()["error"]


async def test_unscored_results_are_null(client, make_user, auth_headers):
    user = await make_user()
    response = await client.get("/results/weighted", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json() == {"data": None}


async def test_private_results_hidden_from_peers(client, make_user, auth_headers):
    viewer = await make_user()
    private = await make_user(allow_public_view=False)
    response = await client.get("/results/weighted", params={"user_id": private.id}, headers=auth_headers(viewer))
    assert response.status_code == 403


async def test_submit_and_read_results_over_http(client, make_user, make_period, auth_headers, db_session):
    from feedback360.models.assessment import AssessmentAssignment

    period = await make_period()
    assessor = await make_user()
    assessee = await make_user()
    assignment = AssessmentAssignment(assessor_id=assessor.id, assessee_id=assessee.id, period_id=period.id)
    db_session.add(assignment)
    await db_session.commit()

    body = {
        "assignment_id": assignment.id,
        "responses": [
            {"aspect": "kolaboratif", "indicator": f"Indikator {n}", "rating": 88, "comment": "Mantap"}
            for n in range(3)
        ],
    }
    submitted = await client.post("/assessment/submit", json=body, headers=auth_headers(assessor))
    assert submitted.status_code == 200

    result = await client.get("/results/weighted", headers=auth_headers(assessee))
    data = result.json()["data"]
    assert data["final_score"] == 88
    assert data["total_feedback"] == 1
    assert data["aspect_results"][0]["peer_comments"][0]["comment"] == "Mantap"


async def test_pin_period_management_over_http(client, make_user, auth_headers):
    user = await make_user()
    admin = await make_user(role="admin")
    payload = {"start_date": "2025-08-01", "end_date": "2025-08-31", "month": 8, "year": 2025}

    assert (await client.get("/pins/period/active")).json() == {"data": None}
    assert (await client.post("/admin/pin-periods", json=payload, headers=auth_headers(user))).status_code == 403

    created = await client.post("/admin/pin-periods", json=payload, headers=auth_headers(admin))
    assert created.status_code == 200
    period_id = created.json()["data"]["id"]
    assert (await client.get("/pins/period/active")).json()["data"]["id"] == period_id

    updated = await client.patch(
        "/admin/pin-periods", json={"id": period_id, "is_completed": True}, headers=auth_headers(admin)
    )
    assert updated.json()["data"]["is_completed"] is True

    reset = await client.post("/admin/reset-pin-period", json={"id": period_id}, headers=auth_headers(admin))
    assert reset.json() == {"pins_deleted": 0, "allowances_reset": 0}

    deleted = await client.delete("/admin/pin-periods", params={"id": period_id}, headers=auth_headers(admin))
    assert deleted.status_code == 200
    assert (await client.get("/admin/pin-periods", headers=auth_headers(admin))).json() == {"data": []}


async def test_team_views_over_http(client, make_user, make_period, auth_headers):
    await make_period()
    user = await make_user()
    supervisor = await make_user(role="supervisor")
    private = await make_user(allow_public_view=False)

    assert (await client.get("/team/performance", headers=auth_headers(user))).status_code == 403
    performance = await client.get("/team/performance", headers=auth_headers(supervisor))
    assert performance.json() == {"data": []}
    stats = await client.get("/team/assignment-stats", headers=auth_headers(supervisor))
    assert stats.json()["data"]["total"] == 0

    hidden = await client.get(f"/team/user/{private.id}", headers=auth_headers(user))
    assert hidden.status_code == 403
    assert (await client.get("/team/user/missing", headers=auth_headers(user))).status_code == 404

    own = await client.get(f"/team/user/{user.id}/performance", headers=auth_headers(user))
    assert own.status_code == 200
    assert own.json()["data"]["average_rating"] is None
    comments = await client.get(f"/team/user/{private.id}/comments", headers=auth_headers(supervisor))
    assert comments.json() == {"data": []}


async def test_dashboard_stats_over_http(client, make_user, make_period, auth_headers):
    await make_period()
    user = await make_user()
    await make_user()

    response = await client.get("/dashboard/stats", headers=auth_headers(user))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["current_period"] == "Juli 2025"
    assert data["total_employees"] == 1
    assert data["current_period_data"]["month"] == 7


async def test_saved_responses_over_http(client, make_user, make_period, auth_headers):
    await make_period()
    user = await make_user()
    response = await client.get("/assessment/responses", params={"assignment_id": "missing"}, headers=auth_headers(user))
    assert response.status_code == 403
