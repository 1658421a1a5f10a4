"""Tests for the auth, room and table endpoints."""

from conftest import login

ROOMS = "/api/v1/rooms/"


def tables_url(room_id):
    return f"/api/v1/rooms/{room_id}/tables/"


def test_ping_is_public(client):
    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json()["ping"] == "pong!"


def test_requests_without_token_are_refused(client):
    assert client.get(ROOMS).status_code == 403
    assert client.get(ROOMS, headers={"Authorization": "Bearer nope"}).status_code == 403


def test_login_with_wrong_password(client):
    response = client.post(
        "/api/v1/auth/login", json={"password": "wrong", "restaurant_id": "resto-1"}
    )

    assert response.status_code == 401


def test_verify_reports_role(client, staff):
    response = client.post("/api/v1/auth/verify", headers=staff)

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "staff"
    assert body["session_active"]


def test_logout_ends_the_session(client, manager):
    assert client.post("/api/v1/auth/logout", headers=manager).status_code == 204

    assert client.get(ROOMS, headers=manager).status_code == 403


def test_create_room_uses_default_grid(client, manager):
    response = client.post(ROOMS, json={"name": "Terrace"}, headers=manager)

    assert response.status_code == 201
    body = response.json()
    assert (body["grid_width"], body["grid_height"]) == (10, 8)
    assert body["restaurant_id"] == "resto-1"


def test_create_room_rejects_grid_out_of_range(client, manager):
    for width, height in [(4, 8), (10, 21)]:
        response = client.post(
            ROOMS,
            json={"name": "Odd", "grid_width": width, "grid_height": height},
            headers=manager,
        )
        assert response.status_code == 422


def test_rooms_are_scoped_to_the_restaurant(client, manager, room_id):
    other = login(client, restaurant_id="resto-2")

    assert client.get(ROOMS, headers=other).json()["items"] == []
    assert client.get(f"{ROOMS}{room_id}", headers=other).status_code == 404
    assert [r["id"] for r in client.get(ROOMS, headers=manager).json()["items"]] == [room_id]


def test_staff_can_view_but_not_change_rooms(client, staff, room_id):
    assert client.get(f"{ROOMS}{room_id}", headers=staff).status_code == 200
    assert client.post(ROOMS, json={"name": "X"}, headers=staff).status_code == 403
    assert client.delete(f"{ROOMS}{room_id}", headers=staff).status_code == 403
    assert (
        client.post(tables_url(room_id), json={"position_x": 0, "position_y": 0}, headers=staff)
        .status_code
        == 403
    )


def test_rename_room(client, manager, room_id):
    response = client.put(f"{ROOMS}{room_id}", json={"name": "Patio"}, headers=manager)

    assert response.status_code == 200
    assert response.json()["name"] == "Patio"


def test_shrinking_past_a_table_is_refused(client, manager, room_id):
    client.post(
        tables_url(room_id),
        json={"table_number": "T9", "position_x": 9, "position_y": 7},
        headers=manager,
    )

    response = client.put(
        f"{ROOMS}{room_id}", json={"grid_width": 6, "grid_height": 6}, headers=manager
    )

    assert response.status_code == 409
    assert "T9" in response.json()["detail"]

    response = client.put(f"{ROOMS}{room_id}", json={"grid_width": 12}, headers=manager)
    assert response.json()["grid_width"] == 12


def test_delete_room(client, manager, room_id):
    assert client.delete(f"{ROOMS}{room_id}", headers=manager).status_code == 204

    assert client.get(f"{ROOMS}{room_id}", headers=manager).status_code == 404
    assert client.delete(f"{ROOMS}{room_id}", headers=manager).status_code == 404


def test_place_table_with_defaults(client, manager, room_id):
    response = client.post(
        tables_url(room_id), json={"position_x": 2, "position_y": 3}, headers=manager
    )

    assert response.status_code == 201
    body = response.json()
    assert body["table_number"] == "T1"
    assert (body["capacity"], body["shape"]) == (2, "square")
    assert (body["width"], body["height"]) == (1, 1)


def test_place_table_conflicts(client, manager, room_id):
    url = tables_url(room_id)
    client.post(url, json={"position_x": 2, "position_y": 3}, headers=manager)

    taken = client.post(url, json={"position_x": 2, "position_y": 3}, headers=manager)
    outside = client.post(url, json={"position_x": 10, "position_y": 0}, headers=manager)

    assert taken.status_code == 409
    assert outside.status_code == 422
    assert len(client.get(url, headers=manager).json()["items"]) == 1


def test_edit_and_move_table(client, manager, room_id):
    url = tables_url(room_id)
    table_id = client.post(
        url, json={"position_x": 2, "position_y": 3}, headers=manager
    ).json()["id"]

    response = client.patch(
        f"{url}{table_id}",
        json={"capacity": 6, "shape": "rectangle", "position_x": 15},
        headers=manager,
    )

    assert response.status_code == 200
    body = response.json()
    assert (body["width"], body["height"]) == (3, 1)
    assert (body["position_x"], body["position_y"]) == (9, 3)


def test_move_onto_taken_cell_keeps_position(client, manager, room_id):
    url = tables_url(room_id)
    first = client.post(url, json={"position_x": 0, "position_y": 0}, headers=manager).json()
    client.post(url, json={"position_x": 1, "position_y": 0}, headers=manager)

    response = client.patch(f"{url}{first['id']}", json={"position_x": 1}, headers=manager)

    assert response.status_code == 200
    assert response.json()["position_x"] == 0


def test_edit_rejects_invalid_values(client, manager, room_id):
    url = tables_url(room_id)
    table_id = client.post(
        url, json={"position_x": 0, "position_y": 0}, headers=manager
    ).json()["id"]

    response = client.patch(f"{url}{table_id}", json={"capacity": 21}, headers=manager)

    assert response.status_code == 422


def test_delete_table(client, manager, room_id):
    url = tables_url(room_id)
    table_id = client.post(
        url, json={"position_x": 0, "position_y": 0}, headers=manager
    ).json()["id"]

    assert client.delete(f"{url}{table_id}", headers=manager).status_code == 204
    assert client.delete(f"{url}{table_id}", headers=manager).status_code == 404
    assert client.patch(f"{url}{table_id}", json={"capacity": 4}, headers=manager).status_code == 404


def test_layout_renders_tables(client, manager, room_id):
    client.post(
        tables_url(room_id),
        json={"capacity": 4, "position_x": 1, "position_y": 1},
        headers=manager,
    )

    view = client.get(f"{ROOMS}{room_id}/layout", headers=manager).json()

    assert (view["pixel_width"], view["pixel_height"]) == (600, 480)
    table = view["tables"][0]
    assert (table["left"], table["top"]) == (64, 64)
    assert (table["pixel_width"], table["pixel_height"]) == (112, 112)
