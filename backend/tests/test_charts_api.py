import pytest


@pytest.fixture
def owned_file(make_user, upload):
    headers, user = make_user()
    file_body = upload(headers).json()
    return headers, file_body


def _chart_body(file_id: str, **overrides) -> dict:
    body = {"title": "Monthly sales", "type": "bar", "fileId": file_id, "xAxis": "month", "yAxis": "sales"}
    body.update(overrides)
    return body


def test_create_chart_derives_series(client, owned_file) -> None:
    headers, file_body = owned_file

    response = client.post(
        "/api/charts",
        json=_chart_body(file_body["id"], data={"labels": ["fake"], "values": [1]}),
        headers=headers,
    )

    assert response.status_code == 201, response.text
    chart = response.json()
    assert chart["data"] == {"labels": ["Jan", "Feb"], "values": [15, 20]}
    assert chart["fileId"] == file_body["id"]
    assert chart["fileName"] == "sales.csv"
    assert chart["userId"] == file_body["userId"]
    assert chart["xAxis"] == "month"


def test_unknown_axis_yields_unknown_series(client, owned_file) -> None:
    headers, file_body = owned_file
    response = client.post(
        "/api/charts", json=_chart_body(file_body["id"], xAxis="region"), headers=headers
    )
    assert response.status_code == 201
    assert response.json()["data"] == {"labels": ["Unknown"], "values": [35]}


def test_chart_type_must_be_known(client, owned_file) -> None:
    headers, file_body = owned_file
    response = client.post("/api/charts", json=_chart_body(file_body["id"], type="donut"), headers=headers)
    assert response.status_code == 422


def test_cannot_chart_someone_elses_file(client, owned_file, make_user) -> None:
    _, file_body = owned_file
    other_headers, _ = make_user(email="bob@example.com", name="Bob")
    response = client.post("/api/charts", json=_chart_body(file_body["id"]), headers=other_headers)
    assert response.status_code == 403


def test_chart_on_missing_file(client, make_user) -> None:
    headers, _ = make_user()
    response = client.post(
        "/api/charts", json=_chart_body("00000000-0000-0000-0000-000000000000"), headers=headers
    )
    assert response.status_code == 404


def test_list_and_get(client, owned_file) -> None:
    headers, file_body = owned_file
    first = client.post("/api/charts", json=_chart_body(file_body["id"], title="First"), headers=headers).json()
    second = client.post("/api/charts", json=_chart_body(file_body["id"], title="Second", type="pie"), headers=headers).json()

    listed = client.get("/api/charts", headers=headers).json()
    assert {c["id"] for c in listed} == {first["id"], second["id"]}
    assert all(c["fileName"] == "sales.csv" for c in listed)

    fetched = client.get(f"/api/charts/{second['id']}", headers=headers).json()
    assert fetched["type"] == "pie"


def test_update_axes_rederives_series(client, owned_file, upload) -> None:
    headers, _ = owned_file
    file_id = upload(headers, b"region,month,sales\nN,Jan,1\nS,Jan,2\nN,Feb,4\n", "regions.csv").json()["id"]
    chart = client.post("/api/charts", json=_chart_body(file_id), headers=headers).json()
    assert chart["data"] == {"labels": ["Jan", "Feb"], "values": [3, 4]}

    response = client.put(
        f"/api/charts/{chart['id']}", json={"xAxis": "region", "title": "By region"}, headers=headers
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "By region"
    assert updated["data"] == {"labels": ["N", "S"], "values": [5, 2]}


def test_update_title_is_trimmed_and_never_blank(client, owned_file) -> None:
    headers, file_body = owned_file
    chart = client.post("/api/charts", json=_chart_body(file_body["id"]), headers=headers).json()
    url = f"/api/charts/{chart['id']}"

    assert client.put(url, json={"title": "   "}, headers=headers).status_code == 422
    assert client.get(url, headers=headers).json()["title"] == chart["title"]

    response = client.put(url, json={"title": "  Quarterly  "}, headers=headers)
    assert response.status_code == 200
    assert response.json()["title"] == "Quarterly"


def test_only_owner_updates(client, owned_file, make_user) -> None:
    headers, file_body = owned_file
    chart = client.post("/api/charts", json=_chart_body(file_body["id"]), headers=headers).json()
    other_headers, _ = make_user(email="bob@example.com", name="Bob")

    assert client.put(f"/api/charts/{chart['id']}", json={"title": "x"}, headers=other_headers).status_code == 403
    assert client.get(f"/api/charts/{chart['id']}", headers=other_headers).status_code == 403
    assert client.delete(f"/api/charts/{chart['id']}", headers=other_headers).status_code == 403


def test_delete_chart_keeps_file(client, owned_file) -> None:
    headers, file_body = owned_file
    chart = client.post("/api/charts", json=_chart_body(file_body["id"]), headers=headers).json()

    assert client.delete(f"/api/charts/{chart['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/charts/{chart['id']}", headers=headers).status_code == 404
    assert client.get(f"/api/files/{file_body['id']}", headers=headers).status_code == 200
