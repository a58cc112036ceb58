import pytest
from flask import Flask

from billsplit import create_app
from billsplit.api.routes import api_bp


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.register_blueprint(api_bp)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def _bill(**overrides):
    data = {
        "date": "2024-03-21",
        "location": "Taipei",
        "tipPercentage": 10,
        "items": [{"name": "Pizza", "price": 30, "isShared": True}],
    }
    data.update(overrides)
    return data


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok"}


def test_create_app_registers_blueprint():
    app = create_app()
    r = app.test_client().get("/api/health")
    assert r.status_code == 200


def test_split_shared_only_bill(client):
    r = client.post("/api/split", json=_bill())
    assert r.status_code == 200
    assert r.get_json() == {
        "date": "2024年3月21日",
        "location": "Taipei",
        "subTotal": 30,
        "tip": 3,
        "totalAmount": 33,
        "items": [
            {"name": "Person 1", "amount": 16.5},
            {"name": "Person 2", "amount": 16.5},
        ],
    }


def test_split_mixed_bill_sums_to_total(client):
    items = [
        {"name": "Hotpot", "price": 47.35, "isShared": True},
        {"name": "Beer", "price": 7.15, "isShared": False, "person": "Dan"},
        {"name": "Juice", "price": 4.45, "isShared": False, "person": "Eve"},
        {"name": "Tea", "price": 2.05, "isShared": False, "person": "Ann"},
    ]
    r = client.post("/api/split", json=_bill(tipPercentage=15, items=items))
    assert r.status_code == 200

    body = r.get_json()
    assert [p["name"] for p in body["items"]] == ["Ann", "Dan", "Eve"]
    assert body["subTotal"] == 61
    assert body["tip"] == 9.2
    people_total = round(sum(p["amount"] for p in body["items"]) * 10)
    assert people_total == 702  # 70.2 = round(61 + 9.2, 1)


def test_split_text_format(client):
    r = client.post("/api/split?format=text", json=_bill())
    assert r.status_code == 200
    assert r.mimetype == "text/plain"
    assert r.get_data(as_text=True).endswith("Person 1: 16.5\nPerson 2: 16.5")


def test_split_unknown_format(client):
    r = client.post("/api/split?format=xml", json=_bill())
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "invalid_format"


def test_split_requires_json_body(client):
    r = client.post("/api/split", data="not json", content_type="application/json")
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "malformed_data"

    r = client.post("/api/split")
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "malformed_data"


def test_split_missing_fields(client):
    r = client.post("/api/split", json={"date": "2024-03-21"})
    assert r.status_code == 400
    error = r.get_json()["error"]
    assert error["code"] == "missing_field"
    assert "tipPercentage" in error["message"]


def test_split_invalid_date(client):
    r = client.post("/api/split", json=_bill(date="2023-02-30"))
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "invalid_date"


def test_split_empty_items(client):
    r = client.post("/api/split", json=_bill(items=[]))
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "out_of_range"
