from decimal import Decimal
from helpers import make_customer, make_admin, fill_cart, checkout, auth_headers, ADMIN_EMAIL
import schema


def place(client, catalog, email, name, team="Flamengo", size="P", quantity=5):
    headers = make_customer(client, email=email, full_name=name)
    fill_cart(client, headers, catalog[team], size, quantity)
    return checkout(client, headers, customer_name=name).get_json()


def test_dashboard_requires_admin(client, catalog):
    assert client.get("/api/v1/dashboard/overview").status_code == 401

    customer = make_customer(client)
    assert client.get("/api/v1/dashboard/overview", headers=customer).status_code == 403

    # a customer cannot promote their own token
    user_id = client.get("/api/v1/auth/me", headers=customer).get_json()["user_id"]
    forged = auth_headers(f"mock-jwt-admin-{user_id}")
    assert client.get("/api/v1/dashboard/overview", headers=forged).status_code == 403

    assert client.get("/api/v1/dashboard/overview", headers=make_admin(client)).status_code == 200


def test_overview_numbers(client, catalog):
    place(client, catalog, "ana@example.com", "Ana Souza")                   # 150 - 30 = 120
    place(client, catalog, "bia@example.com", "Bia Lima", "Palmeiras", "M")  # 300 - 60 = 240
    admin = make_admin(client)

    data = client.get("/api/v1/dashboard/overview", headers=admin).get_json()
    assert data["orders"] == 2
    assert Decimal(data["revenue"]) == Decimal("360")
    assert Decimal(data["average_ticket"]) == Decimal("180")
    assert data["customers"] == 3
    assert data["status_counts"] == {"pending_payment": 2}
    assert len(data["monthly_revenue"]) == 6
    assert Decimal(data["monthly_revenue"][-1]["revenue"]) == Decimal("360")


def test_overview_empty_store(client):
    data = client.get("/api/v1/dashboard/overview", headers=make_admin(client)).get_json()
    assert data["orders"] == 0
    assert Decimal(data["revenue"]) == 0
    assert Decimal(data["average_ticket"]) == 0
    assert Decimal(data["balance"]) == 0


def test_orders_filter_and_search(client, catalog, db_session):
    first = place(client, catalog, "ana@example.com", "Ana Souza")
    second = place(client, catalog, "bia@example.com", "Bia Lima")
    db_session.query(schema.Order).filter_by(id=second["id"]).update({"status": "shipped"})
    db_session.commit()
    admin = make_admin(client)

    all_orders = client.get("/api/v1/dashboard/orders", headers=admin).get_json()["orders"]
    assert [o["id"] for o in all_orders] == [second["id"], first["id"]]

    shipped = client.get("/api/v1/dashboard/orders?status=shipped", headers=admin).get_json()["orders"]
    assert [o["status_label"] for o in shipped] == ["Enviado"]

    by_name = client.get("/api/v1/dashboard/orders?search=souza", headers=admin).get_json()["orders"]
    assert [o["id"] for o in by_name] == [first["id"]]

    by_id = client.get(f"/api/v1/dashboard/orders?search={first['id']}", headers=admin).get_json()["orders"]
    assert first["id"] in [o["id"] for o in by_id]


def test_customers_with_spend(client, catalog):
    place(client, catalog, "ana@example.com", "Ana Souza")
    make_customer(client, email="caio@example.com", full_name="Caio")
    admin = make_admin(client)

    customers = client.get("/api/v1/dashboard/customers", headers=admin).get_json()["customers"]
    by_email = {c["email"]: c for c in customers}
    assert by_email["ana@example.com"]["orders"] == 1
    assert Decimal(by_email["ana@example.com"]["total_spent"]) == Decimal("120")
    assert by_email["caio@example.com"]["orders"] == 0
    assert Decimal(by_email["caio@example.com"]["total_spent"]) == 0

    found = client.get("/api/v1/dashboard/customers?search=caio", headers=admin).get_json()["customers"]
    assert [c["name"] for c in found] == ["Caio"]


def test_overview_shows_admin_balance(client, db_session):
    admin = make_admin(client)
    db_session.query(schema.Profile).filter_by(email=ADMIN_EMAIL).update({"balance": Decimal("50.25")})
    db_session.commit()

    data = client.get("/api/v1/dashboard/overview", headers=admin).get_json()
    assert Decimal(data["balance"]) == Decimal("50.25")


def test_searches_treat_wildcards_literally(client, catalog):
    place(client, catalog, "ana@example.com", "Ana Souza")
    make_customer(client, email="caio@example.com", full_name="Caio")
    admin = make_admin(client)

    for term in ("%", "_", "Ana%"):
        orders = client.get("/api/v1/dashboard/orders", query_string={"search": term}, headers=admin)
        assert orders.get_json()["orders"] == []
        customers = client.get("/api/v1/dashboard/customers", query_string={"search": term}, headers=admin)
        assert customers.get_json()["customers"] == []


def test_add_customer(client):
    admin = make_admin(client)
    payload = {"name": "Davi Costa", "email": "Davi@Example.com", "phone": "21988887777"}

    r = client.post("/api/v1/dashboard/customers", json=payload, headers=admin)
    assert r.status_code == 201
    created = r.get_json()
    assert created["email"] == "davi@example.com"
    assert created["phone"] == "21988887777"
    assert created["orders"] == 0
    assert Decimal(created["total_spent"]) == 0

    listed = client.get("/api/v1/dashboard/customers", query_string={"search": "davi"}, headers=admin)
    assert [c["id"] for c in listed.get_json()["customers"]] == [created["id"]]

    # the new customer can sign in to the same profile
    signin = client.post("/api/v1/auth/signin", json={"email": "davi@example.com", "password": "pw"})
    assert signin.get_json()["user_id"] == created["id"]

    assert client.post("/api/v1/dashboard/customers", json=payload, headers=admin).status_code == 409


def test_add_customer_validation_and_access(client):
    admin = make_admin(client)
    url = "/api/v1/dashboard/customers"
    assert client.post(url, json={"email": "x@example.com"}, headers=admin).status_code == 400
    assert client.post(url, json={"name": "X", "email": 7}, headers=admin).status_code == 400
    assert client.post(url, json=["X", "x@example.com"], headers=admin).status_code == 400

    customer = make_customer(client)
    assert client.post(url, json={"name": "X", "email": "x@example.com"}, headers=customer).status_code == 403
    assert client.post(url, json={"name": "X", "email": "x@example.com"}).status_code == 401
