from datetime import datetime, timezone
from decimal import Decimal
import schema

ADMIN_EMAIL = "admin@malhapro.com.br"

VALID_CHECKOUT = {
    "customer_name": "Ana Souza",
    "customer_email": "ana@example.com",
    "customer_phone": "11999990000",
    "delivery_address": {
        "cep": "01001-000",
        "street": "Praça da Sé",
        "number": "100",
        "complement": "",
        "neighborhood": "Sé",
        "city": "São Paulo",
        "state": "sp",
    },
    "payment_method": "pix",
}

def seed_team(db, name, league_id, price, stock):
    now = datetime.now(timezone.utc)
    team = schema.Team(name=name, league_id=league_id, price=Decimal(price), created_at=now)
    db.add(team)
    db.flush()
    for size, qty in stock.items():
        db.add(schema.ProductStock(team_id=team.id, size=size, stock_quantity=qty, created_at=now, updated_at=now))
    return team

def signup(client, email="ana@example.com", full_name="Ana Souza", password="secret"):
    return client.post("/api/v1/auth/signup", json={"email": email, "password": password, "full_name": full_name})

def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}

def make_customer(client, email="ana@example.com", full_name="Ana Souza"):
    return auth_headers(signup(client, email, full_name).get_json()["token"])

def make_admin(client):
    return make_customer(client, ADMIN_EMAIL, "Admin")

def add_to_cart(client, headers, team_id, size="P"):
    return client.post("/api/v1/cart/items", json={"team_id": team_id, "size": size}, headers=headers)

def set_quantity(client, headers, team_id, size, quantity):
    return client.patch(
        "/api/v1/cart/items",
        json={"team_id": team_id, "size": size, "quantity": quantity},
        headers=headers,
    )

def fill_cart(client, headers, team_id, size="P", quantity=5):
    add_to_cart(client, headers, team_id, size)
    return set_quantity(client, headers, team_id, size, quantity)

def checkout(client, headers, **overrides):
    payload = {**VALID_CHECKOUT, **overrides}
    return client.post("/api/v1/orders", json=payload, headers=headers)
