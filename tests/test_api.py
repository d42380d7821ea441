from services import wheel

from test_coupon_codes import CODE_RE


async def test_root_and_health(client):
    assert (await client.get("/")).json()["status"] == "ok"
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "ok"}


async def test_spin_requires_auth(client):
    resp = await client.post("/api/wheel/spin")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"


async def test_forged_token_is_rejected(client):
    resp = await client.post("/api/wheel/spin", headers={"Authorization": "Bearer not-a-real-token"})
    assert resp.status_code == 401


async def test_spin_for_missing_user_is_404(client, auth_headers, prizes):
    resp = await client.post("/api/wheel/spin", headers=auth_headers("ghost"))
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


async def test_spin_without_prizes(client, make_user, auth_headers):
    await make_user("alice", spins=1)

    resp = await client.post("/api/wheel/spin", headers=auth_headers("alice"))

    assert resp.status_code == 400
    assert resp.json() == {
        "message": "No prizes available",
        "error": "NoPrizesConfigured",
        "retryable": False,
    }


async def test_spin_then_run_out(client, make_user, prizes, auth_headers):
    await make_user("alice", spins=1)
    headers = auth_headers("alice")

    resp = await client.post("/api/wheel/spin", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["prize"]["id"] in {p.id for p in prizes}
    assert CODE_RE.match(body["coupon"]["code"])
    assert body["coupon"]["isRedeemed"] is False
    assert body["coupon"]["prizeId"] == body["prize"]["id"]

    resp = await client.post("/api/wheel/spin", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "InsufficientBalance"

    coupons = (await client.get("/api/coupons/user", headers=headers)).json()
    assert [c["code"] for c in coupons] == [body["coupon"]["code"]]

    me = (await client.get("/api/auth/user", headers=headers)).json()
    assert me["spinsRemaining"] == 0
    assert me["totalSpinsUsed"] == 1


async def test_buy_spins(client, make_user, auth_headers):
    await make_user("alice")

    resp = await client.post("/api/wheel/buy-spins", headers=auth_headers("alice"))

    assert resp.status_code == 200
    assert resp.json() == {"spinsAdded": 2, "newSpinCount": 2}


async def test_public_catalog(client, prizes, make_product):
    await make_product(total_price=300)
    await make_product(total_price=50, in_stock=False)

    assert len((await client.get("/api/prizes/active")).json()) == len(prizes)
    products = (await client.get("/api/products")).json()
    assert [p["totalPrice"] for p in products] == [300]
    assert (await client.get("/api/products/9999")).status_code == 404

    config = (await client.get("/api/wheel/config")).json()
    assert config["spinsPerEntry"] == 2
    assert config["isActive"] is True


async def test_checkout_with_coupon(client, make_user, make_product, prizes, make_coupon, auth_headers):
    await make_user("alice")
    product = await make_product(total_price=300)
    coupon = await make_coupon("alice", prizes[0].id, value=500)
    headers = auth_headers("alice")

    resp = await client.get("/api/coupons/validate/gftest22", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == coupon.id

    resp = await client.post(
        "/api/orders", json={"productId": product.id, "couponId": coupon.id}, headers=headers
    )
    assert resp.status_code == 200
    order = resp.json()
    assert order["discountAmount"] == 300
    assert order["finalPrice"] == 0
    assert order["status"] == "paid"
    assert "paymentIntentId" not in order

    resp = await client.post(
        "/api/orders", json={"productId": product.id, "couponId": coupon.id}, headers=headers
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "AlreadyRedeemed"

    orders = (await client.get("/api/orders/user", headers=headers)).json()
    assert len(orders) == 1


async def test_coupon_of_another_user_is_403(client, make_user, make_product, prizes, make_coupon, auth_headers):
    await make_user("alice")
    await make_user("mallory")
    product = await make_product()
    coupon = await make_coupon("alice", prizes[0].id)

    resp = await client.post(
        "/api/orders", json={"productId": product.id, "couponId": coupon.id}, headers=auth_headers("mallory")
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "Forbidden"


async def test_support_request(client, make_user, auth_headers):
    await make_user("alice")
    headers = auth_headers("alice")

    resp = await client.post(
        "/api/support-requests",
        json={"type": "customization", "description": "Engraved ring", "contactPhone": "5550100"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"

    mine = (await client.get("/api/support-requests/user", headers=headers)).json()
    assert len(mine) == 1


async def test_admin_routes_need_admin(client, make_user, auth_headers):
    await make_user("alice")
    await make_user("root", is_admin=True)

    assert (await client.get("/api/admin/users")).status_code == 401
    assert (await client.get("/api/admin/users", headers=auth_headers("alice"))).status_code == 403
    resp = await client.get("/api/admin/users", headers=auth_headers("root"))
    assert resp.status_code == 200
    assert {u["id"] for u in resp.json()} == {"alice", "root"}


async def test_admin_prize_lifecycle(client, make_user, auth_headers):
    await make_user("root", is_admin=True)
    headers = auth_headers("root")

    resp = await client.post(
        "/api/admin/prizes",
        json={"name": "Rs 75 Off", "type": "discount", "value": 75, "probability": 12},
        headers=headers,
    )
    assert resp.status_code == 200
    prize_id = resp.json()["id"]

    resp = await client.patch(f"/api/admin/prizes/{prize_id}", json={"isActive": False}, headers=headers)
    assert resp.json()["isActive"] is False
    assert (await client.get("/api/prizes/active")).json() == []

    resp = await client.delete(f"/api/admin/prizes/{prize_id}", headers=headers)
    assert resp.status_code == 200
    assert (await client.get("/api/prizes")).json() == []


async def test_admin_wheel_config_drives_buy_spins(client, make_user, auth_headers):
    await make_user("root", is_admin=True)
    headers = auth_headers("root")

    resp = await client.patch("/api/admin/wheel/config", json={"spinsPerEntry": 4}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["spinsPerEntry"] == 4

    resp = await client.post("/api/wheel/buy-spins", headers=headers)
    assert resp.json() == {"spinsAdded": 4, "newSpinCount": 4}


async def test_demo_login_flow(client):
    resp = await client.post("/api/auth/login", json={"email": "user@gpt.com", "password": "wrong"})
    assert resp.status_code == 401

    resp = await client.post("/api/auth/login", json={"email": "user@gpt.com", "password": "user123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["id"] == "demo-user-2"
    assert body["user"]["isAdmin"] is False
    assert body["user"]["spinsRemaining"] == 0

    # The session cookie alone authenticates follow-up calls
    me = await client.get("/api/auth/user")
    assert me.status_code == 200
    assert me.json()["email"] == "user@gpt.com"

    me = await client.get("/api/auth/user", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200

    await client.post("/api/auth/logout")
    assert (await client.get("/api/auth/user")).status_code == 401


async def test_spin_conflict_is_retryable_409(client, make_user, prizes, make_coupon, auth_headers, monkeypatch):
    await make_user("alice", spins=1)
    await make_coupon("alice", prizes[0].id, code="GFTEST22")

    async def stale_code(session, *args, **kwargs):
        return "GFTEST22"

    monkeypatch.setattr(wheel, "generate_unique_coupon_code", stale_code)

    resp = await client.post("/api/wheel/spin", headers=auth_headers("alice"))

    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"
    assert resp.json()["retryable"] is True
    me = (await client.get("/api/auth/user", headers=auth_headers("alice"))).json()
    assert me["spinsRemaining"] == 1


async def test_admin_patch_ignores_null_fields(client, make_user, make_product, prizes, auth_headers):
    await make_user("root", is_admin=True)
    product = await make_product(total_price=300)
    headers = auth_headers("root")
    prize_id = prizes[0].id

    resp = await client.patch(
        f"/api/admin/prizes/{prize_id}", json={"probability": None, "name": None, "value": 40}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["probability"] == prizes[0].probability
    assert resp.json()["name"] == prizes[0].name
    assert resp.json()["value"] == 40

    resp = await client.patch(
        f"/api/admin/products/{product.id}", json={"totalPrice": None, "inStock": None}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["totalPrice"] == 300
    assert resp.json()["inStock"] is True
