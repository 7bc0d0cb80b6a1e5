import uuid

from sqlalchemy import select

from app.branchstock.db.models import InventoryRecord, StockMovement, Transfer, TransferItem
from tests.branchstock_helpers import (
    auth,
    create_branches,
    create_inventory,
    create_product,
    create_user,
    create_variation,
    history_counts,
    inventory_row,
    line,
    login,
    transfer_payload,
)


def _owner_token(client, db_session) -> str:
    create_branches(db_session)
    create_user(db_session, suffix="owner", role="owner")
    return login(client, "user-owner@example.com")


def test_transfer_moves_stock_and_creates_destination_row(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-1")
    create_inventory(
        db_session,
        product_id=product.id,
        branch_id="franko",
        quantity=10,
        min_stock_level=2,
        max_stock_level=50,
    )

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 4)),
        headers=auth(token),
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "Transfer completed successfully"
    data = payload["data"]
    assert data["status"] == "completed"
    assert data["reason"] == "Restock"
    assert data["from_branch_name"] == "Franko"
    assert data["to_branch_name"] == "Mebrathayl"
    assert data["requested_by_name"] == "User owner"
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 4
    assert data["items"][0]["sku"] == "TEE-1"
    assert data["items"][0]["variation_name"] is None

    source = inventory_row(db_session, product_id=product.id, branch_id="franko")
    destination = inventory_row(db_session, product_id=product.id, branch_id="mebrathayl")
    assert source.quantity == 6
    assert destination.quantity == 4
    assert destination.min_stock_level == 2
    assert destination.max_stock_level == 50
    assert destination.last_restocked is not None

    transfer_id = uuid.UUID(data["id"])
    movements = db_session.execute(
        select(StockMovement).where(StockMovement.reference_id == transfer_id)
    ).scalars().all()
    assert sorted((m.movement_type, m.branch_id, m.quantity) for m in movements) == [
        ("in", "mebrathayl", 4),
        ("out", "franko", 4),
    ]
    assert {m.reference_type for m in movements} == {"transfer"}
    assert history_counts(db_session) == (1, 1, 2)


def test_transfer_increments_existing_destination_row(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-2")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=10)
    create_inventory(
        db_session,
        product_id=product.id,
        branch_id="mebrathayl",
        quantity=5,
        min_stock_level=1,
        max_stock_level=9,
    )

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 3)),
        headers=auth(token),
    )

    assert response.status_code == 200
    destination = inventory_row(db_session, product_id=product.id, branch_id="mebrathayl")
    assert destination.quantity == 8
    assert destination.min_stock_level == 1
    assert destination.max_stock_level == 9
    db_session.expire_all()
    rows = db_session.execute(
        select(InventoryRecord).where(InventoryRecord.product_id == product.id)
    ).scalars().all()
    assert len(rows) == 2


def test_destination_row_without_source_levels_gets_null_levels(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-3")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=5)

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 5)),
        headers=auth(token),
    )

    assert response.status_code == 200
    destination = inventory_row(db_session, product_id=product.id, branch_id="mebrathayl")
    assert destination.quantity == 5
    assert destination.min_stock_level is None
    assert destination.max_stock_level is None
    assert inventory_row(db_session, product_id=product.id, branch_id="franko").quantity == 0


def test_insufficient_stock_rejects_without_side_effects(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-4")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=3)

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 5)),
        headers=auth(token),
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["code"] == "INSUFFICIENT_STOCK"
    assert "Available: 3, Requested: 5" in payload["error"]
    assert str(product.id) in payload["error"]
    assert payload["details"]["available"] == 3
    assert payload["details"]["requested"] == 5
    assert history_counts(db_session) == (0, 0, 0)
    assert inventory_row(db_session, product_id=product.id, branch_id="franko").quantity == 3
    assert inventory_row(db_session, product_id=product.id, branch_id="mebrathayl") is None


def test_missing_source_row_counts_as_zero(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-5")

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 1)),
        headers=auth(token),
    )

    assert response.status_code == 400
    assert "Available: 0, Requested: 1" in response.json()["error"]
    assert history_counts(db_session) == (0, 0, 0)


def test_same_branch_is_rejected(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-6")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=10)

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "franko", line(product, 1)),
        headers=auth(token),
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "From and to branches must be different"
    assert payload["code"] == "BRANCHES_MUST_DIFFER"
    assert history_counts(db_session) == (0, 0, 0)
    assert inventory_row(db_session, product_id=product.id, branch_id="franko").quantity == 10


def test_sequential_transfers_never_overdraw(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-7")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=10)
    payload = transfer_payload("franko", "mebrathayl", line(product, 6))

    first = client.post("/api/transfers", json=payload, headers=auth(token))
    second = client.post("/api/transfers", json=payload, headers=auth(token))

    assert first.status_code == 200
    assert second.status_code == 400
    assert "Available: 4, Requested: 6" in second.json()["error"]
    assert inventory_row(db_session, product_id=product.id, branch_id="franko").quantity == 4
    assert inventory_row(db_session, product_id=product.id, branch_id="mebrathayl").quantity == 6
    assert history_counts(db_session) == (1, 1, 2)


def test_resubmitting_performs_a_second_transfer(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-8")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=10)
    payload = transfer_payload("franko", "mebrathayl", line(product, 2))

    first = client.post("/api/transfers", json=payload, headers=auth(token))
    second = client.post("/api/transfers", json=payload, headers=auth(token))

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["data"]["id"] != second.json()["data"]["id"]
    assert inventory_row(db_session, product_id=product.id, branch_id="franko").quantity == 6
    assert inventory_row(db_session, product_id=product.id, branch_id="mebrathayl").quantity == 4


def test_multi_line_failure_rolls_back_every_line(client, db_session):
    token = _owner_token(client, db_session)
    plenty = create_product(db_session, sku="TEE-9")
    scarce = create_product(db_session, sku="TEE-10")
    create_inventory(db_session, product_id=plenty.id, branch_id="franko", quantity=10)
    create_inventory(db_session, product_id=scarce.id, branch_id="franko", quantity=1)

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(plenty, 5), line(scarce, 2)),
        headers=auth(token),
    )

    assert response.status_code == 400
    assert str(scarce.id) in response.json()["error"]
    assert history_counts(db_session) == (0, 0, 0)
    assert inventory_row(db_session, product_id=plenty.id, branch_id="franko").quantity == 10
    assert inventory_row(db_session, product_id=plenty.id, branch_id="mebrathayl") is None


def test_duplicate_lines_are_checked_against_combined_quantity(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-11")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=5)

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 3), line(product, 3)),
        headers=auth(token),
    )

    assert response.status_code == 400
    assert "Available: 5, Requested: 6" in response.json()["error"]
    assert inventory_row(db_session, product_id=product.id, branch_id="franko").quantity == 5


def test_multi_line_items_keep_request_order(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="HOODIE", product_type="variation")
    red = create_variation(db_session, product, sku="HOODIE-R-M", color="Red", size="M")
    blue = create_variation(db_session, product, sku="HOODIE-B-L", color="Blue", size="L")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=4, variation_id=red.id)
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=6, variation_id=blue.id)

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 2, blue), line(product, 1, red)),
        headers=auth(token),
    )

    assert response.status_code == 200
    items = response.json()["data"]["items"]
    assert [item["variation_id"] for item in items] == [str(blue.id), str(red.id)]
    assert [item["variation_name"] for item in items] == ["Blue - L", "Red - M"]
    assert inventory_row(db_session, product_id=product.id, branch_id="franko", variation_id=blue.id).quantity == 4
    assert inventory_row(db_session, product_id=product.id, branch_id="franko", variation_id=red.id).quantity == 3
    assert (
        inventory_row(db_session, product_id=product.id, branch_id="mebrathayl", variation_id=blue.id).quantity
        == 2
    )
    assert history_counts(db_session) == (1, 2, 4)


def test_variation_product_requires_variation_id(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="JACKET", product_type="variation")
    small = create_variation(db_session, product, sku="JACKET-S", color="Black", size="S")
    large = create_variation(db_session, product, sku="JACKET-L", color="Black", size="L")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=4, variation_id=small.id)
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=6, variation_id=large.id)

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 5)),
        headers=auth(token),
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == "VALIDATION_ERROR"
    assert "variation_id is required" in payload["error"]
    assert history_counts(db_session) == (0, 0, 0)


def test_variation_from_another_product_is_rejected(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="CAP", product_type="variation")
    other = create_product(db_session, sku="SCARF", product_type="variation")
    foreign = create_variation(db_session, other, sku="SCARF-G", color="Green", size="One")

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 1, foreign)),
        headers=auth(token),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_unknown_branch_and_product_are_validation_errors(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-12")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=5)

    unknown_branch = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "nowhere", line(product, 1)),
        headers=auth(token),
    )
    unknown_product = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", {"product_id": str(uuid.uuid4()), "quantity": 1}),
        headers=auth(token),
    )

    assert unknown_branch.status_code == 400
    assert unknown_branch.json()["error"] == "Branch not found: nowhere"
    assert unknown_product.status_code == 400
    assert unknown_product.json()["error"].startswith("Product not found")
    assert history_counts(db_session) == (0, 0, 0)


def test_request_shape_is_validated(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-13")

    bad_requests = [
        transfer_payload("franko", "mebrathayl"),
        transfer_payload("franko", "mebrathayl", line(product, 0)),
        transfer_payload("franko", "mebrathayl", line(product, -2)),
        transfer_payload("franko", "mebrathayl", line(product, 1), reason=""),
        transfer_payload("", "mebrathayl", line(product, 1)),
        transfer_payload("franko", "mebrathayl", {"product_id": "not-a-uuid", "quantity": 1}),
    ]
    for body in bad_requests:
        response = client.post("/api/transfers", json=body, headers=auth(token))
        assert response.status_code == 400, body
        assert response.json()["code"] == "VALIDATION_ERROR"

    assert history_counts(db_session) == (0, 0, 0)


def test_transfer_requires_authentication(client, db_session):
    create_branches(db_session)
    product = create_product(db_session, sku="TEE-14")

    response = client.post("/api/transfers", json=transfer_payload("franko", "mebrathayl", line(product, 1)))

    assert response.status_code == 401
    assert history_counts(db_session) == (0, 0, 0)


def test_transfer_items_and_header_are_persisted(client, db_session):
    token = _owner_token(client, db_session)
    product = create_product(db_session, sku="TEE-15")
    create_inventory(db_session, product_id=product.id, branch_id="franko", quantity=9)

    response = client.post(
        "/api/transfers",
        json=transfer_payload("franko", "mebrathayl", line(product, 9), reason="Close franko shelf"),
        headers=auth(token),
    )

    assert response.status_code == 200
    db_session.expire_all()
    transfer = db_session.execute(select(Transfer)).scalars().one()
    item = db_session.execute(select(TransferItem)).scalars().one()
    assert transfer.notes == "Close franko shelf"
    assert transfer.status == "completed"
    assert item.transfer_id == transfer.id
    assert item.quantity == 9
    assert item.line_no == 1
