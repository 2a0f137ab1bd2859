from decimal import Decimal

import pytest

from conftest import make_category, make_product
from electrotech.core.errors import ConflictError, NotFoundError, ValidationFailed
from electrotech.crud import categories as category_repo
from electrotech.crud import products as product_repo
from electrotech.crud.products import StockMovement
from electrotech.services import categories as category_service
from electrotech.services import products as product_service


def test_create_product_starts_with_empty_stock(db_session):
    category = make_category(db_session)
    product = make_product(db_session, category)

    assert product.stock == 0
    assert product.category_name == "Smartphones"
    assert product.margin == Decimal("50.00")
    assert product.margin_pct == Decimal("50.00")
    assert product.needs_restock is True


def test_sale_price_must_exceed_purchase_price(db_session):
    category = make_category(db_session)
    with pytest.raises(ValidationFailed, match="sale_price must be greater"):
        make_product(db_session, category, purchase="100.00", sale="100.00")


def test_duplicate_code_is_a_conflict(db_session):
    category = make_category(db_session)
    make_product(db_session, category, code="SM-001")
    with pytest.raises(ConflictError):
        make_product(db_session, category, code="sm-001", name="Other")


def test_inactive_category_is_rejected(db_session):
    category = make_category(db_session)
    category_service.update_category(db_session, category, {"active": False})
    with pytest.raises(ValidationFailed, match="inactive"):
        make_product(db_session, category)


def test_min_stock_defaults_to_five(db_session):
    category = make_category(db_session)
    product = product_service.create_product(
        db_session,
        {"code": "AC-1", "name": "Cable", "category_id": category.id, "purchase_price": 2, "sale_price": 5},
    )
    assert product.min_stock == 5


def test_stock_in_and_out(db_session):
    category = make_category(db_session)
    product = make_product(db_session, category)

    assert product_service.update_stock(db_session, product.id, 8, "in") == 8
    assert product_service.update_stock(db_session, product.id, 3, StockMovement.OUT) == 5
    assert product_repo.get_stock(db_session, product.id) == 5


def test_stock_out_cannot_go_negative(db_session):
    category = make_category(db_session)
    product = make_product(db_session, category, stock=2)

    with pytest.raises(ValidationFailed, match="Insufficient stock"):
        product_service.update_stock(db_session, product.id, 3, "out")
    assert product_repo.get_stock(db_session, product.id) == 2


def test_stock_for_unknown_product(db_session):
    with pytest.raises(NotFoundError):
        product_service.update_stock(db_session, 999, 1, "in")


def test_low_stock_ordered_by_shortfall(db_session):
    category = make_category(db_session)
    small = make_product(db_session, category, code="A", name="Alpha", stock=4, min_stock=5)
    large = make_product(db_session, category, code="B", name="Beta", stock=1, min_stock=10)
    make_product(db_session, category, code="C", name="Gamma", stock=20, min_stock=5)

    low = product_repo.list_low_stock(db_session)

    assert [product.id for product in low] == [large.id, small.id]
    assert product_repo.count_low_stock(db_session) == 2


def test_search_matches_category_name(db_session):
    phones = make_category(db_session, "Smartphones")
    tablets = make_category(db_session, "Tablets")
    make_product(db_session, phones, code="P1", name="Galaxy")
    make_product(db_session, tablets, code="T1", name="Tab S")

    results = product_repo.search_products(db_session, "tablet")

    assert [product.code for product in results] == ["T1"]


def test_delete_product_is_soft(db_session):
    category = make_category(db_session)
    product = make_product(db_session, category)

    product_service.delete_product(db_session, product)

    assert product_repo.get_product(db_session, product.id).active is False
    assert product_repo.list_products(db_session) == []


def test_category_in_use_cannot_be_deleted(db_session):
    category = make_category(db_session)
    make_product(db_session, category)

    with pytest.raises(ConflictError, match="used by 1 product"):
        category_service.delete_category(db_session, category)


def test_category_names_are_unique(db_session):
    make_category(db_session, "Tablets")
    with pytest.raises(ConflictError):
        make_category(db_session, "tablets")
    assert [c.name for c in category_repo.list_categories(db_session)] == ["Tablets"]
