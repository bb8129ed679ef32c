from pathlib import Path

import pytest

from shopmaster.io import read_products_csv


def write_csv(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "products.csv"
    path.write_text(content, encoding="utf-8")
    return path


def test_read_products_csv_basic(tmp_path):
    path = write_csv(
        tmp_path,
        "ID,Name,Price,Cost,Stock,MinStock,Category\n"
        "001,Rice 5kg,18.5,12,40,10,Grocery\n"
        "002,Tea,6,3.5,2.5,1,\n",
    )

    products = read_products_csv(path)

    assert [p.id for p in products] == ["001", "002"]
    rice, tea = products
    assert rice.name == "Rice 5kg"
    assert rice.price == pytest.approx(18.5)
    assert rice.stock == 40
    assert isinstance(rice.stock, int)
    assert rice.min_stock == 10
    assert rice.category == "Grocery"
    assert rice.last_updated is not None
    assert tea.stock == pytest.approx(2.5)
    assert tea.category is None
    assert tea.sku is None


def test_missing_columns_raise(tmp_path):
    path = write_csv(tmp_path, "id,name,price\np1,Widget,10\n")

    with pytest.raises(ValueError, match="Missing column"):
        read_products_csv(path)


def test_non_numeric_value_raises(tmp_path):
    path = write_csv(
        tmp_path, "id,name,price,cost,stock,min_stock\np1,Widget,ten,5,1,0\n"
    )

    with pytest.raises(ValueError, match="Invalid numeric"):
        read_products_csv(path)


def test_negative_stock_raises(tmp_path):
    path = write_csv(
        tmp_path, "id,name,price,cost,stock,min_stock\np1,Widget,10,5,-1,0\n"
    )

    with pytest.raises(ValueError, match="Negative"):
        read_products_csv(path)


def test_empty_id_raises(tmp_path):
    path = write_csv(
        tmp_path, "id,name,price,cost,stock,min_stock\n,Widget,10,5,1,0\n"
    )

    with pytest.raises(ValueError, match="Empty values in 'id'"):
        read_products_csv(path)


def test_blank_id_raises(tmp_path):
    path = write_csv(
        tmp_path, "id,name,price,cost,stock,min_stock\n   ,Widget,10,5,1,0\n"
    )

    with pytest.raises(ValueError, match="Empty values in 'id'"):
        read_products_csv(path)


def test_empty_name_raises(tmp_path):
    path = write_csv(
        tmp_path, "id,name,price,cost,stock,min_stock\np1,,10,5,1,0\n"
    )

    with pytest.raises(ValueError, match="Empty values in 'name'"):
        read_products_csv(path)


def test_empty_numeric_cell_raises(tmp_path):
    path = write_csv(
        tmp_path, "id,name,price,cost,stock,min_stock\np1,Widget,,5,1,0\n"
    )

    with pytest.raises(ValueError, match="Invalid numeric"):
        read_products_csv(path)


def test_na_like_identifiers_are_kept_as_text(tmp_path):
    path = write_csv(
        tmp_path, "id,name,price,cost,stock,min_stock\nNA,Sodium lamp,10,5,1,0\n"
    )

    (product,) = read_products_csv(path)

    assert product.id == "NA"
    assert isinstance(product.id, str)
