import json

import pytest

import cli_app
from freshbasket.errors import CatalogUnavailable
from freshbasket.service import CatalogService


@pytest.fixture
def package_file(tmp_path, package_doc):
    path = tmp_path / "package.json"
    path.write_text(json.dumps(package_doc), encoding="utf-8")
    return str(path)


def test_quote_from_package_file(package_file, capsys):
    code = cli_app.main(["--package-file", package_file, "--action", "remove:p3"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Adjustment:       -10.00" in out
    assert "Total to pay:     40.00" in out


def test_json_output_and_skipped_actions(package_file, capsys):
    code = cli_app.main([
        "--package-file", package_file,
        "--action", "swap:p1:s1",
        "--action", "add:s3",
        "--json",
    ])
    out = capsys.readouterr().out
    assert code == 0
    assert "Skipped (no effect): add:s3" in out
    view = json.loads(out[out.index("{"):])
    assert [line["productId"] for line in view["basket"]] == ["p2", "p3", "s1"]
    assert [o["productId"] for o in view["swapPool"]] == ["s2", "s3"]
    assert view["quote"]["finalPrice"] == "40.00"


def test_empty_basket_exits_non_zero(package_file, capsys):
    code = cli_app.main([
        "--package-file", package_file,
        "--action", "remove:p1", "--action", "remove:p2", "--action", "qty:p3:-1",
    ])
    assert code == 1
    assert "basket is empty" in capsys.readouterr().out


def test_invalid_action(package_file, capsys):
    assert cli_app.main(["--package-file", package_file, "--action", "qty:p1:lots"]) == 2
    assert cli_app.main(["--package-file", package_file, "--action", "juggle"]) == 2


def test_export_basket(package_file, tmp_path, capsys):
    out_path = tmp_path / "basket.xlsx"
    assert cli_app.main(["--package-file", package_file, "--out", str(out_path)]) == 0
    assert out_path.exists()


def test_catalog_unavailable(monkeypatch, capsys):
    def fail(self, package_id):
        raise CatalogUnavailable("down", package_id=package_id)

    monkeypatch.setattr(CatalogService, "fetch_package", fail)
    code = cli_app.main(["--package-id", "pkg1", "--api-url", "http://shop.test"])
    assert code == 1
    assert "Failed to load package details" in capsys.readouterr().out


def test_import_products(tmp_path, capsys):
    sheet = tmp_path / "products.csv"
    sheet.write_text("id,name,price\nx1,Okra,2.5\n", encoding="utf-8")
    out_path = tmp_path / "clean.csv"

    assert cli_app.main(["--import-products", str(sheet), "--out", str(out_path)]) == 0
    assert "Parsed 1 products." in capsys.readouterr().out
    assert out_path.read_text(encoding="utf-8").splitlines()[1].startswith("x1,Okra,2.50")
