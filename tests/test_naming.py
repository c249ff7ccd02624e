"""Tests for utils.naming."""

import os

import pytest

from utils.naming import (
    detect_entity,
    extract_project_name,
    find_entities,
    get_output_dir,
    has_keyword,
    kebab,
    rename_identifier,
    rename_references,
    slugify,
)


def test_entity_from_keyword_table():
    assert detect_entity("create a simple login button component") == "Button"


def test_entity_table_order_wins():
    # 'card' comes before 'product' in the table
    assert detect_entity("show product cards") == "Card"


def test_entity_domain_noun():
    assert detect_entity("build a product catalog") == "Product"


def test_entity_from_capitalized_word():
    assert detect_entity("Build a Kanban board") == "Kanban"


def test_entity_default():
    assert detect_entity("do something") == "Component"


def test_find_entities_plural_and_order():
    assert find_entities("tables with buttons") == ["Button", "Table"]


def test_has_keyword_word_boundaries():
    assert has_keyword("build a REST API", "api")
    assert not has_keyword("rapid prototyping", "api")
    assert has_keyword("a landing   page", "landing page")


def test_rename_whole_identifier_and_suffix():
    code = "const ItemProps = {}; function Item() {} const LineItem = 1; ItemList;"
    result = rename_identifier(code, "Item", "Product")
    assert result == "const ProductProps = {}; function Product() {} const LineItem = 1; ItemList;"


def test_rename_in_path():
    assert rename_identifier("src/components/Item.tsx", "Item", "Product") == "src/components/Product.tsx"
    assert rename_identifier("src/Item.types.ts", "Item", "Product") == "src/Product.types.ts"


def test_rename_is_noop_for_same_name():
    assert rename_identifier("Item", "Item", "Item") == "Item"


def test_rename_references_only():
    code = (
        "import Item from './Item';\n"
        "import { ItemProps } from '../shared/Item.types';\n"
        "// Item total for the Order\n"
        "const row: ItemProps = load('Item');\n"
    )
    assert rename_references(code, "Item", "Product") == (
        "import Item from './Product';\n"
        "import { ProductProps } from '../shared/Product.types';\n"
        "// Item total for the Order\n"
        "const row: ProductProps = load('Item');\n"
    )


def test_slugify():
    assert slugify("Hello, World!") == "hello_world"
    assert slugify("single-component") == "single_component"


def test_kebab():
    assert kebab("ProductCard") == "product-card"
    assert kebab("") == "project"


def test_extract_project_name():
    assert extract_project_name("create a login button") == "login_button"
    assert extract_project_name("build a") == "project"


def test_output_dir_dedup(tmp_path):
    first = get_output_dir("single-component", "create a login button", base_dir=str(tmp_path))
    assert first == os.path.join(str(tmp_path), "single_component", "login_button")
    os.makedirs(first)
    second = get_output_dir("single-component", "create a login button", base_dir=str(tmp_path))
    assert second == first + "_2"

