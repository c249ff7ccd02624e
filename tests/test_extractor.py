"""Tests for agents.extractor."""

import json
from unittest.mock import MagicMock

from agents.extractor import ArtifactExtractor, dedupe_paths, normalize_name
from agents.strategies import MarkerStrategy, make_artifact
from core.state import ArtifactType, GenerationRequest
from manager.analyzer import analyze_prompt


def _analysis(prompt):
    return analyze_prompt(GenerationRequest(prompt=prompt))


BUTTON_TEXT = """\
// component:Button:typescript:src/components/Button/Button.tsx
import React from 'react';
import { ButtonProps } from './Button.types';

export default function Button({ label, onClick }: ButtonProps) {
  if (!label) {
    return null;
  }
  return <button onClick={onClick}>{label}</button>;
}

// component:ButtonTypes:typescript:src/components/Button/Button.types.ts
export interface ButtonProps {
  label: string;
  onClick: () => void;
}
"""

ITEM_TEXT = """\
// component:Item:typescript:src/components/Item.tsx
import { ItemProps } from './Item.types';

export default function Item({ name }: ItemProps) {
  return <div>{name}</div>;
}
const LineItem = () => null;

// component:Item.types:typescript:src/components/Item.types.ts
export interface ItemProps { name: string; }
"""


def test_button_component_scenario():
    artifacts = ArtifactExtractor().extract(BUTTON_TEXT, _analysis("create a simple login button component"))
    assert [a.name for a in artifacts] == ["Button", "ButtonTypes"]
    button, types = artifacts
    assert button.type == ArtifactType.COMPONENT
    assert types.type == ArtifactType.MODEL
    assert button.dependencies == ["react"]
    assert button.metadata.line_count == 9
    assert button.metadata.complexity == 2
    assert [s.path for s in button.metadata.siblings] == [types.path]
    assert button.metadata.siblings[0].content == types.body


def test_generic_name_renamed_to_entity():
    artifacts = ArtifactExtractor().extract(ITEM_TEXT, _analysis("build a product catalog"))
    component, types = artifacts

    assert component.name == "Product"
    assert component.path == "src/components/Product.tsx"
    assert component.metadata.renamed_from == "Item"
    assert "function Product(" in component.body
    assert "ProductProps" in component.body
    assert "from './Product.types'" in component.body
    assert "LineItem" in component.body

    assert types.name == "Product.types"
    assert types.path == "src/components/Product.types.ts"
    assert "interface ProductProps" in types.body


def test_no_rename_when_entity_is_default():
    artifacts = ArtifactExtractor().extract(ITEM_TEXT, _analysis("do something"))
    assert artifacts[0].name == "Item"


def test_structured_server_payload():
    text = json.dumps({"server": "import express from 'express';\nconst app = express();\napp.listen(3000);"})
    artifacts = ArtifactExtractor().extract(text, _analysis("build a REST API for orders"))
    assert len(artifacts) == 1
    assert artifacts[0].path == "src/server.ts"
    assert artifacts[0].type == ArtifactType.SERVICE
    assert artifacts[0].dependencies == ["express"]


def test_structured_payload_skips_text_strategies():
    """Marker-like strings inside a JSON payload are file content, not markers."""
    text = json.dumps({"app": "// component:Fake:ts:src/fake.ts\nexport const app = createApp();"})
    artifacts = ArtifactExtractor().extract(text, _analysis("an api"))
    assert [a.path for a in artifacts] == ["src/app.ts"]


def test_never_empty_for_prose():
    artifacts = ArtifactExtractor().extract("just some prose", _analysis("create a button"))
    assert len(artifacts) == 1
    assert artifacts[0].name == "Button"
    assert artifacts[0].body == "just some prose"
    assert artifacts[0].path == "src/components/Button.ts"


def test_empty_text_yields_nothing():
    assert ArtifactExtractor().extract("", _analysis("create a button")) == []


def test_failing_strategy_falls_through():
    broken = MagicMock()
    broken.name = "broken"
    broken.try_extract.side_effect = ValueError("bad regex day")
    extractor = ArtifactExtractor(strategies=[broken, MarkerStrategy()])
    artifacts = extractor.extract(BUTTON_TEXT, _analysis("create a button"))
    assert len(artifacts) == 2


def test_duplicate_paths_made_unique():
    text = (
        "// component:A:ts:src/a.ts\nexport const first = 'first version';\n"
        "// component:A:ts:src/a.ts\nexport const second = 'second version';\n"
        "// component:A:ts:src/a.ts\nexport const second = 'second version';\n"
    )
    artifacts = ArtifactExtractor().extract(text, _analysis("something"))
    assert [a.path for a in artifacts] == ["src/a.ts", "src/a-2.ts"]
    assert len({a.path for a in artifacts}) == len(artifacts)


def test_dedupe_paths_skips_taken_suffix():
    artifacts = [
        make_artifact("a", "src/a.ts", "one"),
        make_artifact("a-2", "src/a-2.ts", "two"),
        make_artifact("a", "src/a.ts", "three"),
    ]
    assert [a.path for a in dedupe_paths(artifacts)] == ["src/a.ts", "src/a-2.ts", "src/a-3.ts"]


def test_from_files():
    files = [
        {"path": "backend/src/server.ts", "content": "import express from 'express';"},
        {"path": "frontend/src/App.tsx", "content": "export default function App() { return <div />; }"},
    ]
    artifacts = ArtifactExtractor().from_files(files, _analysis("a fullstack blog"))
    assert [a.name for a in artifacts] == ["server", "App"]
    assert artifacts[0].type == ArtifactType.SERVICE
    assert artifacts[0].dependencies == ["express"]


def test_normalize_name_leaves_specific_names():
    artifact = make_artifact("ItemList", "src/ItemList.tsx", "export const ItemList = 1;")
    normalize_name(artifact, "Product")
    assert artifact.name == "ItemList"
    assert artifact.metadata.renamed_from is None


def test_unusable_payload_falls_back_to_whole_text():
    text = json.dumps({"server": "   "})
    artifacts = ArtifactExtractor().extract(text, _analysis("create a button"))
    assert len(artifacts) == 1
    assert artifacts[0].name == "Button"
    assert artifacts[0].body == text


def test_sibling_rename_limited_to_references():
    text = ITEM_TEXT + (
        "\n// component:Order:typescript:src/components/Order.tsx\n"
        "import Item from './Item';\n"
        "import { ItemProps } from './Item.types';\n"
        "\n"
        "// Order Item total\n"
        "export default function Order(props: ItemProps) { return <Item {...props} />; }\n"
    )
    artifacts = ArtifactExtractor().extract(text, _analysis("build a product catalog"))
    order = next(a for a in artifacts if a.name == "Order")

    assert "from './Product'" in order.body
    assert "from './Product.types'" in order.body
    assert "props: ProductProps" in order.body
    assert "// Order Item total" in order.body
    assert "import Item from" in order.body
    assert "<Item {...props} />" in order.body
