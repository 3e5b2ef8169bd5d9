"""Unit tests for model collections."""

from __future__ import annotations

import pytest

from pyjjm.core.collection import ModelCollection, combine_models, rename_models
from pyjjm.core.exceptions import CollectionError, DuplicateModelNameError, LengthMismatchError
from pyjjm.sample_models import create_sample_model


@pytest.fixture
def models():
    return [create_sample_model(f"mod{i}", n_stock=1 + i % 2) for i in range(3)]


class TestModelCollection:
    def test_mapping(self, models) -> None:
        collection = ModelCollection([("a", models[0]), ("b", models[1])])
        assert len(collection) == 2
        assert collection["b"] is models[1]
        assert list(collection) == ["a", "b"]
        assert "c" not in collection

    def test_duplicate(self, models) -> None:
        with pytest.raises(DuplicateModelNameError):
            ModelCollection([("a", models[0]), ("a", models[1])])

    def test_empty(self) -> None:
        assert len(ModelCollection()) == 0

    def test_names_and_display_names(self, models) -> None:
        collection = ModelCollection([("a", models[0]), ("b", models[1])])
        assert collection.names == ["a", "b"]
        assert collection.display_names == ["mod0", "mod1"]

    def test_by_stock(self, models) -> None:
        collection = ModelCollection([("a", models[0]), ("b", models[1])])
        by_stock = collection.by_stock()
        assert list(by_stock) == ["a", "b"]
        assert list(by_stock["b"]) == ["Stock_1", "Stock_2"]

    def test_repr(self, models) -> None:
        assert repr(ModelCollection([("a", models[0])])) == "ModelCollection(['a'])"


class TestCombineModels:
    def test_pairs_keep_order(self, models) -> None:
        collection = combine_models(("z", models[0]), ("a", models[1]), ("m", models[2]))
        assert collection.names == ["z", "a", "m"]

    def test_flattens_collections_and_sequences(self, models) -> None:
        first = ModelCollection([("mod0", models[0])])
        collection = combine_models(first, [("mod1", models[1]), ("mod2", models[2])])
        assert collection.names == ["mod0", "mod1", "mod2"]

    def test_duplicate_name(self, models) -> None:
        with pytest.raises(DuplicateModelNameError, match="'mod0'") as exc_info:
            combine_models(("mod0", models[0]), ("mod0", models[1]))
        assert exc_info.value.name == "mod0"
        assert isinstance(exc_info.value, CollectionError)

    def test_duplicate_across_collections(self, models) -> None:
        a = ModelCollection([("x", models[0])])
        b = ModelCollection([("x", models[1])])
        with pytest.raises(DuplicateModelNameError):
            combine_models(a, b)

    def test_inputs_untouched(self, models) -> None:
        a = ModelCollection([("x", models[0])])
        combined = combine_models(a, ("y", models[1]))
        assert a.names == ["x"]
        assert combined["x"] is models[0]


class TestRenameModels:
    def test_rename(self, models) -> None:
        collection = combine_models(("h1_0.00", models[0]), ("h1_0.01", models[1]))
        renamed = rename_models(collection, ["h=0.8", "h=0.65"])
        assert renamed.names == ["h1_0.00", "h1_0.01"]
        assert renamed.display_names == ["h=0.8", "h=0.65"]
        assert renamed["h1_0.00"].name == "h=0.8"

    def test_original_untouched(self, models) -> None:
        collection = combine_models(("a", models[0]))
        rename_models(collection, ["renamed"])
        assert collection.display_names == ["mod0"]
        assert models[0].info.model == "mod0"

    def test_records_share_data(self, models) -> None:
        collection = combine_models(("a", models[0]))
        renamed = rename_models(collection, ["renamed"])
        assert renamed["a"].control is models[0].control
        assert renamed["a"].output["Stock_1"] is models[0].output["Stock_1"]

    def test_too_few_names(self, models) -> None:
        collection = combine_models(("a", models[0]), ("b", models[1]))
        with pytest.raises(LengthMismatchError) as exc_info:
            rename_models(collection, ["only"])
        assert exc_info.value.expected == 2
        assert exc_info.value.got == 1

    def test_too_many_names(self, models) -> None:
        collection = combine_models(("a", models[0]))
        with pytest.raises(LengthMismatchError):
            rename_models(collection, ["x", "y"])

    def test_single_string(self, models) -> None:
        collection = combine_models(("a", models[0]))
        assert rename_models(collection, "solo").display_names == ["solo"]
