"""Tests for the exemplar store."""

import json

import pytest

from src.design_engine.errors import ExemplarNotFoundError
from src.design_engine.exemplar_store import ExemplarStore
from src.schemas.design_schema import ExtractedDesign


class TestExemplarStore:
    def test_add_and_get(self, make_exemplar):
        store = ExemplarStore()
        e = store.add(make_exemplar(["Blue", "blue", " Modern "]))
        assert store.get(e.id).keywords == ["blue", "modern"]
        assert len(store) == 1

    def test_get_missing_raises(self):
        with pytest.raises(ExemplarNotFoundError):
            ExemplarStore().get("nope")

    def test_duplicate_id_rejected(self, make_exemplar):
        store = ExemplarStore()
        e = store.add(make_exemplar(["a"]))
        with pytest.raises(ValueError):
            store.add(e)

    def test_retrieval_order(self, make_exemplar):
        store = ExemplarStore()
        unset = store.add(make_exemplar(["a"], quality=None, usage=99))
        low = store.add(make_exemplar(["a"], quality=20))
        high_used = store.add(make_exemplar(["a"], quality=80, usage=5))
        high = store.add(make_exemplar(["a"], quality=80, usage=1))
        ids = [e.id for e in store.retrieve_candidates()]
        assert ids == [high_used.id, high.id, low.id, unset.id]

    def test_user_scope_is_soft_preference(self, make_exemplar):
        store = ExemplarStore()
        other = store.add(make_exemplar(["a"], quality=90, uploaded_by="bob"))
        mine = store.add(make_exemplar(["a"], quality=10, uploaded_by="amy"))
        ids = [e.id for e in store.retrieve_candidates(user_id="amy")]
        assert ids == [mine.id, other.id]

    def test_set_scope_case_insensitive(self, make_exemplar):
        store = ExemplarStore()
        e = store.add(make_exemplar(["a"], category="User-Set:Brand"))
        store.add(make_exemplar(["a"], category="user-set:brand-2"))
        assert [x.id for x in store.retrieve_candidates(set_id="brand")] == [e.id]

    def test_cap(self, make_exemplar):
        store = ExemplarStore()
        for q in range(5):
            store.add(make_exemplar(["a"], quality=q))
        assert len(store.retrieve_candidates(cap=3)) == 3

    def test_find_by_category_prefix_newest_first(self, make_exemplar):
        store = ExemplarStore()
        old = store.add(make_exemplar(category="user-set:a", minutes=1))
        new = store.add(make_exemplar(category="USER-SET:b", minutes=5))
        store.add(make_exemplar(category="user-uploaded", minutes=9))
        assert [e.id for e in store.find_by_category_prefix("user-set:")] == [new.id, old.id]

    def test_record_extraction_defaults(self):
        store = ExemplarStore()
        design = ExtractedDesign(style_keywords=["Bold", "clean"], quality_score=77)
        e = store.record_extraction(design)
        assert e.category == "user-uploaded"
        assert e.keywords == ["bold", "clean"]
        assert e.quality_score == 77

    def test_record_extraction_into_set(self):
        store = ExemplarStore()
        e = store.record_extraction(ExtractedDesign(), keywords=["pitch"], set_id="q3", category="ignored")
        assert e.category == "user-set:q3"
        assert e.set_id == "q3"
        assert e.keywords == ["pitch"]


class TestPersistence:
    def test_round_trip_file(self, tmp_path, make_exemplar):
        path = tmp_path / "store" / "exemplars.json"
        store = ExemplarStore(path)
        e = store.add(make_exemplar(["blue"], quality=60, category="user-set:x"))
        store.increment_usage(e.id)

        reloaded = ExemplarStore(path)
        assert len(reloaded) == 1
        loaded = reloaded.get(e.id)
        assert loaded.usage_count == 1
        assert loaded.extracted_spec == e.extracted_spec
        assert loaded.created_at == e.created_at

    def test_malformed_records_skipped(self, tmp_path, make_exemplar):
        path = tmp_path / "exemplars.json"
        good = make_exemplar(["ok"]).model_dump(mode="json")
        path.write_text(json.dumps({"exemplars": [good, {"quality_score": 500}]}), encoding="utf-8")
        store = ExemplarStore(path)
        assert [e.id for e in store] == [good["id"]]

    def test_no_temp_files_left(self, tmp_path, make_exemplar):
        store = ExemplarStore(tmp_path / "exemplars.json")
        store.add(make_exemplar(["a"]))
        store.add(make_exemplar(["b"]))
        assert [p.name for p in tmp_path.iterdir()] == ["exemplars.json"]
