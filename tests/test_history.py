"""Tests for the recent-generations history store."""

import json
from datetime import datetime

from core.history import HistoryStore


class TestHistoryStore:

    def setup_method(self):
        self.now = datetime(2026, 10, 19, 14, 5, 9)

    def _store(self, tmp_path, limit=5):
        return HistoryStore(str(tmp_path / "data" / "history.json"), limit=limit)

    def test_missing_file_loads_empty(self, tmp_path):
        assert self._store(tmp_path).load() == []

    def test_add_prepends_and_writes_through(self, tmp_path, sample_content):
        store = self._store(tmp_path)
        first = store.add(sample_content, "first idea", now=self.now)
        second = store.add(sample_content, "second idea", now=self.now)
        assert [i.id for i in store.items] == [second.id, first.id]

        with open(store.path, encoding="utf-8") as f:
            persisted = json.load(f)
        assert [p["postIdea"] for p in persisted] == ["second idea", "first idea"]
        assert persisted[0]["seoInsights"]["score"] == 78

    def test_keeps_only_newest_five(self, tmp_path, sample_content):
        store = self._store(tmp_path)
        for n in range(6):
            store.add(sample_content, f"idea {n}", now=self.now)
        assert len(store.items) == 5
        assert store.items[0].post_idea == "idea 5"
        assert store.items[-1].post_idea == "idea 1"

    def test_reload_round_trip(self, tmp_path, sample_content):
        store = self._store(tmp_path)
        added = store.add(sample_content, "persisted", image_preview="data:image/jpeg;base64,AAAA", now=self.now)

        reloaded = self._store(tmp_path)
        items = reloaded.load()
        assert len(items) == 1
        assert items[0].id == added.id
        assert items[0].image_preview == "data:image/jpeg;base64,AAAA"
        assert items[0].caption == sample_content.caption

    def test_display_timestamp(self, tmp_path, sample_content):
        item = self._store(tmp_path).add(sample_content, "x", now=self.now)
        assert item.timestamp == "10/19/2026, 2:05:09 PM"
        assert item.id.startswith("2026-10-19T14:05:09")

    def test_ids_unique_for_same_instant(self, tmp_path, sample_content):
        store = self._store(tmp_path)
        a = store.add(sample_content, "a", now=self.now)
        b = store.add(sample_content, "b", now=self.now)
        assert a.id != b.id

    def test_fallback_post_idea(self, tmp_path, sample_content):
        store = self._store(tmp_path)
        assert store.add(sample_content, "", image_preview="data:x", now=self.now).post_idea == "Image-based post"
        assert store.add(sample_content, "", now=self.now).post_idea == "Untitled post"

    def test_corrupt_file_resets(self, tmp_path):
        store = self._store(tmp_path)
        (tmp_path / "data").mkdir()
        with open(store.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        assert store.load() == []
        assert not (tmp_path / "data" / "history.json").exists()

    def test_wrong_shape_resets(self, tmp_path):
        store = self._store(tmp_path)
        (tmp_path / "data").mkdir()
        with open(store.path, "w", encoding="utf-8") as f:
            json.dump([{"caption": "missing everything else"}], f)
        assert store.load() == []

    def test_non_list_resets(self, tmp_path):
        store = self._store(tmp_path)
        (tmp_path / "data").mkdir()
        with open(store.path, "w", encoding="utf-8") as f:
            json.dump({"items": []}, f)
        assert store.load() == []

    def test_clear(self, tmp_path, sample_content):
        store = self._store(tmp_path)
        store.add(sample_content, "x", now=self.now)
        store.clear()
        assert store.items == []
        assert self._store(tmp_path).load() == []

    def test_items_is_a_copy(self, tmp_path, sample_content):
        store = self._store(tmp_path)
        store.add(sample_content, "x", now=self.now)
        store.items.clear()
        assert len(store.items) == 1
