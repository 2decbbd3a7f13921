"""Tests for the JSON-file local storage and its cross-handle notifications."""

from storefront.infrastructure.persistence.json_cart_storage import JsonCartStorage


class TestJsonCartStorage:

    def test_set_then_get(self, tmp_path):
        storage = JsonCartStorage(tmp_path / "local_storage.json")
        storage.set("cart", "[]")
        assert storage.get("cart") == "[]"
        assert storage.get("other") is None

    def test_value_survives_new_handle(self, tmp_path):
        path = tmp_path / "local_storage.json"
        JsonCartStorage(path).set("cart", '[{"id": "x"}]')
        assert JsonCartStorage(path).get("cart") == '[{"id": "x"}]'

    def test_other_handles_are_notified(self, tmp_path):
        path = tmp_path / "local_storage.json"
        writer, reader = JsonCartStorage(path), JsonCartStorage(path)
        seen_by_writer, seen_by_reader = [], []
        writer.subscribe(lambda k, v: seen_by_writer.append((k, v)))
        reader.subscribe(lambda k, v: seen_by_reader.append((k, v)))

        writer.set("cart", "[]")

        assert seen_by_reader == [("cart", "[]")]
        assert seen_by_writer == []

    def test_other_files_are_not_notified(self, tmp_path):
        seen = []
        JsonCartStorage(tmp_path / "a.json").subscribe(lambda k, v: seen.append(k))
        JsonCartStorage(tmp_path / "b.json").set("cart", "[]")
        assert seen == []

    def test_unsubscribe(self, tmp_path):
        path = tmp_path / "local_storage.json"
        seen = []
        unsubscribe = JsonCartStorage(path).subscribe(lambda k, v: seen.append(k))
        unsubscribe()
        JsonCartStorage(path).set("cart", "[]")
        assert seen == []

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "local_storage.json"
        path.write_text("{oops", encoding="utf-8")
        storage = JsonCartStorage(path)

        assert storage.get("cart") is None
        storage.set("cart", "[]")
        assert storage.get("cart") == "[]"

    def test_non_string_values_are_ignored(self, tmp_path):
        path = tmp_path / "local_storage.json"
        path.write_text('{"cart": [1, 2]}', encoding="utf-8")
        assert JsonCartStorage(path).get("cart") is None
