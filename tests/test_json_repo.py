import json

import pytest

from tradedesk.models.client import Client
from tradedesk.storage.errors import DuplicateRecord, RecordNotFound, StorageError
from tradedesk.storage.json_repo import JsonRepository


@pytest.fixture
def repo(tmp_path):
    return JsonRepository(tmp_path / "things.json", entity_name="thing", backup_keep=2)


class TestCrud:

    def test_creates_empty_file(self, repo):
        assert json.loads(repo.filepath.read_text(encoding="utf-8")) == []

    def test_add_and_get(self, repo):
        repo.add({"id": "a", "name": "A"})
        assert repo.get_by_id("a") == {"id": "a", "name": "A"}

    def test_add_generates_id(self, repo):
        rec = repo.add({"name": "no id"})
        assert rec["id"]
        assert repo.get_by_id(rec["id"])["name"] == "no id"

    def test_add_pydantic_model(self, repo):
        c = Client(name="Bob")
        repo.add(c)
        stored = repo.get_by_id(c.id)
        assert stored["name"] == "Bob"
        # datetimes stored as ISO strings
        assert isinstance(stored["created_at"], str)

    def test_duplicate(self, repo):
        repo.add({"id": "a"})
        with pytest.raises(DuplicateRecord):
            repo.add({"id": "a"})

    def test_update_merges(self, repo):
        repo.add({"id": "a", "name": "A", "x": 1})
        merged = repo.update({"id": "a", "name": "B"})
        assert merged == {"id": "a", "name": "B", "x": 1}

    def test_update_missing(self, repo):
        with pytest.raises(RecordNotFound):
            repo.update({"id": "nope"})
        assert issubclass(RecordNotFound, StorageError)

    def test_upsert(self, repo):
        repo.upsert({"id": "a", "v": 1})
        repo.upsert({"id": "a", "v": 2})
        assert repo.list_all() == [{"id": "a", "v": 2}]

    def test_delete(self, repo):
        repo.add({"id": "a"})
        assert repo.delete("a") is True
        assert repo.delete("a") is False
        assert repo.list_all() == []

    def test_find(self, repo):
        repo.add({"id": "a", "kind": "x"})
        repo.add({"id": "b", "kind": "y"})
        repo.add({"id": "c", "kind": "x"})
        assert [r["id"] for r in repo.find(lambda r: r["kind"] == "x")] == ["a", "c"]
        assert repo.find_one(lambda r: r["kind"] == "y")["id"] == "b"
        assert repo.find_one(lambda r: r["kind"] == "z") is None


class TestFileHandling:

    def test_backups_rotate(self, repo):
        for i in range(5):
            repo.upsert({"id": "a", "v": i})
        assert len(repo._backups()) == 2

    def test_unchanged_content_is_not_rewritten(self, repo):
        repo.add({"id": "a"})
        before = repo._backups()
        repo.update({"id": "a"})
        assert repo._backups() == before

    def test_no_backups_when_disabled(self, tmp_path):
        r = JsonRepository(tmp_path / "x.json", backup_enabled=False)
        r.add({"id": "a"})
        r.update({"id": "a", "v": 1})
        assert r._backups() == []

    def test_corrupt_file_reads_empty_and_is_kept_aside(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        r = JsonRepository(path)
        assert r.list_all() == []
        assert (tmp_path / "broken.corrupt.json").exists()

    def test_non_list_payload_reads_empty(self, tmp_path):
        path = tmp_path / "obj.json"
        path.write_text('{"id": "a"}', encoding="utf-8")
        assert JsonRepository(path).list_all() == []
