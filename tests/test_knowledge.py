from pathlib import Path

from zivy.core.knowledge import KnowledgeStore

from conftest import KNOWLEDGE_TEXT


class TestKnowledgeStore:
    def test_loads_file(self, knowledge_file: Path):
        store = KnowledgeStore(knowledge_file, "fallback text")

        assert not store.loaded
        store.load()

        assert store.loaded
        assert store.text == KNOWLEDGE_TEXT
        assert store.length == len(KNOWLEDGE_TEXT)
        assert store.source == "file"

    def test_missing_file_uses_fallback(self, tmp_path: Path, caplog):
        store = KnowledgeStore(tmp_path / "missing.txt", "fallback text")

        store.load()

        assert store.text == "fallback text"
        assert store.source == "fallback"
        assert store.loaded
        assert "not found" in caplog.text

    def test_reload_picks_up_changes(self, knowledge_file: Path):
        store = KnowledgeStore(knowledge_file, "fallback text")
        store.load()

        knowledge_file.write_text("Updated knowledge.", encoding="utf-8")
        length = store.reload()

        assert length == len("Updated knowledge.")
        assert store.text == "Updated knowledge."

    def test_reload_after_delete_falls_back(self, knowledge_file: Path):
        store = KnowledgeStore(knowledge_file, "fallback text")
        store.load()

        knowledge_file.unlink()
        store.reload()

        assert store.source == "fallback"
        assert store.text == "fallback text"
