import pytest
import requests

from conftest import FakeModelClient
from portfolio_bot.ingest import load_db
from portfolio_bot.ingest.text import chunk_text, html_to_text, normalize_text


class RecordingStore:
    def __init__(self):
        self.ensured = []
        self.inserted = []

    def ensure_collection(self, dimension, metric="dot_product"):
        self.ensured.append((dimension, metric))
        return True

    def insert_many(self, documents):
        self.inserted.extend(documents)
        return len(documents)


def test_html_to_text_drops_scripts():
    text = html_to_text("<html><script>var x=1;</script><body><h1>Prince</h1><p>Developer</p></body></html>")
    assert "var x" not in text
    assert text.split("\n") == ["Prince", "Developer"]


def test_normalize_text():
    assert normalize_text("R&amp;D  \t codes\n\n\n\nGo\x07") == "R&D codes\n\nGo"


def test_chunk_windows_overlap():
    text = "".join(chr(ord("a") + i % 26) for i in range(1200))
    chunks = chunk_text(text, 512, 100)
    assert [len(c) for c in chunks] == [512, 512, 376]
    assert chunks[0][-100:] == chunks[1][:100]


def test_chunk_rejects_overlap_not_smaller_than_size():
    with pytest.raises(ValueError):
        chunk_text("abc", 100, 100)


def test_run_embeds_and_inserts_local_sources(tmp_path):
    md = tmp_path / "about.md"
    md.write_text("Prince Pal is a developer.", encoding="utf-8")
    page = tmp_path / "projects.html"
    page.write_text("<body><p>EcoQuest</p><style>p{}</style></body>", encoding="utf-8")

    store, client = RecordingStore(), FakeModelClient(vector=[0.5] * 4)
    stats = load_db.run([str(md), str(page)], store, client, dimension=4)

    assert store.ensured == [(4, "dot_product")]
    assert stats["sources"] == 2 and stats["chunks"] == 2 and stats["inserted"] == 2
    assert store.inserted[0] == {"$vector": [0.5] * 4, "text": "Prince Pal is a developer.", "source": str(md)}
    assert store.inserted[1]["text"] == "EcoQuest"


def test_unreadable_sources_are_skipped(tmp_path, monkeypatch):
    def fake_get(url, headers, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", fake_get)
    store = RecordingStore()
    stats = load_db.run(["https://example.com/cv", str(tmp_path / "missing.md")], store, FakeModelClient())
    assert stats["failed_sources"] == 2
    assert store.inserted == []


def test_dry_run_touches_nothing(tmp_path):
    md = tmp_path / "about.md"
    md.write_text("x" * 1000, encoding="utf-8")
    stats = load_db.run([str(md)], None, None, dry_run=True)
    assert stats["chunks"] == 3
    assert stats["inserted"] == 0


def test_main_dry_run(tmp_path):
    md = tmp_path / "about.md"
    md.write_text("Prince Pal", encoding="utf-8")
    assert load_db.main(["--source", str(md), "--dry-run"]) == 0
