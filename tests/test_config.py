import pytest

from personal_kb_assistant.config import AppConfig, load_config


def test_defaults_when_file_missing(tmp_path):
    cfg = load_config(tmp_path / "missing.yaml")
    assert cfg == AppConfig()
    assert cfg.vectorizer.dimension == 384
    assert cfg.ranking.embedding_weight == 0.2
    assert cfg.ranking.keyword_weight == 0.3
    assert cfg.ranking.title_bonus == 2.0
    assert (cfg.ranking.title_weight, cfg.ranking.tag_weight, cfg.ranking.content_weight) == (5, 2, 0.5)
    assert cfg.synthesis.greetings == ["hi", "hello", "hey", "greetings"]


def test_nested_overrides(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "config.yaml"
    path.write_text(
        "owner_id: alice\n"
        "ranking:\n"
        "  keyword_weight: 0.5\n"
        "  chat_min_score: null\n"
        "vectorizer:\n"
        "  dimension: 128\n",
        encoding="utf-8",
    )
    cfg = load_config(path)

    assert cfg.owner_id == "alice"
    assert cfg.ranking.keyword_weight == 0.5
    assert cfg.ranking.chat_min_score is None
    assert cfg.ranking.embedding_weight == 0.2
    assert cfg.vectorizer.dimension == 128
    assert (tmp_path / "data").is_dir()
    assert cfg.notes_path == (tmp_path / "index" / "notes.json").resolve()


def test_invalid_config_exits(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("vectorizer:\n  backend: word2vec\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        load_config(path)
