import os

from ccenv.cli_components import editors
from ccenv.cli_components.editors import editor_command, env_changes
from ccenv.cli_components.env import env_to_text, load_env_files, parse_env_text


def test_env_text_survives_editor_format():
    values = {"PLAIN": "1", "SPACED": "a b", "QUOTED": 'say "hi"', "EMPTY": ""}
    text = env_to_text(values, title="Extra environment for profile work")
    assert text.startswith("# Extra environment for profile work\n")
    assert parse_env_text(text) == values


def test_parse_env_text_key_without_value():
    assert parse_env_text("# comment\nFOO\nBAR=2\n") == {"FOO": "", "BAR": "2"}


def test_env_changes():
    assert env_changes({"A": "1", "B": "2"}, {"B": "3", "C": "4"}) == {
        "added": ["C"],
        "removed": ["A"],
        "changed": ["B"],
    }


def test_load_env_files_prefers_local(tmp_path, monkeypatch):
    # register the variable with monkeypatch so the value loaded below is undone
    monkeypatch.setenv("CCX_TEST_SETTING", "")
    monkeypatch.delenv("CCX_TEST_SETTING")
    (tmp_path / ".env").write_text("CCX_TEST_SETTING=shared\n", encoding="utf-8")
    (tmp_path / ".env.local").write_text("CCX_TEST_SETTING=local\n", encoding="utf-8")

    found = load_env_files(tmp_path)
    assert [p.name for p in found] == [".env", ".env.local"]
    assert os.environ["CCX_TEST_SETTING"] == "local"


def test_load_env_files_keeps_existing(tmp_path, monkeypatch):
    monkeypatch.setenv("CCX_TEST_SETTING", "from-shell")
    (tmp_path / ".env").write_text("CCX_TEST_SETTING=file\n", encoding="utf-8")
    load_env_files(tmp_path)
    assert os.environ["CCX_TEST_SETTING"] == "from-shell"


def test_editor_command_order(monkeypatch):
    monkeypatch.setenv("EDITOR", "nano")
    monkeypatch.setenv("VISUAL", "code --wait")
    assert editor_command() == ["code", "--wait"]
    monkeypatch.setenv("CCX_EDITOR", "hx")
    assert editor_command() == ["hx"]


def test_edit_text_uses_terminal_editor(monkeypatch):
    def fake_run(path):
        path.write_text("FOO=edited\n", encoding="utf-8")
        return True

    monkeypatch.setattr(editors, "_run_editor", fake_run)
    assert editors.edit_text("FOO=1\n") == "FOO=edited\n"


def test_env_text_keeps_references_and_newlines_literal(monkeypatch):
    monkeypatch.setenv("HOME", "/home/someone")
    values = {"A": "pre${HOME}post", "B": "line one\nline two", "C": "back\\slash\r"}
    assert parse_env_text(env_to_text(values, title="t")) == values
