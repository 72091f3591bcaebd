import json

import pytest
from typer.testing import CliRunner

from ccenv.cli import app
from ccenv.cli.commands import models as models_cmd
from ccenv.cli.commands import system
from ccenv.openrouter import OpenRouterModel

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch, tmp_path):
    # The root callback loads .env files from the working directory.
    monkeypatch.chdir(tmp_path)


def invoke(store, *args, **kwargs):
    return runner.invoke(app, list(args), obj=store, **kwargs)


def test_no_subcommand_shows_empty_list(store):
    result = invoke(store)
    assert result.exit_code == 0, result.output
    assert "No Profiles" in result.output


def test_create_list_show(store):
    result = invoke(store, "create", "glm", "--template", "zai", "--api-key", "sk-secret")
    assert result.exit_code == 0, result.output
    assert "created successfully" in result.output

    result = invoke(store, "list")
    assert result.exit_code == 0
    assert "glm" in result.output
    assert "glm-4.6" in result.output

    result = invoke(store, "show", "glm")
    assert result.exit_code == 0
    assert "sk-secret" not in result.output
    assert "********" in result.output


def test_create_duplicate_fails(store):
    assert invoke(store, "create", "work", "--base-url", "https://a").exit_code == 0
    result = invoke(store, "create", "work", "--base-url", "https://b")
    assert result.exit_code == 1
    assert "already exists" in result.output
    assert store.get_profile("work").base_url == "https://a"


def test_create_requires_template_or_url(store):
    result = invoke(store, "create", "work")
    assert result.exit_code == 1
    assert store.get_profiles() == {}


def test_create_keep_key_flag(store):
    assert invoke(store, "create", "work", "--base-url", "https://a", "--keep-key").exit_code == 0
    assert store.get_profile("work").clear_anthropic_key is False


def test_show_missing_profile(store):
    result = invoke(store, "show", "ghost")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_edit_clears_model(store, make_profile):
    store.save_profile(make_profile(model="m"))
    result = invoke(store, "edit", "work", "--model", "")
    assert result.exit_code == 0, result.output
    assert store.get_profile("work").model == ""


def test_use_prints_only_the_script(store, make_profile):
    store.save_profile(make_profile(model="big-model"))
    result = invoke(store, "use", "work", "--shell", "bash")
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "export ANTHROPIC_BASE_URL='https://api.example.com'",
        "unset ANTHROPIC_AUTH_TOKEN",
        "export ANTHROPIC_MODEL='big-model'",
        "unset ANTHROPIC_API_KEY",
        "export CCX_ACTIVE_PROFILE='work'",
    ]
    assert store.get_active_profile() == "work"


def test_use_fish_and_reset(store, make_profile):
    store.save_profile(make_profile())
    result = invoke(store, "use", "work", "--shell", "fish")
    assert "set -gx ANTHROPIC_BASE_URL 'https://api.example.com'" in result.output

    result = invoke(store, "reset", "--shell", "powershell")
    assert result.exit_code == 0
    assert "Remove-Item Env:ANTHROPIC_BASE_URL -ErrorAction SilentlyContinue" in result.output
    assert store.get_active_profile() is None


def test_use_detects_shell(store, make_profile, monkeypatch):
    store.save_profile(make_profile())
    monkeypatch.setenv("SHELL", "/usr/bin/fish")
    result = invoke(store, "use", "work")
    assert result.output.startswith("set -gx ")


def test_use_missing_profile(store):
    result = invoke(store, "use", "ghost", "--shell", "bash")
    assert result.exit_code == 1
    assert "export" not in result.output


def test_delete_needs_force(store, make_profile):
    store.save_profile(make_profile())
    result = invoke(store, "delete", "work")
    assert result.exit_code == 0
    assert "--force" in result.output
    assert store.profile_exists("work")

    assert invoke(store, "delete", "work", "--force").exit_code == 0
    assert not store.profile_exists("work")


def test_export_then_import(store, make_profile):
    store.save_profile(make_profile(apiKey="sk-secret", model="m"))
    result = invoke(store, "export", "work")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert "apiKey" not in data

    result = invoke(store, "import", result.output, "--name", "copy")
    assert result.exit_code == 0, result.output
    copy = store.get_profile("copy")
    assert copy.model == "m"
    assert copy.api_key is None


def test_import_from_file_and_bad_json(store, tmp_path):
    path = tmp_path / "p.json"
    path.write_text(json.dumps({"name": "filed", "baseUrl": "https://f"}), encoding="utf-8")
    assert invoke(store, "import", "--file", str(path)).exit_code == 0
    assert store.profile_exists("filed")

    result = invoke(store, "import", "{broken")
    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_env_from_file(store, make_profile, tmp_path):
    store.save_profile(make_profile())
    env_file = tmp_path / "extra.env"
    env_file.write_text("API_TIMEOUT_MS=600000\nDISABLE_TELEMETRY=1\n", encoding="utf-8")

    result = invoke(store, "env", "work", "--from-file", str(env_file))
    assert result.exit_code == 0, result.output
    assert store.get_profile("work").extra_env == {"API_TIMEOUT_MS": "600000", "DISABLE_TELEMETRY": "1"}


def test_env_rejects_bad_names(store, make_profile, tmp_path):
    store.save_profile(make_profile())
    env_file = tmp_path / "bad.env"
    env_file.write_text("BAD-NAME=1\n", encoding="utf-8")
    result = invoke(store, "env", "work", "--from-file", str(env_file))
    assert result.exit_code == 1
    assert store.get_profile("work").extra_env is None


def test_templates_lists_every_template(store):
    result = invoke(store, "templates")
    assert result.exit_code == 0
    for name in ("anthropic", "openrouter", "zai", "custom"):
        assert name in result.output


def test_current_reports_none(store):
    result = invoke(store, "current")
    assert result.exit_code == 0
    assert "(none)" in result.output


def test_run_applies_profile_to_child_env(store, make_profile, monkeypatch):
    store.save_profile(make_profile(apiKey="sk", model="m"))
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ambient")
    monkeypatch.setattr(system.shutil, "which", lambda binary: "/opt/bin/" + binary)
    seen = {}

    def fake_call(cmd, env):
        seen["cmd"] = cmd
        seen["env"] = env
        return 3

    monkeypatch.setattr(system.subprocess, "call", fake_call)
    result = invoke(store, "run", "work", "--", "--print", "hi")

    assert result.exit_code == 3
    assert seen["cmd"] == ["/opt/bin/claude", "--print", "hi"]
    assert seen["env"]["ANTHROPIC_AUTH_TOKEN"] == "sk"
    assert seen["env"]["ANTHROPIC_MODEL"] == "m"
    assert seen["env"]["CCX_ACTIVE_PROFILE"] == "work"
    assert "ANTHROPIC_API_KEY" not in seen["env"]
    assert store.get_active_profile() == "work"


def test_run_missing_binary(store, make_profile, monkeypatch):
    store.save_profile(make_profile())
    monkeypatch.setenv("CCX_CLAUDE_BIN", "definitely-not-installed-ccx")
    monkeypatch.setattr(system.shutil, "which", lambda binary: None)
    result = invoke(store, "run", "work")
    assert result.exit_code == 127


def test_official_strips_profile_vars(store, monkeypatch):
    store.set_active_profile("work")
    monkeypatch.setenv("ANTHROPIC_BASE_URL", "https://stale")
    monkeypatch.setenv("CCX_ACTIVE_PROFILE", "work")
    monkeypatch.setattr(system.shutil, "which", lambda binary: "/opt/bin/" + binary)
    seen = {}
    monkeypatch.setattr(system.subprocess, "call", lambda cmd, env: seen.update(env=env) or 0)

    result = invoke(store, "official")
    assert result.exit_code == 0
    assert "ANTHROPIC_BASE_URL" not in seen["env"]
    assert "CCX_ACTIVE_PROFILE" not in seen["env"]
    assert store.get_active_profile() is None


def test_models_search(store, monkeypatch):
    listing = [
        OpenRouterModel(id="z-ai/glm-4.6", name="GLM 4.6", context_length=200000, prompt_price=0.6),
        OpenRouterModel(id="anthropic/claude-sonnet-4", name="Claude Sonnet 4", context_length=1000000),
    ]
    monkeypatch.setattr(models_cmd, "fetch_models", lambda: listing)
    result = invoke(store, "models", "glm")
    assert result.exit_code == 0, result.output
    assert "z-ai/glm-4.6" in result.output
    assert "claude-sonnet-4" not in result.output

    result = invoke(store, "model", "anthropic/claude-sonnet-4")
    assert result.exit_code == 0
    assert "1.0M" in result.output


def test_models_fetch_failure(store, monkeypatch):
    monkeypatch.setattr(models_cmd, "fetch_models", lambda: [])
    assert invoke(store, "models").exit_code == 1


def test_quick_with_piped_input(store):
    result = invoke(store, "quick", "zai", input="myglm\nsk-z\n")
    assert result.exit_code == 0, result.output
    profile = store.get_profile("myglm")
    assert profile.provider == "zai"
    assert profile.api_key == "sk-z"
    assert profile.model == "glm-4.6"


def test_quick_unknown_template(store):
    result = invoke(store, "quick", "nope")
    assert result.exit_code == 1
    assert "Available templates" in result.output


def test_setup_wizard_with_piped_input(store):
    # name, provider #3 (zai), default URL, default model, key, description, clear key
    answers = "\n".join(["glm", "3", "y", "y", "sk-z", "", ""]) + "\n"
    result = invoke(store, "setup", input=answers)
    assert result.exit_code == 0, result.output
    profile = store.get_profile("glm")
    assert profile.base_url == "https://api.z.ai/api/anthropic"
    assert profile.model == "glm-4.6"
    assert profile.api_key == "sk-z"
    assert profile.clear_anthropic_key is True


def test_setup_wizard_reprompts_taken_name(store, make_profile):
    store.save_profile(make_profile())
    answers = "\n".join(["work", "fresh", "8", "http://proxy:4000", "", "n", "", "n"]) + "\n"
    result = invoke(store, "setup", input=answers)
    assert result.exit_code == 0, result.output
    assert "already exists" in result.output
    profile = store.get_profile("fresh")
    assert profile.base_url == "http://proxy:4000"
    assert profile.model is None
    assert profile.clear_anthropic_key is False


def test_env_rejects_names_starting_with_digit(store, make_profile, tmp_path):
    store.save_profile(make_profile())
    env_file = tmp_path / "digit.env"
    env_file.write_text("1ST=1\n", encoding="utf-8")
    result = invoke(store, "env", "work", "--from-file", str(env_file))
    assert result.exit_code == 1
    assert store.get_profile("work").extra_env is None


def test_quick_custom_asks_for_base_url(store):
    result = invoke(store, "quick", "custom", input="mine\nhttp://proxy:4000\n")
    assert result.exit_code == 0, result.output
    profile = store.get_profile("mine")
    assert profile.base_url == "http://proxy:4000"
    assert profile.provider == "custom"
