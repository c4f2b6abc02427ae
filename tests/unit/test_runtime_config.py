from __future__ import annotations

from repoverse.config import runtime_config
from repoverse.scene_core.tuning import default_tuning


def test_username_resolution_order() -> None:
    assert runtime_config.resolve_username("  octo ", {"REPOVERSE_GITHUB_USERNAME": "env-user"}) == "octo"
    assert runtime_config.resolve_username(None, {"REPOVERSE_GITHUB_USERNAME": "env-user"}) == "env-user"
    assert runtime_config.resolve_username("", {"GITHUB_USERNAME": "fallback-user"}) == "fallback-user"
    assert runtime_config.resolve_username(None, {}) == "torvalds"


def test_environment_overlays_env_file(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local settings\nREPOVERSE_GITHUB_USERNAME='file-user'\nREPOVERSE_GITHUB_TOKEN=abc123\nnot a pair\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("REPOVERSE_GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("REPOVERSE_GITHUB_USERNAME", "process-user")
    values = runtime_config.merged_environment(env_file)
    assert values["REPOVERSE_GITHUB_USERNAME"] == "process-user"
    assert values["REPOVERSE_GITHUB_TOKEN"] == "abc123"
    assert runtime_config.resolve_token(values) == "abc123"
    assert runtime_config.masked_state(values)["REPOVERSE_GITHUB_TOKEN"] == "********"


def test_validate_setup_reports_errors_and_warnings() -> None:
    report = runtime_config.validate_setup(
        {
            "REPOVERSE_REPO_LIMIT": "ten",
            "REPOVERSE_SOURCE_TIMEOUT_S": "0",
            "REPOVERSE_GITHUB_API_URL": "ftp://example",
            "REPOVERSE_COLOUR": "red",
        }
    )
    assert report["ok"] is False
    assert len(report["errors"]) == 3
    assert any("REPOVERSE_COLOUR" in warning for warning in report["warnings"])
    assert any("torvalds" in warning for warning in report["warnings"])

    clean = runtime_config.validate_setup({"REPOVERSE_GITHUB_TOKEN": "t", "REPOVERSE_GITHUB_USERNAME": "octo"})
    assert clean == {"ok": True, "errors": [], "warnings": []}


def test_scene_tuning_reads_clamped_overrides(monkeypatch) -> None:
    monkeypatch.setenv("REPOVERSE_WINDOW_PROBABILITY", "3.5")
    monkeypatch.setenv("REPOVERSE_STAR_COUNT", "not-a-number")
    monkeypatch.setenv("REPOVERSE_HUD_PER_ENTITY_S", "6")
    tuning = default_tuning()
    assert tuning.window_probability == 1.0
    assert tuning.star_count == 30
    assert tuning.hud_per_entity_s == 6.0
    assert tuning.width == 800
