from __future__ import annotations

from repoverse.config import runtime_config
from scripts import generate_scenes
from repoverse.scene_core import Entity, Viewer
from repoverse.sources.github import SourceError


def _fake_loader(calls: list):
    async def load(username, token=None, limit=10, values=None):
        calls.append((username, limit))
        return (
            Viewer(display_name=username),
            [Entity(name="alpha", link_url="https://github.com/octo/alpha", popularity_score=20, orbit_speed=4)],
        )

    return load


def test_cli_writes_both_scenes_by_default(tmp_path, monkeypatch) -> None:
    calls: list = []
    monkeypatch.setattr(generate_scenes, "load_scene_inputs", _fake_loader(calls))
    code = generate_scenes.main(["octo", "--out-dir", str(tmp_path), "--limit", "4", "--seed", "3"])
    assert code == 0
    assert calls == [("octo", 4)]
    orbital = (tmp_path / "universe-3d.svg").read_text(encoding="utf-8")
    city = (tmp_path / "cityscape.svg").read_text(encoding="utf-8")
    assert "RepoVerse 3D" in orbital
    assert "OCTO CITY" in city


def test_cli_falls_back_to_configured_user(tmp_path, monkeypatch) -> None:
    calls: list = []
    monkeypatch.setenv("REPOVERSE_GITHUB_USERNAME", "env-octo")
    monkeypatch.setattr(generate_scenes, "load_scene_inputs", _fake_loader(calls))
    code = generate_scenes.main(["--out-dir", str(tmp_path), "--style", "cityscape"])
    assert code == 0
    assert calls[0][0] == "env-octo"
    assert (tmp_path / "cityscape.svg").exists()
    assert not (tmp_path / "universe-3d.svg").exists()


def test_cli_exits_non_zero_on_source_failure(tmp_path, monkeypatch) -> None:
    async def failing(username, token=None, limit=10, values=None):
        raise SourceError(source="github", message="rate limited", status_code=403)

    monkeypatch.setattr(generate_scenes, "load_scene_inputs", failing)
    code = generate_scenes.main(["octo", "--out-dir", str(tmp_path)])
    assert code == 1
    assert list(tmp_path.iterdir()) == []


def test_cli_defaults_come_from_env_file(tmp_path, monkeypatch) -> None:
    calls: list = []
    out_dir = tmp_path / "scenes"
    env_file = tmp_path / ".env"
    env_file.write_text(f"REPOVERSE_REPO_LIMIT=3\nREPOVERSE_OUTPUT_DIR={out_dir}\n", encoding="utf-8")
    monkeypatch.delenv("REPOVERSE_REPO_LIMIT", raising=False)
    monkeypatch.delenv("REPOVERSE_OUTPUT_DIR", raising=False)
    monkeypatch.setattr(runtime_config, "ENV_PATH", env_file)
    monkeypatch.setattr(generate_scenes, "load_scene_inputs", _fake_loader(calls))
    code = generate_scenes.main(["octo", "--style", "orbital"])
    assert code == 0
    assert calls == [("octo", 3)]
    assert (out_dir / "universe-3d.svg").exists()


def test_cli_flags_override_env_defaults(tmp_path, monkeypatch) -> None:
    calls: list = []
    monkeypatch.setenv("REPOVERSE_REPO_LIMIT", "3")
    monkeypatch.setenv("REPOVERSE_OUTPUT_DIR", str(tmp_path / "ignored"))
    monkeypatch.setattr(generate_scenes, "load_scene_inputs", _fake_loader(calls))
    code = generate_scenes.main(["octo", "--limit", "6", "--out-dir", str(tmp_path / "chosen"), "--style", "cityscape"])
    assert code == 0
    assert calls == [("octo", 6)]
    assert (tmp_path / "chosen" / "cityscape.svg").exists()
    assert not (tmp_path / "ignored").exists()


def test_cli_passes_env_file_settings_to_the_source(tmp_path, monkeypatch) -> None:
    seen: dict = {}
    env_file = tmp_path / ".env"
    env_file.write_text("REPOVERSE_GITHUB_API_URL=https://ghe.example.com/api/v3\n", encoding="utf-8")
    monkeypatch.delenv("REPOVERSE_GITHUB_API_URL", raising=False)
    monkeypatch.setattr(runtime_config, "ENV_PATH", env_file)

    async def load(username, token=None, limit=10, values=None):
        seen["values"] = values
        return Viewer(display_name=username), []

    monkeypatch.setattr(generate_scenes, "load_scene_inputs", load)
    code = generate_scenes.main(["octo", "--out-dir", str(tmp_path), "--style", "cityscape"])
    assert code == 0
    assert seen["values"]["REPOVERSE_GITHUB_API_URL"] == "https://ghe.example.com/api/v3"
