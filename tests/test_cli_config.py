import pytest
import yaml

from game.world.procgen import DungeonSettings, generate_dungeon, load_settings
from main import build_parser, main, render_map, settings_from_args
from utils.helpers import CONFIG_DIR, load_yaml_config


def test_main_prints_summary(capsys):
    code = main(["--seed", "42", "--width", "80", "--height", "50", "--rooms", "10"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Seed: 42" in out
    assert "Critical path: [0" in out


def test_main_show_map_and_populate(capsys):
    code = main(
        ["--seed", "3", "--width", "60", "--height", "40", "--rooms", "6", "--show-map", "--populate", "--strict"]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "@" in out


def test_main_rejects_bad_sizes():
    assert main(["--seed", "1", "--min-size", "9", "--max-size", "4"]) == 1


def test_main_missing_config(tmp_path):
    assert main(["--config", str(tmp_path / "nope.yaml")]) == 1


def test_main_broken_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("dungeon: [unclosed\n")
    assert main(["--config", str(path)]) == 1


def test_config_file_then_cli_overrides(tmp_path):
    path = tmp_path / "small.yaml"
    path.write_text(yaml.safe_dump({"dungeon": {"width": 60, "height": 40, "roomCount": 6}}))
    args = build_parser().parse_args(["--config", str(path), "--rooms", "4"])
    settings = settings_from_args(args)
    assert (settings.width, settings.height, settings.room_count) == (60, 40, 4)
    assert settings.seed is not None


def test_bundled_settings_match_defaults():
    assert load_settings() == DungeonSettings()


def test_load_yaml_config_cases(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(tmp_path / "missing.yaml", "Test")

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_yaml_config(empty, "Test") == {}

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        load_yaml_config(listing, "Test")

    bad = tmp_path / "bad.yaml"
    bad.write_text("key: [1, 2\n")
    with pytest.raises(yaml.YAMLError):
        load_yaml_config(bad, "Test")

    assert "enemies" in load_yaml_config(CONFIG_DIR / "entities.yaml", "Entities")


def test_render_map_marks_spawns():
    result = generate_dungeon({"seed": 12, "width": 60, "height": 40, "room_count": 6})
    lines = render_map(result).splitlines()
    px, py = result.rooms[0].center
    assert lines[py][px] == "@"
    assert len(lines) == 40 and all(len(line) == 60 for line in lines)
