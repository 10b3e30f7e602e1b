import logging

from chip8py.config import DEFAULT_CONFIG, RESERVED_KEYS, Quirks, keypad_mapping, load_config


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "config.toml")
    assert cfg == DEFAULT_CONFIG
    cfg["general"]["fps"] = 1
    assert DEFAULT_CONFIG["general"]["fps"] == 60


def test_overrides_are_merged(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        '[general]\ncycles_per_frame = 20\n\n[quirks]\nload_store_inclusive = false\n\n[keyboard]\n"A" = "m"\n'
    )
    cfg = load_config(path)
    assert cfg["general"]["cycles_per_frame"] == 20
    assert cfg["general"]["fps"] == 60
    assert cfg["quirks"]["jump_v0_checked"] is True
    assert cfg["keyboard"]["A"] == "m"
    assert cfg["keyboard"]["0"] == "x"
    assert Quirks.from_config(cfg) == Quirks(load_store_inclusive=False, jump_v0_checked=True)


def test_invalid_value_falls_back(tmp_path, caplog):
    path = tmp_path / "config.toml"
    path.write_text("[general]\nscale = 0\n")
    with caplog.at_level(logging.ERROR, logger="chip8py"):
        cfg = load_config(path)
    assert cfg == DEFAULT_CONFIG
    assert "general.scale" in caplog.text


def test_bad_keyboard_entry_falls_back(tmp_path, caplog):
    path = tmp_path / "config.toml"
    path.write_text('[keyboard]\n"G" = "g"\n')
    with caplog.at_level(logging.ERROR, logger="chip8py"):
        cfg = load_config(path)
    assert "G" not in cfg["keyboard"]
    assert "not a hex digit" in caplog.text


def test_malformed_toml_falls_back(tmp_path, caplog):
    path = tmp_path / "config.toml"
    path.write_text("[general\n")
    with caplog.at_level(logging.ERROR, logger="chip8py"):
        cfg = load_config(path)
    assert cfg == DEFAULT_CONFIG
    assert "Failed to load config" in caplog.text


def test_keypad_mapping():
    mapping = keypad_mapping(DEFAULT_CONFIG)
    assert len(mapping) == 16
    assert mapping["1"] == 0x1
    assert mapping["4"] == 0xC
    assert mapping["q"] == 0x4
    assert mapping["x"] == 0x0
    assert mapping["v"] == 0xF
    assert sorted(mapping.values()) == list(range(16))


def test_section_of_wrong_type_falls_back(tmp_path, caplog):
    path = tmp_path / "config.toml"
    path.write_text("general = 5\n")
    with caplog.at_level(logging.ERROR, logger="chip8py"):
        cfg = load_config(path)
    assert cfg == DEFAULT_CONFIG
    assert "[general] must be a table" in caplog.text


def test_keyboard_array_falls_back(tmp_path, caplog):
    path = tmp_path / "config.toml"
    path.write_text("keyboard = [1, 2]\n")
    with caplog.at_level(logging.ERROR, logger="chip8py"):
        cfg = load_config(path)
    assert cfg == DEFAULT_CONFIG
    assert "[keyboard] must be a table" in caplog.text


def test_shared_host_key_falls_back(tmp_path, caplog):
    path = tmp_path / "config.toml"
    path.write_text('[keyboard]\n"1" = "Q"\n')
    with caplog.at_level(logging.ERROR, logger="chip8py"):
        cfg = load_config(path)
    assert cfg == DEFAULT_CONFIG
    assert sorted(keypad_mapping(cfg).values()) == list(range(16))
    assert "share host key" in caplog.text


def test_same_keypad_key_twice_falls_back(tmp_path, caplog):
    path = tmp_path / "config.toml"
    path.write_text('[keyboard]\n"a" = "m"\n')
    with caplog.at_level(logging.ERROR, logger="chip8py"):
        cfg = load_config(path)
    assert cfg == DEFAULT_CONFIG
    assert "name the same keypad key" in caplog.text


def test_swapped_keys_are_accepted(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[keyboard]\n"1" = "q"\n"4" = "1"\n')
    mapping = keypad_mapping(load_config(path))
    assert mapping["q"] == 0x1
    assert mapping["1"] == 0x4
    assert sorted(mapping.values()) == list(range(16))


def test_control_keys_are_reserved(tmp_path, caplog):
    path = tmp_path / "config.toml"
    path.write_text('[keyboard]\n"F" = "Escape"\n')
    with caplog.at_level(logging.ERROR, logger="chip8py"):
        cfg = load_config(path)
    assert cfg["keyboard"]["F"] == "v"
    assert "reserved for emulator controls" in caplog.text


def test_default_layout_avoids_control_keys():
    assert not set(keypad_mapping(DEFAULT_CONFIG)) & RESERVED_KEYS
