import json

import main


def test_main_runs_a_few_frames(tmp_path, monkeypatch, restore_root_logger, three_row_text):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    data_path = tmp_path / "points.txt"
    data_path.write_text(three_row_text)
    log_file = tmp_path / "renderer.log"
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({
        "logging": {"level": "INFO", "log_file": str(log_file)},
        "dataset": {"path": str(data_path), "seed": 4},
        "appearance": {"particle_size": 0.2},
        "visualization": {"window_width": 160, "window_height": 120},
        "run_control": {"max_frames": 3, "log_throttle_frames": 1},
    }))

    main.main(str(config_path))

    for handler in restore_root_logger.handlers:
        handler.flush()
    log = log_file.read_text()
    assert "Generating 3 particles" in log
    assert "Reached max_frames (3)" in log


def test_main_reports_missing_config(tmp_path, capsys):
    main.main(str(tmp_path / "missing.json"))
    assert "FATAL" in capsys.readouterr().out


def test_main_reports_config_without_dataset_section(tmp_path, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"visualization": {}}))

    main.main(str(config_path))
    assert "'dataset' section is missing" in capsys.readouterr().out
