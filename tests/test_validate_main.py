import pytest

from insta_flow import __main__ as flow_main


def test_validate_accepts_defaults(tmp_path):
    flow_main.main([str(tmp_path), "--validate"])


def test_validate_rejects_long_seconds(tmp_path, capsys):
    with pytest.raises(SystemExit):
        flow_main.main([str(tmp_path), "--validate", "--seconds", "12"])
    err = capsys.readouterr().err
    assert "--seconds" in err


def test_validate_rejects_odd_reel_size(tmp_path, capsys):
    with pytest.raises(SystemExit):
        flow_main.main([str(tmp_path), "--validate", "--reel-size", "1081x1920"])
    assert "--reel-size" in capsys.readouterr().err


def test_validate_rejects_bad_color_and_step(tmp_path, capsys):
    with pytest.raises(SystemExit):
        flow_main.main(
            [str(tmp_path), "--validate", "--background", "#zzz", "--steps", "square,gif"]
        )
    err = capsys.readouterr().err
    assert "--background" in err
    assert "gif" in err


def test_validate_rejects_bad_tempo(tmp_path, capsys):
    with pytest.raises(SystemExit):
        flow_main.main([str(tmp_path), "--validate", "--bpm", "0", "--beats-per-image", "0"])
    err = capsys.readouterr().err
    assert "--bpm" in err
    assert "--beats-per-image" in err
