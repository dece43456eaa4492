import numpy as np
import pytest

import run_describe
from pointsift.descriptors.sift import DescribePointSift


def write_scene(tmp_path, gradient):
    grad_path = tmp_path / "scene.npz"
    np.savez(grad_path, deriv_x=gradient.deriv_x.data,
             deriv_y=gradient.deriv_y.data)
    kps_path = tmp_path / "scene.csv"
    kps_path.write_text("# x,y,sigma,orientation\n"
                        "30,30,1.0,0.0\n"
                        "45.5,40.2,1.5,2.0\n"
                        "-400,-400,1.0,0.0\n")
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text(
        "descriptor:\n"
        "  sigma_to_pixels: 1.0\n"
        "scenes:\n"
        f"  - name: texture\n"
        f"    gradient: {grad_path}\n"
        f"    keypoints: {kps_path}\n")
    return cfg_path


def test_main_prints_summary(tmp_path, capsys, textured_gradient):
    cfg_path = write_scene(tmp_path, textured_gradient)

    run_describe.main(["--config", str(cfg_path)])

    out = capsys.readouterr().out
    assert "Scene: texture" in out
    assert "3 descriptors  (128-dim), 1 outside the image" in out
    assert "Results Summary" in out


def test_run_scene_metrics(tmp_path, textured_gradient):
    write_scene(tmp_path, textured_gradient)
    scene = {"name": "texture",
             "gradient": str(tmp_path / "scene.npz"),
             "keypoints": str(tmp_path / "scene.csv")}

    metrics = run_describe.run_scene(scene, DescribePointSift())

    assert metrics["keypoints"] == 3
    assert metrics["dim"] == 128
    assert metrics["empty"] == 1
    assert metrics["mean_norm"] == pytest.approx(2.0 / 3.0)
    assert metrics["max_element"] > 0


def test_missing_config_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        run_describe.main(["--config", str(tmp_path / "nope.yaml")])
    assert exc.value.code == 1
    assert "[ERROR] Config file not found" in capsys.readouterr().out


def test_unknown_scene_exits(tmp_path, capsys, textured_gradient):
    cfg_path = write_scene(tmp_path, textured_gradient)
    with pytest.raises(SystemExit) as exc:
        run_describe.main(["--config", str(cfg_path), "--scenes", "boat"])
    assert exc.value.code == 1


def test_invalid_descriptor_config_exits(tmp_path, capsys):
    cfg_path = tmp_path / "bad.yaml"
    cfg_path.write_text("descriptor:\n  width_grid: 0\n")
    with pytest.raises(SystemExit) as exc:
        run_describe.main(["--config", str(cfg_path)])
    assert exc.value.code == 1
    assert "Invalid configuration" in capsys.readouterr().out
