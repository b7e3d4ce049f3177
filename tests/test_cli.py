"""Tests for the command-line interface."""

import json
import os

import pytest
import yaml

from primextract.cli import main
from primextract.models import GeometricPrimitives


@pytest.fixture
def raw_line_file(temp_dir, line_image):
    """Write the line image as a raw single-channel buffer."""
    path = os.path.join(temp_dir, "line.raw")
    with open(path, "wb") as f:
        f.write(line_image.tobytes())
    return path


class TestCli:
    """Tests for the detect and init-config commands."""
    
    def test_detect_prints_primitives(self, raw_line_file, capsys, disable_tracer):
        code = main([
            "detect", "--input", raw_line_file,
            "--width", "200", "--height", "200", "--channels", "1",
        ])
        
        assert code == 0
        primitives = GeometricPrimitives.model_validate_json(capsys.readouterr().out)
        assert len(primitives.lines) > 0
    
    def test_detect_with_config(self, raw_line_file, temp_dir, capsys, disable_tracer):
        """Test that a config file changes detection."""
        config_path = os.path.join(temp_dir, "strict.yaml")
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump({"line": {"min_line_length": 150}}, f)
        
        code = main([
            "detect", "-i", raw_line_file, "--width", "200", "--height", "200",
            "-c", config_path,
        ])
        
        assert code == 0
        assert json.loads(capsys.readouterr().out)["lines"] == []
    
    def test_detect_invalid_format(self, raw_line_file, capsys, disable_tracer):
        code = main([
            "detect", "-i", raw_line_file, "--width", "200", "--height", "200",
            "--channels", "2",
        ])
        
        assert code == 1
        assert "INVALID_FORMAT" in capsys.readouterr().err
    
    def test_detect_trace(self, raw_line_file, capsys, disable_tracer):
        code = main([
            "detect", "-i", raw_line_file, "--width", "200", "--height", "200",
            "--trace",
        ])
        
        assert code == 0
        assert "cli:cli_detect" in capsys.readouterr().err
    
    def test_init_config(self, temp_dir, capsys):
        from primextract.config import DetectorConfig, load_config
        
        path = os.path.join(temp_dir, "defaults.yaml")
        
        assert main(["init-config", "--out", path]) == 0
        assert load_config(path) == DetectorConfig()
    
    def test_no_command(self, capsys):
        assert main([]) == 0
        assert "detect" in capsys.readouterr().out
    
    @pytest.mark.parametrize("content", ["- a\n- b\n", "line: [1, 2\n", "just text\n"])
    def test_detect_bad_config_file(self, raw_line_file, temp_dir, content, capsys, disable_tracer):
        """Test that an unusable config file is reported and exits with 1."""
        config_path = os.path.join(temp_dir, "bad.yaml")
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(content)
        
        code = main([
            "detect", "-i", raw_line_file, "--width", "200", "--height", "200",
            "-c", config_path,
        ])
        
        assert code == 1
        captured = capsys.readouterr()
        assert "CONFIG_ERROR" in captured.err
        assert captured.out == ""
