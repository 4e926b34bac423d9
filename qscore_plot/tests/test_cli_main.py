#!/usr/bin/env python3
"""Tests for the qscore_plot.cli.main entry point."""

import json
import os
import shutil
import tempfile
import unittest
from io import StringIO
from unittest.mock import patch

from qscore_plot.cli.main import (
    EXIT_BAD_BINS,
    EXIT_INVALID_READ,
    EXIT_OK,
    build_parser,
    main,
    resolve_config,
)
from qscore_plot.core.config_manager import PlotConfig

METRICS_DOCUMENT = {
    "run_info": {
        "flowcell": {"barcode": "FC1", "surface_count": 2},
        "reads": [{"number": 1, "num_cycles": 2}, {"number": 2, "num_cycles": 2}],
    },
    "q_metrics": {
        "records": [
            {"lane": 1, "tile": 1101, "cycle": 1, "qscore_hist": [0, 4000000, 2000000]},
            {"lane": 1, "tile": 2101, "cycle": 3, "qscore_hist": [1000000, 0, 0]},
        ]
    },
}


class TestCliMain(unittest.TestCase):
    """Exercise the CLI end to end with temporary files."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.metrics_path = os.path.join(self.temp_dir, "metrics.json")
        self.output_path = os.path.join(self.temp_dir, "plot.json")
        with open(self.metrics_path, "w") as f:
            json.dump(METRICS_DOCUMENT, f)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _read_output(self):
        with open(self.output_path) as f:
            return json.load(f)

    def test_writes_plot_json(self):
        """Test the plot is written to the output file."""
        code = main(["--metrics", self.metrics_path, "--output", self.output_path])
        self.assertEqual(code, EXIT_OK)

        plot = self._read_output()
        self.assertEqual(plot["title"], "FC1 All Lanes")
        self.assertEqual(plot["y_axis"]["label"], "Total (million)")
        points = plot["series"][0]["points"]
        self.assertEqual([(p["x"], p["y"]) for p in points], [(1.0, 1.0), (2.0, 4.0), (3.0, 2.0)])

    def test_read_filter(self):
        """Test the --read filter."""
        code = main(
            ["--metrics", self.metrics_path, "--read", "2", "--output", self.output_path]
        )
        self.assertEqual(code, EXIT_OK)
        plot = self._read_output()
        self.assertEqual(plot["title"], "FC1 All Lanes Read 2")
        self.assertEqual(len(plot["series"][0]["points"]), 1)

    def test_stdout(self):
        """Test output goes to stdout without --output."""
        captured = StringIO()
        with patch("sys.stdout", captured):
            code = main(["--metrics", self.metrics_path, "--surface", "1"])
        self.assertEqual(code, EXIT_OK)
        plot = json.loads(captured.getvalue())
        self.assertEqual(plot["title"], "FC1 All Lanes Surface 1")

    def test_config_file(self):
        """Test running from a config file."""
        config_path = os.path.join(self.temp_dir, "config.json")
        with open(config_path, "w") as f:
            json.dump(
                {
                    "filter": {"lane": 1, "cycle": 1},
                    "input": {"metrics_file": self.metrics_path},
                    "output": {"output_file": self.output_path},
                },
                f,
            )
        self.assertEqual(main([config_path]), EXIT_OK)
        plot = self._read_output()
        self.assertEqual(plot["title"], "FC1 Lane 1")
        self.assertEqual(len(plot["series"][0]["points"]), 2)

    def test_invalid_read(self):
        """Test an unknown read exits with EXIT_INVALID_READ."""
        code = main(
            ["--metrics", self.metrics_path, "--read", "7", "--output", self.output_path]
        )
        self.assertEqual(code, EXIT_INVALID_READ)
        self.assertFalse(os.path.exists(self.output_path))

    def test_bad_bins(self):
        """Test a bad bin table exits with EXIT_BAD_BINS."""
        document = dict(METRICS_DOCUMENT)
        document["q_metrics"] = dict(
            METRICS_DOCUMENT["q_metrics"], bins=[{"value": 40, "lower": 35, "upper": 45}]
        )
        with open(self.metrics_path, "w") as f:
            json.dump(document, f)
        code = main(["--metrics", self.metrics_path, "--output", self.output_path])
        self.assertEqual(code, EXIT_BAD_BINS)

    def test_empty_metrics(self):
        """Test a document without records still writes an empty plot."""
        with open(self.metrics_path, "w") as f:
            json.dump({"run_info": {"reads": [{"number": 1, "num_cycles": 2}]}}, f)
        code = main(["--metrics", self.metrics_path, "--output", self.output_path])
        self.assertEqual(code, EXIT_OK)
        plot = self._read_output()
        self.assertEqual(plot["title"], "")
        self.assertEqual(plot["series"][0]["points"], [])

    def test_mismatched_record_lengths(self):
        """Test records of different lengths are reported as a usage error."""
        document = dict(METRICS_DOCUMENT)
        document["q_metrics"] = {
            "records": [
                {"lane": 1, "tile": 1101, "cycle": 1, "qscore_hist": [0, 0, 0, 0]},
                {"lane": 1, "tile": 1102, "cycle": 1, "qscore_hist": [5000000]},
            ]
        }
        with open(self.metrics_path, "w") as f:
            json.dump(document, f)
        with patch("sys.stderr", StringIO()):
            with self.assertRaises(SystemExit):
                main(["--metrics", self.metrics_path, "--surface", "1", "--output", self.output_path])
        self.assertFalse(os.path.exists(self.output_path))

    def test_requires_input(self):
        """Test a config file or --metrics is required."""
        with patch("sys.stderr", StringIO()):
            with self.assertRaises(SystemExit):
                main([])

    def test_invalid_config(self):
        """Test an invalid filter value is a usage error."""
        with patch("sys.stderr", StringIO()):
            with self.assertRaises(SystemExit):
                main(["--metrics", self.metrics_path, "--lane", "0"])

    def test_missing_metrics_file(self):
        """Test a missing metrics file is a usage error."""
        with patch("sys.stderr", StringIO()):
            with self.assertRaises(SystemExit):
                main(["--metrics", os.path.join(self.temp_dir, "missing.json")])

    def test_example_config(self):
        """Test --example-config writes a file."""
        path = os.path.join(self.temp_dir, "example.json")
        with patch("sys.stdout", StringIO()):
            self.assertEqual(main(["--example-config", path]), EXIT_OK)
        self.assertTrue(os.path.exists(path))


class TestResolveConfig(unittest.TestCase):
    def test_overrides(self):
        """Test command-line values override the config."""
        args = build_parser().parse_args(
            ["--metrics", "m.json", "--lane", "2", "--tile-naming", "five_digit", "--debug"]
        )
        config = resolve_config(args)
        self.assertIsInstance(config, PlotConfig)
        self.assertEqual(config.input.metrics_file, "m.json")
        self.assertEqual(config.filter.lane, 2)
        self.assertIsNone(config.filter.read)
        self.assertEqual(config.filter.tile_naming, "five_digit")
        self.assertTrue(config.output.debug)


if __name__ == "__main__":
    unittest.main()
