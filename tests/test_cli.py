"""
Tests for the command line client
"""

import os
import pytest

from doccount.client.cli import main
from doccount.client.monitoring import format_duration, format_progress_bar
from doccount.common.docno_mapping import TrecDocnoMapping


class TestCountCommand:

    def test_count_success(self, abc_collection, abc_mapping, run_dirs, capsys, output_reader):
        code = main([
            "count",
            "--collection", abc_collection,
            "--output", run_dirs['output'],
            "--docno-mapping", abc_mapping,
            "--count-output", run_dirs['count'],
            "--mapping-scheme", "tsv",
            "--workers", "1",
            "--work-dir", run_dirs['work'],
        ])

        assert code == 0
        out = capsys.readouterr().out
        assert out.strip().splitlines()[-1] == "3"
        assert "Counter DOCS: 3" in out
        assert output_reader(run_dirs['output']) == [("A", 1), ("B", 2), ("C", 3)]
        with open(run_dirs['count']) as f:
            assert f.read() == "3"

    def test_missing_mapping_option(self, abc_collection, run_dirs, capsys):
        code = main([
            "count",
            "--collection", abc_collection,
            "--output", run_dirs['output'],
            "--work-dir", run_dirs['work'],
        ])
        assert code == 1
        assert "--docno-mapping" in capsys.readouterr().err
        assert not os.path.exists(run_dirs['output'])

    def test_job_failure_exit_code(self, abc_collection, tsv_mapping_factory, run_dirs, capsys):
        mapping = tsv_mapping_factory({"A": 1})
        code = main([
            "count",
            "--collection", abc_collection,
            "--output", run_dirs['output'],
            "--docno-mapping", mapping,
            "--count-output", run_dirs['count'],
            "--mapping-scheme", "tsv",
            "--workers", "1",
            "--work-dir", run_dirs['work'],
        ])
        assert code == 1
        assert "Error:" in capsys.readouterr().err
        assert not os.path.exists(run_dirs['count'])

    def test_unwritable_count_output(self, abc_collection, abc_mapping, run_dirs, temp_dir, capsys):
        count_dir = os.path.join(temp_dir, 'count-dir')
        os.makedirs(count_dir)
        code = main([
            "count",
            "--collection", abc_collection,
            "--output", run_dirs['output'],
            "--docno-mapping", abc_mapping,
            "--count-output", count_dir,
            "--mapping-scheme", "tsv",
            "--workers", "1",
            "--work-dir", run_dirs['work'],
        ])
        assert code == 1
        assert "Error:" in capsys.readouterr().err
        assert os.path.isdir(count_dir)

    def test_unknown_scheme_rejected_by_parser(self, abc_collection, abc_mapping, run_dirs):
        with pytest.raises(SystemExit):
            main(["count", "--collection", abc_collection, "--output", run_dirs['output'],
                  "--docno-mapping", abc_mapping, "--mapping-scheme", "bogus"])

    def test_no_command(self, capsys):
        assert main([]) == 1


class TestBuildMappingCommand:

    def test_build_then_count(self, sharded_collection, temp_dir, run_dirs, capsys):
        collection, docids = sharded_collection
        mapping_path = os.path.join(temp_dir, "built.dat")

        assert main(["build-mapping", "--collection", collection, "--output", mapping_path]) == 0
        assert "Wrote 10 docids" in capsys.readouterr().out

        mapping = TrecDocnoMapping()
        mapping.load(mapping_path)
        assert [mapping.get_docno(d) for d in sorted(docids)] == list(range(1, 11))

        code = main(["count", "--collection", collection, "--output", run_dirs['output'],
                     "--docno-mapping", mapping_path, "--workers", "1",
                     "--work-dir", run_dirs['work']])
        assert code == 0

    def test_build_missing_collection(self, temp_dir, capsys):
        code = main(["build-mapping", "--collection", os.path.join(temp_dir, "none"),
                     "--output", os.path.join(temp_dir, "m.dat")])
        assert code == 1


class TestMonitoringFormatting:

    def test_format_duration(self):
        assert format_duration(5.0) == "5.0s"
        assert format_duration(125) == "2m 5.0s"
        assert format_duration(3725) == "1h 2m 5.0s"

    def test_format_progress_bar(self):
        bar = format_progress_bar(1, 4, width=8)
        assert bar == "[██░░░░░░] 25.0%"
        assert format_progress_bar(0, 0, width=4) == "[░░░░] 0.0%"
