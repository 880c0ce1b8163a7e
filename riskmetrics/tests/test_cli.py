"""
Tests for the analyze_assets CLI.
Runs main() in-process and once as a real subprocess.
"""

import os
import sys
import json
import pytest
import tempfile
import subprocess
from pathlib import Path
from unittest.mock import patch

from riskmetrics.analyze_assets import main, build_parser


PROJECT_ROOT = Path(__file__).parent.parent.parent
SAMPLE_PRICES = PROJECT_ROOT / 'tests' / 'fixtures' / 'sample_prices.csv'


@pytest.fixture
def clean_environment():
    """Keep local .env settings out of CLI runs."""
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.mark.usefixtures('clean_environment')
class TestAnalyzeAssetsCLI:
    """Tests for main()."""

    def test_summary_output(self, capsys):
        exit_code = main([str(SAMPLE_PRICES), '--benchmark-a', 'SPX', '--risk-free-rate', '4.5'])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert 'Risk-free rate: 4.50%' in captured.out
        assert '1. BTC' in captured.out
        assert '2. ETH' in captured.out
        assert 'Best risk-adjusted performance: BTC' in captured.out
        assert 'vs ETH' in captured.out

    def test_output_file(self, capsys):
        with tempfile.TemporaryDirectory() as temp_dir:
            output_path = Path(temp_dir) / 'results.json'

            exit_code = main([str(SAMPLE_PRICES), '--output', str(output_path), '--ddof', '0'])

            assert exit_code == 0
            with open(output_path, 'r') as f:
                results = json.load(f)

        assert results['ddof'] == 0
        assert 'Results saved to:' in capsys.readouterr().out

    def test_quiet(self, capsys):
        exit_code = main([str(SAMPLE_PRICES), '--assets', 'BTC', 'ETH', '--quiet'])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert captured.out.strip() == 'Analyzed 2 asset(s)'

    def test_single_asset_has_no_winner_line(self, capsys):
        exit_code = main([str(SAMPLE_PRICES), '--assets', 'ETH'])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert 'Best risk-adjusted performance' not in captured.out

    def test_failed_asset_reported(self, capsys):
        exit_code = main([str(SAMPLE_PRICES), '--assets', 'BTC', 'DOGE'])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert 'WARNING: DOGE skipped (LoaderError)' in captured.err

    def test_all_assets_fail(self, capsys):
        exit_code = main([str(SAMPLE_PRICES), '--assets', 'DOGE'])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert 'ERROR: Analysis failed: No asset could be analyzed' in captured.err

    def test_drawdown_ranking(self, capsys):
        with tempfile.TemporaryDirectory() as temp_dir:
            output_path = Path(temp_dir) / 'results.json'

            exit_code = main([str(SAMPLE_PRICES), '--ranking', 'drawdown', '--output', str(output_path)])

            with open(output_path, 'r') as f:
                results = json.load(f)

        assert exit_code == 0
        assert results['rankingPolicy'] == 'drawdown'

    def test_undefined_sortino_shown_as_na(self, capsys):
        content = """date,asset,close
2025-01-01,DIP,100
2025-01-02,DIP,90
2025-01-03,DIP,100
2025-01-04,DIP,105
"""
        with tempfile.TemporaryDirectory() as temp_dir:
            prices_path = Path(temp_dir) / 'prices.csv'
            prices_path.write_text(content, encoding='utf-8')

            exit_code = main([str(prices_path), '--ddof', '1'])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert 'sortino n/a' in captured.out

    def test_missing_price_file(self, capsys):
        exit_code = main(['/nonexistent/prices.csv'])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert 'ERROR: Price file not found' in captured.err

    def test_missing_config_file(self, capsys):
        exit_code = main([str(SAMPLE_PRICES), '--config', '/nonexistent/riskmetrics.yml'])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert 'ERROR: Invalid configuration' in captured.err

    def test_non_positive_timeframe_rejected_by_parser(self, capsys):
        for value in ('0', '-5', 'nan'):
            with pytest.raises(SystemExit):
                build_parser().parse_args([str(SAMPLE_PRICES), '--timeframe-days', value])

        assert 'positive number of days' in capsys.readouterr().err

    def test_timeframe_override(self, capsys):
        with tempfile.TemporaryDirectory() as temp_dir:
            output_path = Path(temp_dir) / 'results.json'

            exit_code = main([str(SAMPLE_PRICES), '--assets', 'BTC', '--timeframe-days', '365',
                              '--output', str(output_path)])

            with open(output_path, 'r') as f:
                results = json.load(f)

        assert exit_code == 0
        assert abs(results['assets'][0]['cagr'] - (98000 / 90000 - 1)) < 1e-9

    def test_invalid_ddof_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([str(SAMPLE_PRICES), '--ddof', '2'])


class TestAnalyzeAssetsSubprocess:
    """Runs the module the way a user would."""

    def test_module_execution(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            output_path = Path(temp_dir) / 'results.json'

            result = subprocess.run([
                sys.executable, '-m', 'riskmetrics.analyze_assets',
                str(SAMPLE_PRICES),
                '--benchmark-a', 'SPX',
                '--output', str(output_path),
                '--quiet'
            ], capture_output=True, text=True, cwd=PROJECT_ROOT)

            assert result.returncode == 0, result.stderr
            assert output_path.exists()
            assert 'Analyzed 2 asset(s)' in result.stdout
