"""
Results contract tests - the JSON written by the job keeps its shape.
Runs the sample price fixture end to end and checks keys and types.
"""

import json
import pytest
import tempfile
from pathlib import Path

from riskmetrics.analysis_job import run_analysis_job
from riskmetrics.config import AnalysisConfig
from riskmetrics.loaders import load_price_csv


def load_fixture_prices():
    """Load the sample price CSV from the fixtures directory."""
    return load_price_csv(Path(__file__).parent.parent.parent / 'tests/fixtures' / 'sample_prices.csv')


@pytest.fixture(scope='module')
def results():
    price_df = load_fixture_prices()
    config = AnalysisConfig(risk_free_rate_pct=4.25, ddof=1)

    with tempfile.TemporaryDirectory() as temp_dir:
        output_path = Path(temp_dir) / 'results.json'
        run_analysis_job(price_df, config, output_path=output_path, benchmark_a_id='SPX')
        with open(output_path, 'r') as f:
            yield json.load(f)


def test_top_level_keys(results):
    required = {
        'riskFreeRate', 'ddof', 'periodsPerYear', 'rankingPolicy', 'benchmarks',
        'assets', 'failures', 'ranking', 'metadata'
    }
    assert required == set(results.keys())


def test_asset_record_types(results):
    for record in results['assets']:
        assert isinstance(record['assetId'], str)
        assert isinstance(record['sampleSize'], int)
        assert isinstance(record['sortinoNoDownside'], bool)

        for key in ('annualizedReturn', 'annualizedVolatility', 'sharpeRatio',
                    'downsideVolatility', 'sortinoRatio', 'maxDrawdown', 'periodReturn'):
            assert isinstance(record[key], float), key

        for key in ('correlationToBenchmarkA', 'beta', 'cagr', 'calmarRatio'):
            assert record[key] is None or isinstance(record[key], float), key


def test_drawdown_bounds(results):
    for record in results['assets']:
        assert 0 <= record['maxDrawdown'] < 1
        assert record['drawdownPeakIndex'] <= record['drawdownTroughIndex']


def test_benchmark_metrics_present(results):
    for record in results['assets']:
        assert -1 <= record['correlationToBenchmarkA'] <= 1
        assert record['beta'] is not None
        assert record['correlationToBenchmarkB'] is None


def test_ranking_shape(results):
    ranking = results['ranking']

    assert set(ranking.keys()) == {'winner', 'order', 'comparison'}
    assert ranking['order'][0] == ranking['winner']
    assert set(ranking['comparison'].keys()) == {
        'runnerUpId', 'returnDifference', 'periodReturnDifference', 'drawdownDifference'
    }


def test_metadata(results):
    assert set(results['metadata'].keys()) == {'calculatedAt', 'calculationVersion'}
    assert results['failures'] == []
