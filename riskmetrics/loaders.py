"""
Price loaders - read price histories from CSV and align series by date.
Thin IO layer that hands the calculation engines clean numeric sequences.
"""

import logging
import pandas as pd
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from riskmetrics.errors import MetricsError
from riskmetrics.stats_record import AlignedPair

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {'date', 'asset', 'close'}


class LoaderError(MetricsError):
    """Raised when a price file cannot be loaded."""
    pass


def load_price_csv(path: Path) -> pd.DataFrame:
    """
    Load a long-format price file.

    Expects columns ['date', 'asset', 'close']; extra columns are ignored.

    Args:
        path: CSV file path

    Returns:
        DataFrame with columns date (datetime64), asset (str), close (float),
        sorted by asset then date, one row per (asset, date)

    Raises:
        LoaderError: If the file is missing, malformed or has duplicate rows
    """
    path = Path(path)
    if not path.exists():
        raise LoaderError(f"Price file not found: {path}")

    try:
        df = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise LoaderError(f"Failed to read price file {path}: {e}")

    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise LoaderError(f"Price file missing columns: {sorted(missing)}")

    df = df.loc[:, ['date', 'asset', 'close']].copy()

    try:
        df['date'] = pd.to_datetime(df['date'])
    except (ValueError, TypeError) as e:
        raise LoaderError(f"Invalid date values in {path}: {e}")

    df['asset'] = df['asset'].astype(str)
    df['close'] = pd.to_numeric(df['close'], errors='coerce')

    duplicates = df.duplicated(subset=['asset', 'date'])
    if duplicates.any():
        first = df[duplicates].iloc[0]
        raise LoaderError(
            f"Duplicate price rows for {first['asset']} on {first['date'].date()}"
        )

    df = df.sort_values(['asset', 'date']).reset_index(drop=True)
    logger.info(f"Loaded {len(df)} price rows for {df['asset'].nunique()} assets from {path}")

    return df


def list_assets(price_df: pd.DataFrame) -> List[str]:
    """Asset identifiers in order of first appearance in the frame."""
    return list(dict.fromkeys(price_df['asset'].tolist()))


def price_series(price_df: pd.DataFrame, asset: str) -> pd.Series:
    """
    Close prices for one asset indexed by date.

    Raises:
        LoaderError: If the asset has no rows
    """
    rows = price_df[price_df['asset'] == asset]
    if rows.empty:
        raise LoaderError(f"No price data for asset {asset}")

    return rows.set_index('date')['close'].sort_index()


def timeframe_days(series: pd.Series) -> Optional[int]:
    """Calendar days between the first and last observation."""
    if len(series) < 2:
        return None
    days = (series.index[-1] - series.index[0]).days
    return days if days > 0 else None


def _daily_closes(series: pd.Series) -> pd.Series:
    daily = series.copy()
    daily.index = pd.DatetimeIndex(daily.index).normalize()
    return daily.sort_index(kind='stable').groupby(level=0).last()


def align_series(
    asset: pd.Series,
    benchmark: pd.Series,
    min_points: int = 10
) -> Optional[AlignedPair]:
    """
    Pair asset and benchmark prices observed on the same calendar date.

    Args:
        asset: Asset close prices indexed by date
        benchmark: Benchmark close prices indexed by date
        min_points: Minimum number of shared dates

    Several observations on one calendar day collapse to the last of them.

    Returns:
        AlignedPair, or None if fewer than min_points dates are shared

    Raises:
        LoaderError: If the series cannot be aligned by date
    """
    try:
        joined = pd.concat(
            [_daily_closes(asset).rename('asset'), _daily_closes(benchmark).rename('benchmark')],
            axis=1,
            join='inner'
        ).dropna()
    except (ValueError, TypeError) as e:
        raise LoaderError(f"Cannot align series by date: {e}")

    if len(joined) < min_points:
        logger.info(f"Only {len(joined)} aligned observations (need {min_points})")
        return None

    return AlignedPair(
        asset_prices=joined['asset'].tolist(),
        benchmark_prices=joined['benchmark'].tolist()
    )


def price_frame_from_dict(prices: Dict[str, List[float]], start: date) -> pd.DataFrame:
    """
    Build a long-format price frame from per-asset lists on consecutive days.

    Handy for feeding in-memory series through the same job as a CSV file.
    """
    rows = []
    for asset, values in prices.items():
        dates = pd.date_range(start, periods=len(values), freq='D')
        for d, close in zip(dates, values):
            rows.append({'date': d, 'asset': asset, 'close': float(close)})

    if not rows:
        return pd.DataFrame(columns=['date', 'asset', 'close'])

    return pd.DataFrame(rows).sort_values(['asset', 'date']).reset_index(drop=True)
