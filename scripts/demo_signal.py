"""
Print a composite trading signal for a synthetic random-walk series.
Useful as a smoke test of the engine without any market data source:

    python scripts/demo_signal.py

DEMO_SYMBOL, DEMO_BARS and DEMO_SEED tune the generated series.
"""
import json
import os
import sys

import numpy as np
import pandas as pd

sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "services", "signal_engine_py"))
from signal_core import generate_signal_from_frame  # noqa: E402


def synthetic_bars(n: int, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    close = 100 * np.exp(np.cumsum(rng.normal(0, 0.01, n)))
    spread = np.abs(rng.normal(0, 0.005, n)) * close
    return pd.DataFrame({
        "high": close + spread,
        "low": close - spread,
        "close": close,
        "volume": rng.integers(800_000, 1_500_000, n).astype(float),
    })


def main():
    symbol = os.environ.get("DEMO_SYMBOL", "DEMO")
    bars = int(os.environ.get("DEMO_BARS", "250"))
    seed = int(os.environ.get("DEMO_SEED", "7"))
    signal = generate_signal_from_frame(symbol, synthetic_bars(bars, seed))
    print(json.dumps(signal.to_dict(), indent=2))


if __name__ == "__main__":
    main()
