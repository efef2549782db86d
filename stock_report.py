#!/usr/bin/env python3
"""
Render the stock price analysis report.

Usage
-----
    python stock_report.py
    python stock_report.py --price-csv data/other_ticker.csv --output-dir report_other

With no flags the report is built from data/stock_prices.csv into report/,
using the settings in config/report.yaml (12-month horizon, 80% and 95%
intervals, seasonal period 12). The pipeline lives in stock_forecaster_src/.
"""

from stock_forecaster_src.main import main

if __name__ == "__main__":
    main()
