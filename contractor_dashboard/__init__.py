"""
Contractor Registration Dashboard

Analytics backend that turns monthly spreadsheet exports into per-period
registration metrics: unit classification, missing-contract drill-downs,
Pareto concentration, month-over-month comparison and trend projection.

To add a new period:
    Append an entry to config.PERIOD_FILES with its code, display name,
    workbook file name and chronological order, then drop the workbook in
    config.DATA_DIR.

To read a workbook with different sheet or column names:
    Pass DEFAULT_CONFIG.with_overrides(sheet_names=..., indicator_columns=...)
    into the pipeline functions. Nothing reads configuration implicitly.

To connect to a front end:
    Call dashboard.get_period_overview(snapshots, code) for KPI cards,
    dashboard.get_units_table / get_missing_table for tables and drill-downs,
    and dashboard.get_trend_chart for the evolution chart.
"""
