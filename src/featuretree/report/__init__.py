"""Report export."""

from featuretree.report.exporter import forest_to_rows, report_to_dict, write_csv, write_json

__all__ = ["forest_to_rows", "report_to_dict", "write_csv", "write_json"]
