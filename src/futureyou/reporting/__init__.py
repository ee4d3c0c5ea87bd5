"""Timeline export and history summaries."""

from .export import export_csv, export_json, summarize_history, timeline_dataframe

__all__ = ["export_csv", "export_json", "summarize_history", "timeline_dataframe"]
