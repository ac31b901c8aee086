"""Export of cleaned tables and the rules document."""

from allocprep.export.tables import ExportResult, export_data_set, flatten_value, to_table

__all__ = ["ExportResult", "export_data_set", "flatten_value", "to_table"]
