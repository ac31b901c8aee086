"""Cross-entity validation of the client/worker/task data set."""

from allocprep.validation.core import merge_findings, validate_all, validate_entity
from allocprep.validation.reporter import ConsoleReporter

__all__ = ["ConsoleReporter", "merge_findings", "validate_all", "validate_entity"]
