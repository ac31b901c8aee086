"""Rules configuration document (business rules, weights, settings)."""

from allocprep.rules.config import (
    BusinessRule,
    GlobalSettings,
    OptimizationGoal,
    PriorityWeights,
    RecordCounts,
    RulesDocument,
    RulesMetadata,
    RuleType,
    dump_rules,
    load_rules,
    parse_rules,
    save_rules,
)

__all__ = [
    "BusinessRule",
    "GlobalSettings",
    "OptimizationGoal",
    "PriorityWeights",
    "RecordCounts",
    "RuleType",
    "RulesDocument",
    "RulesMetadata",
    "dump_rules",
    "load_rules",
    "parse_rules",
    "save_rules",
]
