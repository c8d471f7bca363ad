from ..models.pattern import PatternSummary


def export_json(summary: PatternSummary) -> str:
    return summary.model_dump_json(indent=2)
