"""Summary report for an age harmonization run."""

import logging
from datetime import datetime

from metaclean.types import AgeCategory, AgeSource, HarmonizationResult

logger = logging.getLogger(__name__)


def summarize(result: HarmonizationResult) -> dict:
    """Collect summary statistics of a harmonization run.

    Args:
        result: Output of AgeHarmonizer.run

    Returns:
        Dictionary with row counts, source split, group distribution,
        per-category imputation details and harmonized age statistics
    """
    out = result.harmonized
    values = out["Harmonized_Value"].dropna()

    group_order = [c.output_label for c in AgeCategory.all()]
    group_counts = out["Harmonized_Age_Group"].value_counts()

    return {
        "num_input": result.num_input,
        "num_dropped": result.num_dropped,
        "num_retained": result.num_retained,
        "num_imputed": result.num_imputed,
        "num_unresolved": result.num_unresolved,
        "age_columns": list(result.age_columns),
        "source_counts": {
            s.value: int((out["Source"] == s.value).sum()) for s in AgeSource
        },
        "group_counts": {g: int(group_counts.get(g, 0)) for g in group_order},
        "num_ungrouped": int(out["Harmonized_Age_Group"].isna().sum()),
        "imputations": {
            c.value: {
                "strategy": imp.strategy.value,
                "num_observed": imp.num_observed,
                "num_imputed": imp.num_imputed,
                "statistic": imp.statistic,
                "unresolved": imp.unresolved,
            }
            for c, imp in result.imputations.items()
        },
        "age_min": float(values.min()) if len(values) else None,
        "age_max": float(values.max()) if len(values) else None,
        "age_mean": float(values.mean()) if len(values) else None,
        "age_median": float(values.median()) if len(values) else None,
    }


def format_report(summary: dict) -> str:
    """Render a summary dictionary as a plain-text report."""
    report_lines = [
        "AGE HARMONIZATION SUMMARY",
        "=" * 60,
        f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "INPUT",
        "-" * 40,
        f"Total samples: {summary['num_input']}",
        f"Age columns: {', '.join(summary['age_columns'])}",
        f"Dropped (no age information): {summary['num_dropped']}",
        f"Retained: {summary['num_retained']}",
        "",
        "SOURCE",
        "-" * 40,
    ]

    for source, count in summary["source_counts"].items():
        report_lines.append(f"  {source}: {count}")

    report_lines.extend([
        "",
        "IMPUTATION",
        "-" * 40,
        f"Imputed: {summary['num_imputed']}",
        f"Unresolved: {summary['num_unresolved']}",
    ])

    for category, imp in summary["imputations"].items():
        line = (
            f"  {category}: {imp['num_imputed']} by {imp['strategy']} "
            f"(n_observed={imp['num_observed']}"
        )
        if imp["statistic"] is not None:
            line += f", value={imp['statistic']:.2f}"
        line += ")"
        if imp["unresolved"]:
            line += f", {imp['unresolved']} unresolved"
        report_lines.append(line)

    report_lines.extend([
        "",
        "AGE GROUP DISTRIBUTION",
        "-" * 40,
    ])

    total = max(summary["num_retained"], 1)
    for group, count in summary["group_counts"].items():
        report_lines.append(f"  {group}: {count} ({count / total * 100:.1f}%)")
    if summary["num_ungrouped"]:
        report_lines.append(f"  (no group): {summary['num_ungrouped']}")

    if summary["age_min"] is not None:
        report_lines.extend([
            "",
            "HARMONIZED AGE (YEARS)",
            "-" * 40,
            f"Range: {summary['age_min']:.2f} - {summary['age_max']:.2f}",
            f"Mean: {summary['age_mean']:.2f}",
            f"Median: {summary['age_median']:.2f}",
        ])

    return "\n".join(report_lines)
