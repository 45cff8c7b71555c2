"""Command-line entry point for metaclean.

Harmonizes the age fields of a sample metadata table and, optionally, maps
its disease terms to ontology identifiers.
"""

import argparse
import logging
import sys
from pathlib import Path

import matplotlib.pyplot as plt

from metaclean.data.loaders import MetadataLoader, write_table
from metaclean.disease.cleaning import annotate_diseases, unique_disease_terms
from metaclean.disease.ontology import OntologyLookupClient
from metaclean.errors import HarmonizationError
from metaclean.pipeline import AgeHarmonizer, HarmonizerConfig
from metaclean.summary import format_report, summarize
from metaclean.visualization import plot_category_distributions

logger = logging.getLogger(__name__)

AGE_OUTPUT = "age_harmonized.csv"
SUMMARY_OUTPUT = "harmonization_summary.txt"
DISEASE_MAPPING_OUTPUT = "disease_ontology_mapping.csv"
DISEASE_ANNOTATED_OUTPUT = "disease_annotated.csv"
PLOT_OUTPUT = "age_category_distributions.png"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Harmonize age fields and map disease terms of sample metadata"
    )
    parser.add_argument("input", type=str,
                        help="Metadata table (CSV, or TSV for .tsv/.txt)")
    parser.add_argument("--output-dir", type=str, default="results",
                        help="Output directory")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML configuration file")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for sampling imputation (overrides config)")
    parser.add_argument("--map-diseases", action="store_true",
                        help="Look up disease terms in the ontology service")
    parser.add_argument("--plots", action="store_true",
                        help="Save per-category age histograms")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")
    return parser


def run(args: argparse.Namespace) -> int:
    """Run the harmonization for parsed arguments; returns an exit code."""
    config = HarmonizerConfig.from_yaml(args.config) if args.config else HarmonizerConfig()
    if args.seed is not None:
        config.seed = args.seed

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"Input: {args.input}")
    logger.info(f"Output directory: {output_dir}")

    try:
        metadata = MetadataLoader(args.input).df
        result = AgeHarmonizer(config).run(metadata)
    except (FileNotFoundError, HarmonizationError, ValueError) as e:
        logger.error(f"Harmonization failed: {e}")
        return 1

    write_table(result.harmonized, output_dir / AGE_OUTPUT)

    report = format_report(summarize(result))
    report_path = output_dir / SUMMARY_OUTPUT
    with open(report_path, "w") as f:
        f.write(report)
    logger.info(f"Saved report: {report_path}")

    if args.plots:
        fig = plot_category_distributions(
            result.reconciled, save_path=str(output_dir / PLOT_OUTPUT)
        )
        plt.close(fig)

    if args.map_diseases:
        if config.disease_column not in metadata.columns:
            logger.error(f"No disease column '{config.disease_column}' in {args.input}")
            return 1

        terms = unique_disease_terms(
            metadata,
            column=config.disease_column,
            sep=config.disease_separator,
            exclude=config.control_terms,
        )
        client = OntologyLookupClient(
            base_url=config.ols_url,
            ontology=config.ontology,
            timeout=config.lookup_timeout,
            pause=config.lookup_pause,
        )
        mapping = client.map_terms(terms)
        write_table(mapping, output_dir / DISEASE_MAPPING_OUTPUT)

        annotated = annotate_diseases(
            metadata, mapping, column=config.disease_column, sep=config.disease_separator
        )
        write_table(annotated, output_dir / DISEASE_ANNOTATED_OUTPUT)

    logger.info("Harmonization complete")
    return 0


def main(argv=None) -> int:
    """Console entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    return run(args)


if __name__ == "__main__":
    sys.exit(main())
