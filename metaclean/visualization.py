"""Plots of age distributions per category.

The imputation strategy of each category was chosen from these histograms:
skewed categories use the median, bell-shaped the mean, flat ones sampling.
"""

import logging
from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd

from metaclean.age.imputation import CATEGORY_STRATEGIES, ages_in_years
from metaclean.types import AgeCategory, CATEGORY_COLUMN, IMPUTED_COLUMN

logger = logging.getLogger(__name__)

COLORS = {
    AgeCategory.NEWBORN: "#DC5050",
    AgeCategory.CHILD: "#508CDC",
    AgeCategory.SCHOOLAGE: "#50B450",
    AgeCategory.ADULT: "#DCB43C",
    AgeCategory.SENIOR: "#A050C8",
}

plt.rcParams.update({
    "font.size": 11,
    "axes.titlesize": 12,
    "figure.dpi": 100,
    "savefig.dpi": 300,
    "figure.facecolor": "white",
    "axes.grid": True,
    "grid.alpha": 0.3,
})


def plot_category_distributions(
    records: pd.DataFrame,
    bins: int = 30,
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Plot a histogram of observed ages (years) for each age category.

    Imputed values are left out so the plot shows the reference
    distributions the imputation drew from.

    Args:
        records: Reconciled records (HarmonizationResult.reconciled)
        bins: Number of histogram bins
        save_path: Optional path to save figure

    Returns:
        Matplotlib figure
    """
    years = ages_in_years(records)
    observed = years.notna()
    if IMPUTED_COLUMN in records.columns:
        observed &= ~records[IMPUTED_COLUMN].astype(bool)

    categories = AgeCategory.all()
    fig, axes = plt.subplots(1, len(categories), figsize=(4 * len(categories), 3.5))

    for ax, category in zip(axes, categories):
        values = years[observed & (records[CATEGORY_COLUMN] == category.value)]
        strategy = CATEGORY_STRATEGIES[category].value

        if len(values):
            ax.hist(values, bins=bins, color=COLORS[category], alpha=0.8)
        else:
            ax.text(0.5, 0.5, "no observations", ha="center", va="center",
                    transform=ax.transAxes)

        ax.set_title(f"{category.value} (n={len(values)}, {strategy})")
        ax.set_xlabel("Age (years)")

    axes[0].set_ylabel("Samples")
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, bbox_inches="tight", dpi=300)
        logger.info(f"Saved figure to {save_path}")

    return fig
