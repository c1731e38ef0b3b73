"""
Run the PyBycatch analysis end to end.

Usage:
    python run_bycatch.py --data-dir Data --output-dir Results

With sensitivity settings:
    python run_bycatch.py --alpha 0.5 --uncertainty uncert --n1 1000 --n2 50

Reads ``bycatch_species.csv`` and ``upsides_<mode>.csv`` from the data
directory, simulates every species in parallel, writes the results,
summary and report files, and optionally the figures.
"""

import argparse
import re
import sys
from pathlib import Path

# Add src to path for pybycatch imports
sys.path.insert(0, str(Path(__file__).parent / "src"))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the bycatch Monte Carlo analysis")
    parser.add_argument("--data-dir", default="Data", help="Directory with input CSV files")
    parser.add_argument("--species-file", default=None, help="Bycatch species CSV")
    parser.add_argument("--stock-file", default=None, help="Target stock (upsides) CSV")
    parser.add_argument(
        "--taxonomy-file", default=None,
        help="Species category to taxonomy CSV (defaults to taxonomies.csv in the data dir)",
    )
    parser.add_argument("--output-dir", default="Results", help="Directory for output tables")
    parser.add_argument("--figures-dir", default=None, help="Write figures to this directory")
    parser.add_argument("--n1", type=int, default=10000, help="Draws per species")
    parser.add_argument("--n2", type=int, default=100, help="Resamples per draw")
    parser.add_argument("--alpha", type=float, default=1.0, help="Elasticity exponent")
    parser.add_argument(
        "--uncertainty", choices=["nouncert", "uncert"], default="nouncert",
        help="Point estimates or uncertainty draws for delta and fe",
    )
    parser.add_argument("--seed", type=int, default=None, help="Run seed")
    parser.add_argument("--workers", type=int, default=None, help="Worker pool size")
    parser.add_argument(
        "--executor", choices=["process", "thread", "serial"], default="process",
        help="Task pool type",
    )
    parser.add_argument("--log-file", default=None, help="Also log to this file")

    args = parser.parse_args(argv)

    from pybycatch.config import SimulationConfig
    from pybycatch.core.params import check_species_params, read_species
    from pybycatch.core.parallel import log_progress, run_simulation
    from pybycatch.core.stocks import read_stock_table
    from pybycatch.core.summary import summarize_results
    from pybycatch.core.upsides import read_taxonomy
    from pybycatch.io.results import write_run
    from pybycatch.logger import setup_logging

    logger = setup_logging(log_file=args.log_file)

    data_dir = Path(args.data_dir)
    species_file = Path(args.species_file or data_dir / "bycatch_species.csv")
    stock_file = Path(args.stock_file or data_dir / f"upsides_{args.uncertainty}.csv")

    config = SimulationConfig(
        n1=args.n1,
        n2=args.n2,
        alpha=args.alpha,
        uncertainty=args.uncertainty,
        seed=args.seed,
        max_workers=args.workers,
        executor=args.executor,
    )

    species = read_species(species_file)
    check_species_params(species)
    pool = read_stock_table(stock_file)
    logger.info(f"Loaded {len(species)} species and {pool!r}")

    run = run_simulation(species, pool, config, progress=log_progress)
    summary = summarize_results(
        run.results,
        quantiles=config.quantiles,
        excluded_draws=run.report.excluded_draws,
    )
    paths = write_run(run, summary, config, args.output_dir)
    for kind, path in paths.items():
        logger.info(f"Wrote {kind}: {path}")

    if args.figures_dir:
        taxonomy_file = Path(args.taxonomy_file or data_dir / "taxonomies.csv")
        taxonomy = read_taxonomy(taxonomy_file) if taxonomy_file.exists() else None
        if taxonomy is None:
            logger.info(f"No taxonomy file at {taxonomy_file}, skipping fig-S1")
        write_figures(run, summary, species, pool, Path(args.figures_dir), config, taxonomy)

    if run.report.failures:
        for name, message in sorted(run.report.failures.items()):
            logger.error(f"Failed: {name}: {message}")
        return 1
    return 0


def write_figures(run, summary, species, pool, figures_dir, config, taxonomy=None):
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from pybycatch.config import PlotTheme
    from pybycatch.core import plotting
    from pybycatch.core.upsides import region_upsides

    theme = PlotTheme()
    suffix = f"{config.uncertainty}{config.alpha_tag}"
    figures = {
        "fig-1a": plotting.plot_elasticity_heatmap(species, theme=theme),
        "fig-1b": plotting.plot_region_upsides(region_upsides(pool), theme=theme),
        f"fig-S2_{suffix}": plotting.plot_bycatch_distribution(run.results, theme=theme),
        f"fig-S3_{suffix}": plotting.plot_cost_distribution(run.results, theme=theme),
        "fig-S4": plotting.plot_alpha_sensitivity(theme=theme),
    }
    for policy in config.policies:
        figures[f"fig-3-{policy.lower()}_{suffix}"] = plotting.plot_tradeoffs(
            summary, policy, theme=theme
        )
    if taxonomy is not None:
        figures["fig-S1"] = plotting.plot_region_upsides(
            region_upsides(pool, taxonomy=taxonomy), theme=theme
        )
    for name, fig in figures.items():
        plotting.save_figure(fig, figures_dir / name, theme=theme)
        plt.close(fig)

    # Target stocks of each species that was simulated
    for sp in species:
        if sp.species in run.report.failures:
            continue
        fig = plotting.plot_stock_samples(pool, sp, theme=theme)
        name = f"fig-2c_{figure_slug(sp.species)}"
        plotting.save_figure(fig, figures_dir / name, theme=theme)
        plt.close(fig)


def figure_slug(name):
    """File-name safe species name.

    'Loggerhead turtle (NW Atlantic)' -> 'loggerhead-turtle-nw-atlantic'
    """
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


if __name__ == "__main__":
    sys.exit(main())
