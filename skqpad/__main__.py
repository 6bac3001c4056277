import sys
import argparse
from skqpad import fit_from_files


def main():
    _DESCRIPTION = ("Fit a conditional multinomial model to interval "
                    "counts, given a configuration file")
    _FORMATERCLASS = argparse.ArgumentDefaultsHelpFormatter
    parser = argparse.ArgumentParser(description=_DESCRIPTION,
                                     formatter_class=_FORMATERCLASS)
    parser.add_argument("--config-file",
                        help="Path to JSON configuration file.")
    parser.add_argument("--covariates-file",
                        help="Path to CSV covariate table.")
    parser.add_argument("--output-file",
                        help="Path to CSV file for per-unit estimates.")
    parser.add_argument("counts_file",
                        help="Path to CSV table of interval counts.")
    parser.add_argument("boundaries_file",
                        help="Path to CSV table of interval boundaries.")
    args = parser.parse_args()
    fit, table = fit_from_files(args.counts_file, args.boundaries_file,
                                covariates_file=args.covariates_file,
                                config_file=args.config_file)
    print(fit)
    if args.output_file is not None:
        table.to_csv(args.output_file)
    return(0 if fit.reliable else 1)


sys.exit(main())
