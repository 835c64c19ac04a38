#!/usr/bin/env python3
"""
Command-line driver for the deprecation enricher.

Reads a serialized model produced by the parsing stage, appends ``@deprecated``
notices to the comments of deprecated beans, properties, enums, enum members
and REST methods, and writes the enriched model as JSON for the rendering
stage.

    enrich_model.py --input model.json --output enriched.json
    enrich_model.py --input model.yaml -v
"""
import argparse
import logging
import os
import sys

from deprecation_enricher import DeprecationEnricher
from model_loader import ModelLoadError, dump_model, load_model

logger = logging.getLogger("enrich_model")


def generate_options():
    arg_parser = argparse.ArgumentParser(
        description="Add @deprecated notices to a serialized API model"
    )
    arg_parser.add_argument("--input", type=str, required=True, help="Model file (.json, .yaml or .yml)")
    arg_parser.add_argument("--output", type=str, help="JSON output file path (stdout if omitted)")
    arg_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return arg_parser


def validate_paths(options):
    if not os.path.isfile(options.input):
        logging.error(f'Model file "{options.input}" does not exist')
        sys.exit(1)

    if options.output:
        output_dir = os.path.dirname(os.path.abspath(options.output))
        if not os.path.isdir(output_dir):
            logging.error(f'Output directory "{output_dir}" does not exist')
            sys.exit(1)


def main(argv=None):
    options = generate_options().parse_args(argv)

    if options.verbose:
        logging.basicConfig(level="DEBUG")
    else:
        logging.basicConfig(level="WARNING")

    validate_paths(options)

    logger.info(f"Enriching model from {options.input}")
    try:
        model = load_model(options.input)
    except ModelLoadError as e:
        logging.error(f"Failed to load model: {e}")
        sys.exit(1)

    enriched = DeprecationEnricher().enrich_model(model)

    try:
        dump_model(enriched, options.output)
    except OSError as e:
        logging.error(f"Failed to write output: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
