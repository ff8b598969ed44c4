"""
Command line entry point.

Usage:
    # Import today's audits
    audit-stash elastic-import

    # Backfill a date range, skipping noisy models
    audit-stash elastic-import --from 2016-01-01 --until 2016-01-31 \
        --exclude-models Session,Token

    # Relabel a model and tag every document
    audit-stash elastic-import -t ParentCategory:categories -a app_name:frontend
"""

import argparse
import logging
import sys

from audit_stash.config import get_settings
from audit_stash.exceptions import ConfigError, FormatError, WriteError
from audit_stash.models.base import SessionLocal
from audit_stash.schemas.import_options import parse_import_options
from audit_stash.services.bulk_writer import BulkWriter
from audit_stash.services.elastic_import_service import ElasticImportService
from audit_stash.services.elasticsearch_store import ElasticsearchStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="audit-stash")
    commands = parser.add_subparsers(dest="command", required=True)

    elastic = commands.add_parser(
        "elastic-import",
        help="Imports audit logs from the legacy audit logs tables "
             "into Elasticsearch",
    )
    elastic.add_argument(
        "-f", "--from", dest="date_from", default="now",
        help="The date from which to start importing audit logs",
    )
    elastic.add_argument(
        "-u", "--until", dest="date_until", default="now",
        help="The date in which to stop importing audit logs",
    )
    elastic.add_argument(
        "-m", "--models", default=None,
        help="A comma separated list of model names to import",
    )
    elastic.add_argument(
        "-e", "--exclude-models", default=None,
        help="A comma separated list of model names to skip importing",
    )
    elastic.add_argument(
        "-t", "--type-map", default=None,
        help="A comma separated list of model:type pairs "
             "(for example ParentCategory:categories)",
    )
    elastic.add_argument(
        "-a", "--extra-meta", default=None,
        help="A comma separated list of key:value pairs to store in meta "
             "(for example app_name:frontend)",
    )
    return parser


def elastic_import(args: argparse.Namespace) -> int:
    settings = get_settings()

    try:
        options = parse_import_options(
            date_from=args.date_from,
            date_until=args.date_until,
            models=args.models,
            exclude_models=args.exclude_models,
            type_map=args.type_map,
            extra_meta=args.extra_meta,
        )
    except ConfigError as e:
        logger.error("Invalid options: %s", e)
        return 2

    writer = BulkWriter(ElasticsearchStore.from_settings(settings))
    db = SessionLocal()
    try:
        service = ElasticImportService(
            db,
            writer,
            index_template=settings.ELASTIC_INDEX,
            bulk_size=settings.IMPORT_BULK_SIZE,
            yield_per=settings.IMPORT_YIELD_PER,
        )
        summary = service.run(options)
    except (FormatError, WriteError) as e:
        logger.error("Import aborted: %s", e)
        return 1
    finally:
        db.close()

    logger.info(
        "Done: %d audits, %d documents, %d batches",
        summary.groups, summary.documents, summary.batches,
    )
    return 0


COMMANDS = {
    "elastic-import": elastic_import,
}


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    )

    args = build_parser().parse_args(argv)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
