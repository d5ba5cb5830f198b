#!/usr/bin/env python3
"""
CLI for full-text search inside a record.

Provides command-line access to searching, importing annotation pages and
inspecting the page store.
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError

from api.schemas import PageIn
from config.log_config import configure_logging
from config.settings import settings
from core.exceptions import SearchException
from core.models import Granularity
from data.database import init_database, session_scope
from data.repositories import PageRepository
from serving.iiif_mapping import to_annotation_list
from services.search_service import FullTextSearchService
from services.solr_client import SolrSearchClient

logger = logging.getLogger(__name__)


def search_cli(
    dataset_id: str,
    local_id: str,
    query: str,
    page_size: int,
    granularity: List[str],
    debug: bool = False,
    version: str = '2'
) -> int:
    """Search a record and print the IIIF annotation list."""
    try:
        types = [Granularity.parse(value) for value in granularity] if granularity else None
    except ValueError as e:
        print(f"❌ INVALID_SEARCH_REQUEST: {e}", file=sys.stderr)
        return 1

    urls = settings.get_url_config()
    search_id = f"{urls.search_base_url}{dataset_id}/{local_id}/search?q={query}"

    try:
        with SolrSearchClient(
            base_url=settings.solr_url,
            timeout=settings.solr_timeout,
            id_field=settings.solr_id_field,
            highlight_field_prefix=settings.solr_highlight_field_prefix
        ) as engine, session_scope(read_only=True) as session:
            service = FullTextSearchService(
                engine=engine,
                store=PageRepository(session),
                max_merge_distance=settings.hit_merge_max_distance
            )
            result = service.search_issue(
                search_id=search_id,
                dataset_id=dataset_id,
                local_id=local_id,
                query=query,
                page_size=page_size,
                types=types,
                debug=debug
            )
    except SearchException as e:
        print(f"❌ {e.error_code}: {e.message}", file=sys.stderr)
        return 1

    print(json.dumps(to_annotation_list(result, urls, version), indent=2, ensure_ascii=False))
    return 0


def load_pages_cli(file_path: str) -> int:
    """Import annotation pages from a JSON file (a list of page objects)."""
    path = Path(file_path)
    if not path.exists():
        print(f"❌ Error: File not found: {file_path}", file=sys.stderr)
        return 1

    try:
        pages = TypeAdapter(List[PageIn]).validate_json(path.read_text(encoding='utf-8'))
    except ValidationError as e:
        print(f"❌ Invalid page file {file_path}:\n{e}", file=sys.stderr)
        return 1

    init_database()
    try:
        with session_scope() as session:
            repo = PageRepository(session)
            for page in pages:
                repo.add_page(page.to_domain())
                logger.debug("Stored page %s of /%s/%s", page.page_id, page.dataset_id, page.local_id)
    except IntegrityError as e:
        print(f"❌ Page already stored, stopped loading {file_path}: {e.orig}", file=sys.stderr)
        return 1

    print(f"✓ Loaded {len(pages)} pages from {file_path}")
    return 0


def count_pages_cli(dataset_id: str, local_id: str) -> int:
    """Print the number of stored pages of a record."""
    with session_scope(read_only=True) as session:
        count = PageRepository(session).count_pages(dataset_id, local_id)
    print(f"/{dataset_id}/{local_id}: {count} pages")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Full-text search inside a record'
    )
    parser.add_argument('--log-level', type=str, default=None, help='Logging level (default: from settings)')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Search command
    search_parser = subparsers.add_parser('search', help='Search the annotations of a record')
    search_parser.add_argument('dataset_id', type=str, help='Dataset ID')
    search_parser.add_argument('local_id', type=str, help='Local ID of the record')
    search_parser.add_argument('query', type=str, help='Free-text query')
    search_parser.add_argument('--page-size', type=int, default=settings.default_page_size, help='Maximum number of annotations')
    search_parser.add_argument('--granularity', type=str, nargs='*', default=None, help='Annotation levels, e.g. Word Line')
    search_parser.add_argument('--debug', action='store_true', help='Include debug information')
    search_parser.add_argument('--format', type=str, default='2', choices=['2', '3'], help='IIIF version')

    # Load command
    load_parser = subparsers.add_parser('load', help='Import annotation pages from a JSON file')
    load_parser.add_argument('file', type=str, help='JSON file with a list of pages')

    # Pages command
    pages_parser = subparsers.add_parser('pages', help='Count the stored pages of a record')
    pages_parser.add_argument('dataset_id', type=str, help='Dataset ID')
    pages_parser.add_argument('local_id', type=str, help='Local ID of the record')

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == 'search':
        return search_cli(
            dataset_id=args.dataset_id,
            local_id=args.local_id,
            query=args.query,
            page_size=args.page_size,
            granularity=args.granularity,
            debug=args.debug,
            version=args.format
        )
    elif args.command == 'load':
        return load_pages_cli(args.file)
    elif args.command == 'pages':
        return count_pages_cli(args.dataset_id, args.local_id)
    else:
        parser.print_help()
        return 0


if __name__ == '__main__':
    sys.exit(main())
