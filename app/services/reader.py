"""Wiring of the formatting components for one request."""

from typing import NamedTuple

from app.services.block_flattener import BlockTreeFlattener
from app.services.content_source import ContentSource
from app.services.gateway import Gateway
from app.services.notion_client import NotionClient
from app.services.property_formatter import PropertyFormatter
from app.services.record_mapper import RecordMapper
from app.services.search_aggregator import SearchAggregator


class Reader(NamedTuple):
    source: ContentSource
    formatter: PropertyFormatter
    flattener: BlockTreeFlattener
    mapper: RecordMapper
    aggregator: SearchAggregator


def build_reader(client: NotionClient, gateway: Gateway, page_size: int = 100) -> Reader:
    """Assemble a :class:`Reader` whose remote calls all share *gateway*."""
    source = ContentSource(client, gateway, page_size=page_size)
    formatter = PropertyFormatter(source)
    flattener = BlockTreeFlattener(source, formatter)
    mapper = RecordMapper(formatter)
    aggregator = SearchAggregator(source, mapper, flattener)
    return Reader(source, formatter, flattener, mapper, aggregator)
