"""
IIIF mapping for search results.

Maps a SearchResult to an IIIF Content Search style annotation list. The
output URLs come from a UrlConfig that is passed in by the caller.

v2 output:
    {"@context": [...], "@id": ..., "@type": "sc:AnnotationList",
     "resources": [annotation, ...], "hits": [hit, ...]}
v3 output:
    {"@context": [...], "id": ..., "type": "AnnotationPage",
     "items": [annotation, ...], "hits": [hit, ...]}
"""
from typing import Any, Dict, List

from config.settings import UrlConfig
from core.constants import (
    IIIF_SEARCH_CONTEXT,
    IIIF_V2_CONTEXT,
    IIIF_V3_CONTEXT,
    V2_MOTIVATION,
    V3_MOTIVATION,
)
from core.models import SearchItem, SearchResult


def _record_path(item: SearchItem) -> str:
    return f"{item.dataset_id}/{item.local_id}"


def annotation_id_url(item: SearchItem, urls: UrlConfig) -> str:
    """URL of an annotation, e.g. .../9200355/BibliographicResource_1/anno/a1"""
    return f"{urls.annotation_base_url}{_record_path(item)}{urls.annotation_directory}{item.annotation.id}"


def annopage_id_url(item: SearchItem, urls: UrlConfig) -> str:
    """URL of the annotation page an item belongs to."""
    return f"{urls.iiif_base_url}{_record_path(item)}{urls.annopage_directory}{item.page_id}"


def resource_base_url(item: SearchItem, urls: UrlConfig) -> str:
    """URL of the full-text resource of the item's page."""
    return f"{urls.resource_base_url}{_record_path(item)}/{item.resource_id or item.page_id}"


def resource_id_url(item: SearchItem, urls: UrlConfig) -> str:
    """Resource URL with a #char fragment for the annotated text."""
    annotation = item.annotation
    if annotation.span is None:
        return resource_base_url(item, urls)
    return f"{resource_base_url(item, urls)}#char={annotation.from_index},{annotation.to_index}"


def target_urls(item: SearchItem) -> List[str]:
    """Page image targets with an #xywh fragment per rectangle."""
    return [f"{item.page_key}#{rect.to_fragment()}" for rect in item.annotation.target_rects]


def _hit(item: SearchItem, urls: UrlConfig, version: str) -> Dict[str, Any]:
    # word items have no highlight, the word text is the hit
    exact = [highlight.exact for highlight in item.highlights if highlight.exact] or [item.text]
    selectors = [{'type': 'TextQuoteSelector', 'exact': text} for text in exact]
    if version == '2':
        return {
            '@type': 'search:Hit',
            'annotations': [annotation_id_url(item, urls)],
            'selectors': [
                {'@type': 'oa:TextQuoteSelector', 'exact': selector['exact']} for selector in selectors
            ],
        }
    return {
        'type': 'SearchHit',
        'annotations': [annotation_id_url(item, urls)],
        'selectors': selectors,
    }


def annotation_v2(item: SearchItem, urls: UrlConfig) -> Dict[str, Any]:
    """Map a search item to an IIIF v2 annotation."""
    resource = {'@type': 'dctypes:Text', '@id': resource_id_url(item, urls)}
    if item.language:
        resource['full'] = resource_base_url(item, urls)
        resource['language'] = item.language
    return {
        '@id': annotation_id_url(item, urls),
        '@type': 'oa:Annotation',
        'motivation': V2_MOTIVATION,
        'dcType': item.annotation.granularity.label,
        'resource': resource,
        'on': target_urls(item),
        'within': annopage_id_url(item, urls),
    }


def annotation_v3(item: SearchItem, urls: UrlConfig) -> Dict[str, Any]:
    """Map a search item to an IIIF v3 annotation."""
    body = {'id': resource_id_url(item, urls)}
    if item.language:
        body['type'] = 'SpecificResource'
        body['source'] = resource_base_url(item, urls)
        body['language'] = item.language
    return {
        'id': annotation_id_url(item, urls),
        'type': 'Annotation',
        'motivation': V3_MOTIVATION,
        'dcType': item.annotation.granularity.label,
        'body': body,
        'target': target_urls(item),
        'partOf': annopage_id_url(item, urls),
    }


def _debug_section(result: SearchResult) -> Dict[str, Any]:
    debug = result.debug
    return {
        'engineQuery': debug.engine_query if debug else None,
        'snippets': list(debug.snippets) if debug else [],
        'mergedHits': debug.merged_hits if debug else 0,
        'locatedHits': [hit.to_dict() for hit in result.hits or []],
        'unlocatedHits': result.unlocated_hits,
        'unmatchedHits': result.unmatched_hits,
    }


def to_annotation_list(result: SearchResult, urls: UrlConfig, version: str = '2') -> Dict[str, Any]:
    """
    Map a search result to an IIIF annotation list.

    Args:
        result: Result of a search
        urls: Base URLs for the generated ids
        version: '2' or '3'

    Returns:
        JSON-serializable dictionary
    """
    if version not in ('2', '3'):
        raise ValueError(f"Unsupported IIIF version: {version!r}")

    if version == '2':
        output = {
            '@context': [IIIF_V2_CONTEXT, IIIF_SEARCH_CONTEXT],
            '@id': result.search_id,
            '@type': 'sc:AnnotationList',
            'resources': [annotation_v2(item, urls) for item in result.items],
        }
    else:
        output = {
            '@context': [IIIF_SEARCH_CONTEXT, IIIF_V3_CONTEXT],
            'id': result.search_id,
            'type': 'AnnotationPage',
            'items': [annotation_v3(item, urls) for item in result.items],
        }
    output['hits'] = [_hit(item, urls, version) for item in result.items]

    if result.debug_enabled:
        output['debug'] = _debug_section(result)
    return output
