from . import (
    cache,
    catalog_service,
    details_service,
    enrichment_service,
    intent,
    query_pipeline,
    similar_service,
    trending_service,
)
