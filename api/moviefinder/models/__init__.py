from moviefinder.models.media import (
    CanonicalItem,
    CatalogDetail,
    EnrichedItem,
    MediaType,
    Ratings,
    StreamingProvider,
    TitleGuess,
)

__all__ = [
    "CanonicalItem",
    "CatalogDetail",
    "EnrichedItem",
    "MediaType",
    "Ratings",
    "StreamingProvider",
    "TitleGuess",
]
