from listing_studio.assets.acquisition import (
    AssetAcquisition,
    build_background_url,
    FETCH_URL_METHOD,
    REMOVE_BG_METHOD,
)

__all__ = [
    "AssetAcquisition",
    "build_background_url",
    "FETCH_URL_METHOD",
    "REMOVE_BG_METHOD",
]
