"""
Configuration & Settings
Trend Signal Scoring & Opportunity Clustering Engine
"""

from pydantic import BaseModel


class Settings(BaseModel):
    # App
    APP_NAME: str = "Trend Signal Scoring & Opportunity Clustering Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Momentum composition
    # "averaged": four 0-100 sub-scores, composite = mean
    # "additive": four 0-25 sub-scores, composite = sum
    COMPOSITION_MODE: str = "averaged"
    CONSISTENCY_DEFAULT_AVERAGED: float = 50.0
    CONSISTENCY_DEFAULT_ADDITIVE: float = 0.0

    # Affine maps from raw series statistics onto the 0-100 scale
    SLOPE_OFFSET: float = 10.0
    SLOPE_SCALE: float = 5.0
    ACCELERATION_OFFSET: float = 20.0
    ACCELERATION_SCALE: float = 2.5
    MAX_STD_DEV: float = 50.0
    MAX_REGIONS: int = 20

    # Classification thresholds (score >= threshold)
    BREAKOUT_THRESHOLD: int = 80
    GROWING_THRESHOLD: int = 60
    STABLE_THRESHOLD: int = 40

    SERIES_WINDOW: str = "90d"

    # Opportunity blending weights
    OPP_DEMAND_WEIGHT: float = 0.45
    OPP_MOMENTUM_WEIGHT: float = 0.35
    OPP_CPC_WEIGHT: float = 0.20
    EFF_DEMAND_WEIGHT: float = 0.55
    EFF_MOMENTUM_WEIGHT: float = 0.45
    EFF_CPC_WEIGHT: float = 0.20
    MICROS_PER_UNIT: int = 1_000_000

    # Default market scope
    DEFAULT_GEO: str = "US"
    DEFAULT_LANGUAGE: str = "en"
    DEFAULT_NETWORK: str = "GOOGLE_SEARCH"
    TOP_LIMIT: int = 50

    # Similarity clustering
    SIMILARITY_THRESHOLD: float = 0.3
    DIMENSION_BONUS: float = 0.2
    MIN_NAME_WORD_LENGTH: int = 3
    DEFAULT_INTENT: str = "education"


settings = Settings()
