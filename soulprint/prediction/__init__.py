"""Prediction module for multi-horizon relationship success estimates."""

from .schema import (
    RELATIONSHIP_STAGES,
    ConversationData,
    ProgressionData,
    PersonalityFactors,
    FactorScore,
    HorizonPrediction,
    RiskFactor,
    Recommendation,
    SuccessPrediction
)
from .predictor import (
    CATEGORIES,
    HORIZONS,
    SuccessPredictor,
    PredictionConfig,
    create_predictor_from_config
)

__all__ = [
    "RELATIONSHIP_STAGES",
    "ConversationData",
    "ProgressionData",
    "PersonalityFactors",
    "FactorScore",
    "HorizonPrediction",
    "RiskFactor",
    "Recommendation",
    "SuccessPrediction",
    "CATEGORIES",
    "HORIZONS",
    "SuccessPredictor",
    "PredictionConfig",
    "create_predictor_from_config"
]
